"""CLI entry point for the SimpleGate gateway server.

This module turns parsed command-line arguments and an optional YAML file
into a GatewayConfig, configures logging, and runs the server.
"""

from __future__ import annotations

import ipaddress
import logging
import os
import sys
from typing import Any, Dict, Optional

import yaml

from common.logging_utils import configure_logging
from constants import Constants, ExitCodes
from proxy.server import GatewayConfig, run_gateway_sync

logger = logging.getLogger(__name__)


def _is_local_bind_host(host: str) -> bool:
    """Return True if host is a loopback/local bind target."""
    if not host:
        return False
    host_lower = host.strip().lower()
    if host_lower in ("localhost",):
        return True
    try:
        return ipaddress.ip_address(host_lower).is_loopback
    except ValueError:
        # Non-IP hostnames are treated as non-local unless explicitly allowed.
        return False


def _enforce_local_binding(host: str, allow_external: bool) -> None:
    """Enforce local-only binding unless explicitly allowed."""
    if _is_local_bind_host(host):
        return
    if not allow_external:
        sys.stderr.write(
            "ERROR: Non-local bindings require --allow-external.\n"
        )
        sys.exit(ExitCodes.BIND_ERROR.value)
    logger.warning(
        "Binding gateway to non-local address (%s). Ensure network controls are in place.",
        host,
    )


def _load_gateway_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load gateway settings from a YAML file.

    Args:
        config_path: Path to YAML config file.

    Returns:
        Settings dict; settings may sit under a top-level ``gateway`` key.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.error("Config file not found: %s", config_path)
        sys.exit(ExitCodes.FILE_ERROR.value)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.error("Config file must contain a mapping: %s", config_path)
        sys.exit(ExitCodes.FILE_ERROR.value)
    section = data.get("gateway", data)
    if not isinstance(section, dict):
        logger.error("'gateway' section must be a mapping: %s", config_path)
        sys.exit(ExitCodes.FILE_ERROR.value)
    return section


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    # Honor CLI --loglevel
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()

    configure_logging()

    # Add file handler if --logfile specified
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def build_config(args: Any) -> GatewayConfig:
    """Combine defaults, the YAML file and CLI flags, in that order of precedence.

    Args:
        args: Parsed CLI arguments namespace.

    Returns:
        GatewayConfig instance.
    """
    settings = _load_gateway_config(getattr(args, "CONFIG", None))
    try:
        config = GatewayConfig.from_mapping(settings)
    except TypeError as e:
        logger.error("Invalid gateway configuration: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    return config.update_from_args(args)


def run_proxy_server(args: Any) -> None:
    """Entry point for the gateway command.

    Args:
        args: Parsed CLI arguments namespace.
    """
    _setup_logging(args)

    config = build_config(args)
    _enforce_local_binding(config.host, config.allow_external)

    if not os.path.isdir(config.policy_dir):
        logger.warning(
            "Policy directory %s does not exist - all packages will be served unfiltered",
            config.policy_dir,
        )

    # Print startup banner
    print(
        f"\n"
        f"  SimpleGate\n"
        f"  ==========\n"
        f"  Listening: http://{config.host}:{config.port}\n"
        f"  Upstream:  {config.upstream}\n"
        f"  Policies:  {config.policy_dir}\n"
        f"\n"
        f"  Configure pip:\n"
        f"    pip config set global.index-url http://{config.host}:{config.port}/simple\n"
        f"\n"
        f"  Press Ctrl+C to stop\n"
    )

    run_gateway_sync(config)
