"""Filtering simple-index gateway server using aiohttp."""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass, fields
from typing import Any, Iterable, Mapping, Optional, Tuple

from aiohttp import web

from constants import Constants
from simple_index.models import PackageIndex, RootIndex
from versioning.errors import UnsupportedOperatorError

from .filter_engine import FilterEngine
from .policy import PolicyStore
from .upstream import UpstreamClient, UpstreamError, UpstreamResponse

logger = logging.getLogger(__name__)

# Response headers dropped when the body is rewritten.
_DROPPED_RESPONSE_HEADERS = frozenset({
    "content-length",
    "content-encoding",
    "transfer-encoding",
    "connection",
    "keep-alive",
})


@dataclass
class GatewayConfig:
    """Configuration for the gateway server."""

    host: str = Constants.DEFAULT_HOST
    port: int = Constants.DEFAULT_PORT
    upstream: str = Constants.DEFAULT_UPSTREAM
    policy_dir: str = Constants.DEFAULT_POLICY_DIR
    timeout: Optional[float] = None
    allow_external: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GatewayConfig":
        """Create config from a mapping, e.g. a parsed YAML file.

        Unknown keys are ignored with a warning.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown gateway settings: %s", ", ".join(unknown))
        return cls(**{key: value for key, value in data.items() if key in known})

    def update_from_args(self, args: Any) -> "GatewayConfig":
        """Override settings with CLI arguments that were given.

        Args:
            args: Parsed CLI arguments namespace.

        Returns:
            This config, for chaining.
        """
        overrides = {
            "host": getattr(args, "GATEWAY_HOST", None),
            "port": getattr(args, "GATEWAY_PORT", None),
            "upstream": getattr(args, "GATEWAY_UPSTREAM", None),
            "policy_dir": getattr(args, "POLICY_DIR", None),
            "timeout": getattr(args, "GATEWAY_TIMEOUT", None),
        }
        for name, value in overrides.items():
            if value is not None:
                setattr(self, name, value)
        if getattr(args, "ALLOW_EXTERNAL", False):
            self.allow_external = True
        return self


def _rewritten_headers(headers: Iterable[Tuple[str, str]]) -> Tuple[Tuple[str, str], ...]:
    return tuple(
        (key, value) for key, value in headers
        if key.lower() not in _DROPPED_RESPONSE_HEADERS
    )


def _plain_response(status: int, text: str) -> web.Response:
    return web.Response(status=status, text=text, content_type="text/plain")


class SimpleGateServer:
    """HTTP gateway in front of a simple-repository index.

    Forwards ``/simple/`` and ``/simple/{package}/`` upstream, re-serializes
    the listing and, where a policy exists for the package, removes the
    releases it does not allow.
    """

    def __init__(
        self,
        config: GatewayConfig,
        upstream: Optional[UpstreamClient] = None,
        policies: Optional[PolicyStore] = None,
        filter_engine: Optional[FilterEngine] = None,
    ):
        """Initialize the gateway.

        Args:
            config: Server configuration.
            upstream: Upstream client; built from ``config`` if omitted.
            policies: Policy store; built from ``config`` if omitted.
            filter_engine: Filter engine; a default one if omitted.
        """
        self._config = config
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None
        self._upstream = upstream or UpstreamClient(
            upstream=config.upstream,
            timeout=config.timeout,
        )
        self._policies = policies or PolicyStore(config.policy_dir)
        self._filter_engine = filter_engine or FilterEngine(logger=logger)

    def create_app(self) -> web.Application:
        """Create the aiohttp application."""
        app = web.Application()
        app.router.add_get(Constants.HEALTH_PATH, self._health_check)
        for path in ("/simple", "/simple/"):
            app.router.add_route("*", path, self._handle_root_index)
        for path in ("/simple/{package}", "/simple/{package}/"):
            app.router.add_route("*", path, self._handle_package_index)
        app.on_startup.append(self._on_startup)
        app.on_cleanup.append(self._on_cleanup)
        return app

    async def _health_check(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response({
            "status": "ok",
            "upstream": self._upstream.upstream,
            "policy_dir": self._policies.directory,
        })

    async def _on_startup(self, app: web.Application) -> None:
        await self._upstream.start()
        logger.info("Gateway starting on %s:%s", self._config.host, self._config.port)

    async def _on_cleanup(self, app: web.Application) -> None:
        await self._upstream.stop()
        logger.info("Gateway stopped")

    async def _fetch(self, request: web.Request, path: str) -> UpstreamResponse:
        return await self._upstream.fetch(path, headers=request.headers)

    async def _handle_root_index(self, request: web.Request) -> web.Response:
        """Serve the root listing of project names."""
        logger.info("%s %s/", request.method, Constants.SIMPLE_PREFIX)
        if request.method != "GET":
            return self._method_not_supported()

        try:
            upstream = await self._fetch(request, f"{Constants.SIMPLE_PREFIX}/")
        except UpstreamError as e:
            return self._bad_gateway(e)

        if upstream.status != 200:
            return self._passthrough(upstream)

        root_index = RootIndex.from_html(upstream.text)
        logger.debug("Root index lists %d packages", len(root_index.packages))
        return self._rewritten(upstream, root_index.to_html())

    async def _handle_package_index(self, request: web.Request) -> web.Response:
        """Serve a project's release listing, filtered by its policy."""
        package = request.match_info["package"]
        logger.info("%s %s/%s/", request.method, Constants.SIMPLE_PREFIX, package)
        if request.method != "GET":
            return self._method_not_supported()

        try:
            upstream = await self._fetch(request, f"{Constants.SIMPLE_PREFIX}/{package}/")
        except UpstreamError as e:
            return self._bad_gateway(e)

        if upstream.status != 200:
            return self._passthrough(upstream)

        package_index = PackageIndex.from_html(upstream.text)

        policy = self._policies.load(package)
        if policy is None:
            logger.debug("No policy for %s, serving unfiltered", package)
        else:
            try:
                filtered = self._filter_engine.filter(package_index, policy)
            except UnsupportedOperatorError as e:
                logger.error("Policy for %s cannot be applied: %s", package, e)
            else:
                logger.info(
                    "Filtered %s: kept %d of %d releases",
                    package, len(filtered.releases), len(package_index.releases),
                )
                package_index = filtered

        return self._rewritten(upstream, package_index.to_html())

    def _rewritten(self, upstream: UpstreamResponse, body: str) -> web.Response:
        response = web.Response(
            status=upstream.status,
            headers=_rewritten_headers(upstream.headers),
            body=body.encode("utf-8"),
        )
        if upstream.header("Content-Type") is None:
            response.content_type = "text/html"
        return response

    def _passthrough(self, upstream: UpstreamResponse) -> web.Response:
        logger.info("Upstream answered %s, passing through", upstream.status)
        return web.Response(
            status=upstream.status,
            headers=_rewritten_headers(upstream.headers),
            body=upstream.text.encode("utf-8"),
        )

    def _method_not_supported(self) -> web.Response:
        return _plain_response(400, "can only forward GET requests for now")

    def _bad_gateway(self, error: Exception) -> web.Response:
        return _plain_response(502, f"upstream registry unavailable: {error}")

    async def start(self) -> None:
        """Start the gateway."""
        self._app = self.create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self._config.host, self._config.port)
        await site.start()

        logger.info(
            "SimpleGate listening on http://%s:%s",
            self._config.host, self._config.port,
        )
        logger.info("Upstream: %s", self._upstream.upstream)
        logger.info("Policy directory: %s", self._policies.directory)

    async def stop(self) -> None:
        """Stop the gateway."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._app = None


def run_gateway_sync(config: GatewayConfig) -> None:
    """Run the gateway synchronously.

    Installs signal handlers for SIGTERM and SIGINT for clean shutdown.

    Args:
        config: Server configuration.
    """
    server = SimpleGateServer(config)
    loop = asyncio.new_event_loop()

    async def run():
        await server.start()
        stop_event = asyncio.Event()
        running_loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            running_loop.add_signal_handler(sig, stop_event.set)
        await stop_event.wait()
        logger.info("Shutdown signal received, stopping...")
        await server.stop()

    try:
        loop.run_until_complete(run())
    except KeyboardInterrupt:
        # Fallback for platforms where signal handlers don't work (Windows)
        loop.run_until_complete(server.stop())
    finally:
        loop.close()
        logger.info("Gateway shutdown complete")
