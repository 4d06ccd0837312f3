"""Argument parsing functionality for SimpleGate."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="simplegate",
        description=(
            "SimpleGate - filtering gateway for simple-repository package indexes"
        ),
        add_help=True,
    )

    parser.add_argument("--host",
                        dest="GATEWAY_HOST",
                        help="Address to bind (default: 127.0.0.1)",
                        action="store", type=str)
    parser.add_argument("--port",
                        dest="GATEWAY_PORT",
                        help="Port to listen on (default: 8080)",
                        action="store", type=int)
    parser.add_argument("--upstream",
                        dest="GATEWAY_UPSTREAM",
                        help="Upstream registry base URL (default: https://pypi.org)",
                        action="store", type=str)
    parser.add_argument("--policy-dir",
                        dest="POLICY_DIR",
                        help="Directory holding per-package <name>.json policies (default: fixtures)",
                        action="store", type=str)
    parser.add_argument("--timeout",
                        dest="GATEWAY_TIMEOUT",
                        help="Upstream request timeout in seconds (default: none)",
                        action="store", type=float)
    parser.add_argument("--allow-external",
                        dest="ALLOW_EXTERNAL",
                        help="Allow binding to a non-loopback address",
                        action="store_true")

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to gateway configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
