"""SimpleGate - filtering gateway for simple-repository package indexes.

    Returns:
        int: Exit code
"""
import sys

from args import parse_args
from cli_proxy import run_proxy_server
from constants import ExitCodes


def main(argv=None):
    """Main entry point for the gateway."""
    args = parse_args(argv)
    run_proxy_server(args)
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
