"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    BIND_ERROR = 2


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    DEFAULT_HOST = "127.0.0.1"
    DEFAULT_PORT = 8080
    DEFAULT_UPSTREAM = "https://pypi.org"
    DEFAULT_POLICY_DIR = "fixtures"
    SIMPLE_PREFIX = "/simple"
    HEALTH_PATH = "/_simplegate/health"
    LOG_FORMAT = "%(levelname)s - %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "SIMPLEGATE_LOG_LEVEL"
    USER_AGENT = "SimpleGate/1.0"

    # Release file suffixes handled by the filter engine
    SDIST_SUFFIXES = (".tar.gz", ".zip", ".sdist")
    EGG_SUFFIX = ".egg"
