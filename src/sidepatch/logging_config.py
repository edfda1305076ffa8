import sys
import os
from loguru import logger

_logging_configured = False


def env_flag(name: str) -> bool:
    """True when an environment variable is set to 1, true or yes."""
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None, force=False):
    """
    Configures the global logger.

    By default, only console logging is enabled. File logging is opt-in via
    SIDEPATCH_FILE_LOGGING=1 environment variable or enable_file_logging=True.

    Args:
        level: Logging level (default: INFO)
        suppress_console: If True, suppress console logging. If None, check SIDEPATCH_MACHINE_MODE env var.
        enable_file_logging: If True, enable file logging. If None, check SIDEPATCH_FILE_LOGGING env var.
        force: Reconfigure even if logging was already set up (CLI flags, tests)
    """
    global _logging_configured

    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = env_flag("SIDEPATCH_MACHINE_MODE")

    # stderr sink, absent in machine mode
    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            colorize=True
        )

    # Opt-in file sink under .sidepatch/logs
    if enable_file_logging is None:
        enable_file_logging = env_flag("SIDEPATCH_FILE_LOGGING")

    if enable_file_logging:
        from sidepatch.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()

        logger.add(
            paths.log_file,
            level="INFO",
            rotation="10 MB",
            retention="7 days",
            compression="gz",
            catch=True,
            serialize=False
        )


# Library users get a configured logger without calling setup_logging
setup_logging()
