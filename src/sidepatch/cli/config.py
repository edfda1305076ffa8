"""
CLI Configuration

Centralized presentation state for the sidepatch CLI.
"""

from typing import Optional

from sidepatch.logging_config import env_flag


class CLIConfig:
    """Configuration for CLI commands"""

    # Machine mode: JSON on stdout, no console logging
    _machine_mode: Optional[bool] = None

    @classmethod
    def set_machine_mode(cls, enabled: bool) -> None:
        """Set machine mode (pure data output, no presentation)"""
        cls._machine_mode = enabled

    @classmethod
    def is_machine_mode(cls) -> bool:
        """
        Check if machine mode is active.

        Off unless requested with --machine or SIDEPATCH_MACHINE_MODE.
        """
        if cls._machine_mode is not None:
            return cls._machine_mode
        return env_flag("SIDEPATCH_MACHINE_MODE")

    @classmethod
    def reset(cls) -> None:
        cls._machine_mode = None
