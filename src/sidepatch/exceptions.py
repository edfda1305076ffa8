# Custom exceptions for sidepatch

class SidepatchError(Exception):
    """Base exception for all application-specific errors."""
    pass


class PatchIOError(SidepatchError):
    """Raised when a source document cannot be read or written."""
    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"I/O failure on {file_path}: {message}")


class RecipeError(SidepatchError):
    """Raised when a patch recipe cannot be found, parsed or validated."""
    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"Invalid recipe '{source}': {message}")


class ConfigError(SidepatchError):
    """Raised for configuration-related problems."""
    pass
