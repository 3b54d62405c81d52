"""Error codes and exceptions for zsh-ai-suggestions.

Shared by:
- the watcher daemon (start-up failures, dropped requests)
- the suggestion backends (provider errors)
- the HTTP front-end (JSON error bodies: BACKEND_ERROR, TIMEOUT, INTERNAL)
"""


class ErrorCode:
    """Standard error codes.

    The HTTP front-end returns these in error bodies:
    {"type": "error", "code": "BACKEND_ERROR", "message": "..."}
    """

    # Client errors
    EMPTY_INPUT = "EMPTY_INPUT"      # Input text is empty after trimming

    # Start-up errors
    CONFIG_ERROR = "CONFIG_ERROR"    # Invalid or incomplete configuration
    STARTUP_ERROR = "STARTUP_ERROR"  # Directory or watcher unusable
    WATCHER_ERROR = "WATCHER_ERROR"  # Filesystem notification failure

    # Request errors
    BACKEND_ERROR = "BACKEND_ERROR"  # Suggestion provider failed
    TIMEOUT = "TIMEOUT"              # Request deadline exceeded
    PROBE_ERROR = "PROBE_ERROR"      # Shell process count failed
    INTERNAL = "INTERNAL"            # Unexpected error


class SuggestionError(Exception):
    """Base exception for zsh-ai-suggestions."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigError(SuggestionError):
    """Raised when configuration is invalid (unknown provider, missing key)."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.CONFIG_ERROR, message)


class StartupError(SuggestionError):
    """Raised when the daemon cannot reach the serving state."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.STARTUP_ERROR, message)


class WatcherError(SuggestionError):
    """Raised when the directory watcher cannot subscribe."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.WATCHER_ERROR, message)


class BackendError(SuggestionError):
    """Raised when a suggestion provider call fails."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.BACKEND_ERROR, message)


class ProbeError(SuggestionError):
    """Raised when shell processes cannot be counted."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.PROBE_ERROR, message)


def format_error_response(code: str, message: str) -> dict:
    """Format an error as a JSON response dict.

    Args:
        code: Error code from ErrorCode class
        message: Human-readable error message

    Returns:
        Dict suitable for JSON serialization

    Examples:
        >>> format_error_response(ErrorCode.TIMEOUT, "Request timed out")
        {'type': 'error', 'code': 'TIMEOUT', 'message': 'Request timed out'}
    """
    return {
        "type": "error",
        "code": code,
        "message": message,
    }
