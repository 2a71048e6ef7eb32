"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for discovery failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class InputError(PipelineError):
    """Raised when the AOI payload is empty or not structured geographic data."""

    error_code = "INVALID_INPUT"


class ParseError(InputError):
    """Raised when the AOI parses but yields no usable coordinate ring."""

    error_code = "AOI_PARSE_ERROR"


class TransientFetchError(PipelineError):
    """Raised for a single failed attempt against the geodata source."""

    error_code = "FETCH_ERROR"


class UpstreamUnavailable(PipelineError):
    """Raised once the retry budget is exhausted."""

    error_code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class ElementError(PipelineError):
    """Raised when one element cannot be turned into an asset geometry."""

    error_code = "ELEMENT_ERROR"


class FetchCancelled(PipelineError):
    """Raised when the caller cancels or the deadline passes."""

    error_code = "CANCELLED"

    def __init__(self, message: str = "discovery cancelled", *, deadline_exceeded: bool = False) -> None:
        super().__init__(message)
        self.deadline_exceeded = deadline_exceeded
