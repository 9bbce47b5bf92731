"""Error taxonomy for provider calls and model output handling."""


class LLMError(Exception):
    """Base class for all LLM layer errors."""


class ConfigError(LLMError):
    """Raised when a provider configuration is invalid."""


class ProviderError(LLMError):
    """Raised when a call to an AI provider fails."""

    retryable: bool = False


class NetworkError(ProviderError):
    """The request never produced a response (connection reset, DNS, ...)."""

    retryable = True


class ProviderTimeoutError(ProviderError, TimeoutError):
    """The request exceeded the configured timeout and was cancelled."""

    retryable = True


class APIError(ProviderError):
    """The provider answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class ResponseError(LLMError):
    """The model answered, but its output could not be used."""


class ExtractionError(ResponseError):
    """No JSON object could be located in the model output."""


class ParseError(ResponseError):
    """The located JSON text is malformed."""


class ResponseValidationError(ResponseError):
    """The parsed JSON does not match the expected result shape."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []
