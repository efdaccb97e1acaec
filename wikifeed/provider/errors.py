"""Error types for the Wikipedia provider."""

from enum import Enum


class ProviderErrorClass(str, Enum):
    """Classification of provider errors.

    - NETWORK: connection failures and timeouts
    - HTTP_STATUS: non-success HTTP status
    - PARSE: body is not the expected JSON document
    - UNSUPPORTED_LANGUAGE: no endpoint configured for the language
    """

    NETWORK = "NETWORK"
    HTTP_STATUS = "HTTP_STATUS"
    PARSE = "PARSE"
    UNSUPPORTED_LANGUAGE = "UNSUPPORTED_LANGUAGE"


class ProviderError(Exception):
    """Failure talking to Wikipedia.

    Raised inside the provider and converted to an empty result at its
    public boundary.
    """

    def __init__(
        self,
        error_class: ProviderErrorClass,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize the provider error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            url: Requested URL.
            status_code: HTTP status, if a response was received.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.url = url
        self.status_code = status_code

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "url": self.url,
            "status_code": self.status_code,
        }
