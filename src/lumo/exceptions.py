"""Custom exceptions for Lumo."""


class ConfigurationError(Exception):
    """Raised when settings fail validation at startup."""


class OtlpDecodeError(ValueError):
    """Raised when an OTLP request body cannot be decoded."""

    def __init__(self, message: str, content_type: str | None = None):
        self.content_type = content_type
        if content_type:
            message += f" (content-type: {content_type})"
        super().__init__(message)


class OtlpPayloadTooLargeError(OtlpDecodeError):
    """Raised when a compressed OTLP body inflates past the size limit."""
