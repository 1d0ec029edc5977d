# exceptions.py


class PinvaultError(Exception):
    """Base error, rendered as a JSON error body with `status_code`."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(PinvaultError):
    """Missing or invalid client input (identifier, file)."""

    status_code = 400


class UploadTooLargeError(InvalidRequestError):
    """The upload batch exceeds the configured byte ceiling."""


class ConfigurationError(PinvaultError):
    """A required provider credential or setting is absent."""

    status_code = 500


class UpstreamError(PinvaultError):
    """The pinning provider answered with a failure or could not be reached."""

    status_code = 500


class AccessDeniedError(PinvaultError):
    """Content could not be fetched from the gateway."""

    status_code = 403


class NotFoundError(PinvaultError):
    """The requested content address is absent from the listing."""

    status_code = 404
