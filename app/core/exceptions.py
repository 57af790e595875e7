from fastapi import status


class FlashcardError(Exception):
    """Base class for domain errors; the app maps ``status_code`` onto the response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(FlashcardError):
    """Blank topic or no usable API key; raised before any network call."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class GenerationInProgressError(FlashcardError):
    status_code = status.HTTP_409_CONFLICT


class ProviderRequestError(FlashcardError):
    """The provider answered with a non-success HTTP status."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, upstream_status: int, message: str):
        super().__init__(f"API request failed: {upstream_status} - {message}")
        self.upstream_status = upstream_status
        self.upstream_message = message


class ProviderUnreachableError(FlashcardError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class MalformedResponseError(FlashcardError):
    """Provider text is neither JSON nor holds a fenced JSON block."""

    status_code = status.HTTP_502_BAD_GATEWAY


class UnexpectedResponseShapeError(FlashcardError):
    status_code = status.HTTP_502_BAD_GATEWAY


class EmptyResultError(FlashcardError):
    status_code = status.HTTP_502_BAD_GATEWAY


class PersistenceError(FlashcardError):
    """Storage write failed. Never surfaced as a request failure."""


class EmailAlreadyRegisteredError(FlashcardError):
    status_code = status.HTTP_409_CONFLICT
