"""
Domain exceptions for the survey service.

The API layer maps each class to an HTTP status code; the message is
returned verbatim in the ``error`` field of the JSON body.
"""


class SurveyError(Exception):
    """Base exception for survey operations."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class SurveyValidationError(SurveyError):
    """Missing or malformed input. Correctable by the caller."""

    status_code = 400


class UnsupportedOperationError(SurveyError):
    """Operation not available for the active store (e.g. reset in durable mode)."""

    status_code = 400


class StoreError(SurveyError):
    """The backing store failed to read or write."""

    status_code = 500
