# services/errors.py
"""
Domain errors raised by services. Each carries the HTTP status it maps to;
api/main.py renders them as {"error": message}.
"""


class CourseAppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(CourseAppError):
    """Missing or malformed request fields."""
    status_code = 400


class InsufficientPapersError(InvalidRequestError):
    """Fewer candidate papers remain than a selection needs."""
    pass


class NotFoundError(CourseAppError):
    status_code = 404


class UpstreamParseError(CourseAppError):
    """The LLM answered, but not in the shape we asked for."""
    status_code = 500


class StorageError(CourseAppError):
    status_code = 500
