"""
Domain-specific exception hierarchy for the lesson slot application.
"""


class LessonSlotsError(Exception):
    """Base class for all application-level errors."""


class InvalidConfiguration(LessonSlotsError, ValueError):
    """Raised when working hours, break or lesson duration cannot be used."""


class InvalidRequestError(LessonSlotsError):
    """Raised when a slot request is missing parameters or carries malformed ones."""


class LessonNotFoundError(LessonSlotsError):
    """Raised when the requested lesson does not exist or is not bookable."""


class DataSourceError(LessonSlotsError):
    """Raised when settings, lessons or bookings cannot be fetched or parsed."""
