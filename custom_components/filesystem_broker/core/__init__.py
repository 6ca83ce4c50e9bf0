"""FileSystem Broker core module."""

from .datetime_utils import DateTimeUtils
from .error_handlers import ErrorHandler
from .runtime import FSBData

__all__ = [
    "DateTimeUtils",
    "ErrorHandler",
    "FSBData",
]
