"""
Error kinds returned by every use case, and the storage-error boundary.
"""

import functools
import logging

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Return

logger = logging.getLogger(__name__)


class ErrorCode:
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_INPUT = "INVALID_INPUT"
    EXPIRED = "EXPIRED"
    EXHAUSTED = "EXHAUSTED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    WORKSPACE_MISMATCH = "WORKSPACE_MISMATCH"
    CONFLICT = "CONFLICT"
    EXTERNAL_PROVIDER_ERROR = "EXTERNAL_PROVIDER_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"


STORAGE_FAILURE_MESSAGE = "The operation could not be completed, please retry"


def translate_storage_errors(execute):
    """Turn SQLAlchemy failures escaping a use case into a STORAGE_ERROR result"""

    @functools.wraps(execute)
    async def wrapper(*args, **kwargs):
        try:
            return await execute(*args, **kwargs)
        except SQLAlchemyError:
            logger.exception("Storage failure in %s", execute.__qualname__)
            return Return.err(Error(ErrorCode.STORAGE_ERROR, STORAGE_FAILURE_MESSAGE))

    return wrapper
