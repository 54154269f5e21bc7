from contextlib import contextmanager
from functools import wraps
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional
import logging

from ..core.exceptions import ConflictError, InternalError

logger = logging.getLogger(__name__)

@contextmanager
def storage_errors(
    conflict_detail: Optional[str] = None,
    failure_detail: str = "Internal server error"
):
    """Translate storage exceptions raised inside the block into service errors.

    Constraint violations become ``ConflictError`` when a conflict detail is
    given; every other database failure becomes ``InternalError``.
    """
    try:
        yield
    except IntegrityError as e:
        if conflict_detail is None:
            logger.error(f"Storage failure: {failure_detail} ({e.orig})")
            raise InternalError(failure_detail) from e
        logger.warning(f"Constraint violation: {conflict_detail} ({e.orig})")
        raise ConflictError(conflict_detail) from e
    except SQLAlchemyError as e:
        logger.error(f"Storage failure: {failure_detail} ({str(e)})")
        raise InternalError(failure_detail) from e

def storage_boundary(func):
    """Keep raw SQLAlchemy errors from escaping a service method."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        with storage_errors():
            return func(*args, **kwargs)
    return wrapper
