"""
Client-facing error taxonomy for import/export operations
"""
import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class InterchangeError(Exception):
    """
    Error reported to the caller with a stable code

    Codes:
    - missing_file, invalid_json, invalid_payload, invalid_enum
    - dangling_reference, constraint_violation, store_error, not_found
    - unknown_kind, invalid_archive, staging_failed, external_procedure
    - snapshot_in_progress
    """

    def __init__(self, code: str, message: str, status_code: int = 400):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
            "status_code": self.status_code,
        }


def from_store_error(exc: SQLAlchemyError, context: str = "") -> InterchangeError:
    """
    Translate a persistence failure into the error taxonomy

    The store's own message is kept verbatim so an operator can see which
    constraint was hit.
    """
    raw = str(getattr(exc, "orig", None) or exc)
    message = f"{context}: {raw}" if context else raw

    if isinstance(exc, IntegrityError):
        if "FOREIGN KEY" in raw.upper():
            return InterchangeError("dangling_reference", message)
        return InterchangeError("constraint_violation", message)

    logger.error(f"Unexpected store error: {raw}")
    return InterchangeError("store_error", message)
