"""
Errors raised by the data-access layer.

These propagate unchanged to the web layer, which maps them to HTTP
responses in ``tradesmen.api.middleware.error_handler``.
"""
from sqlalchemy.exc import IntegrityError


class ModelError(Exception):
    """Base class for data-access errors."""


class EntityNotFoundError(ModelError):
    """No row matched the requested id."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id {entity_id} not found")


class UniqueViolationError(ModelError):
    """A write collided with a unique constraint."""

    def __init__(self, table: str, constraint: str):
        self.table = table
        self.constraint = constraint
        super().__init__(f"{constraint} constraint on {table}")


class ModelValidationError(ModelError):
    """A write was rejected by a database constraint other than uniqueness."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def translate_integrity_error(exc: IntegrityError, table: str) -> ModelError:
    """Map a driver-level IntegrityError onto the model error taxonomy."""
    orig = exc.orig
    # psycopg2 exposes the SQLSTATE, sqlite only the message text
    pgcode = getattr(orig, "pgcode", None)
    text = str(orig).lower()

    if pgcode == "23505" or "unique" in text:
        diag = getattr(orig, "diag", None)
        constraint = getattr(diag, "constraint_name", None) or "unique"
        return UniqueViolationError(table, constraint)

    return ModelValidationError(f"Constraint violation on {table}")
