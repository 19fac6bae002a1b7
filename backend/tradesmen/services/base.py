"""
Shared plumbing for the per-entity BMCs (Business Model Controllers).

Each BMC wraps one SQLAlchemy session and exposes the create/get/list/
update/delete operations for a single table. Statements are executed and
committed one at a time; there are no multi-statement transactions.
"""
from typing import Any, Optional, Type, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tradesmen.lib.db import Base
from tradesmen.lib.logging import get_logger
from tradesmen.services.errors import EntityNotFoundError, translate_integrity_error

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseBmc:
    """Common helpers; subclasses set ``model`` and ``entity``."""

    model: Type[Base]
    entity: str

    def __init__(self, session: Session):
        self.session = session

    def _commit(self) -> None:
        """Commit, translating constraint failures into model errors."""
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise translate_integrity_error(e, self.model.__tablename__) from e

    def _insert(self, row: ModelT) -> int:
        self.session.add(row)
        self._commit()
        logger.info(
            f"{self.entity} created",
            extra={"entity": self.entity, "entity_id": row.id},
        )
        return row.id

    def _get(self, entity_id: int) -> Any:
        row = self.session.get(self.model, entity_id)
        if row is None:
            raise EntityNotFoundError(self.entity, entity_id)
        return row

    def _execute_update(self, stmt: Any, entity_id: int) -> None:
        """Run a single UPDATE ... WHERE id = :id and require that it matched."""
        result = self.session.execute(
            stmt.execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.session.rollback()
            raise EntityNotFoundError(self.entity, entity_id)
        self._commit()
        self.session.expire_all()

    def delete(self, entity_id: int) -> None:
        """Delete a row by id; raises EntityNotFoundError when nothing was deleted."""
        result = self.session.execute(
            sa_delete(self.model)
            .where(self.model.id == entity_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.session.rollback()
            raise EntityNotFoundError(self.entity, entity_id)
        self._commit()
        self.session.expire_all()
        logger.info(
            f"{self.entity} deleted",
            extra={"entity": self.entity, "entity_id": entity_id},
        )

    def _first(self, stmt: Any) -> Optional[Any]:
        return self.session.execute(stmt).scalars().first()
