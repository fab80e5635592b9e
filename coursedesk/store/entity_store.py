import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursedesk.core.exceptions import ConflictException, NotFoundException, ValidationException
from coursedesk.store.query import Predicate, compile_order, compile_predicate

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

# PostgreSQL SQLSTATE codes, with the SQLite message prefix for the same violation
UNIQUE_VIOLATION = ("23505", "UNIQUE constraint failed")
FOREIGN_KEY_VIOLATION = ("23503", "FOREIGN KEY constraint failed")
CHECK_VIOLATION = ("23514", "CHECK constraint failed")


def violation_of(error: IntegrityError, kind) -> bool:
    code, message = kind
    return getattr(error.orig, "pgcode", None) == code or str(error.orig).startswith(message)


class EntityStore:
    """Scoped create/read/update/delete over the relational model.

    Every read takes an explicit predicate; there is no unscoped listing
    helper. Writes commit immediately. A violated unique constraint is
    reported as ``ConflictException`` with the caller supplied message, a
    dangling reference as ``NotFoundException`` and a failed check as
    ``ValidationException``. Any other integrity error propagates.
    """

    def __init__(self, db: Session):
        self.db = db

    def find(self, model: Type[ModelT], where: Optional[Predicate] = None, order_by: Optional[str] = None) -> List[ModelT]:
        stmt = select(model).where(compile_predicate(model, where))
        order = compile_order(model, order_by)
        if order is not None:
            stmt = stmt.order_by(order)
        return list(self.db.scalars(stmt).all())

    def find_one(self, model: Type[ModelT], id: Any) -> Optional[ModelT]:
        if id is None:
            return None
        return self.db.get(model, id)

    def first(self, model: Type[ModelT], where: Predicate) -> Optional[ModelT]:
        stmt = select(model).where(compile_predicate(model, where)).limit(1)
        return self.db.scalars(stmt).first()

    def exists(self, model, where: Predicate) -> bool:
        return self.first(model, where) is not None

    def count(self, model, where: Optional[Predicate] = None) -> int:
        stmt = select(func.count()).select_from(model).where(compile_predicate(model, where))
        return self.db.scalar(stmt)

    def insert(self, model: Type[ModelT], data: Dict[str, Any], conflict: str = "Record already exists") -> ModelT:
        record = model(**data)
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info("Rejected %s insert: %s", model.__tablename__, e.orig)
            if violation_of(e, UNIQUE_VIOLATION):
                raise ConflictException(detail=conflict)
            if violation_of(e, FOREIGN_KEY_VIOLATION):
                raise NotFoundException(detail="Referenced record not found")
            if violation_of(e, CHECK_VIOLATION):
                raise ValidationException(detail="Value out of range")
            raise
        self.db.refresh(record)
        return record

    def update(self, model, id: Any, patch: Dict[str, Any]) -> None:
        record = self.db.get(model, id)
        if record is None:
            return
        for key, value in patch.items():
            setattr(record, key, value)
        self.db.commit()

    def update_where(self, model, where: Predicate, patch: Dict[str, Any]) -> int:
        result = self.db.execute(
            model.__table__.update().where(compile_predicate(model, where)).values(**patch)
        )
        self.db.commit()
        self.db.expire_all()
        return result.rowcount

    def delete(self, model, id: Any) -> None:
        # Children go through the database's ON DELETE CASCADE chain
        self.db.execute(model.__table__.delete().where(model.id == id))
        self.db.commit()
        self.db.expire_all()
