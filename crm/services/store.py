"""Entity store — generic CRUD over the ORM models.

Routers and services go through EntityStore instead of calling
session.query() directly so that "missing id" is always a NotFoundError
and partial updates only touch real columns.

Usage:
    store = EntityStore(db)
    offer = store.get(Offer, offer_id)
    store.update(offer, {"notes": "call back"})
"""

from typing import Any, TypeVar

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from .errors import NotFoundError, ValidationError

M = TypeVar("M")

# Never writable through create()/update()
_PROTECTED = {"id", "created_at"}


def _columns(model) -> set[str]:
    return {attr.key for attr in inspect(model).column_attrs}


class EntityStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, model: type[M], entity_id: str) -> M:
        obj = self.db.get(model, entity_id) if entity_id else None
        if obj is None:
            raise NotFoundError(model.__name__, entity_id)
        return obj

    def list(self, model: type[M], *criteria, order_by=None, limit: int | None = None) -> list[M]:
        q = self.db.query(model)
        if criteria:
            q = q.filter(*criteria)
        if order_by is not None:
            q = q.order_by(*order_by) if isinstance(order_by, (list, tuple)) else q.order_by(order_by)
        if limit:
            q = q.limit(limit)
        return q.all()

    def create(self, model: type[M], data: dict[str, Any], commit: bool = True) -> M:
        self._reject_unknown(model, data)
        obj = model(**{k: v for k, v in data.items() if k not in _PROTECTED})
        self.db.add(obj)
        if commit:
            self.db.commit()
            self.db.refresh(obj)
        else:
            self.db.flush()
        return obj

    def update(self, obj: M, changes: dict[str, Any], commit: bool = True) -> M:
        self._reject_unknown(type(obj), changes)
        for key, value in changes.items():
            if key in _PROTECTED:
                continue
            setattr(obj, key, value)
        if commit:
            self.db.commit()
            self.db.refresh(obj)
        else:
            self.db.flush()
        return obj

    def update_by_id(self, model: type[M], entity_id: str, changes: dict[str, Any]) -> M:
        return self.update(self.get(model, entity_id), changes)

    def delete(self, model: type[M], entity_id: str) -> None:
        obj = self.get(model, entity_id)
        self.db.delete(obj)
        self.db.commit()

    @staticmethod
    def _reject_unknown(model, data: dict[str, Any]) -> None:
        unknown = set(data) - _columns(model)
        if unknown:
            raise ValidationError(
                f"Unknown {model.__name__} fields",
                {name: "unknown field" for name in sorted(unknown)},
            )
