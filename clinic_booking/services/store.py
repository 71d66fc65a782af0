"""Document-style access to the clinic tables.

Services see every record as a plain ``dict`` and only use single-field
queries, so no lookup needs a composite index; anything narrower is filtered
in memory by the caller.
"""

from __future__ import annotations

import operator
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Mapping

from sqlalchemy import delete as sa_delete
from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError

from clinic_booking.extensions import SQLAlchemyEngine
from clinic_booking.models import Appointment, AuditLog, Doctor, LockedSlot, Patient, WaitingListEntry
from clinic_booking.models_rbac import User

COLLECTIONS = {
    "appointments": Appointment,
    "audit_log": AuditLog,
    "doctors": Doctor,
    "locked_slots": LockedSlot,
    "patients": Patient,
    "users": User,
    "waiting_list": WaitingListEntry,
}

_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class StoreError(Exception):
    """Raised for unknown collections, fields or operators."""


class DuplicateDocument(StoreError):
    """Raised when a write violates a uniqueness rule."""


def _columns(model) -> list[str]:
    return [attr.key for attr in inspect(model).column_attrs]


def _to_dict(row) -> dict[str, Any]:
    return {key: getattr(row, key) for key in _columns(type(row))}


class DocumentStore:
    """get/query/add/update/delete over the ORM models, one transaction per call."""

    def __init__(self, engine: SQLAlchemyEngine) -> None:
        self._engine = engine

    @contextmanager
    def _transaction(self):
        session = self._engine.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _model(self, collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError as exc:
            raise StoreError(f"unknown collection: {collection}") from exc

    def _column(self, model, field: str):
        if field not in _columns(model):
            raise StoreError(f"unknown field {model.__tablename__}.{field}")
        return getattr(model, field)

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        model = self._model(collection)
        with self._transaction() as session:
            row = session.get(model, doc_id)
            return _to_dict(row) if row is not None else None

    def query(self, collection: str, field: str, op: str, value: Any) -> list[dict[str, Any]]:
        model = self._model(collection)
        column = self._column(model, field)
        compare = _OPERATORS.get(op)
        if op == "in":
            clause = column.in_(list(value))
        elif compare is not None:
            clause = compare(column, value)
        else:
            raise StoreError(f"unsupported operator: {op}")
        with self._transaction() as session:
            rows = session.execute(select(model).where(clause)).scalars().all()
            return [_to_dict(row) for row in rows]

    def all(self, collection: str) -> list[dict[str, Any]]:
        model = self._model(collection)
        with self._transaction() as session:
            rows = session.execute(select(model)).scalars().all()
            return [_to_dict(row) for row in rows]

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        model = self._model(collection)
        payload = {key: value for key, value in data.items() if key in _columns(model)}
        if "id" in _columns(model) and not payload.get("id") and model is not AuditLog:
            payload["id"] = uuid.uuid4().hex
        try:
            with self._transaction() as session:
                row = model(**payload)
                session.add(row)
                session.flush()
                return str(row.id)
        except IntegrityError as exc:
            raise DuplicateDocument(str(exc.orig)) from exc

    def update(self, collection: str, doc_id: str, changes: Mapping[str, Any]) -> bool:
        model = self._model(collection)
        allowed = _columns(model)
        try:
            with self._transaction() as session:
                row = session.get(model, doc_id)
                if row is None:
                    return False
                for key, value in changes.items():
                    if key in allowed and key != "id":
                        setattr(row, key, value)
                return True
        except IntegrityError as exc:
            raise DuplicateDocument(str(exc.orig)) from exc

    def delete(self, collection: str, doc_id: str) -> bool:
        model = self._model(collection)
        with self._transaction() as session:
            row = session.get(model, doc_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def batch_delete(self, collection: str, doc_ids: Iterable[str]) -> int:
        """Delete several documents in one transaction; returns the number removed."""

        model = self._model(collection)
        ids = list(doc_ids)
        if not ids:
            return 0
        with self._transaction() as session:
            result = session.execute(sa_delete(model).where(model.id.in_(ids)))
            return int(result.rowcount or 0)
