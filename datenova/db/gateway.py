"""
Data-Access Gateway Module

A thin request/response layer over the relational store. Each call is its own
unit of work: it is committed (or rolled back) before it returns, so a sequence
of calls is NOT atomic. Callers that want several calls to commit together wrap
them in ``transaction()``.

Filters are keyword style:

    gateway.select(Task, filters={"estado__ne": "completada"}, order_by="created_at")
    gateway.update(Task, {"horas_reales": 5}, id=task_id)
    gateway.delete(TaskAssignment, task_id=task_id)

Supported suffixes: none (equality, ``None`` means IS NULL), ``__ne`` and ``__in``.
Every database error is rolled back and re-raised as RemoteOperationFailed.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

import structlog
from sqlalchemy import delete as sa_delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, SQLModel, select

from datenova.core.errors import NotFound, RemoteOperationFailed

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


def _error_code(exc: SQLAlchemyError) -> Optional[str]:
    """Best-effort SQLSTATE for a driver error (PostgreSQL, MySQL or SQLite)."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code
    text = str(orig or exc).lower()
    if isinstance(exc, IntegrityError):
        if "unique" in text or "duplicate" in text:
            return "23505"
        if "foreign key" in text:
            return "23503"
        if "not null" in text:
            return "23502"
    if "no such table" in text or "doesn't exist" in text:
        return "42P01"
    return None


class DataGateway:
    def __init__(self, session: Session, feed=None):
        self.session = session
        self.feed = feed
        self._depth = 0
        self._pending_events: List[tuple] = []

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self):
        """Group every call made inside the block into a single commit."""
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.session.rollback()
                self._pending_events.clear()
            raise
        self._depth -= 1
        if self._depth == 0:
            with self._guard("commit", None):
                self._commit()

    def _commit(self) -> None:
        self.session.commit()
        events, self._pending_events = self._pending_events, []
        if self.feed is not None:
            for table, kind, row in events:
                self.feed.publish(table, kind, row)

    def _finish(self) -> None:
        if self._depth == 0:
            self._commit()

    @contextmanager
    def _guard(self, operation: str, model: Optional[Type[SQLModel]]):
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            self._pending_events.clear()
            code = _error_code(exc)
            message = str(getattr(exc, "orig", None) or exc)
            logger.warning(
                "remote_operation_failed",
                operation=operation,
                table=getattr(model, "__tablename__", None),
                code=code,
                error=message,
            )
            raise RemoteOperationFailed(message, code=code) from exc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _conditions(model: Type[SQLModel], filters: Dict[str, Any]) -> list:
        conditions = []
        for key, value in filters.items():
            name, _, op = key.partition("__")
            column = getattr(model, name)
            if op == "ne":
                conditions.append(column.is_not(None) if value is None else column != value)
            elif op == "in":
                conditions.append(column.in_(list(value)))
            elif op == "":
                conditions.append(column.is_(None) if value is None else column == value)
            else:
                raise ValueError(f"Unsupported filter operator: {key}")
        return conditions

    @staticmethod
    def _loader(model: Type[SQLModel], path: str):
        option = None
        current = model
        for name in path.split("."):
            attribute = getattr(current, name)
            option = selectinload(attribute) if option is None else option.selectinload(attribute)
            current = attribute.property.mapper.class_
        return option

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def select(
        self,
        model: Type[ModelT],
        *,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        expand: Sequence[str] = (),
    ) -> List[ModelT]:
        statement = select(model)
        conditions = self._conditions(model, filters or {})
        if conditions:
            statement = statement.where(*conditions)
        for path in expand:
            statement = statement.options(self._loader(model, path))
        if order_by:
            column = getattr(model, order_by)
            statement = statement.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            statement = statement.limit(limit)
        with self._guard("select", model):
            return list(self.session.exec(statement).all())

    def select_one(self, model: Type[ModelT], *, expand: Sequence[str] = (), **filters) -> ModelT:
        rows = self.select(model, filters=filters, expand=expand, limit=1)
        if not rows:
            raise NotFound("No se encontraron resultados")
        return rows[0]

    def insert(self, model: Type[ModelT], rows: Iterable[Dict[str, Any]]) -> List[ModelT]:
        objects = [model(**row) for row in rows]
        if not objects:
            return []
        with self._guard("insert", model):
            self.session.add_all(objects)
            self.session.flush()
            for obj in objects:
                self._pending_events.append((model.__tablename__, "INSERT", obj.model_dump()))
            self._finish()
        return objects

    def update(self, model: Type[ModelT], patch: Dict[str, Any], **filters) -> List[ModelT]:
        if not filters:
            raise ValueError("update() requires at least one filter")
        patch = dict(patch)
        if "updated_at" in model.model_fields and "updated_at" not in patch:
            patch["updated_at"] = datetime.utcnow().isoformat()
        with self._guard("update", model):
            objects = list(self.session.exec(select(model).where(*self._conditions(model, filters))).all())
            for obj in objects:
                for key, value in patch.items():
                    setattr(obj, key, value)
                self.session.add(obj)
            self.session.flush()
            for obj in objects:
                self._pending_events.append((model.__tablename__, "UPDATE", obj.model_dump()))
            self._finish()
        return objects

    def delete(self, model: Type[SQLModel], **filters) -> int:
        if not filters:
            raise ValueError("delete() requires at least one filter")
        statement = sa_delete(model).where(*self._conditions(model, filters))
        with self._guard("delete", model):
            result = self.session.connection().execute(statement)
            self.session.expire_all()
            self._finish()
        return result.rowcount
