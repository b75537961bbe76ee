from __future__ import annotations
from contextlib import contextmanager
from functools import cache
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Generic,
    Iterator,
    Sequence,
    Tuple,
    Type,
    TypeVar,
)
from sqlalchemy import (
    Engine,
    Row,
    select,
    create_engine,
    NullPool,
    asc,
    desc,
)
from sqlalchemy.orm import Session, sessionmaker
from journey_chat.models.base import Base
from journey_chat.settings import config

if TYPE_CHECKING:
    from sqlalchemy import ColumnExpressionArgument

V = TypeVar("V", bound=Type)


@cache
def get_engine(url: str) -> Engine:
    return create_engine(url, poolclass=NullPool)


@cache
def get_session_factory(url: str) -> Callable[..., Session]:
    """
    Build the session factory for a database URL once and reuse it for
    every later request against the same URL.
    """
    return sessionmaker(get_engine(url), expire_on_commit=False)


def init_db(url: str | None = None) -> None:
    # registers every table on Base.metadata
    from journey_chat.models import catalog, chat  # noqa: F401

    Base.metadata.create_all(get_engine(url or config.db_url))


class CRUDCapability(Generic[V]):
    resource_db: Type[V]

    def __init__(self, resource_db: Type[V]) -> None:
        self.resource_db = resource_db

    def db_row_to_model(self, row: V):
        return {field.name: getattr(row, field.name) for field in row.__table__.c}

    def db_rows_to_model_list(self, rows: Sequence[V]) -> list[dict]:
        return [
            {field.name: getattr(r, field.name) for field in r.__table__.c}
            for r in rows
        ]

    def db_tuple_rows_to_model_list(
        self, rows: Sequence[Row[Tuple[V]]], columns: list[str]
    ) -> list[dict]:
        return [{field[0]: field[1] for field in zip(columns, r)} for r in rows]

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = get_session_factory(config.db_url)()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _order_by_clauses(self, order_by: list[str]) -> list:
        clauses = []
        for item in order_by:
            if item.startswith("-"):
                clauses.append(desc(getattr(self.resource_db, item[1:])))
            else:
                clauses.append(asc(getattr(self.resource_db, item)))
        return clauses

    def list_resource(
        self,
        columns: list[str] | None = None,
        where: list["ColumnExpressionArgument[bool]"] | None = None,
        limit: int | None = None,
        order_by: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        if columns is None:
            stmt = select(self.resource_db)
        else:
            stmt = select(*[getattr(self.resource_db, column) for column in columns])
        if where is not None:
            stmt = stmt.where(*where)
        if order_by is not None:
            stmt = stmt.order_by(*self._order_by_clauses(order_by))
        if limit is not None:
            stmt = stmt.limit(limit)

        with self.session_scope() as session:
            if columns is not None:
                return self.db_tuple_rows_to_model_list(
                    session.execute(stmt).all(), columns
                )
            return self.db_rows_to_model_list(session.scalars(stmt).all())

    def get_resource(
        self,
        resource_id: Any | None,
        columns: list[str] | None = None,
        where: list["ColumnExpressionArgument[bool]"] | None = None,
        order_by: list[str] | None = None,
    ) -> dict[str, Any] | None:
        if columns is None:
            stmt = select(self.resource_db)
        else:
            stmt = select(*[getattr(self.resource_db, column) for column in columns])
        if resource_id is not None:
            stmt = stmt.where(self.resource_db.id == resource_id)  # type: ignore
        if where is not None:
            stmt = stmt.where(*where)
        if order_by is not None:
            stmt = stmt.order_by(*self._order_by_clauses(order_by))

        with self.session_scope() as session:
            if columns is not None:
                row = session.execute(stmt).first()
                if row is None:
                    return None
                return self.db_tuple_rows_to_model_list([row], columns)[0]
            resource = session.scalars(stmt).first()
            if resource is None:
                return None
            return self.db_row_to_model(resource)

    def create_resource(
        self,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        resource = self.resource_db(**data)  # type: ignore
        with self.session_scope() as session:
            session.add(resource)
            session.flush()
            session.commit()
            session.refresh(resource)
            return self.db_row_to_model(resource)  # type: ignore

    def delete_resource(
        self,
        resource_id: Any | None = None,
        where: list["ColumnExpressionArgument[bool]"] | None = None,
    ) -> dict[str, Any] | None:
        if resource_id is None:
            stmt = select(self.resource_db)
        else:
            stmt = select(self.resource_db).where(self.resource_db.id == resource_id)  # type: ignore
        if where is not None:
            stmt = stmt.where(*where)
        with self.session_scope() as session:
            resource = session.scalars(stmt).first()
            if resource is None:
                return None
            deleted = self.db_row_to_model(resource)
            session.delete(resource)
            session.flush()
            session.commit()
            return deleted
