"""Generic repository: the CRUD every aggregate repository inherits."""

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from core.db import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    CRUD over one mapped class.

    Subclasses set ``model`` and add their own finders. Writes are flushed so
    generated ids are available, but never committed; the request session
    commits once the whole operation succeeds.

        class IngredientRepository(BaseRepository[Ingredient]):
            model = Ingredient
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, id: str) -> T | None:
        return self.session.get(self.model, id)

    def get_all(self, limit: int | None = None, offset: int = 0) -> list[T]:
        query = self.session.query(self.model)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def create(self, **values: Any) -> T:
        instance = self.model(**values)
        self.session.add(instance)
        self.session.flush()
        return instance

    def update(self, id: str, **values: Any) -> T | None:
        """Set the given attributes; keys the model does not define are ignored."""
        instance = self.get_by_id(id)
        if instance is None:
            return None
        for key in values.keys() & set(self.model.__mapper__.attrs.keys()):
            setattr(instance, key, values[key])
        self.session.flush()
        return instance

    def delete(self, id: str) -> bool:
        instance = self.get_by_id(id)
        if instance is None:
            return False
        self.session.delete(instance)
        self.session.flush()
        return True

    def count(self, **filters: Any) -> int:
        query = self._filtered(self.session.query(func.count()).select_from(self.model), filters)
        return query.scalar() or 0

    def exists(self, id: str) -> bool:
        return self.get_by_id(id) is not None

    def exists_where(self, **filters: Any) -> bool:
        subquery = self._filtered(self.session.query(self.model), filters).exists()
        return bool(self.session.query(subquery).scalar())

    def _filtered(self, query: Query, filters: Mapping[str, Any]) -> Query:
        columns = self.model.__table__.columns
        for key, value in filters.items():
            if key not in columns:
                raise ValueError(f"Unknown filter key for {self.model.__name__}: {key}")
            query = query.filter(columns[key] == value)
        return query
