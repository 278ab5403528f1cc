"""
Collection-oriented data access over the SQLAlchemy models.

Callers address tables by collection name and get plain dict rows back,
the same shape a hosted backend would return. Every method returns a
Result instead of raising, so callers branch on ``result.error.code``.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import inspect, or_
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..logging_config import store_logger, timed
from ..models import Comment, CommentLike, Like, Post, Profile
from .errors import (
    CONNECTION_FAILURE,
    FOREIGN_KEY_VIOLATION,
    INTEGRITY_ERROR,
    INTERNAL_ERROR,
    INVALID_PARAMETER,
    MULTIPLE_ROWS,
    NO_ROWS,
    NOT_NULL_VIOLATION,
    UNDEFINED_COLUMN,
    UNDEFINED_TABLE,
    UNIQUE_VIOLATION,
    Result,
    StoreError,
)

COLLECTIONS = {
    "posts": Post,
    "comments": Comment,
    "profiles": Profile,
    "likes": Like,
    "comment_likes": CommentLike,
}

Filters = Mapping[str, Any]
Order = Sequence[Tuple[str, str]]

LIKE_ESCAPE = "\\"


def like_pattern(text: str) -> str:
    """Build a substring ILIKE pattern that treats % and _ in user input literally."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _integrity_code(exc: IntegrityError) -> str:
    message = str(exc.orig).lower()
    if "unique" in message or "duplicate" in message:
        return UNIQUE_VIOLATION
    if "foreign key" in message:
        return FOREIGN_KEY_VIOLATION
    if "not null" in message:
        return NOT_NULL_VIOLATION
    return INTEGRITY_ERROR


class DataStore:
    """Synchronous data store bound to one database session."""

    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    @staticmethod
    def _model(collection: str):
        model = COLLECTIONS.get(collection)
        if model is None:
            raise StoreError(UNDEFINED_TABLE, f'relation "{collection}" does not exist')
        return model

    @staticmethod
    def _column_names(model) -> List[str]:
        return [attr.key for attr in inspect(model).column_attrs]

    def _column(self, model, name: str):
        if name not in self._column_names(model):
            raise StoreError(UNDEFINED_COLUMN, f'column "{name}" does not exist on "{model.__tablename__}"')
        return getattr(model, name)

    def _row(self, obj, columns: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        names = columns or self._column_names(type(obj))
        return {name: getattr(obj, name) for name in names}

    def _apply_filters(self, model, query, filters: Optional[Filters]):
        for name, condition in (filters or {}).items():
            column = self._column(model, name)
            if isinstance(condition, tuple):
                op, value = condition
            else:
                op, value = "eq", condition

            if op == "eq":
                clause = column.is_(None) if value is None else column == value
            elif op == "neq":
                clause = column.isnot(None) if value is None else column != value
            elif op == "gt":
                clause = column > value
            elif op == "gte":
                clause = column >= value
            elif op == "lt":
                clause = column < value
            elif op == "lte":
                clause = column <= value
            elif op == "in":
                clause = column.in_(list(value))
            elif op == "ilike":
                clause = column.ilike(value, escape=LIKE_ESCAPE)
            elif op == "is":
                clause = column.is_(value)
            else:
                raise StoreError(INVALID_PARAMETER, f"unsupported filter operator '{op}'")
            query = query.filter(clause)
        return query

    def _apply_order(self, model, query, order: Optional[Order]):
        for name, direction in order or ():
            column = self._column(model, name)
            if direction not in ("asc", "desc"):
                raise StoreError(INVALID_PARAMETER, f"invalid order direction '{direction}'")
            query = query.order_by(column.desc() if direction == "desc" else column.asc())
        return query

    def _check_columns(self, model, names: Iterable[str]) -> None:
        for name in names:
            self._column(model, name)

    def _failure(self, action: str, collection: str, exc: Exception) -> Result:
        """Translate a database exception into a Result error and roll back."""
        self.session.rollback()
        if isinstance(exc, StoreError):
            error = exc
        elif isinstance(exc, IntegrityError):
            error = StoreError(_integrity_code(exc), str(exc.orig))
        elif isinstance(exc, OperationalError):
            error = StoreError(CONNECTION_FAILURE, str(exc.orig))
        else:
            error = StoreError(INTERNAL_ERROR, str(exc))
        store_logger.warning(
            f"{action} on {collection} failed",
            collection=collection,
            code=error.code,
            error_message=error.message,
        )
        return Result(error=error)

    def _build_query(
        self,
        model,
        filters: Optional[Filters] = None,
        any_ilike: Optional[Tuple[Sequence[str], str]] = None,
    ):
        query = self._apply_filters(model, self.session.query(model), filters)
        if any_ilike:
            names, pattern = any_ilike
            columns = [self._column(model, name) for name in names]
            query = query.filter(or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns)))
        return query

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    @timed(store_logger)
    def select(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        order: Optional[Order] = None,
        range: Optional[Tuple[int, int]] = None,
        columns: Optional[Sequence[str]] = None,
        any_ilike: Optional[Tuple[Sequence[str], str]] = None,
        limit: Optional[int] = None,
    ) -> Result:
        """Select rows. ``range`` is an inclusive (from, to) pair of row offsets."""
        try:
            model = self._model(collection)
            if columns:
                self._check_columns(model, columns)
            query = self._build_query(model, filters, any_ilike)
            query = self._apply_order(model, query, order)
            if range is not None:
                start, end = range
                if start < 0 or end < start:
                    raise StoreError(INVALID_PARAMETER, f"invalid range {start}-{end}")
                query = query.offset(start).limit(end - start + 1)
            elif limit is not None:
                query = query.limit(limit)
            rows = [self._row(obj, columns) for obj in query.all()]
        except (StoreError, SQLAlchemyError) as exc:
            return self._failure("select", collection, exc)
        return Result(data=rows)

    @timed(store_logger)
    def select_single(
        self,
        collection: str,
        filters: Filters,
        columns: Optional[Sequence[str]] = None,
        required: bool = True,
    ) -> Result:
        """Select exactly one row. With ``required=False`` a missing row yields ``data=None``."""
        result = self.select(collection, filters=filters, columns=columns, limit=2)
        if result.error:
            return result
        rows = result.data
        if len(rows) > 1:
            return Result.failure(MULTIPLE_ROWS, "query returned more than one row")
        if not rows:
            if required:
                return Result.failure(NO_ROWS, "query returned no rows")
            return Result(data=None)
        return Result(data=rows[0])

    @timed(store_logger)
    def count(self, collection: str, filters: Optional[Filters] = None) -> Result:
        try:
            model = self._model(collection)
            total = self._build_query(model, filters).count()
        except (StoreError, SQLAlchemyError) as exc:
            return self._failure("count", collection, exc)
        return Result(count=total)

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    @timed(store_logger)
    def insert(self, collection: str, records: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> Result:
        """Insert one or more records and return the stored rows."""
        if isinstance(records, Mapping):
            records = [records]
        try:
            model = self._model(collection)
            objects = []
            for record in records:
                self._check_columns(model, record.keys())
                objects.append(model(**record))
            self.session.add_all(objects)
            self.session.commit()
            for obj in objects:
                self.session.refresh(obj)
            rows = [self._row(obj) for obj in objects]
        except (StoreError, SQLAlchemyError) as exc:
            return self._failure("insert", collection, exc)
        store_logger.debug(f"inserted {len(rows)} row(s) into {collection}", collection=collection)
        return Result(data=rows)

    @timed(store_logger)
    def update(self, collection: str, patch: Mapping[str, Any], filters: Filters) -> Result:
        """Apply ``patch`` to every row matching ``filters``; returns the updated rows."""
        if not filters:
            return Result.failure(INVALID_PARAMETER, "update requires at least one filter")
        try:
            model = self._model(collection)
            self._check_columns(model, patch.keys())
            objects = self._build_query(model, filters).all()
            for obj in objects:
                for key, value in patch.items():
                    setattr(obj, key, value)
            self.session.commit()
            for obj in objects:
                self.session.refresh(obj)
            rows = [self._row(obj) for obj in objects]
        except (StoreError, SQLAlchemyError) as exc:
            return self._failure("update", collection, exc)
        return Result(data=rows)

    @timed(store_logger)
    def delete(self, collection: str, filters: Filters) -> Result:
        """Delete matching rows one by one so ORM cascades and counter events run."""
        if not filters:
            return Result.failure(INVALID_PARAMETER, "delete requires at least one filter")
        try:
            model = self._model(collection)
            objects = self._build_query(model, filters).all()
            rows = [self._row(obj) for obj in objects]
            for obj in objects:
                self.session.delete(obj)
            self.session.commit()
        except (StoreError, SQLAlchemyError) as exc:
            return self._failure("delete", collection, exc)
        return Result(data=rows)
