"""
Awaitable facade over DataStore.

Client-side components treat the store as a remote service: every call is
an await point and the blocking SQLAlchemy work runs in the threadpool.
"""
from fastapi import Depends
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..database import get_db
from .errors import Result
from .store import DataStore


class AsyncDataStore:
    """Async wrapper exposing the same operations as DataStore."""

    def __init__(self, store: DataStore):
        self.store = store

    async def select(self, collection: str, **kwargs) -> Result:
        return await run_in_threadpool(self.store.select, collection, **kwargs)

    async def select_single(self, collection: str, filters, **kwargs) -> Result:
        return await run_in_threadpool(self.store.select_single, collection, filters, **kwargs)

    async def count(self, collection: str, filters=None) -> Result:
        return await run_in_threadpool(self.store.count, collection, filters)

    async def insert(self, collection: str, records) -> Result:
        return await run_in_threadpool(self.store.insert, collection, records)

    async def update(self, collection: str, patch, filters) -> Result:
        return await run_in_threadpool(self.store.update, collection, patch, filters)

    async def delete(self, collection: str, filters) -> Result:
        return await run_in_threadpool(self.store.delete, collection, filters)


def get_store(db: Session = Depends(get_db)) -> AsyncDataStore:
    """FastAPI dependency: a data store bound to the request's session."""
    return AsyncDataStore(DataStore(db))
