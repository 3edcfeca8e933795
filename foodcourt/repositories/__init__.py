"""
Repository Factory

Single entry point for obtaining the repository a request should use.
Selects the SQL repository while the data store is connected and the mock
repository otherwise (unless fallback is disabled).

Usage:
    from foodcourt.repositories import get_repository

    @app.get("/api/vendors")
    async def list_vendors(repo: BaseFoodCourtRepository = Depends(get_repository)):
        return await repo.list_vendors()
"""

import logging

from fastapi import Request, Response

from foodcourt.database import DataStore, StoreUnavailableError
from foodcourt.repositories.base import BaseFoodCourtRepository
from foodcourt.repositories.mock import MockFoodCourtRepository
from foodcourt.repositories.sql import SqlFoodCourtRepository

logger = logging.getLogger(__name__)

DATA_SOURCE_HEADER = "X-Data-Source"


def select_repository(
    store: DataStore,
    sql_repository: BaseFoodCourtRepository,
    mock_repository: BaseFoodCourtRepository,
    fallback_enabled: bool,
) -> BaseFoodCourtRepository:
    """
    Pick the repository for the current connectivity state.

    Raises:
        StoreUnavailableError: Store disconnected and fallback disabled
    """
    if store.connected:
        return sql_repository
    if fallback_enabled:
        return mock_repository
    raise StoreUnavailableError("Database unavailable")


def get_repository(request: Request, response: Response) -> BaseFoodCourtRepository:
    """
    FastAPI dependency returning the active repository.

    Also labels the response with the data source so clients can tell
    fallback data from real data.
    """
    state = request.app.state
    repo = select_repository(
        state.data_store,
        state.sql_repository,
        state.mock_repository,
        state.settings.fallback_enabled,
    )
    response.headers[DATA_SOURCE_HEADER] = repo.provider_name
    return repo


__all__ = [
    "get_repository",
    "select_repository",
    "DATA_SOURCE_HEADER",
    "BaseFoodCourtRepository",
    "MockFoodCourtRepository",
    "SqlFoodCourtRepository",
]
