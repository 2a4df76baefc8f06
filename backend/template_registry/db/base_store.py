"""
Base store — shared Supabase CRUD helpers for the registry stores.

All registry stores inherit from this class to get insert / select /
update / rpc primitives. PostgREST failures become HTTP 500s, with two
exceptions: unique violations are re-raised for the subclass to interpret,
and transient database failures become DatabaseTransientError.
"""

import logging
from typing import Any, Dict, List, NoReturn

from fastapi import HTTPException
from postgrest.exceptions import APIError

from template_registry.clients.supabase_client import SupabaseClient
from template_registry.core.config import Settings, settings as default_settings
from template_registry.core.constants.templates import (
    TRANSIENT_ERROR_CODES,
    TRANSIENT_ERROR_CLASSES,
    UNIQUE_VIOLATION_CODE,
)
from template_registry.core.exceptions import DatabaseTransientError

logger = logging.getLogger("base_store")


def is_unique_violation(error: APIError) -> bool:
    return getattr(error, "code", None) == UNIQUE_VIOLATION_CODE


def is_transient(error: APIError) -> bool:
    code = getattr(error, "code", None) or ""
    return code in TRANSIENT_ERROR_CODES or code[:2] in TRANSIENT_ERROR_CLASSES


class BaseStore:
    """Base class for all Supabase stores providing shared CRUD operations."""

    def __init__(
        self,
        supabase_client: SupabaseClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._supabase_client = supabase_client or SupabaseClient(self._settings)

    @property
    def _client(self):
        """Get the Supabase client instance."""
        return self._supabase_client.client

    def _raise_api_error(self, action: str, target: str, error: APIError) -> NoReturn:
        logger.info("supabase error target=%s detail=%s", target, str(error))
        if is_transient(error):
            raise DatabaseTransientError(f"Supabase {action} {target} failed: {error}") from error
        raise HTTPException(
            status_code=500,
            detail=f"Supabase {action} {target} failed: {error}",
        )

    async def _insert(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert rows into a table and return the stored representation."""
        if not rows:
            return []
        try:
            response = self._client.table(table).insert(rows).execute()
            return response.data or []
        except APIError as e:
            if is_unique_violation(e):
                logger.info("supabase unique violation table=%s detail=%s", table, str(e))
                raise
            self._raise_api_error("insert into", table, e)

    async def _select(
        self,
        table: str,
        columns: str = "*",
        filters: Dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        offset: int | None = None,
        limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        """Select rows from a table with optional filters, ordering and paging."""
        try:
            query = self._client.table(table).select(columns)
            if filters:
                for key, value in filters.items():
                    query = query.eq(key, value)
            if order_by:
                query = query.order(order_by, desc=descending)
            if limit is not None:
                start = offset or 0
                query = query.range(start, start + limit - 1)
            response = query.execute()
            return response.data or []
        except APIError as e:
            self._raise_api_error("select from", table, e)

    async def _update(
        self, table: str, filters: Dict[str, Any], payload: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """Update rows matching the filters and return them."""
        try:
            query = self._client.table(table).update(payload)
            for key, value in filters.items():
                query = query.eq(key, value)
            response = query.execute()
            return response.data or []
        except APIError as e:
            self._raise_api_error("update", table, e)

    async def _rpc(self, function: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Call a database function and return the rows it produces."""
        try:
            response = self._client.rpc(function, params).execute()
            data = response.data
            if data is None:
                return []
            return data if isinstance(data, list) else [data]
        except APIError as e:
            self._raise_api_error("rpc", function, e)
