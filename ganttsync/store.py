# ganttsync/store.py
"""
Record stores the fetcher reads from and the projector writes to.

DataverseStore talks to the OData Web API the schedule lives in.
SqlRecordStore serves the same contract from local SQLAlchemy tables.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from ganttsync.database import get_engine, tasks_table, resources_table

logger = logging.getLogger(__name__)

TASKS_ENTITY = "cr2eb_projecttaskses"
RESOURCES_ENTITY = "cr2eb_projectresourceses"
PROJECT_LOOKUP = "_cr2eb_project_value"
WBS_COLUMN = "cr2eb_wbs"

ODATA_HEADERS = {
    "Accept": "application/json",
    "OData-MaxVersion": "4.0",
    "OData-Version": "4.0",
}


class StoreError(Exception):
    """Raised when the record store cannot be read or written."""


class RecordStore:
    """Async contract shared by every store backend."""

    async def list_resources(self, project_id: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def list_tasks(self, project_id: str) -> List[Dict[str, Any]]:
        """Rows for the project, ascending by WBS code."""
        raise NotImplementedError

    async def update_task(self, guid: str, fields: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


class DataverseStore(RecordStore):
    def __init__(
        self,
        client_url: str,
        api_version: str = "v9.1",
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = f"{client_url.rstrip('/')}/api/data/{api_version}"
        headers = dict(ODATA_HEADERS)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(headers=headers, transport=transport)

    def _project_filter(self, project_id: str) -> str:
        return f"$filter={PROJECT_LOOKUP} eq {quote(project_id, safe='')}"

    async def _get_rows(self, url: str, what: str) -> List[Dict[str, Any]]:
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise StoreError(f"Error fetching {what}: {e}") from e
        except ValueError as e:
            raise StoreError(f"Error fetching {what}: response is not JSON") from e
        rows = payload.get("value") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise StoreError(f"Error fetching {what}: response has no value list")
        return rows

    async def list_resources(self, project_id: str) -> List[Dict[str, Any]]:
        url = f"{self.api_url}/{RESOURCES_ENTITY}?{self._project_filter(project_id)}"
        return await self._get_rows(url, "resources")

    async def list_tasks(self, project_id: str) -> List[Dict[str, Any]]:
        url = (
            f"{self.api_url}/{TASKS_ENTITY}?{self._project_filter(project_id)}"
            f"&$orderby={WBS_COLUMN} asc"
        )
        return await self._get_rows(url, "tasks")

    async def update_task(self, guid: str, fields: Dict[str, Any]) -> None:
        url = f"{self.api_url}/{TASKS_ENTITY}({guid})"
        try:
            response = await self.client.patch(url, json=fields)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to update task {guid}: {e}") from e

    async def aclose(self) -> None:
        await self.client.aclose()


class SqlRecordStore(RecordStore):
    """
    Serves the store contract from SQLAlchemy tables. Queries run in a worker
    thread so the event loop is never blocked on the database.
    """

    def __init__(self, engine, owns_engine: bool = False):
        self.engine = engine
        self.owns_engine = owns_engine

    def _select_rows(self, query, what: str) -> List[Dict[str, Any]]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(query).fetchall()
        except SQLAlchemyError as e:
            raise StoreError(f"Error fetching {what}: {e}") from e
        return [dict(r._mapping) for r in rows]

    def _update_row(self, guid: str, fields: Dict[str, Any]) -> None:
        unknown = set(fields) - set(tasks_table.c.keys())
        if unknown:
            raise StoreError(f"Unknown task fields: {sorted(unknown)}")
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    update(tasks_table)
                    .where(tasks_table.c.cr2eb_projecttasksid == guid)
                    .values(**fields)
                )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update task {guid}: {e}") from e
        if result.rowcount == 0:
            raise StoreError(f"Task {guid} not found")

    async def list_resources(self, project_id: str) -> List[Dict[str, Any]]:
        query = select(resources_table).where(resources_table.c.project_id == project_id)
        return await asyncio.to_thread(self._select_rows, query, "resources")

    async def list_tasks(self, project_id: str) -> List[Dict[str, Any]]:
        query = (
            select(tasks_table)
            .where(tasks_table.c.project_id == project_id)
            .order_by(tasks_table.c.cr2eb_wbs.asc())
        )
        return await asyncio.to_thread(self._select_rows, query, "tasks")

    async def update_task(self, guid: str, fields: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._update_row, guid, fields)

    async def aclose(self) -> None:
        if self.owns_engine:
            self.engine.dispose()


def make_store(settings) -> RecordStore:
    """Build the store the settings point at."""
    if settings.store == "sql":
        # one engine per database URL for the life of the process
        return SqlRecordStore(get_engine(settings.db_url))
    if not settings.dataverse_url:
        raise StoreError("DATAVERSE_URL is not set")
    return DataverseStore(
        settings.dataverse_url,
        api_version=settings.dataverse_api_version,
        token=settings.dataverse_token,
    )
