# ganttsync/fetcher.py
import logging
from typing import List, Optional
from urllib.parse import urlparse, parse_qs

from pydantic import ValidationError

from ganttsync.models import FetchResult, ResourceRecord, TaskRecord
from ganttsync.store import RecordStore, StoreError

logger = logging.getLogger(__name__)

def project_id_from_url(url: Optional[str]) -> Optional[str]:
    """The project guid carried in the host page's `id` query parameter."""
    if not url:
        return None
    values = parse_qs(urlparse(url).query).get("id")
    if not values or not values[0].strip():
        return None
    return values[0].strip()

def _validate_rows(model, rows, guid_key: str, what: str, skipped: Optional[list]) -> list:
    # a bad row is a data-quality problem, not a failed fetch
    records = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except ValidationError as e:
            ident = row.get(guid_key) if isinstance(row, dict) else None
            logger.warning("Skipping malformed %s row %s: %s", what, ident, e)
            if skipped is not None:
                skipped.append(f"{what} {ident}")
    return records

async def fetch_resources(store: RecordStore, project_id: str, skipped: Optional[list] = None) -> List[ResourceRecord]:
    rows = await store.list_resources(project_id)
    return _validate_rows(ResourceRecord, rows, "cr2eb_projectresourcesid", "resource", skipped)

async def fetch_tasks(store: RecordStore, project_id: str, skipped: Optional[list] = None) -> List[TaskRecord]:
    rows = await store.list_tasks(project_id)
    return _validate_rows(TaskRecord, rows, "cr2eb_projecttasksid", "task", skipped)

async def fetch_project(store: RecordStore, project_id: Optional[str]) -> FetchResult:
    """
    Fetch everything a project view needs.

    Resources are fetched first and must be complete before tasks are read,
    since the tree builder resolves task resources through them.
    Never raises for a missing project id or a failing store: the result
    comes back empty with its status set, and the caller builds an empty tree.
    Rows that fail validation are left out and listed in `skipped`.
    """
    if not project_id:
        logger.error("Project GUID is missing from the URL.")
        return FetchResult(status="missing_project", message="Project GUID is missing")

    skipped = []
    try:
        resources = await fetch_resources(store, project_id, skipped)
        tasks = await fetch_tasks(store, project_id, skipped)
    except StoreError as e:
        logger.error("Error fetching project %s: %s", project_id, e)
        return FetchResult(project_id=project_id, status="error", message=str(e))

    logger.info("Fetched %d tasks and %d resources for project %s",
                len(tasks), len(resources), project_id)
    return FetchResult(project_id=project_id, tasks=tasks, resources=resources, skipped=skipped)
