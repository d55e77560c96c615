# ganttsync/projector.py
import logging
from datetime import datetime
from typing import Any, Optional

from ganttsync.models import EditedTask, SubmitResult, TaskUpdate
from ganttsync.store import RecordStore, StoreError
from ganttsync.utils import days_to_minutes

logger = logging.getLogger(__name__)

RESOURCE_GUID_KEY = "cr2eb_projectresourcesid"

def resource_guids(resource_info: Any) -> str:
    """
    Flatten the widget's resource list back to the store's comma-joined guids.
    Entries without a string guid (bare ids, partial objects) are skipped.
    """
    if not isinstance(resource_info, list):
        return ""
    guids = []
    for res in resource_info:
        guid = res.get(RESOURCE_GUID_KEY) if isinstance(res, dict) else getattr(res, RESOURCE_GUID_KEY, None)
        if isinstance(guid, str):
            guids.append(guid)
    return ",".join(guids)

def _verbatim(value) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value

def project_edit(edited: EditedTask) -> TaskUpdate:
    fields = {
        "name": edited.name,
        "duration": days_to_minutes(edited.duration),
        "complete": edited.progress,
        "resource_names": resource_guids(edited.resource_info),
    }
    # dates the widget did not send stay out of the update; an explicit null
    # is passed through so a finish date can be cleared
    if "start_date" in edited.model_fields_set:
        fields["start"] = _verbatim(edited.start_date)
    if "end_date" in edited.model_fields_set:
        fields["finish"] = _verbatim(edited.end_date)
    return TaskUpdate(**fields)

def edited_from_event(args: dict) -> Optional[EditedTask]:
    """
    Pull the edited task out of a widget `actionComplete` payload.
    Only save requests carry one; `data` may be a single record or a list.
    """
    if not isinstance(args, dict) or args.get("requestType") != "save":
        return None
    data = args.get("data")
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return None
    task_data = data.get("taskData")
    if not isinstance(task_data, dict):
        return None
    return EditedTask.model_validate(task_data)

async def submit_edit(store: RecordStore, edited: EditedTask) -> SubmitResult:
    """
    Write one edited task back to the store as a partial update.

    Skipped without touching the store unless the task has both a guid and a
    name. A failed write is logged and reported; nothing is retried and the
    widget's copy of the task is left as edited.
    """
    if not edited.guid or not edited.name:
        logger.debug("Skipping save for task %s: guid or name missing", edited.task_id)
        return SubmitResult(guid=edited.guid, status="skipped",
                            message="Task guid and name are required")

    update = project_edit(edited).to_store()
    try:
        await store.update_task(edited.guid, update)
    except StoreError as e:
        logger.error("Error updating task %s: %s", edited.guid, e)
        return SubmitResult(guid=edited.guid, status="failed", message=str(e), update=update)

    logger.info("Task %s updated successfully", edited.guid)
    return SubmitResult(guid=edited.guid, status="updated", update=update)
