# ganttsync/widget.py
import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

# Which PresentationNode attribute feeds each widget field.
TASK_FIELDS = {
    "id": "TaskID",
    "name": "TaskName",
    "startDate": "StartDate",
    "endDate": "EndDate",
    "duration": "Duration",
    "progress": "Progress",
    "child": "children",
    "resourceInfo": "resourceInfo",
    "dependency": "Predecessor",
}

RESOURCE_FIELDS = {
    "id": "cr2eb_id",
    "name": "cr2eb_name",
}

ALL_COLUMNS = ["TaskID", "TaskName", "StartDate", "EndDate", "Duration", "Progress"]

_license_key: Optional[str] = None

def register_license(key: Optional[str]) -> bool:
    """
    Process-wide widget activation. Only the first call with a key takes
    effect; returns True when this call registered it.
    """
    global _license_key
    if not key:
        logger.warning("No widget license key configured")
        return False
    if _license_key is not None:
        return False
    _license_key = key
    logger.debug("Widget license registered")
    return True

def license_key() -> Optional[str]:
    return _license_key

def presentation_contract() -> dict:
    return {
        "taskFields": dict(TASK_FIELDS),
        "resourceFields": dict(RESOURCE_FIELDS),
        "columns": list(ALL_COLUMNS),
    }


class ColumnVisibility:
    """Hide/show state for the grid columns. Lives only as long as the view."""

    def __init__(self, columns: Optional[List[str]] = None):
        self.columns = list(columns or ALL_COLUMNS)
        self.selected: Optional[str] = None
        self.hidden: List[str] = []

    def available(self) -> List[str]:
        """Columns that can still be picked for hiding."""
        return [col for col in self.columns if col not in self.hidden]

    def select(self, column: str):
        if column not in self.columns:
            raise ValueError(f"Unknown column: {column}")
        self.selected = column

    def hide(self) -> bool:
        if not self.selected or self.selected in self.hidden:
            return False
        self.hidden.append(self.selected)
        return True

    def show(self, column: str) -> bool:
        if column not in self.hidden:
            return False
        self.hidden = [col for col in self.hidden if col != column]
        return True
