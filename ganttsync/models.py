# ganttsync/models.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union
from datetime import datetime

# Store-native records. Field aliases are the remote table's column names.

class TaskRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(alias="cr2eb_id")
    guid: str = Field(alias="cr2eb_projecttasksid")
    name: Optional[str] = Field(default=None, alias="cr2eb_name")
    start: Optional[str] = Field(default=None, alias="cr2eb_start")
    finish: Optional[str] = Field(default=None, alias="cr2eb_finish")
    duration: Optional[float] = Field(default=0, alias="cr2eb_duration")
    complete: Optional[float] = Field(default=0, alias="cr2eb_complete")
    resource_names: Optional[str] = Field(default=None, alias="cr2eb_resourcenames")
    predecessors: Optional[str] = Field(default=None, alias="cr2eb_predecessors")
    wbs: Optional[str] = Field(default=None, alias="cr2eb_wbs")

class ResourceRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    guid: str = Field(alias="cr2eb_projectresourcesid")
    id: int = Field(alias="cr2eb_id")
    name: Optional[str] = Field(default=None, alias="cr2eb_name")

# Tree form handed to the Gantt widget. Aliases are the widget's field names.

class PresentationNode(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    task_id: int = Field(alias="TaskID")
    guid: str = Field(alias="Taskguid")
    name: Optional[str] = Field(default=None, alias="TaskName")
    start_date: Optional[datetime] = Field(default=None, alias="StartDate")
    end_date: Optional[datetime] = Field(default=None, alias="EndDate")
    duration: float = Field(default=0, alias="Duration")
    progress: float = Field(default=0, alias="Progress")
    predecessor: Optional[str] = Field(default=None, alias="Predecessor")
    resource_ids: List[int] = Field(default_factory=list, alias="resourceInfo")
    wbs: str = Field(default="", alias="WBS")
    children: List["PresentationNode"] = Field(default_factory=list)

    def to_widget(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

class EditedTask(BaseModel):
    """
    The `taskData` the widget hands back on save. Dates are kept verbatim,
    resources arrive as whatever the widget holds (usually resource objects).
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    task_id: Optional[int] = Field(default=None, alias="TaskID")
    guid: Optional[str] = Field(default=None, alias="Taskguid")
    name: Optional[str] = Field(default=None, alias="TaskName")
    start_date: Optional[Union[str, datetime]] = Field(default=None, alias="StartDate")
    end_date: Optional[Union[str, datetime]] = Field(default=None, alias="EndDate")
    duration: Optional[float] = Field(default=0, alias="Duration")
    progress: Optional[float] = Field(default=0, alias="Progress")
    resource_info: Any = Field(default=None, alias="resourceInfo")

class TaskUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, alias="cr2eb_name")
    start: Optional[str] = Field(default=None, alias="cr2eb_start")
    finish: Optional[str] = Field(default=None, alias="cr2eb_finish")
    duration: float = Field(alias="cr2eb_duration")
    complete: Optional[float] = Field(alias="cr2eb_complete")
    resource_names: Optional[str] = Field(default=None, alias="cr2eb_resourcenames")

    def to_store(self) -> Dict[str, Any]:
        # only what the projector actually set goes over the wire
        return self.model_dump(by_alias=True, exclude_unset=True)

# Outcome reporting

class FetchResult(BaseModel):
    project_id: Optional[str] = None
    status: str = "ok"  # "ok", "missing_project" or "error"
    message: Optional[str] = None
    tasks: List[TaskRecord] = Field(default_factory=list)
    resources: List[ResourceRecord] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)

class BuildResult(BaseModel):
    roots: List[PresentationNode] = Field(default_factory=list)
    orphans: List[str] = Field(default_factory=list)
    duplicates: List[str] = Field(default_factory=list)
    unmatched_resources: List[str] = Field(default_factory=list)

class SubmitResult(BaseModel):
    guid: Optional[str] = None
    status: str  # "updated", "skipped" or "failed"
    message: Optional[str] = None
    update: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == "updated"
