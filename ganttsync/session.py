# ganttsync/session.py
import logging
from typing import List, Optional

from ganttsync.fetcher import fetch_project
from ganttsync.models import BuildResult, EditedTask, FetchResult, PresentationNode, SubmitResult
from ganttsync.projector import submit_edit
from ganttsync.store import RecordStore
from ganttsync.tree import ResourceIndex, build_resource_index, build_tree

logger = logging.getLogger(__name__)


class SessionError(RuntimeError):
    pass


class ProjectSession:
    """
    One project view: a single load followed by any number of edits.

    The resource index is written by `load` and only read afterwards.
    Reloading means starting a new session.
    """

    def __init__(self, store: RecordStore, project_id: Optional[str]):
        self.store = store
        self.project_id = project_id
        self.fetch: Optional[FetchResult] = None
        self.build: Optional[BuildResult] = None
        self._resource_index: Optional[ResourceIndex] = None

    @property
    def loaded(self) -> bool:
        return self.fetch is not None

    @property
    def resource_index(self) -> ResourceIndex:
        if self._resource_index is None:
            raise SessionError("Session has not been loaded")
        return self._resource_index

    @property
    def roots(self) -> List[PresentationNode]:
        return self.build.roots if self.build else []

    async def load(self) -> BuildResult:
        if self.loaded:
            raise SessionError(f"Project {self.project_id} is already loaded")
        self.fetch = await fetch_project(self.store, self.project_id)
        self._resource_index = build_resource_index(self.fetch.resources)
        self.build = build_tree(self.fetch.tasks, self.fetch.resources, self._resource_index)
        logger.info("Built %d root tasks for project %s", len(self.build.roots), self.project_id)
        return self.build

    async def submit(self, edited: EditedTask) -> SubmitResult:
        return await submit_edit(self.store, edited)
