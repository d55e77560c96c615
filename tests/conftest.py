import pytest
from sqlalchemy import insert

from ganttsync.database import init_db, resources_table, tasks_table
from ganttsync.store import RecordStore, StoreError

PROJECT_ID = "5d1c7a3e-0000-4000-8000-000000000001"

RESOURCE_ROWS = [
    {"cr2eb_projectresourcesid": "g1", "cr2eb_id": 10, "cr2eb_name": "Crane crew"},
    {"cr2eb_projectresourcesid": "g2", "cr2eb_id": 20, "cr2eb_name": "Electricians"},
]

TASK_ROWS = [
    {
        "cr2eb_id": 1, "cr2eb_projecttasksid": "t1", "cr2eb_name": "Foundations",
        "cr2eb_start": "2024-01-01T08:00:00Z", "cr2eb_finish": "2024-01-05T17:00:00Z",
        "cr2eb_duration": 2400, "cr2eb_complete": 0.25, "cr2eb_resourcenames": "g1",
        "cr2eb_wbs": "1",
    },
    {
        "cr2eb_id": 2, "cr2eb_projecttasksid": "t2", "cr2eb_name": "Excavation",
        "cr2eb_start": "2024-01-01T08:00:00Z", "cr2eb_duration": 960, "cr2eb_complete": 0.5,
        "cr2eb_resourcenames": "g1, g2, g3", "cr2eb_predecessors": "", "cr2eb_wbs": "1.1",
    },
    {
        "cr2eb_id": 3, "cr2eb_projecttasksid": "t3", "cr2eb_name": "Pour slab",
        "cr2eb_start": "2024-01-03T08:00:00Z", "cr2eb_duration": 480, "cr2eb_complete": 0,
        "cr2eb_predecessors": "2FS", "cr2eb_wbs": "1.2",
    },
]


class FakeStore(RecordStore):
    """In-memory store that records every call made against it."""

    def __init__(self, tasks=None, resources=None, fail_reads=False, fail_writes=False):
        self.tasks = list(tasks or [])
        self.resources = list(resources or [])
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.calls = []
        self.closed = False

    async def list_resources(self, project_id):
        self.calls.append(("list_resources", project_id))
        if self.fail_reads:
            raise StoreError("Error fetching resources: 503 Service Unavailable")
        return self.resources

    async def list_tasks(self, project_id):
        self.calls.append(("list_tasks", project_id))
        if self.fail_reads:
            raise StoreError("Error fetching tasks: 503 Service Unavailable")
        return self.tasks

    async def update_task(self, guid, fields):
        self.calls.append(("update_task", guid, fields))
        if self.fail_writes:
            raise StoreError(f"Failed to update task {guid}: 412 Precondition Failed")

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_store():
    return FakeStore(tasks=TASK_ROWS, resources=RESOURCE_ROWS)

@pytest.fixture
def make_fake_store():
    return FakeStore

@pytest.fixture
def engine(tmp_path):
    # file-backed so the API test client's worker thread sees the same data
    return init_db(db_url=f"sqlite:///{tmp_path / 'ganttsync_test.db'}")

def _row(table, values, **extra):
    row = {name: None for name in table.c.keys()}
    row.update(values, **extra)
    return row

@pytest.fixture
def seeded_engine(engine):
    with engine.begin() as conn:
        conn.execute(insert(resources_table), [_row(resources_table, r, project_id=PROJECT_ID) for r in RESOURCE_ROWS])
        # inserted out of WBS order on purpose
        conn.execute(insert(tasks_table), [_row(tasks_table, t, project_id=PROJECT_ID) for t in reversed(TASK_ROWS)])
        conn.execute(insert(tasks_table), [_row(tasks_table, {
            "cr2eb_projecttasksid": "other", "project_id": "another-project", "cr2eb_id": 99,
            "cr2eb_name": "Elsewhere", "cr2eb_start": "2024-02-01", "cr2eb_duration": 480,
            "cr2eb_complete": 0, "cr2eb_wbs": "1",
        })])
    return engine
