import pytest
from fastapi.testclient import TestClient

from ganttsync.api import app, columns, get_store
from ganttsync.store import SqlRecordStore
from conftest import FakeStore, PROJECT_ID, TASK_ROWS

@pytest.fixture
def store():
    return FakeStore()

@pytest.fixture
def client(store):
    async def override():
        yield store

    app.dependency_overrides[get_store] = override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture
def sql_client(seeded_engine):
    async def override():
        yield SqlRecordStore(seeded_engine)

    app.dependency_overrides[get_store] = override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

def test_contract(client):
    response = client.get("/contract")
    assert response.status_code == 200
    data = response.json()
    assert data["taskFields"]["child"] == "children"
    assert data["taskFields"]["dependency"] == "Predecessor"
    assert data["resourceFields"] == {"id": "cr2eb_id", "name": "cr2eb_name"}
    assert "licenseKey" not in data

def test_tree_for_project(sql_client):
    response = sql_client.get("/tree", params={"id": PROJECT_ID})
    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "ok"
    assert [t["TaskName"] for t in data["tasks"]] == ["Foundations"]
    assert [c["WBS"] for c in data["tasks"][0]["children"]] == ["1.1", "1.2"]
    assert data["tasks"][0]["Duration"] == 5
    assert {r["cr2eb_id"] for r in data["resources"]} == {10, 20}
    assert data["skipped"] == []

def test_tree_without_project_id_is_empty(client, store):
    response = client.get("/tree")
    assert response.status_code == 200
    assert response.json()["tasks"] == []
    assert response.json()["status"] == "missing_project"
    assert store.calls == []

def test_tree_with_failing_store_is_empty(client, store):
    store.fail_reads = True
    data = client.get("/tree", params={"id": PROJECT_ID}).json()
    assert data["status"] == "error"
    assert data["tasks"] == []

def test_tree_lists_skipped_rows(client, store):
    store.tasks = [dict(row) for row in TASK_ROWS]
    store.tasks[2]["cr2eb_id"] = None
    data = client.get("/tree", params={"id": PROJECT_ID}).json()

    assert data["status"] == "ok"
    assert data["skipped"] == ["task t3"]
    assert [c["TaskID"] for c in data["tasks"][0]["children"]] == [2]

def test_save_task(client, store):
    payload = {"Taskguid": "t1", "TaskName": "Foundations", "Duration": 2, "Progress": 1}
    response = client.post("/tasks/save", json=payload)

    assert response.status_code == 200
    assert response.json()["status"] == "updated"
    assert store.calls == [("update_task", "t1", {
        "cr2eb_name": "Foundations", "cr2eb_duration": 960, "cr2eb_complete": 1, "cr2eb_resourcenames": "",
    })]

def test_save_task_without_name_is_skipped(client, store):
    response = client.post("/tasks/save", json={"Taskguid": "t1", "Duration": 2})
    assert response.json()["status"] == "skipped"
    assert store.calls == []

def test_failed_save_returns_502(client, store):
    store.fail_writes = True
    response = client.post("/tasks/save", json={"Taskguid": "t1", "TaskName": "A"})
    assert response.status_code == 502
    assert response.json()["status"] == "failed"

def test_action_complete_event(client, store):
    event = {"requestType": "save", "data": [{"taskData": {"Taskguid": "t1", "TaskName": "A", "Duration": 1}}]}
    assert client.post("/events/action-complete", json=event).json()["status"] == "updated"

    other = {"requestType": "sorting"}
    assert client.post("/events/action-complete", json=other).json() == {"status": "ignored"}
    assert len(store.calls) == 1

def test_action_complete_rejects_bad_task_data(client, store):
    event = {"requestType": "save", "data": {"taskData": {"Taskguid": "t1", "TaskName": "A", "Duration": "long"}}}
    assert client.post("/events/action-complete", json=event).status_code == 422
    assert store.calls == []

def test_column_visibility(client):
    columns.hidden.clear()
    columns.selected = None

    client.post("/columns/select/Duration")
    state = client.post("/columns/hide").json()
    assert state["hidden"] == ["Duration"]
    assert "Duration" not in state["available"]

    state = client.post("/columns/show/Duration").json()
    assert state["hidden"] == []
    assert client.post("/columns/select/Nope").status_code == 400
