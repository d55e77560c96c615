from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ganttsync.config import get_settings
from ganttsync.logging_setup import configure_logging
from ganttsync.models import EditedTask
from ganttsync.projector import edited_from_event, submit_edit
from ganttsync.session import ProjectSession
from ganttsync.store import StoreError, make_store
from ganttsync.widget import ColumnVisibility, presentation_contract, register_license

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    register_license(settings.license_key)
    yield

app = FastAPI(lifespan=lifespan)
columns = ColumnVisibility()

async def get_store():
    try:
        store = make_store(get_settings())
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    try:
        yield store
    finally:
        await store.aclose()

def _submit_response(result):
    status_code = 502 if result.status == "failed" else 200
    return JSONResponse(status_code=status_code, content=result.model_dump())

@app.get("/contract")
def contract():
    return presentation_contract()

@app.get("/tree")
async def project_tree(project_id: Optional[str] = Query(default=None, alias="id"), store=Depends(get_store)):
    session = ProjectSession(store, project_id)
    build = await session.load()
    return {
        "project_id": session.project_id,
        "status": session.fetch.status,
        "message": session.fetch.message,
        "tasks": [node.to_widget() for node in build.roots],
        "resources": [res.model_dump(by_alias=True) for res in session.fetch.resources],
        "orphans": build.orphans,
        "duplicates": build.duplicates,
        "skipped": session.fetch.skipped,
    }

@app.post("/tasks/save")
async def save_task(edited: EditedTask, store=Depends(get_store)):
    return _submit_response(await submit_edit(store, edited))

@app.post("/events/action-complete")
async def action_complete(args: dict = Body(...), store=Depends(get_store)):
    try:
        edited = edited_from_event(args)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if edited is None:
        return {"status": "ignored"}
    return _submit_response(await submit_edit(store, edited))

@app.get("/columns")
def column_state():
    return {"available": columns.available(), "selected": columns.selected, "hidden": columns.hidden}

@app.post("/columns/select/{column}")
def select_column(column: str):
    try:
        columns.select(column)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return column_state()

@app.post("/columns/hide")
def hide_column():
    columns.hide()
    return column_state()

@app.post("/columns/show/{column}")
def show_column(column: str):
    columns.show(column)
    return column_state()
