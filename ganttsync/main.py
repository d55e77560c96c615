import asyncio
import json
from typing import List, Optional

import typer

from ganttsync.config import get_settings
from ganttsync.database import init_db
from ganttsync.fetcher import project_id_from_url
from ganttsync.logging_setup import configure_logging
from ganttsync.models import EditedTask
from ganttsync.projector import submit_edit
from ganttsync.session import ProjectSession
from ganttsync.store import make_store
from ganttsync.tree import walk_tree
from ganttsync.widget import register_license

app = typer.Typer()

@app.callback()
def setup():
    settings = get_settings()
    configure_logging(settings.log_level)
    register_license(settings.license_key)

@app.command("init-db")
def init_db_cli(db_url: str = typer.Option(None, help="SQLAlchemy URL; defaults to GANTTSYNC_DB_URL or gen/ganttsync.db")):
    engine = init_db(db_url or get_settings().db_url)
    typer.echo(f"DB initialized at: {engine.url}")

async def _load(project_id: Optional[str]):
    store = make_store(get_settings())
    try:
        session = ProjectSession(store, project_id)
        await session.load()
        return session
    finally:
        await store.aclose()

def _outline(roots):
    for depth, node in walk_tree(roots):
        yield f"{'  ' * depth}{node.wbs or '-'} {node.name} ({node.duration:g}d, {node.progress:g} done)"

@app.command("show-tree")
def show_tree_cli(
    project_id: str = typer.Option(None, help="Project guid"),
    url: str = typer.Option(None, help="Host page URL carrying the project guid in ?id="),
    as_json: bool = typer.Option(False, "--json", help="Print the widget payload as JSON"),
):
    session = asyncio.run(_load(project_id or project_id_from_url(url)))
    if session.fetch.status != "ok":
        typer.echo(f"No tasks loaded ({session.fetch.status}): {session.fetch.message}", err=True)
    if as_json:
        typer.echo(json.dumps([node.to_widget() for node in session.roots], indent=2))
        return
    for line in _outline(session.roots):
        typer.echo(line)
    for code in session.build.duplicates:
        typer.echo(f"warning: duplicate WBS code {code}", err=True)

async def _submit(edited: EditedTask):
    store = make_store(get_settings())
    try:
        return await submit_edit(store, edited)
    finally:
        await store.aclose()

@app.command("update-task")
def update_task_cli(
    guid: str,
    name: str = typer.Option(..., help="Task name"),
    duration: float = typer.Option(..., help="Duration in days"),
    progress: float = typer.Option(0.0, help="Completion fraction"),
    start: str = typer.Option(None, help="Start timestamp, sent as given"),
    finish: str = typer.Option(None, help="Finish timestamp, sent as given"),
    resource: List[str] = typer.Option([], help="Resource guid; repeat for several"),
):
    fields = {
        "guid": guid,
        "name": name,
        "duration": duration,
        "progress": progress,
        "resource_info": [{"cr2eb_projectresourcesid": g} for g in resource],
    }
    # unset dates are left untouched in the store
    if start is not None:
        fields["start_date"] = start
    if finish is not None:
        fields["end_date"] = finish
    edited = EditedTask(**fields)
    result = asyncio.run(_submit(edited))
    typer.echo(json.dumps(result.model_dump(), indent=2))
    if result.status == "failed":
        raise typer.Exit(code=1)

def main():
    app()

if __name__ == "__main__":
    main()
