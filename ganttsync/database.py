# ganttsync/database.py
import logging
import os
from functools import lru_cache
from sqlalchemy import (
    create_engine, Table, Column, Integer, String, MetaData, Float
)

logger = logging.getLogger(__name__)

metadata = MetaData()
gen_folder = "gen"

# Local mirror of the remote task/resource tables. Column names follow the
# remote schema so rows convert straight into TaskRecord / ResourceRecord.
tasks_table = Table(
    "project_tasks",
    metadata,
    Column("cr2eb_projecttasksid", String, primary_key=True),
    Column("project_id", String, index=True),
    Column("cr2eb_id", Integer),
    Column("cr2eb_name", String),
    Column("cr2eb_start", String),
    Column("cr2eb_finish", String, nullable=True),
    Column("cr2eb_duration", Float),
    Column("cr2eb_complete", Float),
    Column("cr2eb_resourcenames", String, nullable=True),
    Column("cr2eb_predecessors", String, nullable=True),
    Column("cr2eb_wbs", String, nullable=True),
)

resources_table = Table(
    "project_resources",
    metadata,
    Column("cr2eb_projectresourcesid", String, primary_key=True),
    Column("project_id", String, index=True),
    Column("cr2eb_id", Integer),
    Column("cr2eb_name", String),
)

def init_db(db_url: str = None):
    if not db_url:
        os.makedirs(gen_folder, exist_ok=True)
        db_path = os.path.abspath(os.path.join(gen_folder, "ganttsync.db"))
        db_url = f"sqlite:///{db_path}"
    logger.debug("initializing db at %s", db_url)
    # the API serves requests from worker threads
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    engine = create_engine(db_url, connect_args=connect_args)
    metadata.create_all(engine)
    return engine

@lru_cache(maxsize=None)
def get_engine(db_url: str = None):
    """Shared engine per URL, so repeated store construction reuses one pool."""
    return init_db(db_url)
