# ganttsync/tree.py
import logging
from typing import Dict, Iterator, List, Optional, Tuple

from ganttsync.models import BuildResult, PresentationNode, ResourceRecord, TaskRecord
from ganttsync.utils import minutes_to_days, parent_wbs, parse_timestamp, split_wbs

logger = logging.getLogger(__name__)

ResourceIndex = Dict[str, int]

def build_resource_index(resources: List[ResourceRecord]) -> ResourceIndex:
    return {res.guid: res.id for res in resources}

def resolve_resources(resource_names: Optional[str], index: ResourceIndex, unmatched: Optional[list] = None) -> List[int]:
    """
    Map a comma-joined list of resource guids to numeric ids.
    Guids with no match in the index are dropped (and collected in `unmatched`).
    """
    ids = []
    for guid in (resource_names or "").split(","):
        guid = guid.strip()
        if not guid:
            continue
        if guid in index:
            ids.append(index[guid])
        elif unmatched is not None:
            unmatched.append(guid)
    return ids

def to_node(task: TaskRecord, index: ResourceIndex, unmatched: Optional[list] = None) -> PresentationNode:
    return PresentationNode(
        task_id=task.id,
        guid=task.guid,
        name=task.name,
        start_date=parse_timestamp(task.start),
        end_date=parse_timestamp(task.finish),
        duration=minutes_to_days(task.duration),
        progress=task.complete or 0,
        predecessor=task.predecessors,
        resource_ids=resolve_resources(task.resource_names, index, unmatched),
        wbs=task.wbs or "",
        children=[],
    )

def build_tree(tasks: List[TaskRecord], resources: List[ResourceRecord], index: Optional[ResourceIndex] = None) -> BuildResult:
    """
    Turn the flat task list into a forest keyed on WBS codes.

    A node's parent is the node whose code is its own code minus the last
    segment. Nodes whose parent code is absent (orphans), single-segment
    codes and blank or malformed codes all become roots. When several
    records share a code the last one owns the code in the parent index;
    each of them is still placed in the tree exactly once.
    Roots and children keep the order of the input list.
    """
    result = BuildResult()
    if index is None:
        index = build_resource_index(resources)

    nodes = [to_node(task, index, result.unmatched_resources) for task in tasks]

    by_code: Dict[str, PresentationNode] = {}
    for node in nodes:
        segments = split_wbs(node.wbs)
        if not segments:
            continue
        code = ".".join(segments)
        if code in by_code and code not in result.duplicates:
            logger.warning("Duplicate WBS code %s; the last record with it becomes the parent", code)
            result.duplicates.append(code)
        by_code[code] = node

    for node in nodes:
        parent_code = parent_wbs(node.wbs)
        parent = by_code.get(parent_code) if parent_code else None
        if parent is not None:
            parent.children.append(node)
            continue
        if parent_code:
            logger.debug("No parent %s for task %s; placing it at the top level", parent_code, node.wbs)
            result.orphans.append(node.wbs)
        result.roots.append(node)

    if result.unmatched_resources:
        logger.debug("Dropped unknown resources: %s", ", ".join(result.unmatched_resources))
    return result

def walk_tree(roots: List[PresentationNode], depth: int = 0) -> Iterator[Tuple[int, PresentationNode]]:
    """Depth-first walk yielding (depth, node), parents before their children."""
    for node in roots:
        yield depth, node
        yield from walk_tree(node.children, depth + 1)

def iter_nodes(roots: List[PresentationNode]) -> Iterator[PresentationNode]:
    for _, node in walk_tree(roots):
        yield node
