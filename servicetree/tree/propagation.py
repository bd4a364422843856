"""Bottom-up status propagation over the service tree.

Leaves keep the status the platform gave them. Every other service is
reclassified from the sum of its children's weights, against its own
threshold table, and then weighs on its parent according to its new status.

Meant to run as a periodic batch job; runs must not overlap. A run only
depends on what is stored, so rerunning it after a crash converges.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging

from servicetree.errors import DataIntegrityError
from servicetree.models.types import SEVERITY_NAMES
from servicetree.store import NodeRef, NodeStore

logger = logging.getLogger(__name__)


@dataclass
class StatusChange:
    service_id: str
    name: str
    old_status: int
    new_status: int


@dataclass
class PropagationReport:
    """What a propagation run did."""
    roots: int = 0
    visited: int = 0
    changes: List[StatusChange] = field(default_factory=list)


@dataclass
class _Frame:
    node: NodeRef
    depth: int
    children: Optional[List[NodeRef]] = None
    next_child: int = 0
    sum_weight: float = 0.0


def classify(thresholds: Sequence[float], sum_weight: float) -> int:
    """Status reached by ``sum_weight`` against threshold slots 1 to 6.

    Every slot is checked and the last one met wins, so thresholds that are
    not in increasing order can skip or revisit statuses.
    """
    status = 0
    for slot, threshold in enumerate(thresholds, start=1):
        if sum_weight >= threshold:
            status = slot - 1
    return status


def propagate_all(store: NodeStore) -> PropagationReport:
    """Recompute the status of every non-leaf service, from leaves up to the roots."""
    logger.info("Updating tree.")

    roots = store.get_roots()
    if not roots:
        raise DataIntegrityError("No root nodes were found.")

    report = PropagationReport()
    for root in roots:
        _propagate(store, root, report)
        report.roots += 1

    logger.info(
        f"Propagation done: {report.visited} service(s) visited, {len(report.changes)} status change(s)."
    )
    return report


def _propagate(store: NodeStore, root: NodeRef, report: PropagationReport) -> float:
    """Post-order walk below ``root``; returns the root's contribution weight."""
    stack = [_Frame(root, 0)]
    on_path = {root.serviceid}
    weight = 0.0

    while stack:
        frame = stack[-1]
        if frame.children is None:
            logger.debug(f"{'  ' * frame.depth}{frame.node.serviceid} ({frame.node.name}) on ProcessNode.")
            frame.children = store.get_children(frame.node.serviceid)
            report.visited += 1

        if frame.next_child < len(frame.children):
            child = frame.children[frame.next_child]
            frame.next_child += 1
            if child.serviceid in on_path:
                raise DataIntegrityError(
                    f"Service {child.serviceid} is its own ancestor, links form a cycle.", child.serviceid
                )
            on_path.add(child.serviceid)
            stack.append(_Frame(child, frame.depth + 1))
            continue

        stack.pop()
        on_path.discard(frame.node.serviceid)
        weight = _settle(store, frame, report)
        if stack:
            stack[-1].sum_weight += weight

    return weight


def _settle(store: NodeStore, frame: _Frame, report: PropagationReport) -> float:
    node = frame.node
    indent = "  " * frame.depth

    if not frame.children:
        logger.debug(f"{indent}{node.serviceid} is a leaf node.")
        return _weight_of_status(store, node, node.status, indent)

    thresholds = store.get_threshold(node.serviceid)
    if thresholds is None:
        raise DataIntegrityError(
            f"Service {node.serviceid} has no entry on service_threshold table.", node.serviceid
        )
    new_status = classify(thresholds.values, frame.sum_weight)
    logger.debug(f"{indent}{node.serviceid} has status {new_status} with a sum weight of {frame.sum_weight}.")

    if new_status != node.status:
        store.update_status(node.serviceid, new_status)
        report.changes.append(StatusChange(node.serviceid, node.name, node.status, new_status))
        logger.info(f"{node.serviceid} ({node.name}) status changed from {node.status} to {new_status}.")

    return _weight_of_status(store, node, new_status, indent)


def _weight_of_status(store: NodeStore, node: NodeRef, status: int, indent: str) -> float:
    weights = store.get_weight(node.serviceid)
    if weights is None:
        raise DataIntegrityError(
            f"Service {node.serviceid} has no entry on service_weight table.", node.serviceid
        )
    if not 0 <= status < len(SEVERITY_NAMES):
        raise DataIntegrityError(f"Service {node.serviceid} has invalid status {status}.", node.serviceid)

    weight = weights.values[status]
    logger.debug(f"{indent}{node.serviceid} has weight {weight} with status {status}.")
    return weight
