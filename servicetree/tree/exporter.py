"""Read the whole service tree into documents."""
from typing import List, Tuple
import logging

from pydantic import ValidationError

from servicetree.errors import DataIntegrityError
from servicetree.store import NodeStore
from servicetree.tree.document import ServiceDocument, SeverityValues

logger = logging.getLogger(__name__)


def export_tree(store: NodeStore) -> List[ServiceDocument]:
    """Export every tree, one document per root, children in link order.

    Nothing is returned unless the whole tree could be read: a single service
    without weight or threshold aborts the export.
    """
    logger.info("Exporting tree.")

    roots = store.get_roots()
    if not roots:
        raise DataIntegrityError("No root nodes were found.")

    documents: List[ServiceDocument] = []
    # (service id, list the document goes into, depth)
    stack: List[Tuple[str, List[ServiceDocument], int]] = [
        (root.serviceid, documents, 0) for root in reversed(roots)
    ]
    count = 0
    while stack:
        service_id, siblings, depth = stack.pop()
        document = _export_node(store, service_id, depth)
        siblings.append(document)
        count += 1

        children = store.get_children(service_id)
        if not children:
            logger.debug(f"{'  ' * depth}{service_id} is a leaf node.")
        for child in reversed(children):
            stack.append((child.serviceid, document.children, depth + 1))

    logger.info(f"Exported {count} service(s) under {len(documents)} root(s).")
    return documents


def _export_node(store: NodeStore, service_id: str, depth: int) -> ServiceDocument:
    logger.debug(f"{'  ' * depth}{service_id} on ExportNode.")

    service = store.get_node(service_id)
    if service is None:
        raise DataIntegrityError(f"Service {service_id} vanished during export.", service_id)

    weight = store.get_weight(service_id)
    if weight is None:
        raise DataIntegrityError(
            f'Service "{service.name}" ({service_id}) has no entry on service_weight table.', service_id
        )
    threshold = store.get_threshold(service_id)
    if threshold is None:
        raise DataIntegrityError(
            f'Service "{service.name}" ({service_id}) has no entry on service_threshold table.', service_id
        )

    try:
        return ServiceDocument(
            name=service.name,
            status=service.status,
            algorithm=service.algorithm,
            showsla=bool(service.showsla),
            goodsla=service.goodsla,
            sortorder=service.sortorder,
            weight=SeverityValues.from_list(weight.values),
            threshold=SeverityValues.from_list(threshold.values),
        )
    except ValidationError as e:
        raise DataIntegrityError(f'Service "{service.name}" ({service_id}) is invalid: {e}', service_id) from e
