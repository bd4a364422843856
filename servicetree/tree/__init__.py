"""Service tree export, import with rollback, and status propagation."""
from servicetree.tree.document import ServiceDocument, SeverityValues, load_document, write_document
from servicetree.tree.exporter import export_tree
from servicetree.tree.importer import ensure_tables, import_tree
from servicetree.tree.propagation import PropagationReport, classify, propagate_all
from servicetree.tree.rollback import CreationLog, rollback
from servicetree.tree.strategies import ApiNodeStrategy, NodeStrategy, StoreNodeStrategy

__all__ = [
    "ServiceDocument",
    "SeverityValues",
    "load_document",
    "write_document",
    "export_tree",
    "ensure_tables",
    "import_tree",
    "PropagationReport",
    "classify",
    "propagate_all",
    "CreationLog",
    "rollback",
    "ApiNodeStrategy",
    "NodeStrategy",
    "StoreNodeStrategy",
]
