"""Portable service tree document (JSON import/export file)."""
from typing import List, Sequence
import json
import logging
import os
import tempfile

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_serializer

from servicetree.errors import DocumentError
from servicetree.models.types import SEVERITY_NAMES

logger = logging.getLogger(__name__)


class SeverityValues(BaseModel):
    """One number per severity, as in the weight and threshold tables."""

    model_config = ConfigDict(extra="forbid")

    normal: float
    information: float
    alert: float
    average: float
    major: float
    critical: float

    def as_list(self) -> List[float]:
        return [getattr(self, name) for name in SEVERITY_NAMES]

    @classmethod
    def from_list(cls, values: Sequence[float]) -> "SeverityValues":
        return cls(**dict(zip(SEVERITY_NAMES, values)))


class ServiceDocument(BaseModel):
    """A service and, recursively, its children.

    Identifiers are not part of the document: import allocates new ones.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    status: int = Field(ge=0, le=5)
    algorithm: int
    showsla: bool
    goodsla: float
    sortorder: int
    weight: SeverityValues
    threshold: SeverityValues
    children: List["ServiceDocument"] = Field(default_factory=list)

    @field_serializer("showsla")
    def _showsla_as_int(self, value: bool) -> int:
        return int(value)

    def node_fields(self) -> dict:
        """Columns of the ``services`` row."""
        return {
            "name": self.name,
            "status": self.status,
            "algorithm": self.algorithm,
            "showsla": int(self.showsla),
            "goodsla": self.goodsla,
            "sortorder": self.sortorder,
        }


ServiceDocumentList = TypeAdapter(List[ServiceDocument])


def parse_document(blob) -> List[ServiceDocument]:
    """Decode and validate a whole document before anything touches the store."""
    try:
        data = json.loads(blob)
    except ValueError as e:
        raise DocumentError(f"Document is not valid JSON: {e}") from e

    try:
        return ServiceDocumentList.validate_python(data)
    except ValidationError as e:
        raise DocumentError(f"Document does not describe a service tree: {e}") from e


def load_document(path: str) -> List[ServiceDocument]:
    """Read and validate the document at ``path``."""
    try:
        with open(path, "rb") as f:
            blob = f.read()
    except OSError as e:
        raise DocumentError(f"could not read from {path}: {e.strerror}") from e

    documents = parse_document(blob)
    logger.info(f"Loaded {len(documents)} root service(s) from {path}")
    return documents


def dump_document(documents: List[ServiceDocument]) -> bytes:
    return ServiceDocumentList.dump_json(documents)


def write_document(documents: List[ServiceDocument], path: str) -> None:
    """Write the document atomically: either the full file exists or nothing changed."""
    blob = dump_document(documents)
    directory = os.path.dirname(os.path.abspath(path))

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile("wb", dir=directory, delete=False, suffix=".tmp") as tmp:
            tmp_path = tmp.name
            tmp.write(blob)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise DocumentError(f"could not write to {path}: {e.strerror or e}") from e

    logger.info(f"Wrote {len(documents)} root service(s) to {path}")
