"""
Unit tests for document decoding, validation and file handling.
"""
import json
import os

import pytest

from servicetree.errors import DocumentError
from servicetree.tree.document import (
    ServiceDocument,
    dump_document,
    load_document,
    parse_document,
    write_document,
)


def _node(**overrides):
    node = {
        "name": "web",
        "status": 1,
        "algorithm": 2,
        "showsla": 0,
        "goodsla": 99.9,
        "sortorder": 3,
        "weight": {"normal": 0, "information": 1, "alert": 2, "average": 3, "major": 4, "critical": 5},
        "threshold": {"normal": 0, "information": 1, "alert": 2, "average": 3, "major": 4, "critical": 5},
        "children": [],
    }
    node.update(overrides)
    return node


class TestParseDocument:
    """Documents are fully validated before any import step."""

    def test_valid_document(self):
        documents = parse_document(json.dumps([_node(children=[_node(name="db")])]))
        assert len(documents) == 1
        assert documents[0].showsla is False
        assert documents[0].weight.as_list() == [0, 1, 2, 3, 4, 5]
        assert documents[0].children[0].name == "db"

    def test_children_may_be_omitted(self):
        node = _node()
        del node["children"]
        documents = parse_document(json.dumps([node]))
        assert documents[0].children == []

    def test_missing_numeric_field_is_rejected(self):
        node = _node()
        del node["weight"]["major"]
        with pytest.raises(DocumentError, match="major"):
            parse_document(json.dumps([node]))

    def test_missing_field_in_nested_child_is_rejected(self):
        child = _node()
        del child["sortorder"]
        with pytest.raises(DocumentError, match="sortorder"):
            parse_document(json.dumps([_node(children=[child])]))

    def test_unknown_field_is_rejected(self):
        with pytest.raises(DocumentError, match="icon"):
            parse_document(json.dumps([_node(icon=12)]))

    def test_status_out_of_range_is_rejected(self):
        with pytest.raises(DocumentError, match="status"):
            parse_document(json.dumps([_node(status=6)]))

    def test_invalid_json_is_rejected(self):
        with pytest.raises(DocumentError, match="not valid JSON"):
            parse_document(b"[{")

    def test_top_level_must_be_an_array(self):
        with pytest.raises(DocumentError):
            parse_document(json.dumps(_node()))


def test_showsla_is_written_as_integer():
    document = ServiceDocument.model_validate(_node(showsla=True))
    data = json.loads(dump_document([document]))
    assert data[0]["showsla"] == 1
    assert list(data[0].keys()) == [
        "name", "status", "algorithm", "showsla", "goodsla", "sortorder", "weight", "threshold", "children",
    ]


def test_write_then_load(tmp_path):
    path = tmp_path / "tree.json"
    documents = parse_document(json.dumps([_node(children=[_node(name="db", status=5)])]))

    write_document(documents, str(path))

    assert load_document(str(path)) == documents
    assert os.listdir(tmp_path) == ["tree.json"]


def test_load_missing_file(tmp_path):
    with pytest.raises(DocumentError, match="could not read"):
        load_document(str(tmp_path / "missing.json"))


def test_write_to_missing_directory(tmp_path):
    path = tmp_path / "missing" / "tree.json"
    documents = parse_document(json.dumps([_node()]))

    with pytest.raises(DocumentError, match="could not write"):
        write_document(documents, str(path))
    assert not path.exists()
