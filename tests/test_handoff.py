from __future__ import annotations

import json

import pytest

from stacked.api import compile_source
from stacked.ops import IntrinsicKind, OpKind
from stacked.schemas import CallRecord, HandoffDocument, OpRecord


def test_document_lists_ops_calls_and_strings() -> None:
    doc = HandoffDocument.from_resolved(compile_source(src='pushs "hi"; puts;\npushi 1; exit;'))
    assert doc.schema_version == 1
    assert [o.kind for o in doc.ops] == [OpKind.PUSH_STR, OpKind.INTRINSIC, OpKind.PUSH_INT, OpKind.INTRINSIC]
    assert doc.ops[2].operand == 1
    assert doc.ops[2].source is not None
    assert (doc.ops[2].source.line, doc.ops[2].source.col) == (2, 1)
    assert doc.strings == {0: "hi"}


def test_document_json_shape() -> None:
    doc = HandoffDocument.from_resolved(compile_source(src="pushi 42; exit;"))
    data = json.loads(doc.model_dump_json())
    assert data["calls"] == [{"index": 1, "intrinsic": "exit", "argument": 42}]
    assert data["ops"][0]["kind"] == "push_int"


def test_document_loads_back_from_json() -> None:
    doc = HandoffDocument.from_resolved(compile_source(src='pushs "a"; pushi 3; exit; puts;'))
    loaded = HandoffDocument.model_validate_json(doc.model_dump_json())
    assert loaded == doc
    assert loaded.calls[1].argument == "a"


def test_call_argument_must_match_intrinsic() -> None:
    with pytest.raises(ValueError, match="exit takes an integer argument"):
        CallRecord(index=0, intrinsic=IntrinsicKind.EXIT, argument="x")
    with pytest.raises(ValueError, match="puts takes a string argument"):
        CallRecord(index=0, intrinsic=IntrinsicKind.PUTS, argument=1)


def test_call_must_point_at_matching_op() -> None:
    with pytest.raises(ValueError, match="does not match an intrinsic op"):
        HandoffDocument(
            ops=[OpRecord(index=0, kind=OpKind.PUSH_INT, operand=1)],
            calls=[CallRecord(index=0, intrinsic=IntrinsicKind.EXIT, argument=1)],
        )
