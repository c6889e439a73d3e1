import struct

from ragadmin.milvus_types import (
    ConsistencyLevel,
    FieldType,
    MetricType,
    SearchResult,
    default_fields,
    to_float32,
    vector_to_bytes,
)


def test_default_field_names_and_order():
    assert [f.name for f in default_fields()] == ["id", "vector", "content", "metadata"]


def test_default_fields_primary_key_is_id():
    assert [f.name for f in default_fields() if f.is_primary_key] == ["id"]


def test_default_fields_sizes():
    by_name = {f.name: f for f in default_fields()}
    assert by_name["vector"].dim == 1536
    assert by_name["vector"].data_type is FieldType.FLOAT_VECTOR
    assert by_name["id"].max_length == 255
    assert by_name["content"].max_length == 1024
    assert by_name["metadata"].data_type is FieldType.JSON


def test_default_fields_are_fresh_objects():
    first = default_fields()
    first[0].name = "changed"
    assert default_fields()[0].name == "id"


def test_vector_to_bytes_wire_format():
    assert vector_to_bytes([1.0]) == b"\x00\x00\x80\x3f"


def test_vector_to_bytes_round_trip():
    vec = [0.1, -2.5, 3.75]
    assert list(struct.unpack("<3f", vector_to_bytes(vec))) == to_float32(vec)


def test_to_float32_exact_values_unchanged():
    assert to_float32([0.5, 1.0, -2.0]) == [0.5, 1.0, -2.0]


def test_to_float32_is_idempotent():
    once = to_float32([0.1, 0.2, 0.3])
    assert to_float32(once) == once


def test_consistency_level_client_numbering():
    assert [ConsistencyLevel(value).to_client_level() for value in range(1, 6)] == [0, 1, 2, 3, 4]


def test_metric_type_from_string():
    assert MetricType("COSINE") is MetricType.COSINE


def test_search_result_count():
    result = SearchResult(ids=["a", "b"], scores=[0.9, 0.8])
    assert result.result_count == len(result.ids)
    assert SearchResult().result_count == 0