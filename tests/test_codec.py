import json

import pytest

from kotoba_dict.codec import (
    NameMap,
    deserialize_entries,
    deserialize_entry,
    serialize_entries,
    serialize_entry,
)
from kotoba_dict.entry import Entry, EntrySource
from kotoba_dict.errors import EncodingInconsistency


def test_round_trip(sample_entries):
    name_map = NameMap()
    data = serialize_entries(sample_entries, name_map)
    # Survives JSON, which turns tuples into lists
    data = json.loads(json.dumps(data, ensure_ascii=False))
    assert deserialize_entries(data, name_map) == sample_entries


def test_serialized_layout():
    name_map = NameMap()
    entry = Entry(
        source=EntrySource.IMPORT,
        origin="JMdict",
        expression="家",
        reading="いえ",
        tags=["P", "n"],
        score=5,
    )
    assert serialize_entry(entry, name_map) == ["I", 1, "家", "いえ", [], [], [2, 3], 5, []]
    assert name_map.names == ["JMdict", "P", "n"]


def test_empty_origin_is_code_zero(sample_entries):
    name_map = NameMap()
    data = serialize_entries(sample_entries, name_map)
    assert [row[1] for row in data] == [1, 0, 0, 0]
    assert "" not in name_map


def test_shared_name_map_across_batches(sample_entries):
    name_map = NameMap()
    first = serialize_entries(sample_entries[:1], name_map)
    second = serialize_entries(sample_entries[1:], name_map)

    code = name_map.code("P")
    assert code in first[0][6]
    assert code in second[0][6]
    assert len(name_map.names) == len(set(name_map.names))
    assert deserialize_entries(first + second, name_map) == sample_entries


def test_code_is_one_based():
    name_map = NameMap()
    assert name_map.code("a") == 1
    assert name_map.code("b") == 2
    assert name_map.code("a") == 1
    assert name_map.name(1) == "a"
    assert name_map.name(2) == "b"
    assert name_map.name(0) == ""


@pytest.mark.parametrize("code", [3, -1, "1", 1.0, True])
def test_unknown_code(code):
    name_map = NameMap(["a", "b"])
    with pytest.raises(EncodingInconsistency):
        name_map.name(code)


def test_decode_unknown_code_in_entry():
    name_map = NameMap(["JMdict"])
    with pytest.raises(EncodingInconsistency):
        deserialize_entry(["I", 1, "家", "", [], [], [7], 0, []], name_map)


def test_frozen_name_map():
    name_map = NameMap(["P"]).freeze()
    assert name_map.frozen
    assert name_map.code("P") == 1
    with pytest.raises(RuntimeError):
        name_map.code("n")


def test_name_map_dict_round_trip():
    name_map = NameMap()
    name_map.codes(["P", "n", "JMdict"])
    restored = NameMap.from_dict(json.loads(json.dumps(name_map.to_dict())))
    assert restored.names == ["P", "n", "JMdict"]
    assert restored.code("JMdict") == 3
    assert len(restored) == 3


@pytest.mark.parametrize("data", [None, {}, {"names": "P"}, {"names": ["P", "P"]}, {"names": [""]}])
def test_name_map_from_bad_dict(data):
    with pytest.raises(EncodingInconsistency):
        NameMap.from_dict(data)


@pytest.mark.parametrize("row", [
    ["I", 0, "家"],
    "not an entry",
    ["X", 0, "家", "", [], [], [], 0, []],
    ["J", 0, "", "", [], [], [], 0, []],
    ["J", 0, "家", "", ["宅"], [], [], 0, []],
    ["J", 0, "家", "", [], [], [], 0, [[["house"], [], []]]],
    ["J", 0, "家", "", [], [], [], 0, [[["house"], [], [], [["see://宅"]]]]],
    ["J", 0, "家", "", [], [], [], 0, [["house", [], [], []]]],
    ["J", 0, "家", "", "宅", "たく", [], 0, []],
    ["J", 0, "家", "", [], [], 5, 0, []],
    ["J", 0, "家", "", [], [], [], 0, "house"],
    ["J", 0, "家", "", [], [], [], 0, [[["house"], 1, [], []]]],
    ["J", 0, "家", "", [], [], [], 0, [[["house"], [], None, []]]],
    ["J", 0, "家", "", [], [], [], 0, [[["house"], [], [], "see://宅"]]],
    ["J", 0, "家", "", [], [], [], 0, [[["house"], [], [], [[1, "宅"]]]]],
    ["J", 0, "家", "", [], [], [], "high", []],
    ["J", 0, "家", "", [], [], [], True, []],
    ["J", 0, 7, "", [], [], [], 0, []],
    ["J", 0, "家", None, [], [], [], 0, []],
])
def test_malformed_rows(row):
    with pytest.raises(EncodingInconsistency):
        deserialize_entry(row, NameMap())
