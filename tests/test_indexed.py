"""Deduplicating table builder tests."""

import pytest

from tablegen.indexed import IndexedArray, IndexedString


def test_identical_entries_share_index():
    """Adding a byte-identical entry twice returns one index and grows by one."""
    table = IndexedArray()
    first = table.add_indexed("{ 1, 2 }")
    second = table.add_indexed("{ 1, 2 }")
    assert first == second == 0
    assert len(table) == 1
    assert table.ref_count_of("{ 1, 2 }") == 2


def test_indices_follow_insertion_order():
    table = IndexedArray()
    indices = [table.add_indexed(item) for item in ("a", "b", "a", "c", "b")]
    assert indices == [0, 1, 0, 2, 1]
    assert list(table) == ["a", "b", "c"]
    assert table[2] == "c"
    assert "b" in table


def test_index_of_unknown_item():
    table = IndexedArray()
    with pytest.raises(KeyError):
        table.index_of("missing")


def test_string_offsets_are_in_record_order():
    names = IndexedString()
    assert names.add("") == 0
    assert names.add("adc") == 1
    assert names.add("add") == 5
    assert names.size == 9


def test_empty_and_repeated_strings_share_span():
    """The sentinel's empty name is a shared one-byte span."""
    names = IndexedString()
    names.add("")
    names.add("nop")
    assert names.add("") == 0
    assert names.add("nop") == 1
    assert len(names) == 2
    assert names.size == 5
    assert names.offset_of("nop") == 1


def test_string_blob_format():
    names = IndexedString()
    for name in ("", "adc", "add"):
        names.add(name)
    assert names.format("  ", 120) == '  "\\0" "adc\\0" "add\\0";'


def test_string_blob_wraps_long_lines():
    names = IndexedString()
    for name in ("aaaa", "bbbb", "cccc"):
        names.add(name)
    lines = names.format("  ", 20).split("\n")
    assert lines == ['  "aaaa\\0" "bbbb\\0"', '  "cccc\\0";']
