"""ISA description loading and comment helper tests."""

import pathlib

import pytest

from tablegen.errors import IsaDescriptionError
from tablegen.isa import IsaDescription, IsaInst, arch_of, features_of

DATA_DIR = pathlib.Path(__file__).parent / "data"


def test_load_and_query():
    isa = IsaDescription.load(DATA_DIR / "isa.yaml")
    assert len(isa) == 9
    assert [inst.encoding for inst in isa.query("add")] == ["T16", "T32", "A32", "A64"]
    assert [inst.encoding for inst in isa.query("ADD", "T32")] == ["T16", "T32"]
    assert isa.query("ld1")[0].extensions == ("ASIMD",)


def test_query_miss_is_empty():
    isa = IsaDescription.load(DATA_DIR / "isa.yaml")
    assert isa.query("does_not_exist") == []
    assert isa.query("yield", "A64") == []
    assert IsaDescription().query("adc") == []


def test_arch_summary():
    def insts(*encodings):
        return [IsaInst("x", encoding, encoding) for encoding in encodings]

    assert arch_of(insts()) == "[--- --- ---]"
    assert arch_of(insts("T16")) == "[T16 --- ---]"
    assert arch_of(insts("T32", "A64")) == "[T32 --- A64]"
    assert arch_of(insts("T16", "T32", "A32", "A64")) == "[Txx A32 A64]"


def test_features_are_sorted_and_distinct():
    records = [
        IsaInst("x", "A64", "A64", ("SVE", "BASE")),
        IsaInst("x", "A32", "A32", ("BASE",)),
    ]
    assert features_of(records) == ["BASE", "SVE"]


@pytest.mark.parametrize(
    "text",
    [
        "name: adc\n",
        "- name: adc\n",
        "- just a string\n",
        "- name: adc\n  encoding: A64\n  extensions: 5\n",
        "- [unclosed\n",
    ],
)
def test_malformed_description(tmp_path, text):
    path = tmp_path / "isa.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(IsaDescriptionError):
        IsaDescription.load(path)


def test_empty_description(tmp_path):
    path = tmp_path / "isa.yaml"
    path.write_text("# nothing yet\n", encoding="utf-8")
    assert len(IsaDescription.load(path)) == 0
