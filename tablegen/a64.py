"""AArch64 instruction table generator.

Reads the ``InstInfo`` region of ``a64instdb.cpp``, regenerates the id
enumeration, the name table and the per-encoding opcode tables, then merges
the resolved indices back into the database.
"""
from __future__ import annotations

import pathlib
from typing import Dict, List, Optional

from . import core
from .errors import ExtractionError, IncompleteRunError
from .extract import MACRO, ParsedInst, extract_instructions
from .isa import IsaDescription, arch_of, features_of
from .records import InstRecord
from .text import format_list, pad_columns

DATABASE_FILE = "src/asmjit/arm/a64instdb.cpp"

DEFAULT_FILES = [
    "src/asmjit/arm/a64emitter.h",
    "src/asmjit/arm/a64globals.h",
    DATABASE_FILE,
    "src/asmjit/arm/a64instdb.h",
    "src/asmjit/arm/a64instdb_p.h",
]

SENTINEL_ENUM = "None"
VARIANT_SUFFIX = "_v"

# Column widths of the merged INST(...) rows.
INST_COLUMNS = (17, 19, 86, 10, 26, 3, 4)


def record_from_parsed(parsed: ParsedInst) -> InstRecord:
    enum = parsed.instruction
    name = "" if enum == SENTINEL_ENUM else enum.lower()
    display_name = name
    if name.endswith(VARIANT_SUFFIX):
        display_name = name[: -len(VARIANT_SUFFIX)]
    return InstRecord(
        name=name,
        display_name=display_name,
        enum=enum,
        encoding=parsed.encoding,
        opcode_data=parsed.opcode_data,
        rw_info=parsed.rw_info,
        flags=parsed.flags,
        source_indices=(parsed.opcode_data_index, parsed.name_data_index),
    )


def format_inst(inst: InstRecord) -> str:
    columns = pad_columns(
        (
            inst.enum,
            inst.encoding,
            inst.opcode_data,
            inst.rw_info,
            inst.flags,
            inst.opcode_data_index,
            inst.name_index,
        ),
        INST_COLUMNS,
    )
    return f"{MACRO}(" + ", ".join(columns) + ")"


class A64TableGen(core.TableGen):
    def __init__(
        self,
        root: pathlib.Path = pathlib.Path("."),
        isa: Optional[IsaDescription] = None,
        mode: Optional[str] = None,
        files: Optional[List[str]] = None,
        database: str = DATABASE_FILE,
        save: bool = True,
        dump_sizes: bool = True,
    ) -> None:
        super().__init__("A64", root, isa, mode)
        self.file_list = list(files or DEFAULT_FILES)
        self.database_file = database
        if database not in self.file_list:
            self.file_list.append(database)
        self.save_files = save
        self.dump_sizes = dump_sizes

    # -----------------------------------------------------------------------
    # Parse / Merge
    # -----------------------------------------------------------------------

    def parse(self) -> None:
        raw_data = self.data_of_file(self.database_file)
        for parsed in extract_instructions(raw_data, "InstInfo"):
            inst = record_from_parsed(parsed)
            if inst.is_sentinel and len(self.insts):
                raise ExtractionError(
                    f"line {parsed.line}: '{SENTINEL_ENUM}' must be the first instruction"
                )
            if inst.name and inst.name in self.insts:
                raise ExtractionError(
                    f"line {parsed.line}: duplicate instruction '{inst.enum}'"
                )
            self.insts.add(inst)

        self.insts.assign_ids()
        print(f"Number of Instructions: {len(self.insts)}")

    def verify(self) -> None:
        unresolved = self.insts.unresolved()
        if unresolved:
            names = ", ".join(inst.enum for inst in unresolved[:8])
            raise IncompleteRunError(
                f"{len(unresolved)} instruction(s) have unresolved indices: {names}"
            )

    def merge(self) -> int:
        s = format_list(list(self.insts), "", True, format_inst) + "\n"
        return self.inject("InstInfo", s, len(self.insts) * 4, disclaimer_text=False)

    # -----------------------------------------------------------------------
    # Hooks
    # -----------------------------------------------------------------------

    def on_before_run(self) -> None:
        self.load(self.file_list)
        self.parse()

    def on_after_run(self) -> None:
        self.verify()
        self.changes["InstInfo"] = self.merge()
        if self.save_files:
            self.save()
        if self.dump_sizes:
            self.dump_table_sizes()


class IdEnum(core.IdEnum):
    def comment(self, inst: InstRecord) -> str:
        db_insts = inst.db_insts
        if not db_insts:
            return ""

        text = arch_of(db_insts)
        features = features_of(db_insts)
        if features:
            text += " {" + "|".join(features) + "}"
        return text


class EncodingTable(core.Task):
    """Builds one opcode table per encoding class and the EncodingId enum."""

    def __init__(self) -> None:
        super().__init__("EncodingTable")

    def run(self, ctx: core.TableGen) -> int:
        tables: Dict[str, List[InstRecord]] = {}

        for inst in ctx.insts:
            table = tables.setdefault(inst.encoding, [])
            if not inst.has_opcode_data:
                inst.opcode_data_index = 0
                continue
            inst.opcode_data_index = len(table)
            table.append(inst)

        encoding_ids = ["enum EncodingId : uint32_t {", "  kEncodingNone"]
        table_header = ""
        table_source = ""

        for data_class in sorted(tables):
            data_name = data_class[0].lower() + data_class[1:]
            table = tables[data_class]
            count = len(table)

            if data_class != SENTINEL_ENUM:
                encoding_ids[-1] += ","
                encoding_ids.append(f"  kEncoding{data_class}")

            if not count:
                continue

            table_header += f"extern const {data_class} {data_name}[{count}];\n"

            if table_source:
                table_source += "\n"
            table_source += f"const {data_class} {data_name}[{count}] = {{\n"
            for i, inst in enumerate(table):
                separator = " " if i == count - 1 else ","
                table_source += f"  {brace_literal(inst.opcode_data)}{separator} // {inst.name}\n"
            table_source += "};\n"

        encoding_ids.append("};")
        return (
            ctx.inject("EncodingId", "\n".join(encoding_ids) + "\n")
            + ctx.inject("EncodingDataForward", table_header)
            + ctx.inject("EncodingData", table_source)
        )


def brace_literal(opcode_data: str) -> str:
    return opcode_data.replace("(", "{ ").replace(")", " }")


def create_generator(
    root: pathlib.Path = pathlib.Path("."),
    isa: Optional[IsaDescription] = None,
    mode: Optional[str] = None,
    **kwargs,
) -> A64TableGen:
    return (
        A64TableGen(root, isa, mode, **kwargs)
        .add_task(IdEnum())
        .add_task(core.NameTable())
        .add_task(EncodingTable())
    )
