"""In-memory instruction records shared by every generation task."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

NO_OPCODE_DATA = "(_)"


@dataclass
class InstRecord:
    """One ``INST(...)`` row of the instruction database."""

    name: str
    display_name: str
    enum: str
    encoding: str
    opcode_data: str
    rw_info: str
    flags: str
    id: int = 0
    opcode_data_index: int = -1
    name_index: int = -1
    source_indices: Tuple[str, str] = ("", "")
    db_insts: List[object] = field(default_factory=list)

    @property
    def is_sentinel(self) -> bool:
        return self.name == ""

    @property
    def has_opcode_data(self) -> bool:
        return self.opcode_data != NO_OPCODE_DATA


class InstDatabase:
    """Ordered collection of records with a lookup by name."""

    def __init__(self) -> None:
        self._insts: List[InstRecord] = []
        self._by_name: Dict[str, InstRecord] = {}

    def add(self, inst: InstRecord) -> InstRecord:
        self._insts.append(inst)
        self._by_name.setdefault(inst.name, inst)
        return inst

    def assign_ids(self) -> None:
        for index, inst in enumerate(self._insts):
            inst.id = index

    def get(self, name: str) -> Optional[InstRecord]:
        return self._by_name.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[InstRecord]:
        return iter(self._insts)

    def __len__(self) -> int:
        return len(self._insts)

    def __getitem__(self, index: int) -> InstRecord:
        return self._insts[index]

    def unresolved(self) -> List[InstRecord]:
        """Return records whose opcode or name index was never assigned."""
        return [
            inst
            for inst in self._insts
            if inst.opcode_data_index < 0 or inst.name_index < 0
        ]
