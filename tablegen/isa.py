"""Read-only ISA description used to annotate generated enumerations.

The description is a YAML list of mappings::

    - name: adc
      encoding: A64
      extensions: [BASE]
    - name: add
      encoding: T16
      arch: A32

``arch`` defaults to ``encoding``. Lookups that find nothing are not errors;
they simply produce no annotation.
"""
from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from .errors import IsaDescriptionError


@dataclass(frozen=True)
class IsaInst:
    name: str
    encoding: str
    arch: str
    extensions: Tuple[str, ...] = field(default_factory=tuple)


def _extensions_of(value: Any, name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, dict):
        return tuple(str(key) for key in value)
    if isinstance(value, list):
        return tuple(str(item) for item in value)
    raise IsaDescriptionError(f"entry '{name}' has unsupported extensions {value!r}")


def _entry_from_mapping(entry: Dict[str, Any]) -> IsaInst:
    for key in ("name", "encoding"):
        if key not in entry:
            raise IsaDescriptionError(f"ISA entry missing '{key}' field: {entry!r}")
    name = str(entry["name"]).lower()
    encoding = str(entry["encoding"])
    return IsaInst(
        name=name,
        encoding=encoding,
        arch=str(entry.get("arch") or encoding),
        extensions=_extensions_of(entry.get("extensions"), name),
    )


class IsaDescription:
    """Instruction metadata indexed by lowercase instruction name."""

    def __init__(self, insts: Iterable[IsaInst] = ()) -> None:
        self._by_name: Dict[str, List[IsaInst]] = {}
        for inst in insts:
            self._by_name.setdefault(inst.name, []).append(inst)

    @classmethod
    def load(cls, path: pathlib.Path) -> "IsaDescription":
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = yaml.safe_load(handle) or []
            except yaml.YAMLError as exc:
                raise IsaDescriptionError(f"{path}: {exc}") from exc
        if not isinstance(data, list):
            raise IsaDescriptionError(f"{path}: ISA description must be a list of mappings")
        entries = []
        for entry in data:
            if not isinstance(entry, dict):
                raise IsaDescriptionError(f"{path}: ISA entry is not a mapping: {entry!r}")
            entries.append(_entry_from_mapping(entry))
        return cls(entries)

    def query(self, name: str, mode: Optional[str] = None) -> List[IsaInst]:
        insts = self._by_name.get(name.lower(), [])
        if not mode:
            return list(insts)
        return [inst for inst in insts if inst.arch == mode]

    def __len__(self) -> int:
        return sum(len(insts) for insts in self._by_name.values())


def arch_of(records: Iterable[IsaInst]) -> str:
    encodings = {record.encoding for record in records}
    t16 = "T16" in encodings
    t32 = "T32" in encodings

    if t16 and t32:
        thumb = "Txx"
    elif t16:
        thumb = "T16"
    elif t32:
        thumb = "T32"
    else:
        thumb = "---"

    a32 = "A32" if "A32" in encodings else "---"
    a64 = "A64" if "A64" in encodings else "---"
    return f"[{thumb} {a32} {a64}]"


def features_of(records: Iterable[IsaInst]) -> List[str]:
    features = set()
    for record in records:
        features.update(record.extensions)
    return sorted(features)
