"""Deduplicating table builders.

``IndexedArray`` stores serialized entries and hands back a stable index for
each one; adding an entry that is already present returns its first index and
leaves the table unchanged. ``IndexedString`` builds on it to pack strings into
a single NUL-terminated blob addressed by byte offset.
"""
from __future__ import annotations

from typing import Dict, Iterator, List


class IndexedArray:
    """Append-only list of serialized entries with reverse lookup."""

    def __init__(self) -> None:
        self._items: List[str] = []
        self._index: Dict[str, int] = {}
        self._refs: List[int] = []

    def add_indexed(self, item: str) -> int:
        index = self._index.get(item)
        if index is not None:
            self._refs[index] += 1
            return index
        index = len(self._items)
        self._items.append(item)
        self._index[item] = index
        self._refs.append(1)
        return index

    def index_of(self, item: str) -> int:
        try:
            return self._index[item]
        except KeyError as exc:
            raise KeyError(f"item {item!r} was never added") from exc

    def ref_count_of(self, item: str) -> int:
        return self._refs[self.index_of(item)]

    def __contains__(self, item: object) -> bool:
        return item in self._index

    def __getitem__(self, index: int) -> str:
        return self._items[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


def c_string_literal(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}\\0"'


class IndexedString:
    """Packs strings into one blob; identical strings share a span."""

    def __init__(self) -> None:
        self._strings = IndexedArray()
        self._offsets: List[int] = []
        self._size = 0

    def add(self, value: str) -> int:
        """Add ``value`` and return its byte offset inside the blob."""
        index = self._strings.add_indexed(value)
        if index == len(self._offsets):
            self._offsets.append(self._size)
            self._size += len(value.encode("utf-8")) + 1
        return self._offsets[index]

    def offset_of(self, value: str) -> int:
        return self._offsets[self._strings.index_of(value)]

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return len(self._strings)

    def format(self, indent: str, justify: int) -> str:
        """Format the blob as adjacent C string literals wrapped at ``justify``."""
        lines: List[str] = []
        line = ""
        for value in self._strings:
            literal = c_string_literal(value)
            if line and len(indent) + len(line) + 1 + len(literal) > justify:
                lines.append(indent + line)
                line = literal
            else:
                line = f"{line} {literal}" if line else literal
        lines.append(indent + line)
        return "\n".join(lines) + ";"
