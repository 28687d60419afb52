"""Text helpers: marked regions, disclaimers and list formatting."""
from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

DISCLAIMER_BEGIN = (
    "// ------------------- Automatically generated, do not edit -------------------\n"
)
DISCLAIMER_END = (
    "// ----------------------------------------------------------------------------\n"
)


def begin_marker(key: str) -> str:
    return "// ${" + key + ":Begin}"


def end_marker(key: str) -> str:
    # Prefix only, anything may follow ":End" on the marker line.
    return "// ${" + key + ":End"


def disclaimer(text: str) -> str:
    return DISCLAIMER_BEGIN + text + DISCLAIMER_END


def indent(text: str, indentation: str) -> str:
    if not indentation:
        return text
    lines = text.split("\n")
    return "\n".join(indentation + line if line else line for line in lines)


def format_list(
    items: Sequence[T],
    indent_with: str = "",
    show_index: bool = False,
    fn: Optional[Callable[[T], str]] = None,
) -> str:
    """Join ``items`` one per line, optionally tagging each with ``// #i``."""
    convert = fn or str
    lines: List[str] = []
    last = len(items) - 1
    for i, item in enumerate(items):
        line = indent_with + convert(item)
        if show_index:
            line += f"{' ' if i == last else ','} // #{i}"
        elif i != last:
            line += ","
        lines.append(line)
    return "\n".join(lines)


def find_region(data: str, begin: str, end: str) -> Tuple[int, int]:
    """Return the ``(start, stop)`` span strictly between two marker lines.

    ``start`` is the first character after the line holding ``begin`` and
    ``stop`` is the first character of the line holding ``end``. Raises
    ``ValueError`` when either marker is missing, when ``begin`` occurs more
    than once, or when ``end`` does not follow ``begin``.
    """
    i_begin = data.find(begin)
    if i_begin == -1:
        raise ValueError(f"cannot locate start mark '{begin}'")
    if data.find(begin, i_begin + len(begin)) != -1:
        raise ValueError(f"start mark '{begin}' occurs more than once")

    newline = data.find("\n", i_begin)
    start = len(data) if newline == -1 else newline + 1

    i_end = data.find(end, start)
    if i_end == -1:
        raise ValueError(f"cannot locate end mark '{end}' after '{begin}'")

    stop = i_end
    while stop > start and data[stop - 1] in " \t":
        stop -= 1
    return start, stop


def marker_indentation(data: str, position: int) -> str:
    line_start = data.rfind("\n", 0, position) + 1
    prefix = data[line_start:position]
    return prefix if prefix.strip() == "" else ""


def extract_region(data: str, key: str) -> str:
    start, stop = find_region(data, begin_marker(key), end_marker(key))
    return data[start:stop]


def inject_region(data: str, key: str, content: str) -> str:
    """Replace the body of region ``key`` in ``data`` with ``content``."""
    begin = begin_marker(key)
    start, stop = find_region(data, begin, end_marker(key))
    if content and not content.endswith("\n"):
        content += "\n"
    content = indent(content, marker_indentation(data, data.find(begin)))
    return data[:start] + content + data[stop:]


def changed_chars(old: str, new: str) -> int:
    """Number of characters that differ once common prefix and suffix are removed."""
    if old == new:
        return 0
    limit = min(len(old), len(new))
    prefix = 0
    while prefix < limit and old[prefix] == new[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and old[len(old) - 1 - suffix] == new[len(new) - 1 - suffix]
    ):
        suffix += 1
    return max(len(old), len(new)) - prefix - suffix


def count_of(data: str, needle: str) -> int:
    return data.count(needle)


def pad_columns(values: Iterable[object], widths: Sequence[int]) -> List[str]:
    return [str(value).ljust(width) for value, width in zip(values, widths)]
