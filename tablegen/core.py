"""Generator context, task scheduling and the architecture-neutral tasks."""
from __future__ import annotations

import pathlib
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .errors import (
    CyclicDependencyError,
    DuplicateTaskError,
    RegionNotFoundError,
    UnknownDependencyError,
)
from .indexed import IndexedString
from .isa import IsaDescription, IsaInst
from .records import InstDatabase, InstRecord
from .text import begin_marker, changed_chars, disclaimer, inject_region

KINDENT = "  "
KJUSTIFY = 120


@dataclass
class SourceFile:
    """A loaded file together with the content it had on disk."""

    path: pathlib.Path
    prev: str
    data: str

    @property
    def changed(self) -> bool:
        return self.data != self.prev


class Task:
    """A named unit of work that runs after the tasks listed in ``deps``."""

    def __init__(self, name: str, deps: Sequence[str] = ()) -> None:
        self.name = name
        self.deps = tuple(deps)

    def run(self, ctx: "TableGen") -> int:
        """Run against ``ctx`` and return the number of characters changed."""
        raise NotImplementedError(f"{type(self).__name__}.run() must be implemented")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, deps={list(self.deps)!r})"


class TableGen:
    """Shared state of one generator run: records, files and tasks."""

    def __init__(
        self,
        arch: str,
        root: pathlib.Path = pathlib.Path("."),
        isa: Optional[IsaDescription] = None,
        mode: Optional[str] = None,
    ) -> None:
        self.arch = arch
        self.root = root
        self.isa = isa or IsaDescription()
        self.mode = mode
        self.insts = InstDatabase()
        self.files: Dict[str, SourceFile] = {}
        self.tasks: List[Task] = []
        self.table_sizes: Dict[str, int] = {}
        self.changes: Dict[str, int] = {}
        self._task_map: Dict[str, Task] = {}

    # -----------------------------------------------------------------------
    # Files
    # -----------------------------------------------------------------------

    def load(self, paths: Iterable[str]) -> "TableGen":
        for name in paths:
            if name in self.files:
                continue
            path = self.root / name
            with path.open("r", encoding="utf-8", newline="") as handle:
                data = handle.read()
            self.files[name] = SourceFile(path, data, data)
        return self

    def data_of_file(self, name: str) -> str:
        try:
            return self.files[name].data
        except KeyError as exc:
            raise KeyError(f"file '{name}' was not loaded") from exc

    def changed_files(self) -> List[SourceFile]:
        return [source for source in self.files.values() if source.changed]

    def save(self) -> List[pathlib.Path]:
        written = []
        for source in self.changed_files():
            with source.path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(source.data)
            source.prev = source.data
            written.append(source.path)
            print(f"wrote {source.path}")
        return written

    def inject(self, key: str, text: str, size: int = 0, disclaimer_text: bool = True) -> int:
        """Replace the body of region ``key`` in whichever loaded file owns it."""
        begin = begin_marker(key)
        owners = [source for source in self.files.values() if begin in source.data]
        if not owners:
            raise RegionNotFoundError(f"cannot find region '{key}' in any loaded file")
        if len(owners) > 1 or owners[0].data.count(begin) > 1:
            where = ", ".join(str(source.path) for source in owners)
            raise RegionNotFoundError(f"region '{key}' is defined more than once ({where})")

        source = owners[0]
        content = disclaimer(text) if disclaimer_text else text
        try:
            updated = inject_region(source.data, key, content)
        except ValueError as exc:
            raise RegionNotFoundError(f"{source.path}: {exc}") from exc

        changed = changed_chars(source.data, updated)
        source.data = updated
        if size:
            self.table_sizes[key] = size
        return changed

    def query(self, name: str) -> List[IsaInst]:
        return self.isa.query(name, self.mode)

    # -----------------------------------------------------------------------
    # Tasks
    # -----------------------------------------------------------------------

    def add_task(self, task: Task) -> "TableGen":
        if task.name in self._task_map:
            raise DuplicateTaskError(f"task '{task.name}' is already registered")
        self.tasks.append(task)
        self._task_map[task.name] = task
        return self

    def schedule(self) -> List[Task]:
        """Order tasks so each follows its dependencies.

        Tasks are swept in registration order; a task becomes ready as soon
        as every dependency has been placed, so independent tasks keep their
        registration order.
        """
        for task in self.tasks:
            for dep in task.deps:
                if dep not in self._task_map:
                    raise UnknownDependencyError(
                        f"task '{task.name}' depends on unknown task '{dep}'"
                    )

        order: List[Task] = []
        done: Set[str] = set()
        pending = list(self.tasks)
        while pending:
            blocked = []
            for task in pending:
                if all(dep in done for dep in task.deps):
                    order.append(task)
                    done.add(task.name)
                else:
                    blocked.append(task)
            if len(blocked) == len(pending):
                names = ", ".join(task.name for task in blocked)
                raise CyclicDependencyError(f"tasks have cyclic dependency: {{{names}}}")
            pending = blocked
        return order

    def run_tasks(self) -> Dict[str, int]:
        for task in self.schedule():
            changed = task.run(self)
            self.changes[task.name] = changed
            print(f"{task.name}: {changed} characters changed")
        return self.changes

    def on_before_run(self) -> None:
        pass

    def on_after_run(self) -> None:
        pass

    def run(self) -> Dict[str, int]:
        self.on_before_run()
        self.run_tasks()
        self.on_after_run()
        return self.changes

    # -----------------------------------------------------------------------
    # Reporting
    # -----------------------------------------------------------------------

    def dump_table_sizes(self) -> int:
        pad = 26
        total = 0
        for name, size in self.table_sizes.items():
            total += size
            print(f"{('Size of ' + name).ljust(pad)}: {size}")
        print(f"{'Size of all tables'.ljust(pad)}: {total}")
        return total


class IdEnum(Task):
    """Emits the instruction id enumeration into region ``InstId``."""

    def __init__(self, name: str = "IdEnum", deps: Sequence[str] = ()) -> None:
        super().__init__(name, deps)

    def comment(self, inst: InstRecord) -> str:
        return ""

    def run(self, ctx: TableGen) -> int:
        lines = []
        for i, inst in enumerate(ctx.insts):
            inst.db_insts = ctx.query(inst.display_name) if inst.display_name else []
            line = f"kId{inst.enum}{'' if i else ' = 0'},"
            text = self.comment(inst)
            if text:
                line = line.ljust(37) + "//!< " + text
            lines.append(line)
        lines.append("_kIdCount")
        return ctx.inject("InstId", "\n".join(lines) + "\n")


class NameTable(Task):
    """Packs display names into ``_nameData`` and resolves ``name_index``."""

    letters = 26

    def __init__(self, name: str = "NameTable", deps: Sequence[str] = ()) -> None:
        super().__init__(name, deps)

    def run(self, ctx: TableGen) -> int:
        none = "Inst::kIdNone"
        names = IndexedString()
        first: List[Optional[str]] = [None] * self.letters
        last: List[Optional[str]] = [None] * self.letters
        max_length = 0

        for inst in ctx.insts:
            name = inst.display_name
            inst.name_index = names.add(name)
            max_length = max(max_length, len(name))

            index = ord(name[0]) - ord("a") if name else -1
            if 0 <= index < self.letters:
                if first[index] is None:
                    first[index] = f"Inst::kId{inst.enum}"
                last[index] = f"Inst::kId{inst.enum}"

        rows = []
        for i in range(self.letters):
            first_id = first[i] or none
            last_id = last[i] or none
            row = f"{KINDENT}{{ {first_id.ljust(22)}, {last_id.ljust(22)} + 1 }}"
            if i != self.letters - 1:
                row += ","
            rows.append(row)

        s = "const char InstDB::_nameData[] =\n"
        s += names.format(KINDENT, KJUSTIFY) + "\n"
        s += "\n"
        s += f"const InstDB::InstNameIndex InstDB::instNameIndex[{self.letters}] = {{\n"
        s += "\n".join(rows) + "\n"
        s += "};\n"

        limits = f"enum : uint32_t {{ kMaxNameSize = {max_length} }};\n"
        return ctx.inject("NameLimits", limits) + ctx.inject(
            "NameData", s, names.size + self.letters * 4
        )
