"""Tokenizer and parser for ``INST(...)`` invocations.

Each invocation carries seven comma separated fields::

    INST(Adc, BaseRRR, (0b0001101000000000000000, kWX, 0), kRWI_W, 0, 0, 1)
         |    |        |                                   |       |  |  '- name data index
         |    |        |                                   |       |  '- opcode data index
         |    |        |                                   |       '- flags
         |    |        |                                   '- rw info
         |    |        '- opcode data
         |    '- encoding
         '- instruction

The last two fields are written back by the generator itself, so the parser
must accept its own output.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .errors import ExtractionError
from .text import begin_marker, end_marker, find_region

MACRO = "INST"
FLAG_CALL = "F"

# Parameter names of ``#define INST(...)``; an invocation using them is the
# macro definition, not data.
HEADER_FIELDS = (
    "id",
    "encoding",
    "opcodeData",
    "rwInfo",
    "flags",
    "opcodeDataIndex",
    "nameDataIndex",
)

TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<comment>//[^\n]*|/\*.*?\*/)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<number>[0-9][A-Za-z0-9_]*)
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<comma>,)
  | (?P<pipe>\|)
  | (?P<other>.)
    """,
    re.VERBOSE | re.DOTALL,
)

SKIPPED = ("space", "comment")


@dataclass
class Token:
    type: str
    value: str
    start: int
    end: int


@dataclass
class ParsedInst:
    """Raw field text of one invocation, whitespace-trimmed."""

    instruction: str
    encoding: str
    opcode_data: str
    rw_info: str
    flags: str
    opcode_data_index: str
    name_data_index: str
    line: int


def tokenize(text: str) -> Iterator[Token]:
    for match in TOKEN_RE.finditer(text):
        kind = match.lastgroup
        if kind in SKIPPED:
            continue
        yield Token(kind, match.group(), match.start(), match.end())
    yield Token("eof", "", len(text), len(text))


class InstParser:
    """Recursive-descent parser over the tokens of one database region."""

    def __init__(self, text: str, first_line: int = 1) -> None:
        self._text = text
        self._first_line = first_line
        self._tokens = list(tokenize(text))
        self._pos = 0
        self.skipped_headers = 0

    # -----------------------------------------------------------------------
    # Token helpers
    # -----------------------------------------------------------------------

    @property
    def _lookahead(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, distance: int = 1) -> Token:
        index = min(self._pos + distance, len(self._tokens) - 1)
        return self._tokens[index]

    def _next(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != "eof":
            self._pos += 1
        return tok

    def _location(self, offset: int) -> Tuple[int, int]:
        line = self._text.count("\n", 0, offset)
        column = offset - (self._text.rfind("\n", 0, offset) + 1) + 1
        return self._first_line + line, column

    def _error(self, msg: str, tok: Optional[Token] = None) -> ExtractionError:
        tok = tok or self._lookahead
        line, column = self._location(tok.start)
        found = tok.value or "end of region"
        return ExtractionError(f"line {line}, column {column}: {msg} (found '{found}')")

    def _expect(self, kind: str, what: str) -> Token:
        if self._lookahead.type != kind:
            raise self._error(f"expected {what}")
        return self._next()

    def _slice(self, first: Token, last: Token) -> str:
        return self._text[first.start:last.end].strip()

    # -----------------------------------------------------------------------
    # Grammar
    # -----------------------------------------------------------------------

    def parse(self) -> List[ParsedInst]:
        insts: List[ParsedInst] = []
        while self._lookahead.type != "eof":
            if self._at_invocation():
                inst = self._invocation()
                if inst is not None:
                    insts.append(inst)
            else:
                self._next()
        return insts

    def _at_invocation(self) -> bool:
        tok = self._lookahead
        follower = self._peek()
        return (
            tok.type == "ident"
            and tok.value == MACRO
            and follower.type == "lparen"
            and follower.start == tok.end
        )

    def _invocation(self) -> Optional[ParsedInst]:
        macro = self._next()
        self._expect("lparen", f"'(' after {MACRO}")

        instruction = self._expect("ident", "instruction identifier").value
        self._expect("comma", "',' after instruction")
        encoding = self._run("encoding", "comma")
        self._expect("comma", "',' after encoding")

        if instruction.lower() == HEADER_FIELDS[0] and encoding == HEADER_FIELDS[1]:
            self._skip_header()
            return None

        opcode_data = self._opcode_data()
        self._expect("comma", "',' after opcode data")
        rw_info = self._run("rw info", "comma")
        self._expect("comma", "',' after rw info")
        flags = self._flags()
        self._expect("comma", "',' after flags")
        opcode_data_index = self._run("opcode data index", "comma")
        self._expect("comma", "',' after opcode data index")
        name_data_index = self._run("name data index", "rparen")
        self._expect("rparen", f"')' closing {MACRO}")

        line, _ = self._location(macro.start)
        return ParsedInst(
            instruction=instruction,
            encoding=encoding,
            opcode_data=opcode_data,
            rw_info=rw_info,
            flags=flags,
            opcode_data_index=opcode_data_index,
            name_data_index=name_data_index,
            line=line,
        )

    def _run(self, what: str, stop: str) -> str:
        """Read a non-empty run of tokens up to ``stop`` at depth zero."""
        first = self._lookahead
        last: Optional[Token] = None
        depth = 0
        while True:
            tok = self._lookahead
            if tok.type == "eof":
                raise self._error(f"unterminated {what}")
            if depth == 0 and tok.type == stop:
                break
            if depth == 0 and tok.type in ("comma", "rparen"):
                raise self._error(f"unexpected '{tok.value}' in {what}")
            if tok.type == "lparen":
                depth += 1
            elif tok.type == "rparen":
                depth -= 1
            last = self._next()
        if last is None:
            raise self._error(f"empty {what}")
        return self._slice(first, last)

    def _opcode_data(self) -> str:
        first = self._expect("lparen", "'(' opening opcode data")
        if self._lookahead.type == "rparen":
            raise self._error("empty opcode data")
        while self._lookahead.type != "rparen":
            tok = self._lookahead
            if tok.type == "eof":
                raise self._error("unterminated opcode data")
            if tok.type == "lparen":
                raise self._error("nested parenthesis in opcode data")
            self._next()
        last = self._next()
        return self._slice(first, last)

    def _flags(self) -> str:
        first = self._lookahead
        last = self._flag_term()
        while self._lookahead.type != "comma":
            if self._lookahead.type == "pipe":
                last = self._next()
                if self._lookahead.type == "comma":
                    break
            last = self._flag_term()
        return self._slice(first, last)

    def _flag_term(self) -> Token:
        tok = self._lookahead
        if tok.type == "number":
            if not tok.value.isdigit():
                raise self._error("flags accept only decimal integers")
            return self._next()
        if tok.type == "ident" and tok.value == FLAG_CALL:
            self._next()
            self._expect("lparen", f"'(' after {FLAG_CALL}")
            while self._lookahead.type != "rparen":
                if self._lookahead.type in ("eof", "lparen"):
                    raise self._error(f"malformed {FLAG_CALL}(...) flag")
                self._next()
            return self._next()
        raise self._error(f"expected integer or {FLAG_CALL}(...) flag term")

    def _skip_header(self) -> None:
        for index in range(2, len(HEADER_FIELDS)):
            stop = "rparen" if index == len(HEADER_FIELDS) - 1 else "comma"
            self._run(HEADER_FIELDS[index], stop)
            self._next()
        self.skipped_headers += 1


def extract_instructions(data: str, key: str = "InstInfo") -> List[ParsedInst]:
    """Parse every invocation inside the region ``key`` of ``data``."""
    try:
        start, stop = find_region(data, begin_marker(key), end_marker(key))
    except ValueError as exc:
        raise ExtractionError(str(exc)) from exc

    region = data[start:stop]
    parser = InstParser(region, first_line=data.count("\n", 0, start) + 1)
    insts = parser.parse()

    if not insts:
        raise ExtractionError(f"no {MACRO}(...) entries parsed in region '{key}'")

    openings = region.count(MACRO + "(")
    if len(insts) + parser.skipped_headers != openings:
        raise ExtractionError(
            f"parsed {len(insts)} entries but region '{key}' contains "
            f"{openings} '{MACRO}(' openings"
        )
    return insts
