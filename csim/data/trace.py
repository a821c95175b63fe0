"""Trace reader.

Reads valgrind-style memory traces, one access per line:

    I 0400d7d4,8
     M 0421c7f0,4
     L 04f6b868,8
     S 7ff0005c8,8

`op` is I (instruction fetch), L (load), S (store) or M (modify); the
address is hex and the size is decimal. Instruction lines start in column
0, data lines are indented by one space. Lines that are not access
records (blank lines, valgrind `==PID==` banners) are skipped.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"^\s*([ILSM])\s+([0-9a-fA-F]+)(?:,(\d+))?\s*$")
# a line that starts like a data access must parse, anything else may be skipped
_DATA_OP_RE = re.compile(r"^\s*[LSM](?:\s|$)")


class TraceFormatError(ValueError):
    """Raised for a trace line that cannot be parsed."""

    def __init__(self, message: str, lineno: Optional[int] = None, line: Optional[str] = None):
        self.lineno = lineno
        self.line = line
        if lineno is not None:
            message = f"line {lineno}: {message}"
        super().__init__(message)


class AccessKind(Enum):
    INSTRUCTION = "I"
    LOAD = "L"
    STORE = "S"
    MODIFY = "M"


@dataclass(frozen=True)
class AccessRecord:
    kind: AccessKind
    address: int
    size: int = 0

    def __str__(self) -> str:
        return f"{self.kind.value} {self.address:x},{self.size}"


def parse_trace_line(line: str, lineno: Optional[int] = None) -> Optional[AccessRecord]:
    """Parse one trace line.

    Returns None for lines that are not access records. Raises
    TraceFormatError for an L/S/M line with a bad address or size.
    """
    if not line.strip():
        return None
    m = _LINE_RE.match(line)
    if m is None:
        if _DATA_OP_RE.match(line):
            raise TraceFormatError(f"malformed trace record {line.strip()!r}", lineno, line)
        logger.debug("skipping line %s: %r", lineno, line.strip())
        return None
    op, addr, size = m.groups()
    return AccessRecord(AccessKind(op), int(addr, 16), int(size) if size is not None else 0)


def parse_trace(lines: Iterable[str]) -> Iterator[AccessRecord]:
    for lineno, line in enumerate(lines, start=1):
        record = parse_trace_line(line, lineno)
        if record is not None:
            yield record


def read_trace(path: str) -> Iterator[AccessRecord]:
    """Yield records from the trace file at `path`.

    The file is opened before the first record is produced, so a missing
    file raises OSError on the first next() call. Traces are ASCII; any
    other byte is replaced and the line then goes through the parser.
    """
    logger.debug("reading trace %s", path)
    with open(path, "r", encoding="ascii", errors="replace") as fh:
        yield from parse_trace(fh)
