"""
Reference Corpus
================

A corpus is a CSV file of named bytebeat expressions, used to check the
evaluator against output produced by a real C compiler:

    name,code
    42_melody,t*(42&t>>10)
    sierpinski,t&t>>8

Names become part of C function names and output file names, so they
are restricted to ASCII letters, digits and underscores. Each entry's
reference output lives next to the corpus as `<name>.bin`: one unsigned
byte per t, starting at t = 0.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Union
import csv
import logging
import re

from bytebeat.errors import CorpusFormatError


logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

REQUIRED_COLUMNS = ("name", "code")


@dataclass(frozen=True)
class CorpusEntry:
    """
    A named expression with known reference output.

    Attributes:
        name: Identifier used for the C function and the .bin file
        code: The bytebeat expression
    """
    name: str
    code: str

    @property
    def reference_filename(self) -> str:
        return f"{self.name}.bin"

    def reference_path(self, directory: Union[str, Path]) -> Path:
        return Path(directory) / self.reference_filename


def load_corpus(path: Union[str, Path]) -> List[CorpusEntry]:
    """
    Read a corpus CSV file.

    Blank rows are skipped. Extra columns are allowed and ignored.

    Raises:
        CorpusFormatError: If a required column is missing, or a name is
            empty, duplicated or not a valid identifier suffix
        OSError: If the file cannot be read
    """
    path = Path(path)
    entries: List[CorpusEntry] = []
    seen = set()

    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise CorpusFormatError(
                f"{path.name}: missing column(s) {', '.join(missing)}", line=1
            )

        for row in reader:
            line = reader.line_num
            name = (row.get("name") or "").strip()
            code = (row.get("code") or "").strip()

            if not name and not code:
                continue
            if not name:
                raise CorpusFormatError("entry has no name", line=line)
            if not NAME_PATTERN.match(name):
                raise CorpusFormatError(
                    f"invalid name {name!r} (use letters, digits and '_')", line=line
                )
            if name in seen:
                raise CorpusFormatError(f"duplicate name {name!r}", line=line)
            if not code:
                raise CorpusFormatError(f"entry {name!r} has no code", line=line)

            seen.add(name)
            entries.append(CorpusEntry(name=name, code=code))

    logger.debug(f"Loaded {len(entries)} corpus entries from {path}")
    return entries


def load_reference(entry: CorpusEntry, directory: Union[str, Path]) -> bytes:
    """Read the reference output for an entry from directory."""
    return entry.reference_path(directory).read_bytes()
