#!/usr/bin/env python3
"""
Description: Parse and rewrite the per-language progress ledger (progress.md).
Functioning: Splits the document into language sections and typed table rows, rewrites one row's status/started/score fields, and writes the result back atomically.
How to use: Imported by adventalex.py and update_readme.py; `python progress_ledger.py progress.md` prints a per-language status count.
"""

import logging
import os
import sys
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

HEADING_PREFIX = "## "
EMPTY = "—"
# Passed as `started` to leave the stored timestamp alone
KEEP = "KEEP"


class LedgerLookupError(LookupError):
  pass


class SectionNotFoundError(LedgerLookupError):
  def __init__(self, language: str):
    super().__init__(f"Language section not found in ledger: {language}")
    self.language = language


class RowNotFoundError(LedgerLookupError):
  def __init__(self, language: str, number: int):
    super().__init__(f"No row {number:02d} in ledger section: {language}")
    self.language = language
    self.number = number


class Status(Enum):
  TODO = "todo"
  STARTED = "started"
  FAILED = "failed"
  DONE = "done"

  @property
  def glyph(self) -> str:
    return _GLYPHS[self]

  @property
  def marker(self) -> str:
    return f"{self.glyph} {self.value}"

  @classmethod
  def from_marker(cls, text: str) -> Optional["Status"]:
    """Return the status for a marker cell like '✅ done', or None if unrecognized."""
    s = text.strip()
    for status in cls:
      if s == status.marker:
        return status
    # Tolerate a marker that lost its glyph or carries a different one
    word = s.split()[-1].lower() if s else ""
    for status in cls:
      if word == status.value:
        return status
    return None


_GLYPHS = {
  Status.TODO: "⬜",
  Status.STARTED: "⏳",
  Status.FAILED: "❌",
  Status.DONE: "✅",
}


class LineKind(Enum):
  HEADING = "heading"
  TABLE_ROW = "table_row"
  OTHER = "other"


def classify_line(line: str) -> LineKind:
  if line.startswith(HEADING_PREFIX):
    return LineKind.HEADING
  if line.lstrip().startswith("|"):
    return LineKind.TABLE_ROW
  return LineKind.OTHER


def heading_name(line: str) -> str:
  return line[len(HEADING_PREFIX):].strip()


def normalize_number(value: Union[int, str]) -> Optional[int]:
  """'02', ' 2 ' and 2 all normalize to 2; anything non-numeric gives None."""
  if isinstance(value, int):
    return value
  s = value.strip()
  if not s.isdecimal():
    return None
  return int(s)


@dataclass
class Row:
  number: str
  title: str
  status_text: str
  started: str
  score: str
  raw: Optional[str] = None
  eol: str = ""

  @property
  def status(self) -> Optional[Status]:
    return Status.from_marker(self.status_text)

  @property
  def item(self) -> int:
    return int(self.number)

  def render(self) -> str:
    if self.raw is not None:
      return self.raw
    return f"| {self.number} | {self.title} | {self.status_text} | {self.started} | {self.score} |{self.eol}"


def parse_row(line: str) -> Optional[Row]:
  """
  Parse `| num | title | status | started | score |` into a Row.
  The title is everything between the number cell and the last three cells,
  so a title containing '|' survives. Returns None for header/separator rows.
  """
  eol = "\r" if line.endswith("\r") else ""
  body = line[:-1] if eol else line
  s = body.strip()
  if not (s.startswith("|") and s.endswith("|")):
    return None
  cells = [c.strip() for c in s[1:-1].split("|")]
  if len(cells) < 5:
    return None
  if normalize_number(cells[0]) is None:
    return None
  return Row(
    number=cells[0],
    title=" | ".join(cells[1:-3]),
    status_text=cells[-3],
    started=cells[-2],
    score=cells[-1],
    raw=line,
    eol=eol,
  )


@dataclass
class Section:
  name: str
  heading: str
  body: List[Union[Row, str]] = field(default_factory=list)

  def rows(self) -> Iterator[Row]:
    for item in self.body:
      if isinstance(item, Row):
        yield item

  def find_row(self, number: Union[int, str]) -> Optional[Row]:
    target = normalize_number(number)
    if target is None:
      return None
    for row in self.rows():
      if row.item == target:
        return row
    return None

  def lines(self) -> Iterator[str]:
    yield self.heading
    for item in self.body:
      yield item.render() if isinstance(item, Row) else item


@dataclass
class Ledger:
  preamble: List[str] = field(default_factory=list)
  sections: List[Section] = field(default_factory=list)

  def render(self) -> str:
    lines = list(self.preamble)
    for section in self.sections:
      lines.extend(section.lines())
    return "\n".join(lines)

  def languages(self) -> List[str]:
    return [s.name for s in self.sections]

  def section(self, language: str) -> Optional[Section]:
    for s in self.sections:
      if s.name == language:
        return s
    return None

  def find_row(self, language: str, number: Union[int, str]) -> Optional[Row]:
    s = self.section(language)
    return s.find_row(number) if s else None

  def next_todo(self, language: str) -> Optional[Row]:
    """First row still marked todo in the language section."""
    s = self.section(language)
    if s is None:
      return None
    for row in s.rows():
      if row.status is Status.TODO:
        return row
    return None

  def count(self, language: str, status: Status) -> int:
    s = self.section(language)
    if s is None:
      return 0
    return sum(1 for row in s.rows() if row.status is status)

  def update_row(self, language: str, number: Union[int, str], status: Status,
                 started: str = KEEP, score: Optional[int] = None,
                 title: Optional[str] = None, strict: bool = False) -> bool:
    """
    Rewrite the status/started/score fields of one row in place.
    Returns True when a row was rewritten. A missing section or row leaves the
    ledger untouched: logged as a warning, or raised when `strict` is set.
    """
    s = self.section(language)
    if s is None:
      if strict:
        raise SectionNotFoundError(language)
      logger.warning("Language section '%s' not found; ledger left unchanged", language)
      return False
    row = s.find_row(number)
    if row is None:
      n = normalize_number(number)
      if strict:
        raise RowNotFoundError(language, n if n is not None else -1)
      logger.warning("Row %s not found in section '%s'; ledger left unchanged", number, language)
      return False

    row.number = f"{row.item:02d}"
    if title is not None:
      row.title = title
    row.status_text = status.marker
    if started != KEEP:
      row.started = started or EMPTY
    row.score = f"{score}%" if score is not None else EMPTY
    row.raw = None
    logger.debug("Rewrote %s row %s -> %s", language, row.number, row.render().rstrip("\r"))
    return True


def parse_ledger(text: str) -> Ledger:
  """
  Build a Ledger from the document text.
  Two states: outside any section (lines go to the preamble) and inside a
  section (lines go to that section's body). Every `## ` heading opens a new
  section; table rows inside a section are parsed, everything else is kept raw.
  """
  ledger = Ledger()
  current: Optional[Section] = None
  for line in text.split("\n"):
    kind = classify_line(line)
    if kind is LineKind.HEADING:
      current = Section(name=heading_name(line), heading=line)
      ledger.sections.append(current)
      continue
    if current is None:
      ledger.preamble.append(line)
      continue
    if kind is LineKind.TABLE_ROW:
      row = parse_row(line)
      current.body.append(row if row is not None else line)
    else:
      current.body.append(line)
  return ledger


def read_text(path: Path) -> str:
  # newline="" keeps \r\n endings so untouched lines round-trip exactly
  with path.open("r", encoding="utf-8", newline="") as f:
    return f.read()


def load_ledger(path: Path) -> Ledger:
  return parse_ledger(read_text(path))


def atomic_write_text(path: Path, text: str) -> None:
  """Write to a temp file next to `path`, then rename it over `path`."""
  path.parent.mkdir(parents=True, exist_ok=True)
  fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
  try:
    with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
      f.write(text)
      f.flush()
      os.fsync(f.fileno())
    if path.exists():
      os.chmod(tmp_name, path.stat().st_mode & 0o777)
    os.replace(tmp_name, path)
  except BaseException:
    try:
      os.unlink(tmp_name)
    except FileNotFoundError:
      pass
    raise


def save_ledger(path: Path, ledger: Ledger) -> None:
  atomic_write_text(path, ledger.render())


def render_empty_ledger(languages: List[str], total: int, title: str = "# Progress") -> str:
  lines = [title, ""]
  for language in languages:
    lines.append(f"{HEADING_PREFIX}{language}")
    lines.append("")
    lines.append("| # | Challenge | Status | Started | Test |")
    lines.append("|---|-----------|--------|---------|------|")
    for n in range(1, total + 1):
      lines.append(f"| {n:02d} | {EMPTY} | {Status.TODO.marker} | {EMPTY} | {EMPTY} |")
    lines.append("")
  return "\n".join(lines)


def status_counts(ledger: Ledger) -> Dict[str, Dict[Status, int]]:
  return {lang: {st: ledger.count(lang, st) for st in Status} for lang in ledger.languages()}


def main() -> None:
  if len(sys.argv) != 2:
    print("Usage: python progress_ledger.py <progress.md>", file=sys.stderr)
    sys.exit(2)
  ledger = load_ledger(Path(sys.argv[1]))
  for lang, counts in status_counts(ledger).items():
    summary = ", ".join(f"{st.glyph} {counts[st]}" for st in Status)
    print(f"{lang}: {summary}")


if __name__ == "__main__":
  main()
