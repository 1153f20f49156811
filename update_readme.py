#!/usr/bin/env python3
"""
Description: Regenerate the per-language progress table in README.md from progress.md.
Functioning: Counts done rows per language in the ledger, renders counts, percentages and a fixed-width bar, and replaces the "## Progress" section of README.md.
How to use: Run `python update_readme.py` from the repository root (also called by adventalex.py after every ledger update).
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from progress_ledger import (
  HEADING_PREFIX,
  Ledger,
  Status,
  atomic_write_text,
  load_ledger,
  read_text,
)

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parent

LANGUAGES = ["Bash", "Python", "Go", "Rust", "Zig", "JavaScript"]
TOTAL_CHALLENGES = 30
BAR_WIDTH = 30
FILLED = "█"
EMPTY_GLYPH = "░"

SUMMARY_HEADING = "## Progress"
# The summary is inserted above this heading when README.md has no summary yet
ANCHOR_HEADING = "## Languages"
TABLE_HEADER = "| Language | Completed | Progress | Bar |"
TABLE_SEPARATOR = "|----------|-----------|----------|-----|"


def progress_bar(done: int, total: int, width: int = BAR_WIDTH) -> str:
  """Fixed-width bar; any progress shows at least one filled glyph."""
  filled = done * width // total if total > 0 else 0
  filled = max(0, min(filled, width))
  if done > 0 and filled == 0:
    filled = 1
  return "[" + FILLED * filled + EMPTY_GLYPH * (width - filled) + "]"


def percentage(done: int, total: int) -> int:
  if total <= 0:
    return 0
  return done * 100 // total


def count_done(ledger: Ledger, language: str) -> int:
  return ledger.count(language, Status.DONE)


def render_summary(ledger: Ledger, languages: Sequence[str] = LANGUAGES,
                   total: int = TOTAL_CHALLENGES, heading: str = SUMMARY_HEADING) -> List[str]:
  lines = [heading, "", TABLE_HEADER, TABLE_SEPARATOR]
  for lang in languages:
    done = count_done(ledger, lang)
    lines.append(f"| {lang} | {done}/{total} | {percentage(done, total)}% | {progress_bar(done, total)} |")
  lines.append("")
  return lines


def _is_heading(line: str) -> bool:
  return line.startswith(HEADING_PREFIX)


def splice_summary(readme_text: str, table: List[str], heading: str = SUMMARY_HEADING,
                   anchor: str = ANCHOR_HEADING) -> str:
  """
  Replace the summary section (heading line up to the next `## ` heading) with
  `table`. Without a summary section, insert it before `anchor`, or append it
  at the end when the anchor is missing too.
  """
  lines = readme_text.split("\n")
  # Follow the README's line endings so a CRLF file stays CRLF
  cr = "\r" if "\r\n" in readme_text else ""
  table = [line + cr for line in table]
  start = _find_heading(lines, heading)
  if start is not None:
    end = start + 1
    while end < len(lines) and not _is_heading(lines[end]):
      end += 1
    if end == len(lines):
      # Summary was the last section; keep the trailing newline
      return "\n".join(lines[:start] + table + [""])
    return "\n".join(lines[:start] + table + lines[end:])

  pos = _find_heading(lines, anchor)
  if pos is not None:
    logger.info("No '%s' section in README; inserting before '%s'", heading, anchor)
    return "\n".join(lines[:pos] + table + lines[pos:])

  logger.info("Neither '%s' nor '%s' found in README; appending summary", heading, anchor)
  head = lines
  while head and head[-1].strip() == "":
    head = head[:-1]
  prefix = head + [cr] if head else []
  return "\n".join(prefix + table + [""])


def _find_heading(lines: List[str], heading: str) -> Optional[int]:
  for i, line in enumerate(lines):
    if line.rstrip() == heading:
      return i
  return None


def generate_readme_content(readme_text: str, ledger: Ledger,
                            languages: Sequence[str] = LANGUAGES,
                            total: int = TOTAL_CHALLENGES) -> str:
  return splice_summary(readme_text, render_summary(ledger, languages, total))


def update_readme(readme_path: Path, ledger: Ledger, languages: Sequence[str] = LANGUAGES,
                  total: int = TOTAL_CHALLENGES) -> bool:
  """Rewrite README.md's summary section. Returns False when nothing changed."""
  current = read_text(readme_path) if readme_path.exists() else ""
  content = generate_readme_content(current, ledger, languages, total)
  if content == current:
    logger.debug("README summary already up to date: %s", readme_path)
    return False
  atomic_write_text(readme_path, content)
  logger.info("README summary regenerated: %s", readme_path)
  return True


def default_paths():
  """(progress.md, README.md) from the environment, falling back to the repository root."""
  root = Path(os.getenv("ADVENTALEX_ROOT") or REPO_ROOT)
  progress = Path(os.getenv("ADVENTALEX_PROGRESS") or root / "progress.md")
  readme = Path(os.getenv("ADVENTALEX_README") or root / "README.md")
  return progress, readme


def main() -> None:
  load_dotenv()
  log_level = os.getenv("LOG_LEVEL", "INFO").upper()
  logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(message)s"
  )
  progress, readme = default_paths()
  update_readme(readme, load_ledger(progress))


if __name__ == "__main__":
  main()
