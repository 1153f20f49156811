"""Shared ledger and README fixtures."""

import pytest

LEDGER_TEXT = """# Progress

Intro paragraph kept as-is.

## Bash

| # | Challenge | Status | Started | Test |
|---|-----------|--------|---------|------|
| 01 | System Summary | ⬜ todo | — | — |
| 02 | File Organizer | ⏳ started | 2025-01-02 09:30 | — |
| 03 | Log Parser | ✅ done | 2025-01-03 10:00 | 100% |

## Python

| # | Challenge | Status | Started | Test |
|---|-----------|--------|---------|------|
| 01 | Hello World | ✅ done | 2025-01-01 08:00 | 100% |
| 02 | Variables | ❌ failed | 2025-01-02 08:00 | 40% |
| 03 | Loops | ⬜ todo | — | — |
"""

README_TEXT = """# Daily challenges

Some intro.

## Progress

| Language | Completed | Progress | Bar |
|----------|-----------|----------|-----|
| Bash | 0/30 | 0% | [░░░░░░░░░░░░░░░░░░░░░░░░░░░░░░] |

## Languages

- Bash
- Python
"""


@pytest.fixture
def ledger_text():
  return LEDGER_TEXT


@pytest.fixture
def readme_text():
  return README_TEXT


@pytest.fixture
def workspace(tmp_path):
  """A challenges root with progress.md and README.md."""
  (tmp_path / "progress.md").write_text(LEDGER_TEXT, encoding="utf-8")
  (tmp_path / "README.md").write_text(README_TEXT, encoding="utf-8")
  return tmp_path
