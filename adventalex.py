#!/usr/bin/env python3
"""
Description: Track daily coding challenges across languages in progress.md and README.md.
Functioning: Validates language/day, runs the day's test_*.sh and reads its TEST_RESULT line, rewrites the matching progress.md row, then regenerates the README progress table.
How to use: adventalex start|done|fail <lang> <num>, adventalex status, adventalex next <lang>, adventalex summary, adventalex init

Exit codes:
- 0: success (for `done`, the tests scored 100%)
- 1: invalid language/day, missing or unreadable test result, missing ledger row
- 2: tests ran but scored below 100% (argparse usage errors also exit 2)
"""

import argparse
import logging
import os
import re
import subprocess
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from progress_ledger import (
  KEEP,
  LedgerLookupError,
  Status,
  atomic_write_text,
  load_ledger,
  read_text,
  render_empty_ledger,
  save_ledger,
)
from update_readme import LANGUAGES, TOTAL_CHALLENGES, update_readme

logger = logging.getLogger("adventalex")

# Directory name -> ledger section name
LANGUAGE_MAP: Dict[str, str] = {lang.lower(): lang for lang in LANGUAGES}

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
RE_TEST_RESULT = re.compile(r"^TEST_RESULT=(.*)$")
RE_README_TITLE = re.compile(r"^#\s*(.+?)\s*$")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_DONE = 2


class ValidationError(ValueError):
  pass


class ChallengeTestError(RuntimeError):
  pass


def _env_flag(value: Optional[str], default: bool) -> bool:
  if value is None or value.strip() == "":
    return default
  return value.strip().lower() in ("1", "true", "yes", "on")


def _env_seconds(value: Optional[str], default: float) -> float:
  if value is None or value.strip() == "":
    return default
  try:
    seconds = float(value)
  except ValueError:
    raise ValidationError(f"ADVENTALEX_TEST_TIMEOUT must be a number of seconds: {value!r}") from None
  if seconds <= 0:
    raise ValidationError(f"ADVENTALEX_TEST_TIMEOUT must be positive: {value!r}")
  return seconds


@dataclass
class Settings:
  root: Path
  progress: Path
  readme: Path
  strict: bool = True
  test_timeout: float = 300.0
  log_level: str = "INFO"

  @classmethod
  def from_env(cls, environ: Mapping[str, str] = os.environ) -> "Settings":
    root = Path(environ.get("ADVENTALEX_ROOT") or Path.cwd())
    return cls(
      root=root,
      progress=Path(environ.get("ADVENTALEX_PROGRESS") or root / "progress.md"),
      readme=Path(environ.get("ADVENTALEX_README") or root / "README.md"),
      strict=_env_flag(environ.get("ADVENTALEX_STRICT"), True),
      test_timeout=_env_seconds(environ.get("ADVENTALEX_TEST_TIMEOUT"), 300.0),
      log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
    )


# =======================
# Validation
# =======================
def resolve_language(raw: str) -> str:
  """Map 'bash' / 'Bash' to the ledger section name, rejecting anything unknown."""
  lang = LANGUAGE_MAP.get(raw.strip().lower())
  if not lang:
    raise ValidationError(f"Unknown language '{raw}'. Known: {', '.join(sorted(LANGUAGE_MAP))}")
  return lang


def resolve_number(raw: str, total: int = TOTAL_CHALLENGES) -> int:
  s = str(raw).strip()
  if not s.isdecimal():
    raise ValidationError(f"Day must be a number between 1 and {total}: {raw!r}")
  n = int(s)
  if not 1 <= n <= total:
    raise ValidationError(f"Day must be a number between 1 and {total}: {raw!r}")
  return n


def day_dir(root: Path, language: str, number: int) -> Path:
  return root / language.lower() / f"day{number:02d}"


def read_title(daydir: Path) -> Optional[str]:
  """Challenge title from the first line of the day's README (`# Title`)."""
  readme = daydir / "README.md"
  if not readme.is_file():
    return None
  with readme.open("r", encoding="utf-8") as f:
    first = f.readline()
  m = RE_README_TITLE.match(first.strip())
  return m.group(1) if m else None


# =======================
# Test runner
# =======================
def find_test_script(daydir: Path) -> Path:
  scripts = sorted(daydir.glob("test_*.sh"))
  if not scripts:
    raise ChallengeTestError(f"test_*.sh not found in {daydir}")
  script = scripts[0]
  if not os.access(script, os.X_OK):
    raise ChallengeTestError(f"{script} is not executable")
  return script


def parse_test_result(output: str) -> int:
  """Score from the last `TEST_RESULT=<0-100>` line of the test output."""
  values = []
  for line in output.splitlines():
    m = RE_TEST_RESULT.match(line.strip())
    if m:
      values.append(m.group(1).strip())
  if not values:
    raise ChallengeTestError("TEST_RESULT not found in test output")
  raw = values[-1]
  if not raw.isdecimal():
    raise ChallengeTestError(f"TEST_RESULT is not a number: {raw!r}")
  score = int(raw)
  if score > 100:
    raise ChallengeTestError(f"TEST_RESULT out of range 0-100: {score}")
  return score


def run_tests(script: Path, timeout: float) -> int:
  print(f"🧪 Running tests: {script}")
  try:
    proc = subprocess.run(
      [str(script)], cwd=str(script.parent), capture_output=True, text=True, timeout=timeout
    )
  except subprocess.TimeoutExpired as e:
    raise ChallengeTestError(f"{script} timed out after {timeout:g}s") from e
  except OSError as e:
    raise ChallengeTestError(f"Failed to run {script}: {e}") from e
  sys.stdout.write(proc.stdout)
  if proc.stdout and not proc.stdout.endswith("\n"):
    sys.stdout.write("\n")
  if proc.stderr:
    sys.stderr.write(proc.stderr)
  if proc.returncode != 0:
    logger.warning("%s exited with status %d", script.name, proc.returncode)
  return parse_test_result(proc.stdout)


# =======================
# Ledger operations
# =======================
def record(settings: Settings, language: str, number: int, status: Status,
           started: str = KEEP, score: Optional[int] = None, title: Optional[str] = None) -> bool:
  """Rewrite one ledger row, then regenerate the README table."""
  ledger = load_ledger(settings.progress)
  changed = ledger.update_row(language, number, status, started=started, score=score,
                              title=title, strict=settings.strict)
  if not changed:
    print(f"⚠ {status.value} {language} {number:02d} not recorded: no such row in {settings.progress.name}")
    return False
  save_ledger(settings.progress, ledger)
  print(f"✔ {settings.progress.name} updated: {status.value} {language} {number:02d}")
  if update_readme(settings.readme, ledger):
    print(f"✔ {settings.readme.name} progress table updated")
  return True


def cmd_start(settings: Settings, args: argparse.Namespace) -> int:
  language = resolve_language(args.lang)
  number = resolve_number(args.num)
  title = read_title(day_dir(settings.root, language, number))
  started = datetime.now().strftime(TIMESTAMP_FORMAT)
  record(settings, language, number, Status.STARTED, started=started, score=None, title=title)
  return EXIT_OK


def cmd_done(settings: Settings, args: argparse.Namespace) -> int:
  language = resolve_language(args.lang)
  number = resolve_number(args.num)
  daydir = day_dir(settings.root, language, number)
  script = find_test_script(daydir)
  score = run_tests(script, settings.test_timeout)
  title = read_title(daydir)
  if score == 100:
    record(settings, language, number, Status.DONE, score=score, title=title)
    print(f"✅ DONE ({score}%)")
    return EXIT_OK
  record(settings, language, number, Status.FAILED, score=score, title=title)
  print(f"❌ NOT DONE ({score}%)")
  return EXIT_NOT_DONE


def cmd_fail(settings: Settings, args: argparse.Namespace) -> int:
  language = resolve_language(args.lang)
  number = resolve_number(args.num)
  if args.score is not None and not 0 <= args.score <= 100:
    raise ValidationError(f"Score must be between 0 and 100: {args.score}")
  record(settings, language, number, Status.FAILED, score=args.score)
  return EXIT_OK


def cmd_status(settings: Settings, args: argparse.Namespace) -> int:
  sys.stdout.write(read_text(settings.progress))
  return EXIT_OK


def cmd_next(settings: Settings, args: argparse.Namespace) -> int:
  language = resolve_language(args.lang)
  row = load_ledger(settings.progress).next_todo(language)
  if row is None:
    logger.info("No todo challenge left for %s", language)
    return EXIT_ERROR
  print(f"{row.item:02d}")
  return EXIT_OK


def cmd_summary(settings: Settings, args: argparse.Namespace) -> int:
  if update_readme(settings.readme, load_ledger(settings.progress)):
    print(f"✔ {settings.readme.name} progress table updated")
  else:
    print(f"{settings.readme.name} already up to date")
  return EXIT_OK


def cmd_init(settings: Settings, args: argparse.Namespace) -> int:
  if settings.progress.exists():
    logger.error("%s already exists; refusing to overwrite", settings.progress)
    return EXIT_ERROR
  atomic_write_text(settings.progress, render_empty_ledger(LANGUAGES, TOTAL_CHALLENGES))
  print(f"✔ Created {settings.progress}")
  update_readme(settings.readme, load_ledger(settings.progress))
  return EXIT_OK


# =========
# Program
# =========
def build_parser() -> argparse.ArgumentParser:
  p = argparse.ArgumentParser(prog="adventalex", description="Daily coding challenge progress tracker.")
  p.add_argument("--root", help="Challenges root directory (default: $ADVENTALEX_ROOT or cwd)")
  p.add_argument("--progress", help="Ledger path (default: <root>/progress.md)")
  p.add_argument("--readme", help="README path (default: <root>/README.md)")
  p.add_argument("--lenient", action="store_true",
                 help="Warn instead of failing when the language section or day row is missing")
  p.add_argument("--log-level", help="Logging level (default: $LOG_LEVEL or INFO)")
  sub = p.add_subparsers(dest="command", required=True)

  for name, handler, help_text in (
    ("start", cmd_start, "Mark a challenge as started"),
    ("done", cmd_done, "Run the challenge tests and record the result"),
    ("fail", cmd_fail, "Mark a challenge as failed"),
  ):
    sp = sub.add_parser(name, help=help_text)
    sp.add_argument("lang", help=f"One of: {', '.join(LANGUAGE_MAP)}")
    sp.add_argument("num", help=f"Day number (1-{TOTAL_CHALLENGES})")
    sp.set_defaults(func=handler)
    if name == "fail":
      sp.add_argument("--score", type=int, default=None, help="Test percentage to record (0-100)")

  sp = sub.add_parser("status", help="Print progress.md")
  sp.set_defaults(func=cmd_status)
  sp = sub.add_parser("next", help="Print the next todo day for a language")
  sp.add_argument("lang")
  sp.set_defaults(func=cmd_next)
  sp = sub.add_parser("summary", help="Regenerate the README progress table")
  sp.set_defaults(func=cmd_summary)
  sp = sub.add_parser("init", help="Create an empty progress.md")
  sp.set_defaults(func=cmd_init)
  return p


def resolve_settings(args: argparse.Namespace, environ: Mapping[str, str] = os.environ) -> Settings:
  settings = Settings.from_env(environ)
  if args.root:
    settings.root = Path(args.root)
    if not environ.get("ADVENTALEX_PROGRESS"):
      settings.progress = settings.root / "progress.md"
    if not environ.get("ADVENTALEX_README"):
      settings.readme = settings.root / "README.md"
  if args.progress:
    settings.progress = Path(args.progress)
  if args.readme:
    settings.readme = Path(args.readme)
  if args.lenient:
    settings.strict = False
  if args.log_level:
    settings.log_level = args.log_level.upper()
  return settings


def main(argv=None) -> int:
  load_dotenv()
  args = build_parser().parse_args(argv)
  try:
    settings = resolve_settings(args)
  except ValidationError as e:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    logger.error("%s", e)
    return EXIT_ERROR
  logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(message)s"
  )
  try:
    return args.func(settings, args)
  except (ValidationError, ChallengeTestError, LedgerLookupError) as e:
    logger.error("%s", e)
    return EXIT_ERROR
  except FileNotFoundError as e:
    logger.error("File not found: %s", e.filename)
    return EXIT_ERROR
  except Exception:
    logger.exception("adventalex failed")
    return EXIT_ERROR


if __name__ == "__main__":
  sys.exit(main())
