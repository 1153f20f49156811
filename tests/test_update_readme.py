"""Tests for the README progress table."""

import pytest

from progress_ledger import Status, parse_ledger, render_empty_ledger
from update_readme import (
  LANGUAGES,
  SUMMARY_HEADING,
  count_done,
  generate_readme_content,
  main as readme_main,
  percentage,
  progress_bar,
  render_summary,
  splice_summary,
  update_readme,
)


class TestProgressBar:
  def test_zero_is_all_empty(self):
    assert progress_bar(0, 30) == "[" + "░" * 30 + "]"

  def test_full(self):
    assert progress_bar(30, 30) == "[" + "█" * 30 + "]"

  def test_any_progress_shows_a_filled_glyph(self):
    bar = progress_bar(1, 100, width=30)
    assert bar.count("█") == 1
    assert bar.count("░") == 29

  def test_proportional(self):
    assert progress_bar(15, 30).count("█") == 15
    assert progress_bar(1, 30).count("█") == 1

  def test_clamped_to_width(self):
    assert len(progress_bar(45, 30)) == 32


class TestPercentage:
  @pytest.mark.parametrize("done,expected", [(0, 0), (1, 3), (2, 6), (15, 50), (29, 96), (30, 100)])
  def test_truncates(self, done, expected):
    assert percentage(done, 30) == expected


class TestSummary:
  def test_rows_per_language(self, ledger_text):
    ledger = parse_ledger(ledger_text)
    lines = render_summary(ledger)
    assert lines[0] == SUMMARY_HEADING
    assert lines[2] == "| Language | Completed | Progress | Bar |"
    assert lines[4] == "| Bash | 1/30 | 3% | [█" + "░" * 29 + "] |"
    assert lines[-1] == ""
    assert len(lines) == 5 + len(LANGUAGES)

  def test_missing_language_counts_zero(self, ledger_text):
    ledger = parse_ledger(ledger_text)
    assert count_done(ledger, "Zig") == 0
    assert "| Zig | 0/30 | 0% | [" + "░" * 30 + "] |" in render_summary(ledger)

  def test_replaces_existing_section(self, ledger_text, readme_text):
    ledger = parse_ledger(ledger_text)
    out = generate_readme_content(readme_text, ledger)
    assert out.startswith("# Daily challenges\n\nSome intro.\n\n## Progress\n")
    assert "| Bash | 0/30 |" not in out
    assert "| Python | 1/30 | 3% |" in out
    assert out.endswith("## Languages\n\n- Bash\n- Python\n")
    assert out.count(SUMMARY_HEADING) == 1

  def test_inserts_before_anchor(self, ledger_text):
    ledger = parse_ledger(ledger_text)
    readme = "# Title\n\n## Languages\n\n- Bash\n"
    out = generate_readme_content(readme, ledger)
    assert out.index(SUMMARY_HEADING) < out.index("## Languages")
    assert out.startswith("# Title\n\n## Progress\n\n")

  def test_appends_without_anchor(self, ledger_text):
    ledger = parse_ledger(ledger_text)
    out = generate_readme_content("# Title\n\nBody\n\n\n", ledger)
    assert out.startswith("# Title\n\nBody\n\n## Progress\n\n")
    assert out.endswith("|\n\n")

  @pytest.mark.parametrize("readme", [
    "",
    "# Title\n",
    "# Title\n\n## Languages\n",
    "# Title\n\n## Progress\n\nstale\n",
    "# Title\n\n## Progress\nstale\n## Other\ntext\n",
  ])
  def test_idempotent(self, ledger_text, readme):
    ledger = parse_ledger(ledger_text)
    once = generate_readme_content(readme, ledger)
    assert generate_readme_content(once, ledger) == once

  def test_crlf_readme_stays_crlf(self, ledger_text, readme_text):
    ledger = parse_ledger(ledger_text)
    crlf = readme_text.replace("\n", "\r\n")
    out = generate_readme_content(crlf, ledger)
    assert "\n" not in out.replace("\r\n", "")
    assert generate_readme_content(out, ledger) == out

  @pytest.mark.parametrize("readme", ["# Title\r\n", "# Title\r\n\r\n## Languages\r\n"])
  def test_crlf_insert_and_append(self, ledger_text, readme):
    ledger = parse_ledger(ledger_text)
    out = generate_readme_content(readme, ledger)
    assert "\n" not in out.replace("\r\n", "")
    assert generate_readme_content(out, ledger) == out

  def test_splice_keeps_following_sections(self):
    table = ["## Progress", "", "T", ""]
    out = splice_summary("## Progress\nold\n## Next\nkeep\n", table)
    assert out == "## Progress\n\nT\n\n## Next\nkeep\n"


class TestUpdateReadme:
  def test_writes_then_reports_unchanged(self, workspace, ledger_text):
    ledger = parse_ledger(ledger_text)
    readme = workspace / "README.md"
    assert update_readme(readme, ledger) is True
    first = readme.read_bytes()
    assert update_readme(readme, ledger) is False
    assert readme.read_bytes() == first

  def test_reflects_ledger_changes(self, workspace):
    ledger = parse_ledger(render_empty_ledger(LANGUAGES, 30))
    for n in range(1, 16):
      ledger.update_row("Go", n, Status.DONE, score=100)
    readme = workspace / "README.md"
    update_readme(readme, ledger)
    assert "| Go | 15/30 | 50% | [" + "█" * 15 + "░" * 15 + "] |" in readme.read_text(encoding="utf-8")

  def test_creates_missing_readme(self, tmp_path, ledger_text):
    readme = tmp_path / "README.md"
    assert update_readme(readme, parse_ledger(ledger_text)) is True
    assert readme.read_text(encoding="utf-8").startswith(SUMMARY_HEADING)


class TestMain:
  def test_uses_paths_from_environment(self, tmp_path, ledger_text, monkeypatch):
    progress = tmp_path / "ledger.md"
    progress.write_text(ledger_text, encoding="utf-8")
    readme = tmp_path / "OVERVIEW.md"
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ADVENTALEX_ROOT", raising=False)
    monkeypatch.setenv("ADVENTALEX_PROGRESS", str(progress))
    monkeypatch.setenv("ADVENTALEX_README", str(readme))
    readme_main()
    assert "| Python | 1/30 | 3% |" in readme.read_text(encoding="utf-8")

  def test_root_from_environment(self, workspace, monkeypatch):
    monkeypatch.chdir(workspace)
    monkeypatch.delenv("ADVENTALEX_PROGRESS", raising=False)
    monkeypatch.delenv("ADVENTALEX_README", raising=False)
    monkeypatch.setenv("ADVENTALEX_ROOT", str(workspace))
    readme_main()
    assert "| Bash | 1/30 | 3% |" in (workspace / "README.md").read_text(encoding="utf-8")
