import textwrap

from mend.models import ApplicationOutcome, OutcomeKind
from mend.patch.applier import apply_hunks
from mend.patch.parser import parse_patch
from mend.patch.report import RunStatus, build_report, format_report

LINES = [f"line{i}" for i in range(1, 21)]

PATCH = textwrap.dedent("""
    @@ -1,2 +1,2 @@
     line1
    -line2
    +TWO
    @@ -3,3 +3,3 @@
     line9
    -line10
    +TEN
     line11
    @@ -15,2 +15,2 @@
     unrelated
    -text
    +TEXT
""").lstrip()


def _run():
    patch = parse_patch(PATCH)
    _, outcomes = apply_hunks(patch, LINES)
    return patch, build_report(outcomes)


def test_counts_and_status():
    _, report = _run()
    assert report.total == 3
    assert (report.applied, report.relocated, report.conflicted) == (1, 1, 1)
    assert report.applied_indices == [0, 1]
    assert [o.hunk_index for o in report.conflicts] == [2]
    assert report.status is RunStatus.PARTIALLY_APPLIED


def test_fully_applied_status():
    _, outcomes = apply_hunks(parse_patch("@@ -1,1 +1,1 @@\n-line1\n+ONE\n"), LINES)
    report = build_report(outcomes)
    assert report.status is RunStatus.FULLY_APPLIED
    assert report.conflicts == []


def test_relocation_is_reported_with_offset():
    _, report = _run()
    moved = report.outcomes[1]
    assert moved.kind is OutcomeKind.RELOCATED
    assert moved.match.offset == 6


def test_format_report_lists_conflicts_for_manual_attention():
    patch, report = _run()
    text = format_report(report, patch)
    lines = text.splitlines()
    assert lines[0] == "3 hunk(s): 1 applied, 1 relocated, 1 conflicted"
    assert "hunk #2: relocated at lines 9-11 (confidence 1.00, moved +6 lines)" in text
    assert "Needs manual attention:" in text
    assert "  hunk #3 @@ -15,2 +15,2 @@" in lines
    assert "    searched lines 1-20" in lines
    assert "     unrelated" in lines
    assert "    +TEXT" in lines


def test_format_report_without_patch_omits_hunk_bodies():
    _, report = _run()
    text = format_report(report)
    assert "+TEXT" not in text


def test_outcome_without_conflict_details_still_formats():
    bare = ApplicationOutcome(OutcomeKind.CONFLICTED, 0)
    text = format_report(build_report([bare]))
    assert "hunk #1: conflicted" in text
    assert "Needs manual attention:" in text
