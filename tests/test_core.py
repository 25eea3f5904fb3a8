import difflib
import logging
import textwrap

import pytest

from mend import MendConfig, fuzzy_patch_partial, mend_text, patch_text
from mend.errors import MalformedPatch, PatchFailedError
from mend.models import ConflictReason, OutcomeKind
from mend.patch.report import RunStatus


def _text(lines):
    return "\n".join(lines) + "\n"


ORIGINAL = [f"row {i:02d}" for i in range(1, 31)]


def _modified():
    lines = list(ORIGINAL)
    lines[2:3] = ["row 03 (split)", "row 03 (extra)"]
    del lines[15]  # was "row 15"
    lines[-3] = "row 28 changed"
    return lines


def _unified(a, b):
    return "\n".join(difflib.unified_diff(a, b, "a/rows.txt", "b/rows.txt", lineterm=""))


# =============================
# Round trip and drift
# =============================

def test_exact_diff_round_trips():
    modified = _modified()
    result = mend_text(_text(ORIGINAL), _unified(ORIGINAL, modified))
    assert result.text == _text(modified)
    assert result.report.total == 3
    assert all(o.kind is OutcomeKind.APPLIED for o in result.report.outcomes)
    assert all(o.match.confidence == 1.0 for o in result.report.outcomes)
    assert result.status is RunStatus.FULLY_APPLIED


def test_ten_line_scenario_with_zero_drift():
    source = _text([f"line{i}" for i in range(1, 11)])
    patch = textwrap.dedent("""
        @@ -2,4 +2,4 @@
         line2
        -line3
        -line4
        +three
        +four
         line5
        @@ -7,3 +7,3 @@
         line7
        -line8
        +eight
         line9
    """).lstrip()
    result = mend_text(source, patch)
    kinds = [o.kind for o in result.report.outcomes]
    assert kinds == [OutcomeKind.APPLIED, OutcomeKind.APPLIED]
    second = result.report.outcomes[1].match
    assert second.start_line == 6
    assert second.offset == 0
    assert result.text == _text(
        ["line1", "line2", "three", "four", "line5", "line6", "line7", "eight", "line9", "line10"]
    )


def test_positive_drift_carries_to_next_hunk():
    source = _text([f"line{i}" for i in range(1, 21)])
    patch = textwrap.dedent("""
        @@ -2,3 +2,5 @@
         line2
        -line3
        +a
        +b
        +c
         line4
        @@ -12,3 +14,3 @@
         line12
        -line13
        +THIRTEEN
         line14
    """).lstrip()
    result = mend_text(source, patch)
    second = result.report.outcomes[1]
    assert second.kind is OutcomeKind.APPLIED
    assert second.match.start_line == 13
    assert second.match.drift == 2


# =============================
# Guards and tolerance
# =============================

def test_applying_twice_does_not_reapply():
    source = _text([f"line{i}" for i in range(1, 21)])
    patch = textwrap.dedent("""
        @@ -2,3 +2,5 @@
         line2
        -line3
        +a
        +b
        +c
         line4
        @@ -12,3 +14,3 @@
         line12
        -line13
        +THIRTEEN
         line14
    """).lstrip()
    once = mend_text(source, patch).text
    twice = mend_text(once, patch)
    assert twice.text == once
    assert twice.status is RunStatus.PARTIALLY_APPLIED
    assert all(o.kind is OutcomeKind.CONFLICTED for o in twice.report.outcomes)
    assert all(
        o.conflict.reason is ConflictReason.NO_CONFIDENT_MATCH for o in twice.report.outcomes
    )


@pytest.mark.parametrize(
    "source, patch, expected",
    [
        (
            ["a1", "ctx1", "ctx2", "ctx3", "tail"],
            "@@ -1,4 +1,5 @@\n-a1\n+b1\n+b2\n ctx1\n ctx2\n ctx3\n",
            ["b1", "b2", "ctx1", "ctx2", "ctx3", "tail"],
        ),
        (
            ["head", "ctx1", "ctx2", "ctx3", "a1"],
            "@@ -2,4 +2,5 @@\n ctx1\n ctx2\n ctx3\n-a1\n+b1\n+b2\n",
            ["head", "ctx1", "ctx2", "ctx3", "b1", "b2"],
        ),
    ],
    ids=["change-before-context", "change-after-context"],
)
def test_change_at_hunk_edge_is_not_reapplied(source, patch, expected):
    once = mend_text(_text(source), patch)
    assert once.status is RunStatus.FULLY_APPLIED
    assert once.text == _text(expected)

    twice = mend_text(once.text, patch)
    assert twice.text == once.text
    assert twice.status is RunStatus.PARTIALLY_APPLIED
    conflict = twice.report.outcomes[0].conflict
    assert conflict.reason is ConflictReason.NO_CONFIDENT_MATCH
    assert "hunk looks applied" in conflict.message


def test_whitespace_drifted_deletion_applies_once():
    source = "x0\n\n\tkeep1\n\tkeep2\n\tdrop\n"
    patch = "@@ -2,4 +2,3 @@\n \n keep1\n keep2\n-drop\n"
    once = mend_text(source, patch)
    assert once.report.outcomes[0].kind is OutcomeKind.APPLIED
    assert once.text == "x0\n\n\tkeep1\n\tkeep2\n"

    twice = mend_text(once.text, patch)
    assert twice.text == once.text
    assert twice.report.outcomes[0].kind is OutcomeKind.CONFLICTED


def test_whitespace_differences_are_tolerated():
    source = "def f():\n\tx = 1\n\treturn x\n"
    patch = "@@ -1,3 +1,3 @@\n def f():\n-    x = 1\n+    x = 2\n     return x\n"
    result = mend_text(source, patch)
    outcome = result.report.outcomes[0]
    assert outcome.kind is OutcomeKind.APPLIED
    assert 0.7 <= outcome.match.confidence < 1.0
    assert result.text == "def f():\n\tx = 2\n\treturn x\n"


def test_unrelated_hunk_conflicts_and_rest_applies():
    source = _text(["alpha", "beta", "gamma", "delta"])
    patch = textwrap.dedent("""
        @@ -1,3 +1,3 @@
         alpha
        -beta
        +BETA
         gamma
        @@ -1,2 +1,2 @@
         completely
        -unrelated
        +content
    """).lstrip()
    result = mend_text(source, patch)
    assert result.text == _text(["alpha", "BETA", "gamma", "delta"])
    conflict = result.report.outcomes[1].conflict
    assert conflict.reason is ConflictReason.NO_CONFIDENT_MATCH
    assert result.status is RunStatus.PARTIALLY_APPLIED


def test_exact_only_config_rejects_whitespace_drift():
    source = "def f():\n\tx = 1\n\treturn x\n"
    patch = "@@ -1,3 +1,3 @@\n def f():\n-    x = 1\n+    x = 2\n     return x\n"
    result = mend_text(source, patch, MendConfig.for_fuzziness(0))
    assert result.text == source
    assert result.report.conflicted == 1


# =============================
# Line endings
# =============================

def test_crlf_is_preserved():
    assert patch_text("line1\r\nline2\r\n", "@@\r\n-line2\r\n+line two\r\n") == "line1\r\nline two\r\n"


def test_missing_final_newline_is_preserved():
    assert patch_text("line1\nline2", "@@\n-line2\n+line two\n") == "line1\nline two"


def test_insertion_into_empty_file():
    assert patch_text("", "@@ -0,0 +1,2 @@\n+hello\n+world\n") == "hello\nworld\n"


# =============================
# Strict and best-effort APIs
# =============================

def test_malformed_patch_is_fatal():
    with pytest.raises(MalformedPatch):
        mend_text("content\n", "just some prose\n")


def test_patch_text_raises_when_a_hunk_conflicts():
    with pytest.raises(PatchFailedError, match="1 of 1 hunk"):
        patch_text("a\nb\n", "@@ -1,2 +1,2 @@\n x\n-y\n+z\n")


def test_patch_text_threshold_override():
    source = "def f():\n\tx = 1\n\treturn x\n"
    patch = "@@ -1,3 +1,3 @@\n def f():\n-    x = 1\n+    x = 2\n     return x\n"
    with pytest.raises(PatchFailedError):
        patch_text(source, patch, threshold=0.99)


def test_fuzzy_patch_partial_reports_failures():
    content = "alpha\nbeta\ngamma\ndelta\n"
    patch_str = textwrap.dedent("""
        @@ -1,3 +1,3 @@
         alpha
        -beta
        +BETA
         gamma
        @@ -1,1 +1,1 @@
        -nonexistent
        +NEX
    """)
    new_text, applied, failed = fuzzy_patch_partial(content, patch_str)
    assert new_text == "alpha\nBETA\ngamma\ndelta\n"
    assert applied == [0]
    assert len(failed) == 1
    failure = failed[0]
    assert failure["index"] == 1
    assert failure["reason"] == "NoConfidentMatch"
    assert "context not found" in failure["error"]
    assert failure["old_content"] == ["nonexistent"]
    assert failure["new_content"] == ["NEX"]


def test_fuzzy_patch_partial_empty_patch_is_noop():
    assert fuzzy_patch_partial("x\n", "  \n") == ("x\n", [], [])


def test_mend_text_logging(caplog):
    with caplog.at_level(logging.DEBUG):
        mend_text("a\nb\n", "@@ -1,2 +1,2 @@\n a\n-b\n+c\n", log=True)
    messages = [rec.getMessage() for rec in caplog.records]
    assert any("1 applied, 0 relocated, 0 conflicted" in m for m in messages)
    assert any("hunk #1" in m for m in messages)
