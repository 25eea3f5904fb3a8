"""
Command line entry point: apply a possibly stale or hand-written unified diff.

    mend src/app.py -p fix.diff            # patched text to stdout
    mend src/app.py -p fix.diff -i         # rewrite the file in place
    pbpaste | mend -i                      # every file named by the patch headers
    mend app.py -c --dry-run               # patch from the clipboard, report only
"""
from __future__ import annotations

import dataclasses
import logging
import os
import sys
from typing import List, NoReturn, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .commit import read_document, resolve_target, write_document
from .config import MendConfig
from .core import MendResult, mend_text
from .errors import ExtractError, MalformedPatch, PathViolation
from .extract import FilePatch, sanitize_patch, split_patch_by_file
from .models.outcome import OutcomeKind
from .patch.report import RunStatus
from .system import read_clipboard

try:
    from importlib.metadata import version as pkg_version

    _version = pkg_version("mend")
except Exception:
    _version = "0.3.0"

console_err = Console(stderr=True)

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_PARSE_FAILED = 3
EXIT_IO_ERROR = 4

_EXIT_FOR_STATUS = {
    RunStatus.FULLY_APPLIED: EXIT_OK,
    RunStatus.PARTIALLY_APPLIED: EXIT_PARTIAL,
    RunStatus.PARSE_FAILED: EXIT_PARSE_FAILED,
}

_RESULT_STYLE = {
    OutcomeKind.APPLIED: "green",
    OutcomeKind.RELOCATED: "yellow",
    OutcomeKind.CONFLICTED: "red",
}


def _fail(message: str, code: int) -> NoReturn:
    console_err.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(code)


def _parse_radius(value: Optional[str]) -> Tuple[bool, Optional[int]]:
    """(given, radius) where radius None means the whole document."""
    if value is None:
        return False, None
    if value.lower() == "all":
        return True, None
    try:
        radius = int(value)
    except ValueError:
        raise click.BadParameter("expected a line count or 'all'", param_hint="--radius")
    if radius < 0:
        raise click.BadParameter("must be >= 0", param_hint="--radius")
    return True, radius


def _build_config(fuzziness: str, threshold: Optional[float], radius: Optional[str]) -> MendConfig:
    cfg = MendConfig.for_fuzziness(int(fuzziness)).with_overrides(threshold=threshold)
    given, value = _parse_radius(radius)
    if given:
        cfg = dataclasses.replace(cfg, search_radius=value)
    return cfg


def _read_patch(patch_file: Optional[str], clipboard: bool) -> str:
    if clipboard:
        text = read_clipboard()
        if text is None:
            _fail("could not read the clipboard (no pbpaste, wl-paste, xclip or xsel found)", EXIT_IO_ERROR)
        return text
    if patch_file:
        try:
            return read_document(patch_file)
        except (OSError, UnicodeDecodeError) as e:
            _fail(f"cannot read patch {patch_file}: {e}", EXIT_IO_ERROR)
    return click.get_text_stream("stdin").read()


def _same_path(target: str, header_path: str) -> bool:
    t = os.path.normpath(target).replace("\\", "/")
    p = os.path.normpath(header_path).replace("\\", "/")
    return t == p or t.endswith("/" + p) or p.endswith("/" + t)


def _select_sections(
    sections: List[FilePatch], target: Optional[str], root: str
) -> List[Tuple[str, FilePatch]]:
    """Pair each patch section with the file it should be applied to."""
    if target:
        for section in sections:
            if section.path and _same_path(target, section.path):
                return [(target, section)]
        if len(sections) == 1:
            # Headerless or single-file patch: the caller named the file.
            return [(target, sections[0])]
        _fail(f"no matching changes for file {target}", EXIT_PARSE_FAILED)

    pairs: List[Tuple[str, FilePatch]] = []
    for section in sections:
        if not section.path:
            raise click.UsageError("the patch does not name its file; pass TARGET")
        try:
            pairs.append((resolve_target(root, section.path), section))
        except PathViolation as e:
            _fail(str(e), EXIT_IO_ERROR)
    return pairs


def _print_report(path: str, result: MendResult) -> None:
    report = result.report
    table = Table(title=escape(path), show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("#", justify="right")
    table.add_column("Hunk", style="cyan")
    table.add_column("Result")
    table.add_column("Lines")
    table.add_column("Confidence", justify="right")
    table.add_column("Offset", justify="right")
    for o in report.outcomes:
        hunk = result.patch.hunks[o.hunk_index]
        style = _RESULT_STYLE[o.kind]
        if o.match is not None:
            m = o.match
            lines = f"{m.start_line + 1}-{m.end_line}" if m.length else f"+{m.start_line + 1}"
            table.add_row(
                str(o.hunk_index + 1), escape(hunk.header), f"[{style}]{o.kind.value}[/{style}]",
                lines, f"{m.confidence:.2f}", f"{m.offset:+d}",
            )
        else:
            table.add_row(
                str(o.hunk_index + 1), escape(hunk.header), f"[{style}]{o.kind.value}[/{style}]",
                "-", f"{o.conflict.best_score:.2f}", "-",
            )
    console_err.print(table)
    console_err.print(
        f"[bright_black]{report.applied} applied, {report.relocated} relocated, "
        f"{report.conflicted} conflicted[/bright_black]"
    )
    for o in report.conflicts:
        console_err.print()
        console_err.print(f"[red]Needs manual attention:[/red] {escape(o.conflict.message)}")
        console_err.print(escape(result.patch.hunks[o.hunk_index].render()), highlight=False)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=_version, prog_name="mend")
@click.argument("target", required=False, type=click.Path(dir_okay=False))
@click.option("-p", "--patch", "patch_file", type=click.Path(dir_okay=False), help="Read the patch from a file.")
@click.option("-c", "--clipboard", is_flag=True, help="Read the patch from the clipboard.")
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Write the result to this file.")
@click.option("-i", "--in-place", is_flag=True, help="Rewrite the target file(s).")
@click.option("--dry-run", is_flag=True, help="Report only; write nothing.")
@click.option("--backup", metavar="EXT", help="With --in-place, keep the old file as FILE.EXT.")
@click.option("--threshold", type=click.FloatRange(0.0, 1.0), help="Minimum match score (default 0.7).")
@click.option("--radius", metavar="N|all", help="Lines searched around each hunk header (default 50).")
@click.option(
    "--fuzziness", type=click.Choice(["0", "1", "2"]), default="2", show_default=True,
    help="0 exact, 1 whitespace-tolerant, 2 fuzzy.",
)
@click.option("--no-sanitize", is_flag=True, help="Do not strip markdown fences or repair context lines.")
@click.option(
    "--root", type=click.Path(file_okay=False), default=".", show_default=True,
    help="Directory header paths are resolved against when TARGET is omitted.",
)
@click.option("--debug", is_flag=True, help="Log candidate scoring to stderr.")
def main(
    target: Optional[str],
    patch_file: Optional[str],
    clipboard: bool,
    output: Optional[str],
    in_place: bool,
    dry_run: bool,
    backup: Optional[str],
    threshold: Optional[float],
    radius: Optional[str],
    fuzziness: str,
    no_sanitize: bool,
    root: str,
    debug: bool,
):
    """
    Apply a unified diff to files that may have drifted from it.

    Each hunk is located by fuzzy matching of its context rather than by its
    line numbers. Hunks that cannot be placed confidently are skipped and
    listed for manual attention.

    Exit status: 0 all hunks applied, 1 some conflicted, 3 the patch could
    not be parsed, 4 input/output error.
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s")
    if clipboard and patch_file:
        raise click.UsageError("use either --patch or --clipboard, not both")
    if in_place and output:
        raise click.UsageError("use either --in-place or --output, not both")

    cfg = _build_config(fuzziness, threshold, radius)
    raw = _read_patch(patch_file, clipboard)

    try:
        text = raw if no_sanitize else sanitize_patch(raw)
    except ExtractError as e:
        _fail(str(e), EXIT_PARSE_FAILED)
    sections = split_patch_by_file(text)
    if not sections:
        _fail("the input contains no patch", EXIT_PARSE_FAILED)

    pairs = _select_sections(sections, target, root)
    if len(pairs) > 1 and not (in_place or dry_run):
        raise click.UsageError("the patch touches several files; use --in-place or --dry-run")

    # Nothing is written until every section has parsed.
    statuses: List[RunStatus] = []
    pending: List[Tuple[str, MendResult]] = []
    for path, section in pairs:
        if section.is_deletion:
            console_err.print(f"[yellow]Skipping deletion of {escape(path)}; remove the file by hand.[/yellow]")
            statuses.append(RunStatus.PARTIALLY_APPLIED)
            continue
        try:
            content = read_document(path) if os.path.exists(path) or not section.is_creation else ""
        except (OSError, UnicodeDecodeError) as e:
            _fail(f"cannot read {path}: {e}", EXIT_IO_ERROR)

        try:
            pending.append((path, mend_text(content, section.text, cfg, log=debug)))
        except MalformedPatch as e:
            _fail(f"malformed patch for {path}: {e}", _EXIT_FOR_STATUS[RunStatus.PARSE_FAILED])

    for path, result in pending:
        _print_report(path, result)
        statuses.append(result.status)
        if dry_run:
            continue
        try:
            if in_place:
                write_document(path, result.text, backup_ext=backup)
            elif output:
                write_document(output, result.text)
            else:
                click.echo(result.text, nl=False)
        except OSError as e:
            _fail(f"cannot write {output or path}: {e}", EXIT_IO_ERROR)

    sys.exit(max((_EXIT_FOR_STATUS[s] for s in statuses), default=EXIT_OK))


if __name__ == "__main__":
    main()
