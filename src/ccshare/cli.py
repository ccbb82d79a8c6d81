"""Typer CLI for ccshare: share, export and diff commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from result import Err, Result

from ccshare.config import Config
from ccshare.models.sessions import ParsedSession

app = typer.Typer(
    name="ccshare",
    help="Parse, sanitize and render agent session journals for sharing.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Parse, sanitize and render agent session journals for sharing."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def share(
    path: Annotated[Path, typer.Argument(help="Session journal (.jsonl)")],
    project_name: Annotated[
        str | None, typer.Option("--project-name", help="Project name shown in the header")
    ] = None,
    project_path: Annotated[
        str | None, typer.Option("--project-path", help="Project root, rewritten to '.'")
    ] = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write JSON here instead of stdout")
    ] = None,
) -> None:
    """Parse and sanitize a journal, emitting the JSON share payload."""
    from ccshare.services.export_service import ExportService

    session = _prepare(path, project_name, project_path)
    _emit(ExportService().export_session_json(session), output)


@app.command()
def export(
    path: Annotated[Path, typer.Argument(help="Session journal (.jsonl)")],
    fmt: Annotated[str, typer.Option("--format", "-f", help="markdown, json or html")] = "markdown",
    project_name: Annotated[str | None, typer.Option("--project-name")] = None,
    project_path: Annotated[str | None, typer.Option("--project-path")] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o")] = None,
) -> None:
    """Sanitize a journal and export it as Markdown, JSON or HTML."""
    from ccshare.services.export_service import ExportService

    session = _prepare(path, project_name, project_path)
    _emit(ExportService().export(session, fmt), output)


@app.command()
def diff(
    before: Annotated[
        Path, typer.Argument(exists=True, dir_okay=False, help="File with the old text")
    ],
    after: Annotated[
        Path, typer.Argument(exists=True, dir_okay=False, help="File with the new text")
    ],
) -> None:
    """Print the line diff between two text files."""
    from ccshare.render.diff import compute_diff, diff_stats, format_diff

    lines = compute_diff(_read_text(before), _read_text(after))
    stats = diff_stats(lines)
    if lines:
        typer.echo(format_diff(lines))
    typer.echo(f"+{stats.added} -{stats.removed}")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        typer.echo(f"{path} is not valid UTF-8", err=True)
        raise typer.Exit(code=1) from None
    except OSError as exc:
        typer.echo(f"Cannot read {path}: {exc}", err=True)
        raise typer.Exit(code=1) from None


def _prepare(path: Path, project_name: str | None, project_path: str | None) -> ParsedSession:
    from ccshare.services.share_service import prepare_session_file

    result = prepare_session_file(
        path, project_name, project_path, home_dir=Config().home_dir
    )
    if isinstance(result, Err):
        typer.echo(result.err_value, err=True)
        raise typer.Exit(code=1)
    return result.ok_value


def _emit(result: Result[str, str], output: Path | None) -> None:
    if isinstance(result, Err):
        typer.echo(result.err_value, err=True)
        raise typer.Exit(code=1)
    if output is None:
        typer.echo(result.ok_value)
        return
    output.write_text(result.ok_value, encoding="utf-8")
    typer.echo(f"Wrote {output}")
