import contextlib
import os
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from mdlinks.cli.shared_flags import output_options
from mdlinks.core.services.error_codes import ErrorCode, MdlinksError
from mdlinks.core.services.exit_codes import EX_BROKEN_LINKS, EX_SUCCESS, exit_code_for_error
from mdlinks.core.services.metadata_cache import DocumentCache
from mdlinks.core.services.observability import get_current_run_id, log_operation
from mdlinks.core.services.output_formatter import (
    format_check_envelope,
    format_envelope,
    format_error_envelope,
    format_github_annotation,
    format_text_lines,
)
from mdlinks.core.services.repo_config import load_check_config
from mdlinks.core.use_cases.check_links import CheckLinksUseCase

console = Console()


def get_console() -> Console:
    """Helper to get the rich console from context if available."""
    ctx = click.get_current_context(silent=True)
    if ctx and isinstance(ctx.obj, dict) and "console" in ctx.obj:
        return ctx.obj["console"]
    return console


def _write_output(output_str: str, output: Optional[str] = None) -> None:
    """Write output to stdout or to a file if requested."""
    if output:
        Path(output).write_text(output_str + "\n", encoding="utf-8")
    else:
        click.echo(output_str)


@contextlib.contextmanager
def maybe_capture(output: Optional[str], format: str):
    """Capture console output into ``output`` when writing text to a file."""
    if format == "text" and output:
        with get_console().capture() as capture:
            yield
        captured_text = capture.get()
        if captured_text.strip():
            _write_output(captured_text.rstrip("\n"), output)
    else:
        yield


@contextlib.contextmanager
def command_output_handler(
    command_name: str,
    format: str,
    output: Optional[str],
    include_timestamp: bool,
    run_id: str,
    root_path: Optional[Path] = None,
):
    """Centralized error handling and output formatting for CLI commands."""
    root = str(root_path) if root_path else "."
    try:
        yield
    except MdlinksError as e:
        if format == "json":
            _write_output(
                format_error_envelope(
                    command=command_name,
                    root=root,
                    error_code=e.code,
                    message=e.message,
                    details=e.details,
                    include_timestamp=include_timestamp,
                    run_id=run_id,
                ),
                output,
            )
        elif format == "github":
            click.echo(f"::error title={e.code.value}::{e.message}")
        else:
            click.echo(f"[ERROR {e.code.value}] {e.message}", err=True)
        raise SystemExit(exit_code_for_error(e.code))
    except Exception as e:
        safe_msg = "An unexpected internal error occurred."
        if format == "json":
            _write_output(
                format_error_envelope(
                    command=command_name,
                    root=root,
                    error_code=ErrorCode.UNKNOWN_ERROR,
                    message=safe_msg,
                    details={"internal_error": str(e)},
                    include_timestamp=include_timestamp,
                    run_id=run_id,
                ),
                output,
            )
        else:
            click.echo(f"[ERROR UNKNOWN_ERROR] {safe_msg}", err=True)

        # Always log the real error to stderr for operators
        click.echo(f"INTERNAL ERROR: {e}", err=True)
        raise SystemExit(exit_code_for_error(ErrorCode.UNKNOWN_ERROR))


@click.group()
@click.version_option(package_name="mdlinks", prog_name="mdlinks")
@click.option("--no-color", is_flag=True, default=False, help="Disable ANSI colors in text output.")
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose debug logging.")
@click.pass_context
def cli(ctx: click.Context, no_color: bool, verbose: bool):
    """Verify cross-document local links in a set of markdown files."""
    if verbose:
        previous_debug = os.environ.get("MDLINKS_DEBUG")
        os.environ["MDLINKS_DEBUG"] = "1"

        def _restore_debug() -> None:
            if previous_debug is None:
                os.environ.pop("MDLINKS_DEBUG", None)
            else:
                os.environ["MDLINKS_DEBUG"] = previous_debug

        ctx.call_on_close(_restore_debug)

    ctx.ensure_object(dict)
    ctx.obj["console"] = Console(no_color=no_color, highlight=False)


@cli.command()
@click.option(
    "-d",
    "--dir",
    "root",
    default=".",
    show_default=True,
    help="Directory to scan; it's considered to be a root for absolute links.",
)
@click.option(
    "-p",
    "--pattern",
    default=None,
    help="Glob pattern to match markdown file names (only base names are matched). "
    "Defaults to 'pattern' from .mdlinks.yaml, then '*.md'.",
)
@output_options(formats=("text", "json", "github"))
def check(root, pattern, format, output, include_timestamp):
    """Find links to missing files and missing heading slugs."""
    run_id = get_current_run_id()
    root_path = Path(root)

    with command_output_handler("check", format, output, include_timestamp, run_id, root_path):
        config = load_check_config(root_path, pattern)
        use_case = CheckLinksUseCase(root_path, config.pattern, config.excluded_dirs)
        result = use_case.execute()
        exit_code = EX_SUCCESS if result.success else EX_BROKEN_LINKS

        if format == "json":
            _write_output(
                format_check_envelope(result, include_timestamp=include_timestamp, run_id=run_id),
                output,
            )
            raise SystemExit(exit_code)

        if format == "github":
            lines = [format_github_annotation(b, root) for b in result.broken_links]
            if lines:
                _write_output("\n".join(lines), output)
            raise SystemExit(exit_code)

        with maybe_capture(output, format):
            for line in format_text_lines(result.broken_links):
                get_console().print(line, markup=False, soft_wrap=True)
            if not result.success:
                get_console().print(
                    f"[bold red]Found {result.violations_count} broken links "
                    f"across {result.files_checked} checked files.[/bold red]"
                )
        raise SystemExit(exit_code)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@output_options(formats=("text", "json"))
def anchors(file, format, output, include_timestamp):
    """Show the heading slugs and local links extracted from FILE."""
    run_id = get_current_run_id()
    file_path = Path(file)

    with command_output_handler("anchors", format, output, include_timestamp, run_id, file_path):
        with log_operation("extract_anchors", details={"file": str(file_path)}, run_id=run_id) as ctx:
            document = DocumentCache(file_path.parent).get(file_path.name)
            ctx["details"]["anchors"] = len(document.anchors)
            ctx["details"]["links"] = len(document.links)

        if format == "json":
            _write_output(
                format_envelope(
                    command="anchors",
                    root=str(file_path),
                    success=True,
                    data={
                        "anchors": sorted(document.anchors),
                        "links": [
                            {
                                "raw": link.raw,
                                "path": link.path,
                                "fragment": link.fragment,
                                "line_start": link.line_start,
                                "line_end": link.line_end,
                            }
                            for link in document.links
                        ],
                    },
                    include_timestamp=include_timestamp,
                    run_id=run_id,
                ),
                output,
            )
            return

        with maybe_capture(output, format):
            table = Table(title=f"Anchors in {file_path.as_posix()}")
            table.add_column("Slug", style="cyan")
            for slug in sorted(document.anchors):
                table.add_row(f"#{slug}")
            get_console().print(table)

            links_table = Table(title="Local links")
            links_table.add_column("Link")
            links_table.add_column("Lines")
            for link in document.links:
                lines = f"{link.line_start}-{link.line_end}" if link.line_start else "-"
                links_table.add_row(Text(link.raw), lines)
            get_console().print(links_table)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
