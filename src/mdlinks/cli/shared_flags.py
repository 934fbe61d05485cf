"""Shared Click option decorators for mdlinks commands."""

import functools
import os
from typing import Sequence

import click


def format_option(choices: Sequence[str] = ("text", "json")):
    """Add --format option."""

    def decorator(f):
        return click.option(
            "--format",
            "format",
            type=click.Choice(list(choices), case_sensitive=False),
            default="text",
            help=f"Output format ({'|'.join(choices)}).",
        )(f)

    return decorator


def output_option():
    """Add --output option to write results to a file."""

    def decorator(f):
        return click.option(
            "--output",
            type=click.Path(dir_okay=False),
            default=None,
            help="Write output to this file path instead of stdout.",
        )(f)

    return decorator


def include_timestamp_option():
    """Add --include-timestamp flag."""

    def decorator(f):
        return click.option(
            "--include-timestamp",
            is_flag=True,
            default=False,
            help="Include ISO 8601 UTC timestamp in JSON output.",
        )(f)

    return decorator


def with_log_silence():
    """Silence log events for JSON or file output unless debug is enabled."""

    def decorator(f):
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            previous = os.environ.get("MDLINKS_LOG_SILENT")
            silence_logs = os.environ.get("MDLINKS_DEBUG") != "1" and (
                kwargs.get("format") == "json" or bool(kwargs.get("output"))
            )
            changed = False
            if silence_logs and previous != "1":
                os.environ["MDLINKS_LOG_SILENT"] = "1"
                changed = True
            try:
                return f(*args, **kwargs)
            finally:
                if changed:
                    if previous is None:
                        os.environ.pop("MDLINKS_LOG_SILENT", None)
                    else:
                        os.environ["MDLINKS_LOG_SILENT"] = previous

        return wrapper

    return decorator


def output_options(formats: Sequence[str] = ("text", "json")):
    """Composite decorator applying --format, --output and --include-timestamp.

    Usage::

        @cli.command()
        @output_options(formats=("text", "json", "github"))
        def my_command(format, output, include_timestamp, ...):
            ...
    """

    def decorator(f):
        f = with_log_silence()(f)
        f = format_option(formats)(f)
        f = output_option()(f)
        f = include_timestamp_option()(f)
        return f

    return decorator
