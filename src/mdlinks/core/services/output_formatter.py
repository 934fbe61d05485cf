"""Render scan results for humans, CI logs and machines.

Three renderings share one source of truth, the ordered BrokenLink list:

- text: one ``<file>: link "<raw>" points to a non-existing ...`` line each
- github: GitHub Actions ``::error`` workflow commands, so the runner marks
  the offending lines inline in pull requests
- json: a single-line envelope validated against ``ENVELOPE_SCHEMA``

Violations are never re-sorted: walk order, then document order.
"""

import json
import logging
import posixpath
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from mdlinks.core.domain.entities import BrokenLink, CheckResult
from mdlinks.core.services.error_codes import ErrorCode
from mdlinks.core.services.observability import get_current_run_id
from mdlinks.core.services.output_contracts import ENVELOPE_SCHEMA, OUTPUT_SCHEMA_VERSION

logger = logging.getLogger(__name__)

_ENVELOPE_KEY_ORDER = [
    "output_schema_version",
    "success",
    "command",
    "run_id",
    "timestamp",
    "root",
    "pattern",
    "files_checked",
    "violations_count",
    "data",
    "violations",
    "error",
]

_VALIDATOR = Draft7Validator(ENVELOPE_SCHEMA)


def _sort_key_index(key: str) -> tuple:
    try:
        return (_ENVELOPE_KEY_ORDER.index(key), key)
    except ValueError:
        return (len(_ENVELOPE_KEY_ORDER), key)


def _recursively_sort_keys(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _recursively_sort_keys(v) for k, v in sorted(obj.items())}
    if isinstance(obj, list):
        return [_recursively_sort_keys(item) for item in obj]
    return obj


def validate_envelope(envelope: Dict[str, Any]) -> None:
    """Raise ValueError if ``envelope`` does not satisfy the output contract."""
    errors = sorted(_VALIDATOR.iter_errors(envelope), key=str)
    if errors:
        messages = "; ".join(error.message for error in errors[:3])
        raise ValueError(f"output envelope failed schema validation: {messages}")


def violation_as_dict(broken: BrokenLink) -> Dict[str, Any]:
    return {
        "path": broken.file,
        "link": broken.link.raw,
        "link_path": broken.link.path,
        "fragment": broken.link.fragment,
        "kind": broken.kind.value,
        "message": broken.reason,
        "line_start": broken.link.line_start,
        "line_end": broken.link.line_end,
    }


def format_envelope(
    *,
    command: str,
    root: str,
    success: bool,
    extra_top_level: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    error: Optional[Dict[str, Any]] = None,
    include_timestamp: bool = False,
    run_id: Optional[str] = None,
) -> str:
    """Build a JSON envelope as a deterministic single-line string.

    Args:
        command: CLI subcommand name (e.g. "check", "anchors").
        root: Scanned directory or inspected file; made absolute.
        success: Whether the command found nothing to report.
        extra_top_level: Command counters and violation list.
        data: Command-specific payload.
        error: Operational error object (code, message, optional details).
        include_timestamp: If True, include ISO 8601 UTC timestamp.
        run_id: Override run_id.
    """
    envelope: Dict[str, Any] = {
        "output_schema_version": OUTPUT_SCHEMA_VERSION,
        "success": success,
        "command": command,
        "run_id": run_id or get_current_run_id(),
        "root": Path(root).resolve().as_posix(),
    }
    if include_timestamp:
        envelope["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    if data is not None:
        envelope["data"] = _recursively_sort_keys(data)
    if error is not None:
        envelope["error"] = _recursively_sort_keys(error)
    for key, value in (extra_top_level or {}).items():
        if key in envelope:
            raise ValueError(f"extra_top_level contains reserved key: {key}")
        # Violation order is part of the contract; only keys inside them are sorted.
        envelope[key] = _recursively_sort_keys(value)

    ordered = {key: envelope[key] for key in sorted(envelope, key=_sort_key_index)}
    try:
        validate_envelope(ordered)
    except ValueError:
        logger.exception("Envelope schema validation failed")
    return json.dumps(ordered, separators=(",", ":"), ensure_ascii=False, default=str)


def format_check_envelope(
    result: CheckResult,
    *,
    include_timestamp: bool = False,
    run_id: Optional[str] = None,
) -> str:
    return format_envelope(
        command="check",
        root=result.root,
        success=result.success,
        extra_top_level={
            "pattern": result.pattern,
            "files_checked": result.files_checked,
            "violations_count": result.violations_count,
            "violations": [violation_as_dict(b) for b in result.broken_links],
        },
        include_timestamp=include_timestamp,
        run_id=run_id,
    )


def format_error_envelope(
    *,
    command: str,
    root: str,
    error_code: ErrorCode,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    include_timestamp: bool = False,
    run_id: Optional[str] = None,
) -> str:
    error_obj: Dict[str, Any] = {"code": error_code.value, "message": message}
    if details is not None:
        error_obj["details"] = details
    return format_envelope(
        command=command,
        root=root,
        success=False,
        error=error_obj,
        include_timestamp=include_timestamp,
        run_id=run_id,
    )


def format_text_lines(broken_links: List[BrokenLink]) -> List[str]:
    return [str(broken) for broken in broken_links]


def _escape_annotation_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_annotation_property(value: str) -> str:
    return _escape_annotation_data(value).replace(":", "%3A").replace(",", "%2C")


def format_github_annotation(broken: BrokenLink, scan_dir: str = ".") -> str:
    """Render a GitHub Actions ``::error`` command for one broken link.

    ``scan_dir`` is the directory as given on the command line, so that file
    paths are relative to the repository checkout like GitHub expects.
    """
    file_path = posixpath.normpath(posixpath.join(Path(scan_dir).as_posix(), broken.file))
    props = [f"file={_escape_annotation_property(file_path)}"]
    if broken.link.line_start:
        props.append(f"line={broken.link.line_start}")
        props.append(f"endLine={broken.link.line_end}")
    props.append(f"title={_escape_annotation_property(broken.reason)}")
    message = f"link {json.dumps(broken.link.raw, ensure_ascii=False)} points to a non-existing {broken.kind.target_label}"
    return f"::error {','.join(props)}::{_escape_annotation_data(message)}"
