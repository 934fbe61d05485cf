from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

from mdlinks.core.services.error_codes import ErrorCode, MdlinksError
from mdlinks.core.services.observability import log_debug

CONFIG_FILENAME = ".mdlinks.yaml"
DEFAULT_PATTERN = "*.md"
# Version-control metadata is never scanned, whatever the config says.
ALWAYS_EXCLUDED_DIRS: Tuple[str, ...] = (".git",)


@dataclass(frozen=True)
class CheckConfig:
    root_dir: Path
    pattern: str = DEFAULT_PATTERN
    excluded_dirs: Tuple[str, ...] = ALWAYS_EXCLUDED_DIRS
    config_path: Optional[Path] = None


def _config_error(path: Path, message: str) -> MdlinksError:
    return MdlinksError(
        code=ErrorCode.CONFIG_INVALID,
        message=f"{path.name}: {message}",
        details={"config_path": str(path)},
    )


def _normalize_excluded_dirs(path: Path, raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return ALWAYS_EXCLUDED_DIRS
    if not isinstance(raw, list):
        raise _config_error(path, "'exclude_dirs' must be a list of directory names")

    names = list(ALWAYS_EXCLUDED_DIRS)
    for item in raw:
        if not isinstance(item, str) or not item.strip():
            raise _config_error(path, f"invalid entry in 'exclude_dirs': {item!r}")
        name = item.strip().strip("/")
        if "/" in name:
            raise _config_error(path, f"'exclude_dirs' takes names, not paths: {item!r}")
        if name not in names:
            names.append(name)
    return tuple(names)


def load_check_config(root_dir: str | Path, pattern: Optional[str] = None) -> CheckConfig:
    """Load scan settings for ``root_dir``.

    Precedence: explicit ``pattern`` argument > ``.mdlinks.yaml`` > defaults.
    A missing config file is not an error.
    """
    root_dir = Path(root_dir)
    config_path = root_dir / CONFIG_FILENAME
    if not config_path.is_file():
        return CheckConfig(root_dir=root_dir, pattern=pattern or DEFAULT_PATTERN)

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise _config_error(config_path, f"cannot be read: {exc}") from exc
    except yaml.YAMLError as exc:
        raise _config_error(config_path, f"invalid YAML: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise _config_error(config_path, "top level must be a mapping")

    file_pattern = raw.get("pattern")
    if file_pattern is not None and (not isinstance(file_pattern, str) or not file_pattern):
        raise _config_error(config_path, "'pattern' must be a non-empty string")

    excluded_dirs = _normalize_excluded_dirs(config_path, raw.get("exclude_dirs"))
    resolved_pattern = pattern or file_pattern or DEFAULT_PATTERN

    log_debug(
        "config_loaded",
        details={
            "config_path": str(config_path),
            "pattern": resolved_pattern,
            "excluded_dirs": list(excluded_dirs),
        },
    )
    return CheckConfig(
        root_dir=root_dir,
        pattern=resolved_pattern,
        excluded_dirs=excluded_dirs,
        config_path=config_path,
    )
