"""Output contract for machine-readable mdlinks results."""

OUTPUT_SCHEMA_VERSION = "1.0"

VIOLATION_SCHEMA = {
    "type": "object",
    "required": ["path", "link", "link_path", "fragment", "kind", "message", "line_start", "line_end"],
    "additionalProperties": False,
    "properties": {
        "path": {"type": "string"},
        "link": {"type": "string"},
        "link_path": {"type": "string"},
        "fragment": {"type": "string"},
        "kind": {
            "type": "string",
            "enum": ["file_not_found", "internal_anchor_not_found", "external_anchor_not_found"],
        },
        "message": {"type": "string"},
        "line_start": {"type": "integer", "minimum": 0},
        "line_end": {"type": "integer", "minimum": 0},
    },
}

ENVELOPE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["output_schema_version", "success", "command", "run_id", "root"],
    "properties": {
        "output_schema_version": {"const": OUTPUT_SCHEMA_VERSION},
        "success": {"type": "boolean"},
        "command": {"type": "string"},
        "run_id": {"type": "string"},
        "timestamp": {"type": "string"},
        "root": {"type": "string"},
        "pattern": {"type": "string"},
        "files_checked": {"type": "integer", "minimum": 0},
        "violations_count": {"type": "integer", "minimum": 0},
        "violations": {"type": "array", "items": VIOLATION_SCHEMA},
        "data": {"type": "object"},
        "error": {
            "type": "object",
            "required": ["code", "message"],
            "properties": {
                "code": {"type": "string"},
                "message": {"type": "string"},
                "details": {"type": ["object", "null"]},
            },
        },
    },
}
