"""
JSON schemas for configuration and meter validation.
"""

BUDGET_CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "prices": {
            "type": "object",
            "additionalProperties": {"type": "number", "minimum": 0},
        },
        "night_total_SEK_max": {"type": "number", "exclusiveMinimum": 0},
        "per_task_SEK_max": {"type": ["number", "null"], "minimum": 0},
    },
    "required": ["prices", "night_total_SEK_max"],
    "additionalProperties": True,  # router.json carries unrelated routing settings
}

STEP_SCHEMA = {
    "type": "object",
    "properties": {
        "timestamp": {"type": "string"},
        "step": {"type": "string"},
        "kind": {"type": "string"},
        "count": {"type": "number"},
        "cost": {"type": "number", "minimum": 0},
        "totalAfter": {"type": "number", "minimum": 0},
    },
    "required": ["timestamp", "step", "kind", "count", "cost", "totalAfter"],
}

METER_SCHEMA = {
    "type": "object",
    "properties": {
        "total": {"type": "number", "minimum": 0},
        "by": {
            "type": "object",
            "additionalProperties": {"type": "number", "minimum": 0},
        },
        "steps": {"type": "array", "items": STEP_SCHEMA},
        "startTime": {"type": "string"},
        "warnings": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["total", "by", "steps", "startTime"],
}


__all__ = ["BUDGET_CONFIG_SCHEMA", "STEP_SCHEMA", "METER_SCHEMA"]
