"""JSON and YAML rendering that reports problems instead of raising."""

from __future__ import annotations

import dataclasses
import enum
import json
from typing import Any

import yaml


def _encode(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(obj, enum.Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _dumps(obj: Any, indent: bool) -> str:
    if indent:
        return json.dumps(obj, default=_encode, indent=2, ensure_ascii=False)
    return json.dumps(obj, default=_encode, separators=(",", ":"), ensure_ascii=False)


def safe_json(ctx, obj: Any, indent: bool) -> str:
    """Render ``obj`` as JSON; on failure warn and return an empty string."""
    try:
        return _dumps(obj, indent)
    except (TypeError, ValueError, RecursionError) as exc:
        ctx.warn("error marshalling JSON: %s", exc)
        return ""


def safe_yaml(ctx, obj: Any) -> str:
    """Render ``obj`` as YAML; on failure warn and return an empty string."""
    try:
        text = _dumps(obj, False)
    except (TypeError, ValueError, RecursionError) as exc:
        ctx.warn("error marshalling JSON: %s", exc)
        return ""
    try:
        data = json.loads(text)
    except ValueError as exc:
        ctx.warn("error converting JSON to YAML: %s", exc)
        return ""
    try:
        return yaml.safe_dump(
            data, sort_keys=True, default_flow_style=False, allow_unicode=True
        )
    except yaml.YAMLError as exc:
        ctx.warn("error marshalling YAML: %s", exc)
        return ""