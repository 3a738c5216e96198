"""Pydantic schemas for the tools a remote JSON-RPC provider exposes."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Type

from pydantic import BaseModel, Field, ValidationError


class ToolSchema(BaseModel):
    """Base class for all tool schemas with strict validation."""

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @classmethod
    def input_schema(cls) -> Dict[str, Any]:
        """JSON schema in the shape the model expects for ``input_schema``."""
        schema = cls.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        schema.setdefault("required", [])
        return schema


class JokesGetInput(ToolSchema):
    pass


class JokesSearchInput(ToolSchema):
    q: str = Field(..., min_length=1, description='Keyword to search for, e.g. "egg" or "cheese".')
    limit: int = Field(..., ge=1, le=10, description="Maximum number of results (1..10).")


class HealthPingInput(ToolSchema):
    pass


_TOOL_SCHEMAS: Dict[str, Type[ToolSchema]] = {
    "jokes_get": JokesGetInput,
    "jokes_search": JokesSearchInput,
    "health_ping": HealthPingInput,
}


def parse_tool_input(tool_name: str, raw_input: Mapping[str, Any]) -> ToolSchema | Dict[str, Any]:
    """Parse and validate raw input into a Pydantic model instance.

    Tools without a registered schema are passed through unchanged.
    """
    schema = _TOOL_SCHEMAS.get(tool_name)
    if schema is None:
        return dict(raw_input)
    try:
        model = schema(**raw_input)
    except ValidationError as exc:
        messages = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ())) or "input"
            messages.append(f"{loc}: {err.get('msg', 'invalid value')}")
        raise ValueError("; ".join(messages))
    return model


def validate_tool_input(tool_name: str, raw_input: Mapping[str, Any]) -> Dict[str, Any]:
    model = parse_tool_input(tool_name, raw_input)
    if isinstance(model, dict):
        return dict(model)
    return model.dump()


__all__ = [
    "HealthPingInput",
    "JokesGetInput",
    "JokesSearchInput",
    "ToolSchema",
    "parse_tool_input",
    "validate_tool_input",
]
