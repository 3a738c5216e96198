"""Tool description models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


OPEN_OBJECT_SCHEMA: Mapping[str, Any] = {"type": "object", "additionalProperties": True}


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool as declared by a provider's own catalog."""

    name: str
    description: str = ""
    input_schema: Optional[Mapping[str, Any]] = None


@dataclass(slots=True)
class ToolSpec:
    """Describes a tool in the model-facing catalog."""

    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_descriptor(cls, descriptor: ToolDescriptor, *, label: str) -> "ToolSpec":
        """Fill in the fallbacks a provider may leave out."""
        schema = descriptor.input_schema or OPEN_OBJECT_SCHEMA
        return cls(
            name=descriptor.name,
            description=descriptor.description or f"{label} tool",
            input_schema=dict(schema),
        )

    def to_anthropic_definition(self) -> Dict[str, Any]:
        """Return a dict compatible with Anthropic tool definitions."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }


__all__ = ["OPEN_OBJECT_SCHEMA", "ToolDescriptor", "ToolSpec"]
