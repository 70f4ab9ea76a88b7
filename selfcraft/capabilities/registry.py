"""
Capability Registry — the agent's catalog of what it may do.

Every capability is registered here with a name, a description and a typed
argument model. The registry serves two purposes:

1. DISCOVERY: get_api_tools() renders each enabled capability as
   {name, description, input_schema} for the model's tool list. The JSON
   schema is derived from the argument model, so the schema the agent sees
   and the validation the executor applies cannot drift apart.

2. DISPATCH: the executor looks capabilities up by name and hands the
   validated argument object to the handler.

Descriptions are prompts. They tell the agent not only what a capability
does but when to reach for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Optional

import structlog
from pydantic import BaseModel, ConfigDict

logger = structlog.get_logger(__name__)


class CapabilityArguments(BaseModel):
    """
    Base for capability argument models.

    Each subclass is one variant of a domain's closed operation set. The
    class itself is the tag: façades dispatch on the argument type. Unknown
    keys are rejected so a typo in an argument name fails loudly.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    capability_name: ClassVar[str] = ""
    capability_description: ClassVar[str] = ""

    @classmethod
    def input_schema(cls) -> dict[str, Any]:
        """JSON Schema for the arguments, without pydantic's title noise."""
        schema = cls.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        for prop in schema["properties"].values():
            if isinstance(prop, dict):
                prop.pop("title", None)
        return schema


@dataclass
class CapabilityDefinition:
    """A registered capability with its argument model and handler."""

    name: str
    description: str
    arguments: type[CapabilityArguments]
    handler: Optional[Callable[[CapabilityArguments], Any]] = None
    category: str = "general"
    enabled: bool = True

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.arguments.input_schema()

    def to_api_format(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }


class CapabilityRegistry:
    """
    Central registry of capabilities available to the agent.

    Names are unique within a registry. Registration normally happens once at
    startup when the runtime wires each domain's capability set in.
    """

    def __init__(self) -> None:
        self._capabilities: dict[str, CapabilityDefinition] = {}
        logger.debug("capability_registry.initialized")

    def register(self, capability: CapabilityDefinition, *, allow_override: bool = False) -> None:
        """Register a capability, blocking accidental name collisions by default."""
        existing = self._capabilities.get(capability.name)
        if existing is not None and not allow_override:
            logger.warning(
                "capability_registry.name_collision",
                name=capability.name,
                existing_category=existing.category,
                new_category=capability.category,
            )
            raise ValueError(
                f"Capability '{capability.name}' is already registered. "
                "Use allow_override=True for an explicit replacement."
            )

        self._capabilities[capability.name] = capability
        logger.debug(
            "capability_registry.registered",
            name=capability.name,
            category=capability.category,
        )

    def register_all(self, capabilities: list[CapabilityDefinition]) -> None:
        for capability in capabilities:
            self.register(capability)

    def unregister(self, name: str) -> bool:
        if name in self._capabilities:
            del self._capabilities[name]
            logger.debug("capability_registry.unregistered", name=name)
            return True
        return False

    def get(self, name: str) -> Optional[CapabilityDefinition]:
        return self._capabilities.get(name)

    def get_api_tools(self, categories: Optional[list[str]] = None) -> list[dict[str, Any]]:
        """Tool definitions for every enabled capability, optionally by category."""
        return [
            capability.to_api_format()
            for capability in self._capabilities.values()
            if capability.enabled and (not categories or capability.category in categories)
        ]

    def list_capabilities(self) -> list[dict[str, Any]]:
        return [
            {
                "name": c.name,
                "category": c.category,
                "enabled": c.enabled,
                "arguments": sorted(c.input_schema.get("properties", {})),
            }
            for c in self._capabilities.values()
        ]

    @property
    def count(self) -> int:
        return len(self._capabilities)

    @property
    def enabled_count(self) -> int:
        return sum(1 for c in self._capabilities.values() if c.enabled)
