"""Capability façade — everything the agent can do, by name."""
from selfcraft.capabilities.executor import CapabilityExecutor, CapabilityResult
from selfcraft.capabilities.registry import (
    CapabilityArguments,
    CapabilityDefinition,
    CapabilityRegistry,
)

__all__ = [
    "CapabilityArguments",
    "CapabilityDefinition",
    "CapabilityExecutor",
    "CapabilityRegistry",
    "CapabilityResult",
]
