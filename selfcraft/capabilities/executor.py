"""
Capability Executor — where an agent's request becomes a state change.

When the agent decides to use a capability, this module runs it. It is the
boundary between "deciding to do something" and "doing it", and it enforces:

1. VALIDATION: arguments are checked against the capability's model before
   the handler (and therefore the store) is touched
2. ERROR HANDLING: domain failures come back as natural-language tool
   results the agent can relay, never as a crash of the host
3. OBSERVABILITY: every call is logged with its outcome and timing

Handlers are short and synchronous in practice (one store read, one write),
so there is no timeout or retry machinery here.
"""

from __future__ import annotations

import asyncio
import json
import time
import traceback
import uuid
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from pydantic import BaseModel, ValidationError

from selfcraft.capabilities.registry import CapabilityRegistry
from selfcraft.errors import InvalidArgument, SelfcraftError

logger = structlog.get_logger(__name__)


@dataclass
class CapabilityResult:
    """
    The outcome of one capability call.

    Sent back to the agent as the tool result so it can see what happened
    and decide what to say next.
    """

    call_id: str
    name: str
    success: bool
    result: Any = None
    error: Optional[str] = None
    execution_time: float = 0.0

    def to_content(self) -> str:
        """Text form of the result for the agent's conversation."""
        if not self.success:
            return f"Error: {self.error}"
        return render_result(self.result)


def render_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json", by_alias=True)
    return json.dumps(result, indent=2, ensure_ascii=False, default=str)


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one readable sentence."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        if err.get("type") == "missing":
            parts.append(f"Missing required parameter '{loc}'")
        elif err.get("type") == "extra_forbidden":
            parts.append(f"Unexpected parameter '{loc}'")
        else:
            parts.append(f"Parameter '{loc}': {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid arguments"


class CapabilityExecutor:
    """
    Executes capability calls with validation and observability.

    Every call:
    1. Looks the capability up and checks it is enabled
    2. Validates the raw arguments into the capability's argument model
    3. Runs the handler (sync or async)
    4. Captures the result, or converts the failure into an error message
    5. Logs the outcome
    """

    def __init__(self, registry: CapabilityRegistry) -> None:
        self._registry = registry

        self._total_executions = 0
        self._total_successes = 0
        self._total_failures = 0

    def _fail(self, call_id: str, name: str, error: str, elapsed: float = 0.0) -> CapabilityResult:
        self._total_failures += 1
        return CapabilityResult(
            call_id=call_id,
            name=name,
            success=False,
            error=error,
            execution_time=elapsed,
        )

    async def execute(
        self,
        call_id: Optional[str],
        name: str,
        arguments: Optional[dict[str, Any]] = None,
    ) -> CapabilityResult:
        """
        Execute one capability call from the agent.

        Args:
            call_id: Correlation ID from the agent's tool-use block (generated if None)
            name: Which capability to run
            arguments: Raw arguments as the agent supplied them

        Returns:
            CapabilityResult with success/failure and payload
        """
        call_id = call_id or uuid.uuid4().hex[:12]
        arguments = arguments or {}
        start_time = time.monotonic()
        self._total_executions += 1

        logger.info(
            "capability_executor.executing",
            capability=name,
            call_id=call_id,
            argument_keys=sorted(arguments) if isinstance(arguments, dict) else None,
        )

        capability = self._registry.get(name)
        if capability is None:
            return self._fail(call_id, name, f"Unknown capability: {name}")
        if not capability.enabled:
            return self._fail(call_id, name, f"Capability '{name}' is currently disabled.")
        if capability.handler is None:
            return self._fail(call_id, name, f"No handler registered for capability: {name}")

        try:
            args = capability.arguments.model_validate(arguments)
        except ValidationError as exc:
            error = InvalidArgument(describe_validation_error(exc))
            logger.info("capability_executor.invalid_arguments", capability=name, error=str(error))
            return self._fail(call_id, name, str(error))

        try:
            result = capability.handler(args)
            if asyncio.iscoroutine(result):
                result = await result
        except SelfcraftError as exc:
            elapsed = time.monotonic() - start_time
            logger.info(
                "capability_executor.rejected",
                capability=name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return self._fail(call_id, name, str(exc), elapsed)
        except Exception as exc:
            elapsed = time.monotonic() - start_time
            error_detail = f"{type(exc).__name__}: {exc}"
            logger.error(
                "capability_executor.error",
                capability=name,
                error=error_detail,
                traceback=traceback.format_exc(),
            )
            return self._fail(call_id, name, error_detail, elapsed)

        elapsed = time.monotonic() - start_time
        self._total_successes += 1
        logger.info(
            "capability_executor.success",
            capability=name,
            elapsed=round(elapsed, 4),
        )
        return CapabilityResult(
            call_id=call_id,
            name=name,
            success=True,
            result=result,
            execution_time=elapsed,
        )

    @property
    def stats(self) -> dict[str, Any]:
        return {
            "total_executions": self._total_executions,
            "successes": self._total_successes,
            "failures": self._total_failures,
            "success_rate": self._total_successes / max(1, self._total_executions),
        }
