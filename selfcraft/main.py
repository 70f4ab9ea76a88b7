"""
Main — the ``selfcraft`` console entry point.

Configures logging once, then hands over to the click command group.
"""

from __future__ import annotations

import logging

import structlog

# The stored safe key must never reach a log line.
_MASKED_KEYS = frozenset({"safe_key"})
_TRUNCATED_KEYS = frozenset({"title", "description", "message"})
_MAX_DISPLAY_LEN = 80


def _mask_sensitive_fields(logger, method_name, event_dict):
    """Structlog processor that masks secrets and truncates free text."""
    for key in _MASKED_KEYS:
        if key in event_dict:
            event_dict[key] = "***"
    for key in _TRUNCATED_KEYS:
        val = event_dict.get(key)
        if isinstance(val, str) and len(val) > _MAX_DISPLAY_LEN:
            event_dict[key] = val[:_MAX_DISPLAY_LEN] + "... [truncated]"
    return event_dict


_logging_configured = False


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure structlog over standard-library logging.

    Safe to call more than once; subsequent calls are no-ops.
    """
    global _logging_configured  # noqa: PLW0603
    if _logging_configured:
        return
    _logging_configured = True

    logging.basicConfig(format="%(message)s", level=level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            _mask_sensitive_fields,
            structlog.dev.ConsoleRenderer(colors=True),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def main() -> None:
    configure_logging()
    from selfcraft.cli.app import cli

    cli()


if __name__ == "__main__":
    main()
