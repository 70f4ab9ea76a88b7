"""
Selfcraft — Persisted Self-Improvement Records for an Autonomous Agent.

This package holds the small set of domain records a self-improvement app
keeps about its user, and the capability façade a chat agent uses to change
them. The agent never touches storage directly: it calls a capability by
name, the façade loads the record, applies a pure transition, saves the
result and hands any side effects to the dispatcher.

Layers (bottom to top):
    1. Key-value backend (memory or JSON files)
    2. Record store (typed load/save, per-key transactions)
    3. Domain transitions (safe, profile)
    4. Effects (activity log, agent event bus)
    5. Capability façade (registry, executor, domain capability sets)
    6. Runtime wiring and CLI
"""

__version__ = "0.1.0"
