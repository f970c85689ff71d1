"""
Core orchestration components for Yoke.

This module provides the command lifecycle: context, resolvers, the
initialization task runner, the command invoker, the process lifecycle
manager and the error reporter.
"""

__all__ = [
    "context",
    "errors",
    "resolvers",
    "init_tasks",
    "invoker",
    "lifecycle",
    "reporter",
    "orchestrator",
]
