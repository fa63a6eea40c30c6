"""Workspace context for agents.

Loads the agent's .shrimp/ memory documents (US.md, PRINCIPLES.md,
CONTEXT.md and recent memory notes) into a single prompt block.
"""

from adaptbeat.context_engine.workspace import WorkspaceContext, WorkspaceContextLoader

__all__ = [
    "WorkspaceContext",
    "WorkspaceContextLoader",
]
