"""Workspace memory documents for agent prompts.

An agent's workspace may carry a .shrimp/ directory holding its long-lived
memory as plain markdown:
- US.md: who the agent and its human are
- PRINCIPLES.md: how the agent should behave
- CONTEXT.md: what is going on right now
- memory/*.md: dated notes, newest file names last

The loader concatenates the documents plus the most recent notes into one
context block. Missing or unreadable files are skipped.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONTEXT_DIR = ".shrimp"
CONTEXT_FILES = ("US.md", "PRINCIPLES.md", "CONTEXT.md")
MEMORY_DIR = "memory"
MAX_MEMORY_FILES = 7

CONTEXT_HEADER = (
    "[CONTEXT FROM .shrimp/ - These files are your memory. "
    "You can read and update them.]"
)
COMBINED_PATH = ".shrimp/CONTEXT.md (combined)"


@dataclass
class WorkspaceContext:
    us: str | None = None
    principles: str | None = None
    context: str | None = None
    recent_memory: list[str] = field(default_factory=list)
    raw: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.us or self.principles or self.context or self.recent_memory)


class WorkspaceContextLoader:
    """Loads the .shrimp/ memory documents from a workspace."""

    def __init__(self, workspace_dir: Path | None = None, max_memory_files: int = MAX_MEMORY_FILES):
        self.workspace_dir = workspace_dir or Path.cwd()
        self.max_memory_files = max_memory_files

    @property
    def context_dir(self) -> Path:
        return self.workspace_dir / CONTEXT_DIR

    def _read(self, path: Path) -> str | None:
        """Read a file, returning stripped content or None."""
        try:
            content = path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError):
            return None
        return content or None

    def _recent_memory(self) -> list[str]:
        memory_dir = self.context_dir / MEMORY_DIR
        if not memory_dir.is_dir():
            return []

        names = sorted(
            (p.name for p in memory_dir.iterdir() if p.name.endswith(".md")),
            reverse=True,
        )[: self.max_memory_files]

        notes = []
        for name in names:
            content = self._read(memory_dir / name)
            if content:
                notes.append(content)
        return notes

    def load(self) -> WorkspaceContext:
        """Load all documents. Returns an empty context if .shrimp/ is absent."""
        ctx = WorkspaceContext()
        if not self.context_dir.is_dir():
            return ctx

        ctx.us = self._read(self.context_dir / "US.md")
        ctx.principles = self._read(self.context_dir / "PRINCIPLES.md")
        ctx.context = self._read(self.context_dir / "CONTEXT.md")
        ctx.recent_memory = self._recent_memory()
        ctx.raw = self.build_context_string(ctx)
        return ctx

    @staticmethod
    def build_context_string(ctx: WorkspaceContext) -> str:
        """Join the documents into one block for prompt injection."""
        parts = [CONTEXT_HEADER, ""]

        for doc in (ctx.us, ctx.principles, ctx.context):
            if doc:
                parts.extend([doc, ""])

        if ctx.recent_memory:
            parts.extend(["[RECENT MEMORY]", ""])
            for note in ctx.recent_memory:
                parts.extend([note, ""])

        parts.extend(["[END CONTEXT]", ""])
        return "\n".join(parts).strip()

    def build_context_files(self) -> list[dict[str, Any]]:
        """Combined context as embeddable files (empty without .shrimp/)."""
        if not self.context_dir.is_dir():
            return []
        ctx = self.load()
        if not ctx.raw:
            return []
        return [{"path": COMBINED_PATH, "content": ctx.raw}]
