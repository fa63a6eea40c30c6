"""Persistent, cached storage for heartbeat state.

Each agent's state is a JSON file at
<state_dir>/heartbeat/adaptive-<agent_key>.json.

Design decisions:
1. Cache first: a loaded state stays in the store's in-process cache, so
   repeated loads return the same object and never re-read the disk.
2. Best effort: load() and save() never raise. A missing or corrupt file
   yields a fresh baseline state; a failed write leaves the cache as the
   source of truth for the rest of the process.
3. Observable failures: swallowed errors are logged and passed to an
   optional on_error(operation, path, exc) callback.
4. No locking: one caller drives a given agent key at a time. Concurrent
   processes writing the same file are unsupported (last writer wins).
"""

import json
import logging
from pathlib import Path
from typing import Callable

from adaptbeat.config import resolve_state_dir
from adaptbeat.heartbeat.state import (
    HeartbeatState,
    create_initial_state,
    now_ms,
)
from adaptbeat.identity import normalize_agent_id

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str, Path, Exception], None]


class HeartbeatStateStore:
    """Keyed heartbeat state with a write-through JSON file per agent.

    Usage:
        store = HeartbeatStateStore(state_dir=Path("/var/lib/agent"))
        state = store.load("main")
        ...
        store.save("main", state)
    """

    def __init__(
        self,
        state_dir: Path | None = None,
        on_error: ErrorCallback | None = None,
    ):
        self.state_dir = resolve_state_dir(state_dir)
        self.on_error = on_error
        self._cache: dict[str, HeartbeatState] = {}

    @property
    def heartbeat_dir(self) -> Path:
        return self.state_dir / "heartbeat"

    def path_for(self, agent_id: str | None) -> Path:
        """Get the state file path for an agent."""
        key = normalize_agent_id(agent_id)
        return self.heartbeat_dir / f"adaptive-{key}.json"

    def load(self, agent_id: str | None, now: int | None = None) -> HeartbeatState:
        """Load an agent's state, creating a baseline if none is usable."""
        key = normalize_agent_id(agent_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        now = now_ms() if now is None else now
        path = self.path_for(key)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            state = HeartbeatState.from_dict(raw, now)
        except FileNotFoundError:
            state = create_initial_state(now)
        except Exception as e:
            self._report("load", path, e)
            state = create_initial_state(now)

        self._cache[key] = state
        return state

    def save(self, agent_id: str | None, state: HeartbeatState) -> None:
        """Cache the state and write it to disk if possible."""
        key = normalize_agent_id(agent_id)
        self._cache[key] = state

        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(state.to_dict(), indent=2), encoding="utf-8")
        except Exception as e:
            self._report("save", path, e)

    def clear_cache(self, agent_id: str | None = None) -> None:
        """Drop one agent's cached state, or all of them."""
        if agent_id is None:
            self._cache.clear()
        else:
            self._cache.pop(normalize_agent_id(agent_id), None)

    def cached_agents(self) -> list[str]:
        """Canonical keys currently held in the cache."""
        return list(self._cache)

    def _report(self, operation: str, path: Path, exc: Exception) -> None:
        logger.warning(f"Heartbeat state {operation} failed for {path}: {exc}")
        if self.on_error is None:
            return
        try:
            self.on_error(operation, path, exc)
        except Exception as e:
            logger.error(f"Heartbeat error callback raised: {e}")
