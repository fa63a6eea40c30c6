"""Tests for identity, configuration, workspace context and the CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from adaptbeat.config import STATE_DIR_ENV, get_settings, resolve_state_dir, save_config
from adaptbeat.context_engine import WorkspaceContextLoader
from adaptbeat.identity import DEFAULT_AGENT_ID, normalize_agent_id


# ── Fixtures ──────────────────────────────────────────────────

@pytest.fixture
def home(tmp_path, monkeypatch):
    """Isolated home directory with no config and no state override."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv(STATE_DIR_ENV, raising=False)
    return home_dir


@pytest.fixture
def workspace(tmp_path):
    """Workspace with a populated .shrimp/ directory."""
    root = tmp_path / "workspace"
    shrimp = root / ".shrimp"
    (shrimp / "memory").mkdir(parents=True)
    (shrimp / "US.md").write_text("We are a team\n")
    (shrimp / "PRINCIPLES.md").write_text("   \n")
    (shrimp / "CONTEXT.md").write_text("Ship it")
    (shrimp / "memory" / "2026-01-01.md").write_text("note a")
    (shrimp / "memory" / "2026-01-02.md").write_text("note b")
    (shrimp / "memory" / "scratch.txt").write_text("ignored")
    return root


# ═══════════════════════════════════════════════════════════════
# 1. IDENTITY
# ═══════════════════════════════════════════════════════════════

class TestIdentity:

    @pytest.mark.parametrize("raw,expected", [
        ("main", "main"),
        ("  Main Agent ", "main-agent"),
        ("ops/../prod", "ops-prod"),
        ("agent_1-b", "agent_1-b"),
        ("", DEFAULT_AGENT_ID),
        (None, DEFAULT_AGENT_ID),
        ("!!!", DEFAULT_AGENT_ID),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_agent_id(raw) == expected

    def test_long_ids_are_capped(self):
        assert len(normalize_agent_id("a" * 200)) == 64


# ═══════════════════════════════════════════════════════════════
# 2. CONFIGURATION
# ═══════════════════════════════════════════════════════════════

class TestConfig:

    def test_defaults_without_config_file(self, home):
        settings = get_settings()
        assert settings.default_agent == "default"
        assert settings.log_level == "WARNING"
        assert resolve_state_dir() == home / ".adaptbeat"

    def test_config_file_settings(self, home, tmp_path):
        save_config({"heartbeat": {"state_dir": str(tmp_path / "state"), "default_agent": "main"}})
        settings = get_settings()
        assert settings.default_agent == "main"
        assert resolve_state_dir() == tmp_path / "state"

    def test_env_overrides_config(self, home, tmp_path, monkeypatch):
        save_config({"heartbeat": {"state_dir": str(tmp_path / "state")}})
        monkeypatch.setenv(STATE_DIR_ENV, str(tmp_path / "env"))
        assert resolve_state_dir() == tmp_path / "env"

    @pytest.mark.parametrize("content", [
        "heartbeat: [unclosed\n",
        "heartbeat:\n  default_agent: [1, 2]\n",
        "- just\n- a list\n",
    ])
    def test_broken_config_falls_back_to_home(self, home, content):
        from adaptbeat.heartbeat import HeartbeatStateStore

        config_path = home / ".adaptbeat" / "config.yaml"
        config_path.parent.mkdir(parents=True)
        config_path.write_text(content)

        assert resolve_state_dir() == home / ".adaptbeat"
        assert HeartbeatStateStore().state_dir == home / ".adaptbeat"

    def test_explicit_dir_wins(self, home, tmp_path, monkeypatch):
        monkeypatch.setenv(STATE_DIR_ENV, str(tmp_path / "env"))
        assert resolve_state_dir(tmp_path / "explicit") == tmp_path / "explicit"


# ═══════════════════════════════════════════════════════════════
# 3. WORKSPACE CONTEXT
# ═══════════════════════════════════════════════════════════════

class TestWorkspaceContext:

    def test_combined_context(self, workspace):
        ctx = WorkspaceContextLoader(workspace).load()
        assert ctx.us == "We are a team"
        assert ctx.principles is None
        assert ctx.context == "Ship it"
        assert ctx.recent_memory == ["note b", "note a"]
        assert ctx.raw == (
            "[CONTEXT FROM .shrimp/ - These files are your memory. You can read and update them.]\n"
            "\n"
            "We are a team\n"
            "\n"
            "Ship it\n"
            "\n"
            "[RECENT MEMORY]\n"
            "\n"
            "note b\n"
            "\n"
            "note a\n"
            "\n"
            "[END CONTEXT]"
        )

    def test_memory_is_capped_to_newest(self, tmp_path):
        memory = tmp_path / ".shrimp" / "memory"
        memory.mkdir(parents=True)
        for day in range(1, 11):
            (memory / f"2026-01-{day:02d}.md").write_text(f"day {day}")

        ctx = WorkspaceContextLoader(tmp_path).load()
        assert ctx.recent_memory == [f"day {d}" for d in range(10, 3, -1)]

    def test_missing_directory(self, tmp_path):
        loader = WorkspaceContextLoader(tmp_path)
        assert loader.load().is_empty
        assert loader.build_context_files() == []

    def test_context_files(self, workspace):
        files = WorkspaceContextLoader(workspace).build_context_files()
        assert len(files) == 1
        assert files[0]["path"] == ".shrimp/CONTEXT.md (combined)"
        assert files[0]["content"].endswith("[END CONTEXT]")


# ═══════════════════════════════════════════════════════════════
# 4. CLI
# ═══════════════════════════════════════════════════════════════

class TestCli:

    @pytest.fixture
    def run(self, home, tmp_path):
        from adaptbeat.cli import app

        runner = CliRunner()
        state_dir = tmp_path / "state"

        def _run(*args: str):
            return runner.invoke(app, [*args, "--state-dir", str(state_dir)])

        _run.state_dir = state_dir
        return _run

    def test_beat_records_state(self, run):
        result = run("beat", "-a", "main", "--replies", "2", "-t", "poll")
        assert result.exit_code == 0, result.output
        assert "Got 2 new replies" in result.output

        data = json.loads((run.state_dir / "heartbeat" / "adaptive-main.json").read_text())
        assert data["interestLevel"] == "high"
        assert data["currentInterval"] == 5
        assert data["history"][0]["trigger"] == "poll"

    def test_beat_if_due_skips_when_not_due(self, run):
        run("beat", "-a", "main", "--replies", "1")
        result = run("beat", "-a", "main", "--if-due")
        assert result.exit_code == 0
        assert "skipped" in result.output

        data = json.loads((run.state_dir / "heartbeat" / "adaptive-main.json").read_text())
        assert len(data["history"]) == 1

    def test_human_then_status(self, run):
        assert run("human", "-a", "main").exit_code == 0
        result = run("status", "-a", "main")
        assert result.exit_code == 0
        assert "medium" in result.output

    def test_history_rejects_unknown_level(self, run):
        run("beat", "-a", "main", "--interesting")
        result = run("history", "-a", "main", "--level", "urgent")
        assert result.exit_code == 1
        assert "Unknown interest level" in result.output

    def test_history_lists_entries(self, run):
        run("beat", "-a", "main", "--interesting", "-t", "first")
        result = run("history", "-a", "main")
        assert result.exit_code == 0
        assert "first" in result.output
