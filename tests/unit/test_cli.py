"""
TEST DOC: Command-Line Interface

WHAT: Tests for the play, validate and config commands
WHY: The CLI is how authors check worlds and how players play them
HOW: typer's CliRunner with piped stdin and a temp data directory

CASES:
- validate prints stats for a good world
- validate exits 1 on bad JSON or schema errors
- config shows the effective settings
- play runs an offline session from stdin, with /save

EDGE CASES:
- Soft issues are printed but don't fail validate
- End of input ends the session cleanly
"""

import json

import pytest
from typer.testing import CliRunner

from fiction_engine.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """No real API key and no writes to the home directory."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("FICTION_ENGINE_LLM_ANTHROPIC_API_KEY", raising=False)
    monkeypatch.setenv("FICTION_ENGINE_DATA_DIR", str(tmp_path / "data"))


class TestValidate:
    """Tests for `fiction-engine validate`."""

    def test_valid_world(self, sample_world_path):
        """A good world prints its title and counts."""
        result = runner.invoke(app, ["validate", str(sample_world_path)])
        assert result.exit_code == 0
        assert "Valid world: The Hermit's Hollow" in result.output
        assert "Locations: 5" in result.output
        assert "Action rules: 6" in result.output

    def test_bad_json(self, tmp_path):
        """Unparseable files exit 1."""
        path = tmp_path / "broken.json"
        path.write_text("{ nope")
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_schema_errors(self, tmp_path, minimal_world_dict: dict):
        """Schema errors are listed and exit 1."""
        minimal_world_dict["meta"]["initial_player_location"] = "room_z"
        path = tmp_path / "world.json"
        path.write_text(json.dumps(minimal_world_dict))
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Validation errors" in result.output

    def test_soft_issues(self, tmp_path, minimal_world_dict: dict):
        """Soft issues are reported without failing."""
        minimal_world_dict["rules"] = {"action_rules": [{"id": "r", "action": "take", "target": "ghost"}]}
        path = tmp_path / "world.json"
        path.write_text(json.dumps(minimal_world_dict))
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 0
        assert "ghost" in result.output


class TestConfig:
    """Tests for `fiction-engine config`."""

    def test_shows_settings(self):
        """Effective settings are printed, the key only as set/not set."""
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "API Key: not set" in result.output
        assert "World model: spatial" in result.output


class TestPlay:
    """Tests for `fiction-engine play`."""

    def test_offline_session(self, sample_world_path, tmp_path):
        """Commands from stdin are played and rendered."""
        result = runner.invoke(
            app,
            ["play", str(sample_world_path), "--offline"],
            input="take key\ninventory\n/save first\nquit\n",
        )
        assert result.exit_code == 0
        assert "Great Hall" in result.output
        assert "You take the brass key." in result.output
        assert "brass key" in result.output
        assert "Thanks for playing!" in result.output
        assert (tmp_path / "data" / "saves" / "first.json").exists()

    def test_end_of_input(self, sample_world_path):
        """Running out of input ends the game politely."""
        result = runner.invoke(app, ["play", str(sample_world_path), "--offline"], input="look\n")
        assert result.exit_code == 0
        assert "Thanks for playing!" in result.output
