"""Tests for workspace config resolution and parsing."""

from pathlib import Path

import pytest

from workstat.config import load_config, resolve_config_path
from workstat.errors import ConfigUnavailable
from workstat.models import WorkspaceOptions


def test_env_var_wins_over_cli_and_home():
    """WORKSPACE_CONFIG beats --config and HOME."""
    env = {"WORKSPACE_CONFIG": "/etc/ws.toml", "HOME": "/home/u"}
    assert resolve_config_path(Path("/cli.toml"), env) == Path("/etc/ws.toml")


def test_cli_path_wins_over_home():
    """--config beats the default under HOME."""
    assert resolve_config_path(Path("/cli.toml"), {"HOME": "/home/u"}) == Path("/cli.toml")


def test_default_under_home():
    """Falls back to ~/.config/workspace.toml."""
    assert resolve_config_path(None, {"HOME": "/home/u"}) == Path("/home/u/.config/workspace.toml")


def test_nothing_to_resolve():
    """No env var, no flag, no HOME -> ConfigUnavailable."""
    with pytest.raises(ConfigUnavailable):
        resolve_config_path(None, {})


def test_load_toml_projects_and_options(tmp_path):
    """Projects and options tables are parsed."""
    p = tmp_path / "workspace.toml"
    p.write_text(
        "[projects]\n"
        "alpha = '/tmp/a'\n"
        "beta = '/tmp/b'\n"
        "\n"
        "[options]\n"
        "auto_init = false\n"
        "jobs = 4\n"
    )
    c = load_config(p)
    assert c.path == p
    assert c.projects == {"alpha": Path("/tmp/a"), "beta": Path("/tmp/b")}
    assert c.options.auto_init is False
    assert c.options.jobs == 4
    assert c.options.fail_fast is True
    assert c.options.count_untracked is False


def test_options_default_when_absent(tmp_path):
    """Missing [options] table gives defaults."""
    p = tmp_path / "workspace.toml"
    p.write_text("[projects]\nalpha = '/tmp/a'\n")
    assert load_config(p).options == WorkspaceOptions()


def test_entries_sorted_by_name(tmp_path):
    """entries() is deterministic regardless of file order."""
    p = tmp_path / "workspace.toml"
    p.write_text("[projects]\nzeta = '/z'\nalpha = '/a'\nmid = '/m'\n")
    assert [e.name for e in load_config(p).entries()] == ["alpha", "mid", "zeta"]


def test_home_is_expanded(tmp_path, monkeypatch):
    """Project paths starting with ~ are expanded."""
    monkeypatch.setenv("HOME", str(tmp_path))
    p = tmp_path / "workspace.toml"
    p.write_text("[projects]\nalpha = '~/code/alpha'\n")
    assert load_config(p).projects["alpha"] == tmp_path / "code" / "alpha"


def test_load_yaml(tmp_path):
    """YAML config is accepted by suffix."""
    p = tmp_path / "workspace.yaml"
    p.write_text("projects:\n  alpha: /tmp/a\noptions:\n  count_untracked: true\n")
    c = load_config(p)
    assert c.projects == {"alpha": Path("/tmp/a")}
    assert c.options.count_untracked is True


def test_missing_file(tmp_path):
    """Unreadable config -> ConfigUnavailable naming the file."""
    p = tmp_path / "nope.toml"
    with pytest.raises(ConfigUnavailable) as exc:
        load_config(p)
    assert str(p) in str(exc.value)


@pytest.mark.parametrize(
    "text",
    [
        "[projects\nalpha = '/a'\n",  # syntax error
        "[projects]\nalpha = '/a'\nalpha = '/b'\n",  # duplicate name
        "title = 'no projects'\n",
        "projects = 'x'\n",
        "[projects]\nalpha = 3\n",
        "[projects]\nalpha = ''\n",
        "[projects]\nalpha = '/a'\n[options]\njobs = 0\n",
        "[projects]\nalpha = '/a'\n[options]\nauto_init = 'yes'\n",
        "[projects]\nalpha = '/a'\n[options]\nparallel = true\n",
    ],
)
def test_malformed_config(tmp_path, text):
    """Bad syntax or bad shapes -> ConfigUnavailable."""
    p = tmp_path / "workspace.toml"
    p.write_text(text)
    with pytest.raises(ConfigUnavailable):
        load_config(p)


def test_yaml_top_level_must_be_mapping(tmp_path):
    """A YAML list is not a config."""
    p = tmp_path / "workspace.yml"
    p.write_text("- alpha\n- beta\n")
    with pytest.raises(ConfigUnavailable):
        load_config(p)


def test_invalid_utf8_is_malformed(tmp_path):
    """Bytes that are not UTF-8 -> ConfigUnavailable naming the file."""
    p = tmp_path / "workspace.toml"
    p.write_bytes(b"[projects]\nalpha = '\xff'\n")
    with pytest.raises(ConfigUnavailable) as exc:
        load_config(p)
    assert str(p) in str(exc.value)
