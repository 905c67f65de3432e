import logging

import pytest

from promptpack.config import PackConfig, load_config, user_config_path
from promptpack.errors import ConfigError


def test_defaults_without_files(tmp_path):
    config = load_config(tmp_path)
    assert config == PackConfig()
    assert config.include_tree
    assert config.compression.small_cell_threshold == 6


def test_workspace_file(tmp_path):
    (tmp_path / "promptpack.toml").write_text(
        'goal = "Fix the loss"\n'
        'full = ["*/Cell 1", "src/*.py"]\n'
        "\n"
        "[compression]\n"
        "workers = 4\n"
        "show_bucket = false\n"
    )
    config = load_config(tmp_path)
    assert config.goal == "Fix the loss"
    assert config.full == ["*/Cell 1", "src/*.py"]
    assert config.compression.workers == 4
    assert not config.compression.show_bucket
    assert config.compression.show_stats


def test_github_dir_fallback(tmp_path):
    (tmp_path / ".github").mkdir()
    (tmp_path / ".github" / "promptpack.toml").write_text("include_tree = false\n")
    assert not load_config(tmp_path).include_tree


def test_workspace_file_wins_over_user_file(tmp_path):
    user = user_config_path()
    user.parent.mkdir(parents=True)
    user.write_text('goal = "from user"\n')
    assert load_config(tmp_path).goal == "from user"

    (tmp_path / "promptpack.toml").write_text('goal = "from workspace"\n')
    assert load_config(tmp_path).goal == "from workspace"


def test_explicit_path(tmp_path):
    path = tmp_path / "custom.toml"
    path.write_text('preamble = "hello"\n')
    (tmp_path / "promptpack.toml").write_text('preamble = "ignored"\n')
    assert load_config(tmp_path, path).preamble == "hello"


def test_missing_explicit_path(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path, tmp_path / "nope.toml")


def test_invalid_toml(tmp_path):
    (tmp_path / "promptpack.toml").write_text("goal = [unterminated\n")
    with pytest.raises(ConfigError, match="Failed to load config"):
        load_config(tmp_path)


def test_unknown_keys_are_warned_and_ignored(tmp_path, caplog):
    (tmp_path / "promptpack.toml").write_text(
        "colour = true\n\n[compression]\nturbo = 1\nworkers = 2\n"
    )
    with caplog.at_level(logging.WARNING):
        config = load_config(tmp_path)
    assert config.compression.workers == 2
    assert "Unknown keys in config: {'colour'}" in caplog.text
    assert "Unknown keys in compression config: {'turbo'}" in caplog.text


def test_is_full():
    config = PackConfig(full=["*/Cell 2", "src/*.py"])
    assert config.is_full("nb.ipynb/Cell 2")
    assert config.is_full("src/model.py")
    assert not config.is_full("nb.ipynb/Cell 3")
    assert not PackConfig().is_full("anything")
