"""
Unit tests for configuration loading.
"""

from pathlib import Path

import pytest
import yaml

from symtree.config import SymtreeConfig, load_config, resolve_variables
from symtree.core.errors import ConfigError


class TestLoadConfig:
    """Reading .symtree/config.yaml."""

    @pytest.fixture(autouse=True)
    def no_env_override(self, monkeypatch):
        monkeypatch.delenv("SYMTREE_CONFIG", raising=False)

    def test_defaults_when_missing(self, tmp_path):
        config = load_config(tmp_path)

        assert config.launch.command == "ccls"
        assert config.tree_views.double_click_timeout_ms == 500
        assert config.methods.call == "$ccls/call"
        assert config.methods.inheritance == "$ccls/inheritance"

    def test_reads_workspace_file(self, tmp_path):
        config_dir = tmp_path / ".symtree"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(yaml.dump({
            "launch": {"command": "/opt/ccls/bin/ccls", "args": ["--log-file=/tmp/ccls.log"]},
            "tree_views": {"double_click_timeout_ms": 250},
            "methods": {"call": "$cquery/callHierarchy"},
        }))

        config = load_config(tmp_path)

        assert config.launch.command == "/opt/ccls/bin/ccls"
        assert config.launch.args == ["--log-file=/tmp/ccls.log"]
        assert config.tree_views.double_click_timeout_ms == 250
        assert config.methods.call == "$cquery/callHierarchy"
        assert config.methods.inheritance == "$ccls/inheritance"

    def test_env_var_selects_file(self, tmp_path, monkeypatch):
        path = tmp_path / "elsewhere.yaml"
        path.write_text(yaml.dump({"launch": {"command": "clangd-ish"}}))
        monkeypatch.setenv("SYMTREE_CONFIG", str(path))

        assert load_config(tmp_path).launch.command == "clangd-ish"

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        path = tmp_path / "explicit.yaml"
        path.write_text(yaml.dump({"launch": {"command": "explicit"}}))
        monkeypatch.setenv("SYMTREE_CONFIG", str(tmp_path / "missing.yaml"))

        assert load_config(tmp_path, path).launch.command == "explicit"

    def test_empty_file_means_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(tmp_path, path) == SymtreeConfig()

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"tree_views": {"double_click_timeout_ms": "soon"}}))
        with pytest.raises(ConfigError):
            load_config(tmp_path, path)

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text(yaml.dump(["a", "b"]))
        with pytest.raises(ConfigError):
            load_config(tmp_path, path)

    def test_unparseable_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("launch: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path, path)


class TestInitializationOptions:
    """Options forwarded to the backend."""

    def test_workspace_folder_is_substituted(self):
        config = SymtreeConfig(initialization_options={
            "compilationDatabaseDirectory": "${workspaceFolder}/build",
            "clang": {"extraArgs": ["-I${workspaceFolder}/include", "-DX"]},
        })

        options = config.resolved_initialization_options(Path("/proj"))

        assert options["cacheDirectory"] == ".ccls-cache"
        assert options["compilationDatabaseDirectory"] == "/proj/build"
        assert options["clang"]["extraArgs"] == ["-I/proj/include", "-DX"]

    def test_user_value_overrides_default(self):
        config = SymtreeConfig(initialization_options={"cacheDirectory": "/tmp/cache"})
        assert config.resolved_initialization_options(Path("/p"))["cacheDirectory"] == "/tmp/cache"

    def test_non_strings_are_untouched(self):
        assert resolve_variables(3, Path("/p")) == 3
        assert resolve_variables(None, Path("/p")) is None

    def test_backend_env_forwards_listed_variables(self, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        monkeypatch.setenv("SECRET_TOKEN", "x")
        monkeypatch.delenv("CPATH", raising=False)

        env = SymtreeConfig().backend_env()

        assert env["PATH"] == "/usr/bin"
        assert "SECRET_TOKEN" not in env
        assert "CPATH" not in env
