"""Tests for configuration loading."""

import json

import pytest

from daybook.config import (
    BuildConfig,
    dict_to_config,
    find_config_file,
    load_config,
    load_json_config,
    load_toml_config,
)


class TestFindConfigFile:
    """Tests for find_config_file."""

    def test_finds_toml_config(self, temp_project):
        """TOML config is found first."""
        (temp_project / "daybook.toml").write_text("")
        (temp_project / "daybook.json").write_text("{}")

        found = find_config_file(temp_project)
        assert found.name == "daybook.toml"

    def test_finds_json_config(self, temp_project):
        """JSON config is found if no TOML."""
        (temp_project / "daybook.json").write_text("{}")

        found = find_config_file(temp_project)
        assert found.name == "daybook.json"

    def test_finds_dotfile_config(self, temp_project):
        """Dotfile configs are found."""
        (temp_project / ".daybook.toml").write_text("")

        found = find_config_file(temp_project)
        assert found.name == ".daybook.toml"

    def test_returns_none_if_no_config(self, temp_project):
        """Returns None if no config file found."""
        assert find_config_file(temp_project) is None


class TestLoaders:
    """Tests for the file format loaders."""

    def test_loads_json(self, temp_project):
        """Loads JSON config file."""
        config_file = temp_project / "config.json"
        config_file.write_text('{"site": {"url": "https://a.example"}}')

        data = load_json_config(config_file)
        assert data["site"]["url"] == "https://a.example"

    def test_loads_toml(self, temp_project):
        """Loads TOML config file."""
        config_file = temp_project / "daybook.toml"
        config_file.write_text('[directories]\ndata = "entries"\n')

        data = load_toml_config(config_file)
        assert data["directories"]["data"] == "entries"


class TestDictToConfig:
    """Tests for dict_to_config."""

    def test_defaults(self, temp_project):
        """An empty dict gives defaults."""
        config = dict_to_config({}, temp_project)
        assert config.data_dir == "data"
        assert config.out_dir == "public"
        assert config.strict_links is True
        assert config.write_pages is False

    def test_all_sections(self, temp_project):
        """Every section is applied."""
        config = dict_to_config({
            "directories": {"data": "entries", "out": "dist"},
            "site": {"url": "https://blog.example.net"},
            "build": {"strict_links": False, "pages": True},
        }, temp_project)
        assert config.get_data_path() == temp_project / "entries"
        assert config.get_out_path() == temp_project / "dist"
        assert config.site_url == "https://blog.example.net"
        assert config.strict_links is False
        assert config.write_pages is True

    def test_absolute_directories(self, temp_project, tmp_path):
        """Absolute directories are used as-is."""
        config = dict_to_config({"directories": {"out": str(tmp_path)}}, temp_project)
        assert config.get_out_path() == tmp_path


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_file_gives_defaults(self, temp_project):
        """Without a config file, defaults apply."""
        config = load_config(temp_project)
        assert isinstance(config, BuildConfig)
        assert config.project_root == temp_project

    def test_autodetects_toml(self, temp_project):
        """daybook.toml is picked up."""
        (temp_project / "daybook.toml").write_text('[site]\nurl = "https://t.example"\n')
        assert load_config(temp_project).site_url == "https://t.example"

    def test_explicit_json(self, temp_project):
        """An explicit JSON path is used."""
        path = temp_project / "custom.json"
        path.write_text(json.dumps({"build": {"pages": True}}))
        assert load_config(temp_project, path).write_pages is True

    def test_unsupported_suffix(self, temp_project):
        """Unknown config formats raise ValueError."""
        path = temp_project / "daybook.yaml"
        path.write_text("")
        with pytest.raises(ValueError, match="Unsupported"):
            load_config(temp_project, path)
