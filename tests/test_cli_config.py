"""Tests for configuration loading and CLI precedence."""

import os

import pytest

from args import parse_args
from cli_config import build_pack_config, get_include_modules_section, load_config_file
from constants import Constants
from packer.errors import ConfigError


def _args(tmp_path, *extra):
    return parse_args(["--report", "report.json", "--project-root", str(tmp_path), *extra])


class TestLoadConfigFile:
    """YAML and JSON config files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "externpack.yml"
        path.write_text("include_modules:\n  package_path: ./app/package.json\n  workers: 3\n")
        assert load_config_file(str(path)) == {
            "include_modules": {"package_path": "./app/package.json", "workers": 3}
        }

    def test_json(self, tmp_path):
        path = tmp_path / "externpack.json"
        path.write_text('{"include_modules": true}')
        assert load_config_file(str(path)) == {"include_modules": True}

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "externpack.yml"
        path.write_text("")
        assert load_config_file(str(path)) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config_file(str(tmp_path / "nope.yml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "externpack.yml"
        path.write_text("include_modules: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config_file(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "externpack.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config_file(str(path))


class TestIncludeModulesSection:
    """Opt-in section forms."""

    def test_forms(self):
        assert get_include_modules_section({}) is None
        assert get_include_modules_section({"include_modules": False}) is None
        assert get_include_modules_section({"include_modules": True}) == {}
        assert get_include_modules_section({"include_modules": {"workers": 2}}) == {"workers": 2}

    def test_invalid_form(self):
        with pytest.raises(ConfigError):
            get_include_modules_section({"include_modules": "yes please"})


class TestBuildPackConfig:
    """Merged configuration."""

    def test_defaults_disabled(self, tmp_path):
        config = build_pack_config(_args(tmp_path), {})
        assert not config.enabled
        assert config.project_root == str(tmp_path)
        assert config.manifest_path == os.path.join(str(tmp_path), "package.json")
        assert config.staging_dir == os.path.join(str(tmp_path), Constants.DEFAULT_OUTPUT_PATH, "dependencies")
        assert config.max_buffer == 200 * 1024
        assert config.timeout is None
        assert config.workers == 1

    def test_cli_flag_enables(self, tmp_path):
        assert build_pack_config(_args(tmp_path, "--include-modules"), {}).enabled

    def test_config_section_values(self, tmp_path):
        cfg = {"include_modules": {"package_path": "./app/package.json", "max_buffer": 1024, "timeout": 60}}
        config = build_pack_config(_args(tmp_path, "-o", "build"), cfg)
        assert config.enabled
        assert config.manifest_path == os.path.join(str(tmp_path), "app", "package.json")
        assert config.staging_dir == os.path.join(str(tmp_path), "build", "dependencies")
        assert config.max_buffer == 1024
        assert config.timeout == 60.0

    def test_cli_overrides_config(self, tmp_path):
        cfg = {"include_modules": {"max_buffer": 1024, "workers": 2}}
        config = build_pack_config(_args(tmp_path, "--max-buffer", "4096", "-w", "4", "-v"), cfg)
        assert config.max_buffer == 4096
        assert config.workers == 4
        assert config.verbose

    def test_loads_config_path_from_args(self, tmp_path):
        path = tmp_path / "externpack.yml"
        path.write_text("include_modules: true\n")
        assert build_pack_config(_args(tmp_path, "-c", str(path))).enabled

    @pytest.mark.parametrize("section", [{"workers": 0}, {"max_buffer": "lots"}, {"timeout": -1}])
    def test_invalid_values(self, tmp_path, section):
        with pytest.raises(ConfigError):
            build_pack_config(_args(tmp_path), {"include_modules": section})

    def test_cli_rejects_non_positive(self, tmp_path):
        with pytest.raises(SystemExit):
            _args(tmp_path, "--workers", "0")
