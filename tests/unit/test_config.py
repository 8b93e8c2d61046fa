#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_config.py
"""Unit tests for configuration discovery and loading.

Tests cover:
- Loading TOML, YAML, JSON and pyproject.toml files
- Discovery in parent directories and the home directory
- Priority between explicit path, environment variable and discovery
- Building conversion options from configuration

"""

from pathlib import Path

import pytest

from mdxbridge.config import (
    CONFIG_ENV_VAR,
    discover_config_file,
    find_config_in_parents,
    load_config_file,
    load_config_with_priority,
    merge_configs,
    options_from_config,
)
from mdxbridge.exceptions import ConfigurationError
from mdxbridge.options import ConversionOptions, MarkdownRendererOptions


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    return home


@pytest.mark.unit
class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_toml(self, tmp_path):
        path = tmp_path / ".mdxbridge.toml"
        path.write_text('strict = true\n[renderer]\nbullet = "*"\n', encoding="utf-8")
        assert load_config_file(path) == {"strict": True, "renderer": {"bullet": "*"}}

    def test_yaml(self, tmp_path):
        path = tmp_path / ".mdxbridge.yaml"
        path.write_text("frontmatter:\n  format: toml\n", encoding="utf-8")
        assert load_config_file(str(path)) == {"frontmatter": {"format": "toml"}}

    def test_json(self, tmp_path):
        path = tmp_path / ".mdxbridge.json"
        path.write_text('{"parser": {"max_inline_depth": 8}}', encoding="utf-8")
        assert load_config_file(path) == {"parser": {"max_inline_depth": 8}}

    def test_pyproject_section(self, tmp_path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n[tool.mdxbridge]\nstrict = true\n', encoding="utf-8")
        assert load_config_file(path) == {"strict": True}

    def test_pyproject_without_section(self, tmp_path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n', encoding="utf-8")
        assert load_config_file(path) == {}

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="does not exist"):
            load_config_file(tmp_path / "missing.toml")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[x]", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Unsupported config file format"):
            load_config_file(path)

    @pytest.mark.parametrize(
        "name,content",
        [("bad.toml", "strict = "), ("bad.yaml", "a: [1"), ("bad.json", "{"), ("list.yaml", "- a\n- b\n")],
    )
    def test_invalid_content(self, tmp_path, name, content):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config_file(path)


@pytest.mark.unit
class TestDiscovery:
    """Tests for finding configuration files."""

    def test_found_in_parent(self, tmp_path):
        (tmp_path / ".mdxbridge.yaml").write_text("strict: true\n", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_in_parents(nested) == (tmp_path / ".mdxbridge.yaml").resolve()

    def test_nearest_wins(self, tmp_path):
        (tmp_path / ".mdxbridge.yaml").write_text("strict: true\n", encoding="utf-8")
        nested = tmp_path / "a"
        nested.mkdir()
        (nested / ".mdxbridge.toml").write_text("strict = false\n", encoding="utf-8")
        assert find_config_in_parents(nested) == (nested / ".mdxbridge.toml").resolve()

    def test_pyproject_needs_section(self, tmp_path):
        project = tmp_path / "project"
        project.mkdir()
        (project / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.mdxbridge]\nstrict = true\n", encoding="utf-8")
        assert find_config_in_parents(project) == (tmp_path / "pyproject.toml").resolve()

    def test_home_fallback(self, tmp_path, isolated_home):
        (isolated_home / ".mdxbridge.json").write_text("{}", encoding="utf-8")
        workdir = tmp_path / "work"
        workdir.mkdir()
        assert discover_config_file(workdir) == isolated_home / ".mdxbridge.json"


@pytest.mark.unit
class TestLoadConfigWithPriority:
    """Tests for configuration source priority."""

    def test_explicit_path_wins(self, tmp_path, isolated_home, monkeypatch):
        explicit = tmp_path / "explicit.toml"
        explicit.write_text("strict = true\n", encoding="utf-8")
        env = tmp_path / "env.toml"
        env.write_text("strict = false\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env))
        assert load_config_with_priority(str(explicit)) == {"strict": True}

    def test_environment_variable(self, tmp_path, isolated_home, monkeypatch):
        env = tmp_path / "env.yaml"
        env.write_text("strict: true\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env))
        assert load_config_with_priority() == {"strict": True}

    def test_discovery_from_cwd(self, tmp_path, isolated_home, monkeypatch):
        workdir = tmp_path / "work"
        workdir.mkdir()
        (workdir / ".mdxbridge.toml").write_text("[renderer]\nbullet = \"+\"\n", encoding="utf-8")
        monkeypatch.chdir(workdir)
        assert load_config_with_priority() == {"renderer": {"bullet": "+"}}


@pytest.mark.unit
class TestMergeConfigs:
    """Tests for merge_configs."""

    def test_deep_merge(self):
        base = {"renderer": {"bullet": "*", "escape_special": True}, "strict": False}
        override = {"renderer": {"escape_special": False}, "strict": True}
        assert merge_configs(base, override) == {
            "renderer": {"bullet": "*", "escape_special": False},
            "strict": True,
        }

    def test_inputs_not_mutated(self):
        base = {"renderer": {"bullet": "*"}}
        merge_configs(base, {"renderer": {"bullet": "+"}})
        assert base == {"renderer": {"bullet": "*"}}


@pytest.mark.unit
class TestOptionsFromConfig:
    """Tests for building ConversionOptions."""

    def test_empty_config(self):
        assert options_from_config({}) == ConversionOptions()

    def test_sections(self):
        options = options_from_config(
            {
                "strict": True,
                "frontmatter": {"format": "toml"},
                "renderer": {"bullet": "*", "thematic_break": "___"},
                "parser": {"max_inline_depth": 4},
            }
        )
        assert options.strict is True
        assert options.frontmatter.format == "toml"
        assert options.renderer.bullet == "*"
        assert options.renderer.thematic_break == "___"
        assert options.renderer.emphasis_symbol == "*"
        assert options.parser.max_inline_depth == 4

    def test_base_options_kept(self):
        base = ConversionOptions(renderer=MarkdownRendererOptions(bullet="+"))
        options = options_from_config({"renderer": {"escape_special": False}}, base=base)
        assert options.renderer.bullet == "+"
        assert options.renderer.escape_special is False

    @pytest.mark.parametrize(
        "config,parameter",
        [
            ({"unknown": 1}, "config"),
            ({"renderer": {"colour": "red"}}, "renderer"),
            ({"renderer": "fancy"}, "renderer"),
            ({"renderer": {"bullet": "x"}}, "renderer"),
            ({"renderer": {"thematic_break": "---"}}, "renderer"),
            ({"frontmatter": {"format": "json"}}, "frontmatter"),
            ({"parser": {"max_inline_depth": 0}}, "parser"),
            ({"strict": "yes"}, "strict"),
        ],
    )
    def test_invalid_config(self, config, parameter):
        with pytest.raises(ConfigurationError) as exc_info:
            options_from_config(config)
        assert exc_info.value.parameter_name == parameter
