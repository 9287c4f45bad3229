"""Tests for depkit.toml loading and discovery."""

from pathlib import Path

import pytest

from depkit.core.config import (
    CONFIG_ENV_VAR,
    DefaultsConfig,
    DepkitConfig,
    find_config,
    load_config,
    resolve_config,
)
from depkit.core.domains import BUILDERS, Domain, builder_for
from depkit.core.errors import ConfigError
from depkit.core.matchers import ArtifactMatcherBuilder


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


def write_config(directory: Path, text: str) -> Path:
    path = directory / "depkit.toml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    """Parsing depkit.toml."""

    def test_full(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path,
            """
[project]
name = "demo"
basedir = "build"

[properties]
groupId = "org.example"
major = 3

[defaults]
matcher = "not(snapshot())"
sink = "flat(libs)"
""",
        )
        config = load_config(path)
        assert config.name == "demo"
        assert config.basedir == (tmp_path / "build").resolve()
        assert config.properties == {"groupId": "org.example", "major": "3"}
        assert config.defaults.matcher == "not(snapshot())"
        assert config.defaults.sink == "flat(libs)"
        assert config.defaults.mapper == "identity()"
        assert config.path == path

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(write_config(tmp_path, ""))
        assert config.name == tmp_path.name
        assert config.basedir == tmp_path.resolve()
        assert config.defaults == DefaultsConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "depkit.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(write_config(tmp_path, "[project\n"))

    def test_properties_must_be_table(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="must be a table"):
            load_config(write_config(tmp_path, 'properties = "x"\n'))

    def test_unknown_defaults(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Unknown keys in \\[defaults\\]"):
            load_config(write_config(tmp_path, '[defaults]\nfilter = "any()"\n'))

    def test_merged_properties(self) -> None:
        config = DepkitConfig(properties={"a": "1", "b": "2"})
        assert config.merged_properties({"b": "3"}) == {"a": "1", "b": "3"}
        assert config.properties == {"a": "1", "b": "2"}


class TestFindConfig:
    """Discovery of the nearest depkit.toml."""

    def test_walks_up(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == path.resolve()

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write_config(tmp_path, "")
        other = tmp_path / "other.toml"
        other.write_text("", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(other))
        assert find_config(tmp_path) == other

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))
        with pytest.raises(ConfigError, match="missing file"):
            find_config(tmp_path)

    def test_resolve_loads_nearest(self, tmp_path: Path) -> None:
        write_config(tmp_path, '[properties]\nx = "1"\n')
        nested = tmp_path / "sub"
        nested.mkdir()
        config = resolve_config(nested)
        assert config.properties == {"x": "1"}
        assert config.basedir == tmp_path.resolve()


class TestDomains:
    """Domain registry used by the CLI."""

    def test_every_domain_has_a_builder(self) -> None:
        assert set(BUILDERS) == set(Domain)

    def test_lookup_by_name(self) -> None:
        assert builder_for("matcher") is ArtifactMatcherBuilder

    def test_unknown_domain(self) -> None:
        with pytest.raises(ValueError):
            builder_for("widget")
