import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from depkit.core.errors import ConfigError

CONFIG_FILENAME = "depkit.toml"
CONFIG_ENV_VAR = "DEPKIT_CONFIG"


@dataclass
class DefaultsConfig:
    """Specs used when a command is not given one explicitly."""

    matcher: str = "any()"
    mapper: str = "identity()"
    name_mapper: str = "ACVE()"
    selector: str = "contextualSnapshotsAndPreviews()"
    sink: str = "null()"


@dataclass
class DepkitConfig:
    """Contents of depkit.toml."""

    name: str = "depkit"
    basedir: Path = field(default_factory=Path.cwd)
    properties: dict[str, str] = field(default_factory=dict)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    path: Path | None = None

    def merged_properties(self, overrides: dict[str, str] | None = None) -> dict[str, str]:
        merged = dict(self.properties)
        merged.update(overrides or {})
        return merged


def load_config(path: Path) -> DepkitConfig:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    project = data.get("project", {})
    properties = data.get("properties", {})
    defaults_data = data.get("defaults", {})

    if not isinstance(properties, dict):
        raise ConfigError(f"[properties] in {path} must be a table")
    unknown = set(defaults_data) - set(DefaultsConfig.__dataclass_fields__)
    if unknown:
        raise ConfigError(f"Unknown keys in [defaults] of {path}: {', '.join(sorted(unknown))}")

    basedir = Path(project.get("basedir", "."))
    if not basedir.is_absolute():
        basedir = (path.parent / basedir).resolve()

    return DepkitConfig(
        name=project.get("name", path.parent.name),
        basedir=basedir,
        properties={str(k): str(v) for k, v in properties.items()},
        defaults=DefaultsConfig(**defaults_data),
        path=path,
    )


def find_config(start: Path | None = None) -> Path | None:
    """Locate depkit.toml: $DEPKIT_CONFIG first, then ``start`` and its parents."""
    if env_path := os.environ.get(CONFIG_ENV_VAR):
        path = Path(env_path)
        if not path.is_file():
            raise ConfigError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")
        return path

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config(start: Path | None = None) -> DepkitConfig:
    """Load the nearest depkit.toml, or defaults when there is none."""
    path = find_config(start)
    if path is None:
        return DepkitConfig(basedir=(start or Path.cwd()).resolve())
    return load_config(path)
