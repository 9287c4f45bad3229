"""Core depkit functionality: spec language, value families and domain builders."""

from . import ir
from .errors import (
    ConfigError,
    DepkitError,
    ErrorContext,
    SinkError,
    SpecConfigError,
    SpecSyntaxError,
)
from .spec_lang import dump, parse_spec

__all__ = [
    "ir",
    "ConfigError",
    "DepkitError",
    "ErrorContext",
    "SinkError",
    "SpecConfigError",
    "SpecSyntaxError",
    "dump",
    "parse_spec",
]
