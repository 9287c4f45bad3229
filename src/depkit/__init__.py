"""
depkit - spec-expression compiler for dependency pipelines.

Compiles small function-call specs such as ``matching(not(snapshot()), counting())``
into matchers, mappers, name mappers, version selectors and sinks.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import DepkitError, SinkError, SpecConfigError, SpecSyntaxError

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "DepkitError",
    "SinkError",
    "SpecConfigError",
    "SpecSyntaxError",
]
