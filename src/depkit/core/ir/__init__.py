"""
depkit intermediate representation types.

Spec AST nodes and the artifact/dependency shapes that compiled
pipeline values operate on.
"""

from .artifacts import (
    Artifact,
    Dependency,
    is_snapshot_version,
    to_base_version,
)
from .spec import (
    Literal,
    Node,
    Op,
    SpecVisitor,
)

__all__ = [
    "Artifact",
    "Dependency",
    "Literal",
    "Node",
    "Op",
    "SpecVisitor",
    "is_snapshot_version",
    "to_base_version",
]
