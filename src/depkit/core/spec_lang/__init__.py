"""
depkit spec language.

Tokenizer, parser, debug dump, and the generic stack builder that domain
builders specialise.

Usage:
    from depkit.core.spec_lang import parse_spec, dump

    node = parse_spec("matching(artifact(org.example:*), counting())")
    print(dump(node))
"""

from depkit.core.spec_lang.builder import SpecBuilder, substitute
from depkit.core.spec_lang.dump import DumpVisitor, dump
from depkit.core.spec_lang.parser import parse_spec

__all__ = ["DumpVisitor", "SpecBuilder", "dump", "parse_spec", "substitute"]
