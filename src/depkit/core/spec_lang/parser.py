"""
Recursive descent parser for the spec language.

Grammar:
    spec    → op EOF
    op      → NAME "(" args? ")"
    args    → arg ("," arg)*
    arg     → op | literal
    literal → TEXT | QUOTED          (never empty)

A bare argument without parentheses is a Literal, never an implicit
zero-argument Op: ``a(b(), c)`` has an Op child ``b`` and a Literal ``c``.
"""

from __future__ import annotations

import re

from depkit.core.errors import SpecSyntaxError, make_syntax_error
from depkit.core.ir.spec import Literal, Node, Op
from depkit.core.spec_lang.tokenizer import Token, TokenKind, tokenize

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class _Parser:
    """Recursive descent parser for specs."""

    def __init__(self, source: str, tokens: list[Token]) -> None:
        self.source = source
        self.tokens = tokens
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def error(self, message: str, tok: Token | None = None) -> SpecSyntaxError:
        tok = tok or self.current
        return make_syntax_error(message, self.source, tok.pos)

    def expect(self, kind: TokenKind) -> Token:
        tok = self.current
        if tok.kind != kind:
            found = "end of input" if tok.kind == TokenKind.EOF else repr(tok.value)
            raise self.error(f"Expected {_describe(kind)}, got {found}")
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    # -- Grammar rules --

    def parse_spec(self) -> Op:
        if self.current.kind == TokenKind.EOF:
            raise self.error("Empty spec")
        if self.current.kind != TokenKind.TEXT or self.peek(1).kind != TokenKind.LPAREN:
            raise self.error("Spec must start with a call, e.g. name(...)")
        op = self.parse_op()
        if self.current.kind != TokenKind.EOF:
            raise self.error(f"Unexpected {self.current.value!r} after end of spec")
        return op

    def parse_op(self) -> Op:
        name_tok = self.expect(TokenKind.TEXT)
        if not _NAME_RE.fullmatch(name_tok.value):
            raise self.error(f"Invalid op name {name_tok.value!r}", name_tok)
        self.expect(TokenKind.LPAREN)

        children: list[Node] = []
        if not self.match(TokenKind.RPAREN):
            children.append(self.parse_arg())
            while self.match(TokenKind.COMMA):
                children.append(self.parse_arg())
            self.expect(TokenKind.RPAREN)

        return Op(value=name_tok.value, children=tuple(children))

    def parse_arg(self) -> Node:
        tok = self.current
        if tok.kind == TokenKind.TEXT and self.peek(1).kind == TokenKind.LPAREN:
            return self.parse_op()
        if tok.kind == TokenKind.TEXT:
            self.advance()
            if not tok.value:
                raise self.error("Empty argument", tok)
            return Literal(value=tok.value)
        if tok.kind == TokenKind.QUOTED:
            self.advance()
            if not tok.value:
                raise self.error("Empty argument", tok)
            return Literal(value=tok.value, quoted=True)
        if tok.kind == TokenKind.EOF:
            raise self.error("Unterminated call")
        raise self.error(f"Empty argument before {tok.value!r}")


def _describe(kind: TokenKind) -> str:
    return {
        TokenKind.LPAREN: "'('",
        TokenKind.RPAREN: "')'",
        TokenKind.COMMA: "','",
        TokenKind.TEXT: "a name",
    }.get(kind, str(kind))


def parse_spec(source: str) -> Op:
    """
    Parse a spec string into its root Op.

    Raises:
        SpecSyntaxError: on any malformed input
    """
    tokens = tokenize(source)
    return _Parser(source, tokens).parse_spec()
