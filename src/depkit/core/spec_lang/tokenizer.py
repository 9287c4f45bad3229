"""
Tokenizer for the spec language.

Converts a spec string such as ``matching(artifact(org.example:*), null())``
into a flat list of typed tokens.
"""

from __future__ import annotations

from enum import StrEnum, auto

from depkit.core.errors import make_syntax_error


class TokenKind(StrEnum):
    """Token types for the spec language."""

    # Bare text: op names and unquoted literals
    TEXT = auto()
    # 'quoted' or "quoted" literal
    QUOTED = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()

    # End of input
    EOF = auto()


class Token:
    """A single token from the spec tokenizer."""

    __slots__ = ("kind", "value", "pos")

    def __init__(self, kind: TokenKind, value: str, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"


_PUNCTUATION: dict[str, TokenKind] = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
}

_QUOTES = ('"', "'")


def tokenize(source: str) -> list[Token]:
    """Tokenize a spec string into a list of tokens."""
    tokens: list[Token] = []
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        # Skip whitespace
        if c.isspace():
            i += 1
            continue

        if c in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[c], c, i))
            i += 1
            continue

        # Quoted literals
        if c in _QUOTES:
            i, tok = _read_quoted(source, i)
            tokens.append(tok)
            continue

        # Bare text runs up to the next delimiter, trimmed
        start = i
        while i < n and source[i] not in _PUNCTUATION:
            i += 1
        tokens.append(Token(TokenKind.TEXT, source[start:i].strip(), start))

    tokens.append(Token(TokenKind.EOF, "", n))
    return tokens


def _read_quoted(source: str, start: int) -> tuple[int, Token]:
    """Read a quoted literal; a backslash escapes the next character."""
    quote = source[start]
    i = start + 1
    n = len(source)
    chars: list[str] = []

    while i < n:
        c = source[i]
        if c == "\\":
            if i + 1 < n:
                chars.append(source[i + 1])
                i += 2
                continue
            raise make_syntax_error("Unterminated escape sequence", source, i)
        if c == quote:
            return i + 1, Token(TokenKind.QUOTED, "".join(chars), start)
        chars.append(c)
        i += 1

    raise make_syntax_error("Unterminated quoted literal", source, start)
