"""Tests for the generic stack builder.

Uses a small arithmetic-ish builder to exercise stack frames, typed pops,
property substitution and cross-builder compilation independently of any
artifact domain.
"""

from __future__ import annotations

import pytest

from depkit.core.errors import SpecConfigError
from depkit.core.ir.spec import Op
from depkit.core.spec_lang import parse_spec
from depkit.core.spec_lang.builder import SpecBuilder, substitute


class Word:
    family = "word"

    def __init__(self, text: str) -> None:
        self.text = text

    def __repr__(self) -> str:
        return f"Word({self.text})"


class Number:
    family = "number"

    def __init__(self, value: int) -> None:
        self.value = value


class NumberBuilder(SpecBuilder[Number]):
    domain = "number"
    produces = Number

    def process_op(self, node: Op) -> None:
        match node.value:
            case "num":
                self.params.append(Number(self.int_param()))
            case "sum":
                self.params.append(Number(sum(n.value for n in self.typed_params(Number))))
            case _:
                raise self.unknown_op(node)


class WordBuilder(SpecBuilder[Word]):
    domain = "word"
    produces = Word
    combinators = frozenset({"repeat"})

    def process_op(self, node: Op) -> None:
        match node.value:
            case "w":
                self.params.append(Word(self.string_param()))
            case "join":
                words = self.typed_params(Word)
                self.params.append(Word("".join(w.text for w in words)))
            case "pair":
                right = self.typed_param(Word)
                left = self.typed_param(Word)
                self.params.append(Word(f"{left.text}+{right.text}"))
            case "upper":
                flag = self.boolean_param()
                word = self.typed_param(Word)
                self.params.append(Word(word.text.upper() if flag else word.text))
            case "strings":
                self.params.append(Word("|".join(self.string_params())))
            case "repeat":
                self.require_children(node, 2)
                count = self.compile_child(node, 0, NumberBuilder)
                word = self.compile_child(node, 1, WordBuilder)
                self.params.append(Word(word.text * count.value))
            case "raw":
                self.params.append(self.string_param())
            case "nothing":
                pass
            case _:
                raise self.unknown_op(node)


# ============================================================================
# Stack semantics
# ============================================================================


class TestStack:
    """Post-order evaluation with per-op frames."""

    def test_single_value(self) -> None:
        assert WordBuilder.compile("w(hello)").text == "hello"

    def test_declaration_order(self) -> None:
        word = WordBuilder.compile("join(w(a), w(b), w(c))")
        assert word.text == "abc"

    def test_fixed_arity_pops_reverse(self) -> None:
        assert WordBuilder.compile("pair(w(l), w(r))").text == "l+r"

    def test_variadic_does_not_drain_enclosing_frame(self) -> None:
        # join() inside pair() only sees its own children
        word = WordBuilder.compile("pair(w(x), join(w(a), w(b)))")
        assert word.text == "x+ab"

    def test_empty_variadic(self) -> None:
        assert WordBuilder.compile("join()").text == ""

    def test_string_params(self) -> None:
        assert WordBuilder.compile("strings(a, b, c)").text == "a|b|c"

    def test_boolean_param(self) -> None:
        assert WordBuilder.compile("upper(w(x), TRUE)").text == "X"
        assert WordBuilder.compile("upper(w(x), false)").text == "x"

    def test_builder_is_single_use(self) -> None:
        builder = WordBuilder()
        parse_spec("w(a)").accept(builder)
        builder.build()
        with pytest.raises(SpecConfigError, match="single use"):
            builder.build()


# ============================================================================
# Semantic errors
# ============================================================================


class TestErrors:
    """Builder failures are SpecConfigError naming the op."""

    def test_unknown_op(self) -> None:
        with pytest.raises(SpecConfigError, match="Unknown word op frob") as exc_info:
            WordBuilder.compile("frob()")
        assert exc_info.value.op == "frob"

    def test_too_few_arguments(self) -> None:
        with pytest.raises(SpecConfigError, match="Bad parameter count for op w"):
            WordBuilder.compile("w()")

    def test_too_many_arguments(self) -> None:
        with pytest.raises(SpecConfigError, match="Too many arguments for op w"):
            WordBuilder.compile("w(a, b)")

    def test_wrong_family(self) -> None:
        with pytest.raises(SpecConfigError, match="Expected word, got string 'x'"):
            WordBuilder.compile("pair(x, w(y))")

    def test_variadic_wrong_family(self) -> None:
        with pytest.raises(SpecConfigError, match="Expected word"):
            WordBuilder.compile("join(w(a), b)")

    def test_bad_boolean(self) -> None:
        with pytest.raises(SpecConfigError, match="Expected true or false"):
            WordBuilder.compile("upper(w(x), yes)")

    def test_bad_int(self) -> None:
        with pytest.raises(SpecConfigError, match="Expected an integer"):
            NumberBuilder.compile("num(two)")

    def test_op_produces_nothing(self) -> None:
        with pytest.raises(SpecConfigError, match="produced no value"):
            WordBuilder.compile("join(nothing())")

    def test_result_of_wrong_family(self) -> None:
        with pytest.raises(SpecConfigError, match="does not produce a word"):
            WordBuilder.compile("raw(x)")


# ============================================================================
# Cross-builder compilation
# ============================================================================


class TestCombinators:
    """Combinators compile children under other builders."""

    def test_embedded_builder(self) -> None:
        word = WordBuilder.compile("repeat(sum(num(1), num(2)), w(ab))")
        assert word.text == "ababab"

    def test_embedded_vocabulary_is_isolated(self) -> None:
        with pytest.raises(SpecConfigError, match="Unknown number op w"):
            WordBuilder.compile("repeat(w(x), w(ab))")

    def test_combinator_arity(self) -> None:
        with pytest.raises(SpecConfigError, match="Bad parameter count for op repeat"):
            WordBuilder.compile("repeat(num(1))")

    def test_combinator_literal_child_rejected(self) -> None:
        with pytest.raises(SpecConfigError, match="Expected a number spec"):
            WordBuilder.compile("repeat(3, w(ab))")

    def test_properties_reach_embedded_builder(self) -> None:
        word = WordBuilder.compile("repeat(num(${n}), w(${w}))", {"n": 2, "w": "ok"})
        assert word.text == "okok"


# ============================================================================
# Property substitution
# ============================================================================


class TestProperties:
    """${name} placeholders resolve at build time."""

    def test_whole_literal(self) -> None:
        assert WordBuilder.compile("w(${x})", {"x": "value"}).text == "value"

    def test_embedded_placeholders(self) -> None:
        word = WordBuilder.compile("w(${g}:${a}:*)", {"g": "org", "a": "lib"})
        assert word.text == "org:lib:*"

    def test_non_string_values(self) -> None:
        assert NumberBuilder.compile("num(${n})", {"n": 7}).value == 7

    def test_missing_key(self) -> None:
        with pytest.raises(SpecConfigError, match=r"Unknown property \$\{x\}"):
            WordBuilder.compile("w(${x})", {"y": "1"})

    def test_no_properties(self) -> None:
        with pytest.raises(SpecConfigError, match="No properties supplied"):
            WordBuilder.compile("w(${x})")

    def test_quoted_literal_not_substituted(self) -> None:
        assert WordBuilder.compile("w('${x}')").text == "${x}"

    def test_plain_literals_need_no_properties(self) -> None:
        assert WordBuilder.compile("w($x)").text == "$x"

    def test_substitute_helper(self) -> None:
        assert substitute("a-${b}-c", {"b": "B"}) == "a-B-c"
