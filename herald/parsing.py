"""Parser combinators over text.

A parser is a function `parser(text, start)` that either returns `None` or a
pair `(end, value)`, where `end` is the index just past the consumed input.
This is the same calling convention as `bencoding.decode_from`. Parsers never
mutate anything, so they can be shared freely and combined into larger ones.
"""

from typing import Callable, List, Optional, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Parser = Callable[[str, int], Optional[Tuple[int, T]]]


def tag(literal: str) -> Parser[str]:
    """Match `literal` exactly."""

    def parser(text, start):
        if text.startswith(literal, start):
            return start + len(literal), literal
        return None

    return parser


def matching(predicate: Callable[[str], bool]) -> Parser[str]:
    """Match a single character that satisfies `predicate`."""

    def parser(text, start):
        if start < len(text) and predicate(text[start]):
            return start + 1, text[start]
        return None

    return parser


def sequence(first: Parser[T], second: Parser[U]) -> Parser[Tuple[T, U]]:
    def parser(text, start):
        if (result := first(text, start)) is None:
            return None
        start, x = result
        if (result := second(text, start)) is None:
            return None
        start, y = result
        return start, (x, y)

    return parser


def alt(first: Parser[T], second: Parser[T]) -> Parser[T]:
    """Try `first`, falling back to `second` from the same position."""

    def parser(text, start):
        if (result := first(text, start)) is not None:
            return result
        return second(text, start)

    return parser


def repeat(inner: Parser[T]) -> Parser[List[T]]:
    """Apply `inner` until it fails; never fails itself."""

    def parser(text, start):
        values = []
        while (result := inner(text, start)) is not None:
            end, value = result
            if end == start:
                # `inner` succeeded without consuming anything and would do so
                # forever.
                break
            start = end
            values.append(value)
        return start, values

    return parser


def exactly(n: int, inner: Parser[T]) -> Parser[List[T]]:
    def parser(text, start):
        values = []
        for _ in range(n):
            if (result := inner(text, start)) is None:
                return None
            start, value = result
            values.append(value)
        return start, values

    return parser


def mapped(inner: Parser[T], f: Callable[[T], U]) -> Parser[U]:
    def parser(text, start):
        if (result := inner(text, start)) is None:
            return None
        end, value = result
        return end, f(value)

    return parser


def parse_all(parser: Parser[T], text: str) -> T:
    """Run `parser` on `text` and return its value.

    Raise `ValueError` if `parser` fails or leaves input unconsumed.
    """
    if (result := parser(text, 0)) is None:
        raise ValueError("No match at index 0.")
    end, value = result
    if end != len(text):
        raise ValueError(f"Unexpected input at index {end}.")
    return value
