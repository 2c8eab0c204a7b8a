"""Query string handling for announce requests.

Announce URLs carry binary values: `info_hash` is 20 raw bytes, percent-escaped
only where a byte isn't a printable character. Decoding such a value as text
would corrupt it, so the query is split without unescaping the values, and
`unquote_value` turns a single value into bytes when a field needs it.
"""

from typing import Dict

import string
import urllib.parse

from . import parsing


def _byte(hex_digits):
    return int("".join(hex_digits), 16)


# Either `%XX` or any other single character that fits in a byte, taken
# literally. A `%` is only valid as the start of an escape.
_escaped = parsing.mapped(
    parsing.sequence(
        parsing.tag("%"),
        parsing.mapped(
            parsing.exactly(2, parsing.matching(lambda c: c in string.hexdigits)),
            _byte,
        ),
    ),
    lambda pair: pair[1],
)
_literal = parsing.mapped(parsing.matching(lambda c: c != "%" and ord(c) < 256), ord)
_value = parsing.repeat(parsing.alt(_escaped, _literal))


def unquote_value(value: str) -> bytes:
    """Return the bytes represented by the percent-escaped `value`.

    Raise `ValueError` if part of `value` can't be decoded, e.g. because of a
    `%` that isn't followed by two hex digits.
    """
    return bytes(parsing.parse_all(_value, value))


def split(query: str) -> Dict[str, str]:
    """Split `query` into a dictionary of raw values.

    Keys are unescaped, values are not. Pairs without a key or without a value
    are dropped; for repeated keys the last value wins.
    """
    params = {}
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        if key and sep and value:
            params[urllib.parse.unquote(key)] = value
    return params
