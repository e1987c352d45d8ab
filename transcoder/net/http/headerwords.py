r"""
Parsing and assembly of HTTP header words.

Header words are the comma- and semicolon-delimited `key[=value]`
parameter lists used by `Content-Type`, `Link` and similar headers.
The grammar (relaxed from RFC 7230) is:

    headers           = #header
    header            = (token | parameter) *( [";"] (token | parameter))

    token             = 1*<any CHAR except CTLs or separators>
    separators        = "(" | ")" | "<" | ">" | "@"
                      | "," | ";" | ":" | "\" | <">
                      | "/" | "[" | "]" | "?" | "="
                      | "{" | "}" | SP | HT

    quoted-string     = ( <"> *(qdtext | quoted-pair ) <"> )
    qdtext            = <any TEXT except <">>
    quoted-pair       = "\" CHAR

    parameter         = attribute "=" value
    attribute         = token
    value             = token | quoted-string

A list of space separated tokens is parsed as if it was separated by ";".
Angle-bracketed URI references (RFC 8288) are kept as a single key.
"""

import re
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Optional
from typing import Union

from transcoder import exceptions
from transcoder.coretypes import multidict

_LINK = re.compile(r"\s*(<[^>]*>)")
_KEY = re.compile(r"\s*(=*[^\s=;,]+)")
_QUOTED_VALUE = re.compile(r'\s*=\s*"([^"\\]*(?:\\.[^"\\]*)*)"')
_VALUE = re.compile(r"\s*=\s*([^;,\s]*)")
_GROUP_SEPARATOR = re.compile(r"\s*,")
_PARAM_SEPARATOR = re.compile(r"\s*;")
_WHITESPACE = re.compile(r"\s+")

_QUOTED_PAIR = re.compile(r"\\(.)")
_NEEDS_ESCAPE = re.compile(r'(["\\])')
_TOKEN = re.compile(r'[^\s\x00-\x1f\x7f()<>@,;:\\"/\[\]?={}]+')


class HeaderWords(multidict._MultiDict):
    """
    One comma-separated unit of a header value, e.g. the parameters of a
    single `Content-Type` value.

    Keys are case-insensitive but keep the spelling they were first seen with:
    >>> w = HeaderWords([("text/html", None), ("Charset", "latin1")])
    >>> w["charset"]
    'latin1'
    >>> w["CHARSET"] = "utf-8"
    >>> w.fields
    (('text/html', None), ('Charset', 'utf-8'))

    Keys that only differ in case are kept as separate words; lookups and
    assignments act on the first one. Tokens without a value are stored with
    a value of None.
    """

    fields: tuple[tuple[str, Optional[str]], ...]

    @staticmethod
    def _kconv(key):
        return key.lower()


def _unquote(value: str) -> str:
    return _QUOTED_PAIR.sub(r"\1", value)


def _split_one(header: str) -> list[HeaderWords]:
    result = []
    # A repeated key replaces the value of its first occurrence.
    current: dict[str, Optional[str]] = {}
    pos = 0
    while pos < len(header):
        if m := _LINK.match(header, pos):
            current[m.group(1)] = None
            pos = m.end()
        elif m := _KEY.match(header, pos):
            key = m.group(1)
            value = None
            pos = m.end()
            if m := _QUOTED_VALUE.match(header, pos):
                value = _unquote(m.group(1))
                pos = m.end()
            elif m := _VALUE.match(header, pos):
                value = m.group(1).strip()
                pos = m.end()
            current[key] = value
        elif m := _GROUP_SEPARATOR.match(header, pos):
            if current:
                result.append(HeaderWords(current.items()))
            current = {}
            pos = m.end()
        elif m := _PARAM_SEPARATOR.match(header, pos):
            pos = m.end()
        elif m := _WHITESPACE.match(header, pos):
            pos = m.end()
        else:
            raise exceptions.HeaderSyntaxError(header[pos:])
    if current:
        result.append(HeaderWords(current.items()))
    return result


def split(header_values: Union[str, Iterable[str]]) -> list[HeaderWords]:
    """
    Parse header values into a list of HeaderWords groups.

    E.g.

        split('foo="bar"; port="80,81"; discard, bar=baz')
        split('text/html; charset="iso-8859-1"')
        split('Basic realm="\\"foo\\\\bar\\""')

    Returns:

        [{foo: "bar", port: "80,81", discard: None}, {bar: "baz"}]
        [{"text/html": None, charset: "iso-8859-1"}]
        [{Basic: None, realm: '"foo\\bar"'}]

    If multiple header values are passed, each one is parsed on its own and
    the resulting groups are concatenated.

    Raises:
        HeaderSyntaxError, if the input matches none of the grammar rules.
    """
    if isinstance(header_values, str):
        header_values = [header_values]
    result = []
    for header in header_values:
        result.extend(_split_one(header))
    return result


def _assemble_word(key: str, value: Optional[str]) -> str:
    if value is None:
        return key
    if _TOKEN.fullmatch(value):
        return f"{key}={value}"
    value = _NEEDS_ESCAPE.sub(r"\\\1", value)
    return f'{key}="{value}"'


def join(
    header_words: Union[Mapping[str, Optional[str]], Sequence[Mapping[str, Optional[str]]]]
) -> str:
    """
    The inverse of split: assemble groups of header words into a single
    header value. Values are quoted only if they are not valid tokens.

    E.g.

        join([HeaderWords([("text/plain", None), ("charset", "iso-8859/1")])])
        join(HeaderWords([("text/plain", None), ("charset", "iso-8859/1")]))

    both return

        text/plain; charset="iso-8859/1"

    Whitespace and quoting of the original header are not preserved.
    """
    if isinstance(header_words, Mapping):
        header_words = [header_words]
    groups = []
    for group in header_words:
        pairs = group.fields if isinstance(group, HeaderWords) else group.items()
        words = [_assemble_word(key, value) for key, value in pairs]
        if words:
            groups.append("; ".join(words))
    return ", ".join(groups)
