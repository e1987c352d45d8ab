"""
Locate charset declarations in HTTP responses.

There are three independent detectors:

 - `from_header` reads the charset parameter of the Content-Type header.
 - `from_html` looks for a `<meta>` charset declaration (HTML4 or HTML5 style).
 - `from_xml` looks for the encoding pseudo-attribute of an XML declaration.

Each detector reports the declared encoding verbatim, together with the
replacement that rewrites the declaration to a target encoding. Declarations
are located with bounded pattern matching over the raw bytes; we never build
a DOM. Only the first declaration found is considered.

Detectors return None or an empty BodyDetection if there is nothing to find.
Malformed header word syntax raises HeaderSyntaxError.
"""

import enum
import re
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Optional

from transcoder.net.http import headers as http_headers
from transcoder.net.http import headerwords
from transcoder.net.http.headers import HeaderValue
from transcoder.utils import strutils

# Matched declarations are converted between bytes and str using latin-1,
# which maps every byte to exactly one character and back.
_RAW = "latin-1"

# e.g. <meta http-equiv="content-type" content="text/html; charset=ISO-8859-1">
HTML4_META = re.compile(
    rb"""<meta[^>]+http-equiv\s*=\s*(?P<quote>["']?)content-type(?P=quote)[^>]*?>""",
    re.IGNORECASE,
)
HTML4_CONTENT_ATTRIBUTE = re.compile(
    rb"""(?P<before>.*)content\s*=\s*(?P<quote>["'])(?P<content>.*?)(?P=quote)(?P<after>.*)""",
    re.IGNORECASE | re.DOTALL,
)
# e.g. <meta charset=iso-8859-1>
# An unquoted value swallows a directly following solidus, as browsers do:
# https://html.spec.whatwg.org/multipage/syntax.html#start-tags
HTML5_META = re.compile(
    rb"""(?P<before><meta[^>]+?)charset\s*=\s*"""
    rb"""(?:(?P<quote>["'])(?P<quoted>[^"' ]+?)(?P=quote)|(?P<unquoted>[^"'=<>`\s]+))"""
    rb"""(?P<after>[^>]*?>)""",
    re.IGNORECASE,
)
# e.g. <?xml version="1.0" encoding="ISO-8859-1"?>
XML_DECLARATION = re.compile(
    rb"""(?P<before><\?xml[^>]+?)encoding=(?P<quote>["'])(?P<encoding>[^"']+?)(?P=quote)"""
    rb"""(?P<after>[^>]*?>)""",
    re.IGNORECASE,
)


class DeclarationSource(enum.Enum):
    HEADER = "header"
    HTML_META = "html-meta"
    XML_DECLARATION = "xml-declaration"


@dataclass(frozen=True)
class DetectedEncoding:
    source: DeclarationSource
    name: str
    """The charset name exactly as declared, not normalized."""


@dataclass(frozen=True)
class BodyReplacement:
    """
    A declaration as found in the body and its rewritten form, both in the
    encoding of the body. Every occurrence of `matched` gets replaced, not
    just the one that was found.
    """

    matched: bytes
    replacement: bytes


@dataclass
class HeaderDetection:
    mime_type: str
    declared: Optional[DetectedEncoding]
    params: headerwords.HeaderWords
    """The Content-Type parameters with charset set to the target encoding."""


@dataclass
class BodyDetection:
    declared: Optional[DetectedEncoding] = None
    replacements: list[BodyReplacement] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "BodyDetection":
        return cls()


def _charset_param(
    words: headerwords.HeaderWords, target_encoding: str
) -> tuple[Optional[str], headerwords.HeaderWords]:
    declared = words.get("charset")
    updated = words.copy()
    updated["charset"] = target_encoding
    return declared, updated


def from_header(
    headers: Mapping[str, HeaderValue], target_encoding: str
) -> Optional[HeaderDetection]:
    """
    Read the charset parameter of the Content-Type header.

    Returns:
        None, if there is no Content-Type header at all.
        Otherwise, the MIME type, the declared charset (if any) and
        the parameters with charset set to target_encoding.
    """
    value = http_headers.get_by_case_insensitive_key(headers, "content-type")
    if value is None:
        return None
    content_type = http_headers.first_value(value)
    if content_type is None:
        return None

    mime_type, params = http_headers.split_content_type(content_type)
    declared, updated = _charset_param(params, target_encoding)
    return HeaderDetection(
        mime_type=mime_type,
        declared=(
            DetectedEncoding(DeclarationSource.HEADER, declared)
            if declared is not None
            else None
        ),
        params=updated,
    )


def _from_html4(meta: bytes, target_encoding: str) -> BodyDetection:
    m = HTML4_CONTENT_ATTRIBUTE.search(meta)
    if not m:
        return BodyDetection.empty()

    parsed = headerwords.split(strutils.always_str(m.group("content"), _RAW))
    words = parsed[0] if parsed else headerwords.HeaderWords()
    declared, updated = _charset_param(words, target_encoding)
    new_content = strutils.always_bytes(headerwords.join(updated), _RAW)

    quote = m.group("quote")
    new_meta = (
        m.group("before")
        + b"content="
        + quote
        + new_content
        + quote
        + m.group("after")
    )
    return BodyDetection(
        declared=(
            DetectedEncoding(DeclarationSource.HTML_META, declared)
            if declared is not None
            else None
        ),
        replacements=[BodyReplacement(meta, new_meta)],
    )


def from_html(content: bytes, target_encoding: str) -> BodyDetection:
    """
    Find the charset declared by the first HTML4 http-equiv `<meta>` tag, or
    failing that, by the first HTML5 `<meta charset>` tag.

    If an http-equiv tag is found, it is authoritative: the HTML5 form is not
    considered even if the tag does not declare a charset.
    """
    if m := HTML4_META.search(content):
        return _from_html4(m.group(0), target_encoding)

    if m := HTML5_META.search(content):
        quote = m.group("quote") or b""
        declared = m.group("quoted") or m.group("unquoted")
        new_meta = (
            m.group("before")
            + b"charset="
            + quote
            + strutils.always_bytes(target_encoding, _RAW)
            + quote
            + m.group("after")
        )
        return BodyDetection(
            declared=DetectedEncoding(
                DeclarationSource.HTML_META, strutils.always_str(declared, _RAW)
            ),
            replacements=[BodyReplacement(m.group(0), new_meta)],
        )

    return BodyDetection.empty()


def from_xml(content: bytes, target_encoding: str) -> BodyDetection:
    """
    Find the encoding declared by the XML declaration, if any.
    """
    m = XML_DECLARATION.search(content)
    if not m:
        return BodyDetection.empty()

    quote = m.group("quote")
    new_declaration = (
        m.group("before")
        + b"encoding="
        + quote
        + strutils.always_bytes(target_encoding, _RAW)
        + quote
        + m.group("after")
    )
    return BodyDetection(
        declared=DetectedEncoding(
            DeclarationSource.XML_DECLARATION,
            strutils.always_str(m.group("encoding"), _RAW),
        ),
        replacements=[BodyReplacement(m.group(0), new_declaration)],
    )


def from_body(mime_type: str, content: bytes, target_encoding: str) -> BodyDetection:
    """
    Run the body detector matching the MIME type, if there is one.
    """
    if http_headers.is_html(mime_type):
        return from_html(content, target_encoding)
    elif http_headers.is_xml(mime_type):
        return from_xml(content, target_encoding)
    return BodyDetection.empty()
