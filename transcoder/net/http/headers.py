import re
from collections.abc import Mapping
from typing import Optional
from typing import TypeVar
from typing import Union

from transcoder.net.http import headerwords

T = TypeVar("T")

HeaderValue = Union[str, list[str]]

_HTML_TYPE = re.compile(r"text/html", re.IGNORECASE)
# text/xml, application/xml and all application/*+xml types
_XML_TYPE = re.compile(r"(text|application)/(.+\+)?xml", re.IGNORECASE)


def get_by_case_insensitive_key(items: Mapping[str, T], key: str) -> Optional[T]:
    """
    Return the value of the first entry whose key matches `key` case-insensitively,
    or None.
    """
    key = key.lower()
    for k, v in items.items():
        if k.lower() == key:
            return v
    return None


def set_by_case_insensitive_key(
    items: Mapping[str, T], key: str, value: T
) -> dict[str, T]:
    """
    Return a copy of `items` with the entry for `key` set to `value`.

    If an entry matches case-insensitively, its position and spelling are kept.
    Otherwise, a new entry is appended using the spelling of `key`.
    """
    new = dict(items)
    for k in items:
        if k.lower() == key.lower():
            key = k
            break
    new[key] = value
    return new


def split_content_type(c: str) -> tuple[str, headerwords.HeaderWords]:
    """
    Split a content-type value into its MIME type and parameters.

    E.g. the following string:

        text/html; charset=UTF-8

    Returns:

        ("text/html", HeaderWords[("charset", "UTF-8")])

    The MIME type is returned verbatim. If there are no parameters,
    the returned HeaderWords are empty.

    Raises:
        HeaderSyntaxError, if the parameters are malformed.
    """
    mime_type, _, params = c.partition(";")
    parsed = headerwords.split(params)
    if parsed:
        return mime_type, parsed[0]
    return mime_type, headerwords.HeaderWords()


def assemble_content_type(mime_type: str, params: headerwords.HeaderWords) -> str:
    if not params:
        return mime_type
    return f"{mime_type}; {headerwords.join(params)}"


def first_value(value: HeaderValue) -> Optional[str]:
    """
    Repeated headers are stored as lists. Content-Type must not be repeated
    (RFC 9110, section 5.3), so we only look at the first instance.
    """
    if isinstance(value, list):
        return value[0] if value else None
    return value


def is_html(mime_type: str) -> bool:
    return bool(_HTML_TYPE.match(mime_type))


def is_xml(mime_type: str) -> bool:
    return bool(_XML_TYPE.match(mime_type))
