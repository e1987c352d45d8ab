"""
Utility functions for converting message bodies between character encodings.
"""

import codecs

from transcoder import exceptions


def lookup(encoding: str) -> codecs.CodecInfo:
    """
    Look up the codec for an encoding name.

    Raises:
        UnsupportedEncoding, if the name is unknown or does not denote a text encoding.
    """
    try:
        info = codecs.lookup(encoding)
    except LookupError:
        raise exceptions.UnsupportedEncoding(encoding) from None
    # bytes-to-bytes codecs such as "zlib" or "hex" cannot be used to transcode text.
    if not getattr(info, "_is_text_encoding", True):
        raise exceptions.UnsupportedEncoding(encoding)
    return info


def decode(content: bytes, encoding: str, errors: str = "strict") -> str:
    """
    Decode content with the given encoding.

    Raises:
        UnsupportedEncoding, if the encoding name is unknown.
        TranscodeError, if content is not valid in the encoding.
    """
    codec = lookup(encoding)
    try:
        return content.decode(codec.name, errors)
    except UnicodeError as e:
        raise exceptions.TranscodeError(
            "{} when decoding {} with {}: {}".format(
                type(e).__name__,
                repr(content)[:10],
                repr(encoding),
                repr(e),
            )
        ) from e


def encode(text: str, encoding: str, errors: str = "strict") -> bytes:
    """
    Encode text with the given encoding. Codecs that write a byte order mark
    write it once, at the start.

    Raises:
        UnsupportedEncoding, if the encoding name is unknown.
        TranscodeError, if text cannot be represented in the encoding.
    """
    codec = lookup(encoding)
    try:
        return text.encode(codec.name, errors)
    except UnicodeError as e:
        raise exceptions.TranscodeError(
            "{} when encoding {} with {}: {}".format(
                type(e).__name__,
                repr(text)[:10],
                repr(encoding),
                repr(e),
            )
        ) from e


def transcode(
    content: bytes, from_encoding: str, to_encoding: str, errors: str = "strict"
) -> bytes:
    """
    Convert content from one character encoding to another.

    Returns:
        The transcoded content. If both names refer to the same codec,
        content is returned unchanged.

    Raises:
        UnsupportedEncoding, if either encoding name is unknown.
        TranscodeError, if content cannot be decoded or encoded.
    """
    source = lookup(from_encoding)
    target = lookup(to_encoding)
    if len(content) == 0 or source.name == target.name:
        return content
    return encode(decode(content, from_encoding, errors), to_encoding, errors)


__all__ = ["lookup", "decode", "encode", "transcode"]
