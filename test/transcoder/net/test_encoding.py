import pytest

from transcoder import exceptions
from transcoder.net import encoding


@pytest.mark.parametrize(
    "content,from_encoding,to_encoding,expected",
    [
        (b"\xe4\xf6\xfc", "iso-8859-1", "utf-8", b"\xc3\xa4\xc3\xb6\xc3\xbc"),
        (b"\xc3\xa4", "UTF-8", "latin1", b"\xe4"),
        (b"foo", "ascii", "utf-16-le", b"f\x00o\x00o\x00"),
        (b"\xa4", "iso-8859-15", "utf-8", "€".encode()),
    ],
)
def test_transcode(content, from_encoding, to_encoding, expected):
    assert encoding.transcode(content, from_encoding, to_encoding) == expected


def test_transcode_same_codec():
    # invalid utf-8, but nothing needs to be converted.
    content = b"\xff\xfe"
    assert encoding.transcode(content, "utf-8", "UTF8") is content
    assert encoding.transcode(content, "latin1", "iso-8859-1") is content


def test_transcode_empty():
    assert encoding.transcode(b"", "latin1", "utf-8") == b""
    with pytest.raises(exceptions.UnsupportedEncoding):
        encoding.transcode(b"", "nope", "utf-8")


@pytest.mark.parametrize(
    "from_encoding,to_encoding,unknown",
    [
        ("iso-8859-99", "utf-8", "iso-8859-99"),
        ("utf-8", "placeholder-encoding", "placeholder-encoding"),
        ("zlib", "utf-8", "zlib"),
    ],
)
def test_transcode_unsupported(from_encoding, to_encoding, unknown):
    with pytest.raises(exceptions.UnsupportedEncoding) as e:
        encoding.transcode(b"foo", from_encoding, to_encoding)
    assert e.value.encoding == unknown
    assert isinstance(e.value, LookupError)


def test_transcode_invalid_content():
    with pytest.raises(exceptions.TranscodeError, match="UnicodeDecodeError"):
        encoding.transcode(b"\xff", "utf-8", "latin1")
    with pytest.raises(exceptions.TranscodeError, match="UnicodeEncodeError"):
        encoding.transcode("€".encode(), "utf-8", "latin1")
    assert (
        encoding.transcode("€".encode(), "utf-8", "latin1", errors="replace") == b"?"
    )


def test_decode_encode():
    assert encoding.decode(b"\xe4", "latin1") == "ä"
    assert encoding.encode("ä", "utf-8") == b"\xc3\xa4"
    # the byte order mark is written once per call
    assert encoding.encode("ab", "utf-16") == "ab".encode("utf-16")
    assert encoding.encode("", "utf-8-sig") == b"\xef\xbb\xbf"
    with pytest.raises(exceptions.TranscodeError, match="when decoding"):
        encoding.decode(b"\xff", "utf-8")
    with pytest.raises(exceptions.TranscodeError, match="when encoding"):
        encoding.encode("€", "ascii")
    with pytest.raises(exceptions.UnsupportedEncoding):
        encoding.decode(b"", "placeholder-encoding")
    with pytest.raises(exceptions.UnsupportedEncoding):
        encoding.encode("", "zlib")


def test_lookup():
    assert encoding.lookup("LATIN1").name == "iso8859-1"
    with pytest.raises(exceptions.UnsupportedEncoding):
        encoding.lookup("hex")
