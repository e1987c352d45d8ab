import logging

import pytest

from transcoder import exceptions
from transcoder import options
from transcoder.http import Response
from transcoder.rewriter import Outcome
from transcoder.rewriter import Transcoder

TYPES = {
    "html4": "text/html",
    "html5": "text/html",
    "text-xml": "text/xml",
    "application-rss-xml": "application/rss+xml",
    "application-xml": "application/xml",
}

TEXT = (
    "Just a little piece of text with some german umlauts like äöüßÄÖÜ "
    "and maybe some more UTF-8 characters"
)


def make_response(body_encoding, header_charset, meta_charset, kind) -> Response:
    headers = {
        "Date": "Wed, 26 Nov 2014 22:26:29 GMT",
        "Server": "Apache",
        "Content-Language": "en",
        "Vary": "Accept-Encoding",
        "Content-Type": TYPES[kind],
    }
    if header_charset is not None:
        headers["Content-Type"] += f"; charset={header_charset}"

    meta = ""
    if kind == "html4":
        if meta_charset is not None:
            meta = f"<meta http-equiv='content-type' content='{TYPES[kind]}; charset={meta_charset}'>"
        content = (
            '<!DOCTYPE HTML PUBLIC "-//W3C//DTD HTML 4.01 Transitional//EN" '
            '"http://www.w3.org/TR/html4/loose.dtd">'
            f"<html><head>{meta}<title>Umlauts everywhere öäüßÖÄÜ</title></head>"
            f"<body>{TEXT}</body></html>"
        )
    elif kind == "html5":
        if meta_charset is not None:
            meta = f"<meta charset='{meta_charset}'>"
        content = (
            f"<!DOCTYPE html><html><head>{meta}<title>Umlauts everywhere öäüßÖÄÜ</title></head>"
            f"<body>{TEXT}</body></html>"
        )
    else:
        if meta_charset is not None:
            meta = f" encoding='{meta_charset}'"
        content = f"<?xml version='1.0'{meta}><foo><bar>{TEXT}</bar></foo>"

    return Response(200, headers, content.encode(body_encoding))


SRC = "iso-8859-1"
DST = "utf-8"

# mode: (replace_headers, replace_content)
MODES = {
    "none": (False, False),
    "header": (True, False),
    "header-meta": (True, True),
    "meta": (False, True),
}

# (input, {mode: expected}) as (body encoding, header charset, meta charset)
CASES = {
    "no charset": (
        (SRC, None, None),
        {
            "none": (SRC, None, None),
            "header": (SRC, None, None),
            "header-meta": (SRC, None, None),
            "meta": (SRC, None, None),
        },
    ),
    "charset in header": (
        (SRC, SRC, None),
        {
            "none": (DST, SRC, None),
            "header": (DST, DST, None),
            "header-meta": (DST, DST, None),
            "meta": (DST, SRC, None),
        },
    ),
    "charset in header and body": (
        (SRC, SRC, SRC),
        {
            "none": (DST, SRC, SRC),
            "header": (DST, DST, SRC),
            "header-meta": (DST, DST, DST),
            "meta": (DST, SRC, DST),
        },
    ),
    "charset in body": (
        (SRC, None, SRC),
        {
            "none": (DST, None, SRC),
            "header": (DST, DST, SRC),
            "header-meta": (DST, DST, DST),
            "meta": (DST, None, DST),
        },
    ),
}


@pytest.mark.parametrize("kind", list(TYPES))
@pytest.mark.parametrize("case", list(CASES))
@pytest.mark.parametrize("mode", list(MODES))
def test_convert(kind, case, mode):
    given, expected = CASES[case]
    replace_headers, replace_content = MODES[mode]
    t = Transcoder(
        target_encoding=DST,
        replace_headers=replace_headers,
        replace_content=replace_content,
    )

    response = t.convert(make_response(*given, kind))

    assert response == make_response(*expected[mode], kind)


class TestRewrite:
    def test_body_declaration_wins(self):
        t = Transcoder(target_encoding="utf-16")
        content = b'<html><head><meta charset="UTF-16"></head></html>\x00'
        outcome, result = t.rewrite(
            {"Content-Type": "text/html; charset=ISO-8859-1"}, content
        )
        assert outcome is Outcome.CONVERTED
        # utf-16 to utf-16 leaves the content untouched.
        assert result["content"] is content
        assert result["headers"] == {"Content-Type": "text/html; charset=utf-16"}

    def test_http_equiv_without_header_charset(self):
        t = Transcoder(target_encoding="utf-8", replace_content=True)
        outcome, result = t.rewrite(
            {"Content-Type": "text/html"},
            b'<meta http-equiv="content-type" content="text/html; charset=ISO-8859-1">'
            b"<p>caf\xe9</p>",
        )
        assert outcome is Outcome.CONVERTED
        assert result == {
            "headers": {"Content-Type": "text/html; charset=utf-8"},
            "content": (
                b'<meta http-equiv="content-type" content="text/html; charset=utf-8">'
                b"<p>caf\xc3\xa9</p>"
            ),
        }

    def test_header_charset_without_declaration(self):
        t = Transcoder()
        outcome, result = t.rewrite(
            {"Content-Type": "application/xml; charset=iso-8859-1"},
            b"<foo>\xe9</foo>",
        )
        assert outcome is Outcome.CONVERTED
        assert result["content"] == b"<foo>\xc3\xa9</foo>"
        assert result["headers"] == {"Content-Type": "application/xml; charset=utf-8"}

    def test_no_content_type(self):
        t = Transcoder()
        assert t.rewrite({}, b'<meta charset="utf-8">') == (
            Outcome.NO_CONTENT_TYPE_HEADER,
            None,
        )
        assert t.rewrite({"Content-Type": []}, b"") == (
            Outcome.NO_CONTENT_TYPE_HEADER,
            None,
        )

    def test_no_encoding_declared(self):
        t = Transcoder()
        assert t.rewrite({"Content-Type": "text/html"}, b"<html></html>") == (
            Outcome.NO_ENCODING_DECLARED,
            None,
        )
        # body declarations are only considered for HTML and XML.
        assert t.rewrite({"Content-Type": "text/plain"}, b"<meta charset=latin1>") == (
            Outcome.NO_ENCODING_DECLARED,
            None,
        )

    def test_header_casing(self):
        t = Transcoder()
        _, result = t.rewrite(
            {"content-TYPE": "Text/HTML; Charset=latin1; foo=bar", "X": "y"}, b"\xe4"
        )
        assert result["headers"] == {
            "content-TYPE": "Text/HTML; Charset=utf-8; foo=bar",
            "X": "y",
        }
        assert result["content"] == b"\xc3\xa4"

    def test_repeated_charset_parameter(self):
        t = Transcoder()
        _, result = t.rewrite(
            {"Content-Type": "text/html; charset=latin1; CHARSET=utf-8"}, b"\xe4"
        )
        assert result["content"] == b"\xc3\xa4"
        assert result["headers"] == {
            "Content-Type": "text/html; charset=utf-8; CHARSET=utf-8"
        }

    def test_list_valued_header(self):
        t = Transcoder()
        headers = {"Content-Type": ["text/html; charset=latin1", "text/plain"]}
        _, result = t.rewrite(headers, b"\xe4")
        assert result["headers"] == {"Content-Type": ["text/html; charset=utf-8"]}
        assert headers["Content-Type"] == ["text/html; charset=latin1", "text/plain"]

    def test_pass_through(self):
        t = Transcoder(replace_headers=False, replace_content=False)
        headers = {"Content-Type": "text/html; charset=UTF-8"}
        content = b'<meta charset="utf8"><p>\xc3\xa4</p>'
        _, result = t.rewrite(headers, content)
        assert result == {"headers": headers, "content": content}

    def test_replace_all_occurrences(self):
        t = Transcoder(replace_content=True)
        content = b"<meta charset=latin1><meta charset=latin1>"
        _, result = t.rewrite({"Content-Type": "text/html"}, content)
        assert result["content"] == b"<meta charset=utf-8><meta charset=utf-8>"

    def test_replacement_in_source_encoding(self):
        t = Transcoder(target_encoding="utf-16-le", replace_content=True)
        _, result = t.rewrite(
            {"Content-Type": "text/xml"},
            b"<?xml version='1.0' encoding='latin1'?><a/>",
        )
        assert result["content"] == (
            "<?xml version='1.0' encoding='utf-16-le'?><a/>".encode("utf-16-le")
        )

    def test_replacement_with_byte_order_mark(self):
        t = Transcoder(target_encoding="utf-16", replace_content=True)
        _, result = t.rewrite(
            {"Content-Type": "text/html"}, b"<p>x</p><meta charset=latin1>"
        )
        assert result["content"].decode("utf-16") == "<p>x</p><meta charset=utf-16>"
        assert result["content"] == "<p>x</p><meta charset=utf-16>".encode("utf-16")

        t = Transcoder(target_encoding="utf-8-sig", replace_content=True)
        _, result = t.rewrite(
            {"Content-Type": "application/xml"},
            b"<a/><?xml version='1.0' encoding='latin1'?>",
        )
        assert result["content"] == (
            b"\xef\xbb\xbf<a/><?xml version='1.0' encoding='utf-8-sig'?>"
        )

    def test_replacement_with_non_ascii_source(self):
        t = Transcoder(target_encoding="utf-8", replace_content=True)
        _, result = t.rewrite(
            {"Content-Type": "text/html"},
            b"<title>\xe4</title><meta charset=latin1><meta charset=latin1>",
        )
        assert result["content"] == (
            b"<title>\xc3\xa4</title><meta charset=utf-8><meta charset=utf-8>"
        )

    def test_scan_limit(self):
        headers = {"Content-Type": "text/html; charset=utf-8"}
        content = b" " * 100 + b"<meta charset=latin1>\xe4"

        t = Transcoder(scan_limit=50)
        with pytest.raises(exceptions.TranscodeError):
            t.rewrite(headers, content)

        for scan_limit in (None, 200):
            t = Transcoder(scan_limit=scan_limit)
            _, result = t.rewrite(headers, content)
            assert result["content"].endswith(b"\xc3\xa4")

    def test_unsupported_encoding(self):
        t = Transcoder()
        with pytest.raises(exceptions.UnsupportedEncoding):
            t.rewrite({"Content-Type": "text/html; charset=placeholder-encoding"}, b"")
        with pytest.raises(exceptions.UnsupportedEncoding) as e:
            t.rewrite({"Content-Type": "text/html"}, b"<meta charset=x-unknown/>")
        assert e.value.encoding == "x-unknown/"

        t = Transcoder(target_encoding="placeholder-encoding")
        with pytest.raises(exceptions.UnsupportedEncoding):
            t.rewrite({"Content-Type": "text/html; charset=utf-8"}, b"foo")

    def test_malformed_header(self):
        t = Transcoder()
        with pytest.raises(exceptions.HeaderSyntaxError):
            t.rewrite({"Content-Type": "text/html; ="}, b"")

    def test_invalid_content(self):
        t = Transcoder()
        with pytest.raises(exceptions.TranscodeError):
            t.rewrite({"Content-Type": "text/html; charset=utf-8"}, b"\xff")


def test_convert_response(caplog):
    caplog.set_level(logging.DEBUG)
    t = Transcoder()
    assert t.convert_response({}, b"") is None
    assert "no content-type header" in caplog.text

    result = t.convert_response({"Content-Type": "text/html; charset=latin1"}, b"\xe4")
    assert result == {
        "headers": {"Content-Type": "text/html; charset=utf-8"},
        "content": b"\xc3\xa4",
    }
    assert "from latin1 to utf-8" in caplog.text


def test_convert_unmodified():
    t = Transcoder()
    response = Response(200, {"Server": "Apache"}, b"<meta charset=latin1>")
    assert t.convert(response) is response


def test_convert_keeps_status():
    t = Transcoder()
    response = Response(
        404, {"Content-Type": "text/html; charset=latin1"}, b"\xe4", "Not Found"
    )
    converted = t.convert(response)
    assert converted is not response
    assert converted.status_code == 404
    assert converted.reason == "Not Found"
    assert converted.content == b"\xc3\xa4"
    # the original is not modified
    assert response.content == b"\xe4"


def test_middleware():
    t = Transcoder()

    def fetch(url, *, status=200):
        """Fetch a page."""
        return Response(status, {"Content-Type": "text/plain; charset=latin1"}, b"\xe4")

    wrapped = t(fetch)
    assert wrapped.__name__ == "fetch"
    assert wrapped.__doc__ == "Fetch a page."
    response = wrapped("http://example.com/", status=201)
    assert response.status_code == 201
    assert response.headers == {"Content-Type": "text/plain; charset=utf-8"}
    assert response.content == b"\xc3\xa4"


def test_from_options():
    opts = options.Options(target_encoding="latin1", scan_limit=None)
    t = Transcoder.from_options(opts)
    assert t.target_encoding == "latin1"
    assert t.replace_headers is True
    assert t.replace_content is False
    assert t.scan_limit is None
    assert repr(t) == (
        "Transcoder(target_encoding='latin1', replace_headers=True, "
        "replace_content=False, scan_limit=None)"
    )


def test_outcome_values():
    assert [o.value for o in Outcome] == [
        "no content-type header",
        "no encoding declared",
        "converted",
    ]
