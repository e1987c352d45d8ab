import enum
import functools
import logging
from collections.abc import Callable
from collections.abc import Mapping
from typing import Optional
from typing import TypedDict

from transcoder import charset
from transcoder import http
from transcoder import options
from transcoder.net import encoding
from transcoder.net.http import headers as http_headers
from transcoder.net.http.headers import HeaderValue
from transcoder.utils import strutils

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    NO_CONTENT_TYPE_HEADER = "no content-type header"
    NO_ENCODING_DECLARED = "no encoding declared"
    CONVERTED = "converted"


class RewriteResult(TypedDict):
    headers: dict[str, HeaderValue]
    content: bytes


class Transcoder:
    """
    Converts HTTP responses to a target encoding.

    The original encoding is defined by (in order):
     - the charset declaration in the body of an HTML (text/html) or
       XML (text/xml, application/xml, application/*+xml) document
     - the charset parameter of the Content-Type header

    Responses without a Content-Type header are never converted, even if
    the body declares a charset.

    A Transcoder can be used as middleware around any callable that returns
    a Response:

    >>> fetch = Transcoder(target_encoding="utf-8")(fetch)
    """

    def __init__(
        self,
        target_encoding: str = "utf-8",
        replace_headers: bool = True,
        replace_content: bool = False,
        scan_limit: Optional[int] = 8192,
    ) -> None:
        self.target_encoding = target_encoding
        self.replace_headers = replace_headers
        self.replace_content = replace_content
        self.scan_limit = scan_limit

    @classmethod
    def from_options(cls, opts: options.Options) -> "Transcoder":
        return cls(
            target_encoding=opts.target_encoding,
            replace_headers=opts.replace_headers,
            replace_content=opts.replace_content,
            scan_limit=opts.scan_limit,
        )

    def __repr__(self):
        return (
            f"Transcoder(target_encoding={self.target_encoding!r}, "
            f"replace_headers={self.replace_headers}, "
            f"replace_content={self.replace_content}, "
            f"scan_limit={self.scan_limit})"
        )

    def rewrite(
        self, headers: Mapping[str, HeaderValue], content: bytes
    ) -> tuple[Outcome, Optional[RewriteResult]]:
        """
        Like convert_response, but also reports why a response was not converted.
        """
        header = charset.from_header(headers, self.target_encoding)
        if header is None:
            return Outcome.NO_CONTENT_TYPE_HEADER, None

        head = content if self.scan_limit is None else content[: self.scan_limit]
        body = charset.from_body(header.mime_type, head, self.target_encoding)
        logger.debug(
            f"Declared encodings for {header.mime_type}: "
            f"header={header.declared}, body={body.declared}"
        )

        declared = body.declared or header.declared
        if declared is None:
            return Outcome.NO_ENCODING_DECLARED, None
        source = declared.name

        new_headers = dict(headers)
        if self.replace_headers:
            content_type = http_headers.assemble_content_type(
                header.mime_type, header.params
            )
            existing = http_headers.get_by_case_insensitive_key(
                headers, "content-type"
            )
            new_headers = http_headers.set_by_case_insensitive_key(
                headers,
                "content-type",
                [content_type] if isinstance(existing, list) else content_type,
            )

        if self.replace_content and body.replacements:
            # Replace on text, so that a byte order mark is only written once.
            text = encoding.decode(content, source)
            for replacement in body.replacements:
                logger.debug(
                    f"Replacing {strutils.bytes_to_escaped_str(replacement.matched)} "
                    f"with {strutils.bytes_to_escaped_str(replacement.replacement)}"
                )
                text = text.replace(
                    encoding.decode(replacement.matched, source),
                    encoding.decode(replacement.replacement, source),
                )
            converted = encoding.encode(text, self.target_encoding)
        else:
            converted = encoding.transcode(content, source, self.target_encoding)

        logger.info(
            f"Transcoded {header.mime_type} response from {source} to {self.target_encoding}."
        )
        return Outcome.CONVERTED, RewriteResult(headers=new_headers, content=converted)

    def convert_response(
        self, headers: Mapping[str, HeaderValue], content: bytes
    ) -> Optional[RewriteResult]:
        """
        Convert content to the target encoding.

        Returns:
            None, if the original encoding could not be determined.
            Otherwise, the new headers and content.

        Raises:
            HeaderSyntaxError, if a Content-Type value is malformed.
            UnsupportedEncoding, if the declared or the target encoding is unknown.
            TranscodeError, if the content is not valid in the declared encoding.
        """
        outcome, result = self.rewrite(headers, content)
        if result is None:
            logger.debug(f"Not transcoding response: {outcome.value}.")
        return result

    def convert(self, response: http.Response) -> http.Response:
        """
        Convert a response. If the original encoding cannot be determined,
        the response is returned unmodified.
        """
        result = self.convert_response(response.headers, response.content)
        if result is None:
            return response
        return response.with_changes(result["headers"], result["content"])

    def __call__(
        self, handler: Callable[..., http.Response]
    ) -> Callable[..., http.Response]:
        @functools.wraps(handler)
        def wrapper(*args, **kwargs) -> http.Response:
            return self.convert(handler(*args, **kwargs))

        return wrapper
