"""
We use builtin exceptions wherever possible and specialize where necessary.

Every exception that is raised by transcoder itself is a subclass of
TranscoderException. Where a builtin exception describes the failure equally
well (e.g. LookupError for unknown encodings), the specialized exception also
inherits from it, so that callers can catch either one.

"No encoding found" is not an error: detectors return None or an empty
result in that case.
"""


class TranscoderException(Exception):
    """
    Base class for all exceptions thrown by transcoder.
    """

    def __init__(self, message=None):
        super().__init__(message)


class HeaderSyntaxError(TranscoderException, ValueError):
    """
    Raised if a header value contains text that matches none of the
    header word grammar rules.
    """

    def __init__(self, remainder: str):
        super().__init__(f"Malformed header word syntax: {remainder!r}")
        self.remainder = remainder


class UnsupportedEncoding(TranscoderException, LookupError):
    """
    Raised if the transcoding service does not know an encoding name.
    """

    def __init__(self, encoding: str):
        super().__init__(f"Unsupported encoding: {encoding!r}")
        self.encoding = encoding


class TranscodeError(TranscoderException, ValueError):
    """
    Raised if the content cannot be represented in the source or target encoding.
    """


class OptionsError(TranscoderException):
    pass
