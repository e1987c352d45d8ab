from typing import Optional

from transcoder import exceptions
from transcoder import optmanager
from transcoder.net import encoding


class Options(optmanager.OptManager):
    def __init__(self, **kwargs) -> None:
        super().__init__()
        self.add_option(
            "target_encoding",
            str,
            "utf-8",
            "Encoding that response bodies are transcoded to.",
        )
        self.add_option(
            "replace_headers",
            bool,
            True,
            "Update the charset parameter of the Content-Type header to the target encoding.",
        )
        self.add_option(
            "replace_content",
            bool,
            False,
            """
            Update charset declarations in the body (HTML meta tags, XML declarations)
            to the target encoding.
            """,
        )
        self.add_option(
            "scan_limit",
            Optional[int],
            8192,
            """
            Number of bytes at the start of the body that are searched for charset
            declarations. Set to None to search the entire body.
            """,
        )
        self.update(**kwargs)

    def validate(self, updated: set[str]) -> None:
        if "target_encoding" in updated:
            try:
                encoding.lookup(self.target_encoding)
            except exceptions.UnsupportedEncoding as e:
                raise exceptions.OptionsError(str(e)) from e
        if "scan_limit" in updated:
            if self.scan_limit is not None and self.scan_limit <= 0:
                raise exceptions.OptionsError(
                    f"scan_limit must be positive, not {self.scan_limit}."
                )
