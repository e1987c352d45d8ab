from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from dataclasses import replace
from typing import Union

from transcoder.utils import typecheck

Headers = dict[str, Union[str, list[str]]]


@dataclass
class Response:
    """
    A minimal HTTP response as seen by the transcoder.

    Headers map header names (in their original spelling) to either a single
    value or a list of values if the header was repeated.
    """

    status_code: int
    headers: Headers = field(default_factory=dict)
    content: bytes = b""
    reason: str = ""

    # noinspection PyUnreachableCode
    if __debug__:

        def __post_init__(self):
            for f in fields(self):
                val = getattr(self, f.name)
                typecheck.check_option_type(f.name, val, f.type)

    def with_changes(self, headers: Mapping, content: bytes) -> "Response":
        return replace(self, headers=dict(headers), content=content)
