"""Parameters a feed request can carry."""

import re
from typing import Mapping

from pydantic import BaseModel, ConfigDict

DEFAULT_MEDIA_WIDTH = 1920
DEFAULT_MIN_LENGTH = 0

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _int_param(query: Mapping[str, str], name: str, default: int) -> int:
    """Read a decimal integer query parameter, ignoring malformed values."""
    value = query.get(name)
    if not value or not _INTEGER.fullmatch(value):
        return default
    return int(value)


class RequestParameters(BaseModel):
    """Requested media width and minimum episode length in seconds."""

    model_config = ConfigDict(frozen=True)

    width: int = DEFAULT_MEDIA_WIDTH
    min_length: int = DEFAULT_MIN_LENGTH

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "RequestParameters":
        return cls(
            width=_int_param(query, "width", DEFAULT_MEDIA_WIDTH),
            min_length=_int_param(query, "minLength", DEFAULT_MIN_LENGTH),
        )

    def __str__(self) -> str:
        return f"width={self.width},minLength={self.min_length}"
