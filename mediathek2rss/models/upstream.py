"""Shared base for models parsed from upstream API responses."""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from mediathek2rss.core.errors import UpstreamMalformedError

M = TypeVar("M", bound=BaseModel)


class UpstreamModel(BaseModel):
    """Lenient model: unknown keys are ignored and nulls fall back to defaults."""

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


def parse_response(model: type[M], body: bytes, url: str) -> M:
    """Parse a JSON body into model, raising UpstreamMalformedError on failure."""
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise UpstreamMalformedError(f"Unexpected response from {url}: {e}", e)
