"""Shared request parsing: form coercion rules and pagination."""
import pydantic
from pydantic import BaseModel, field_validator
from app.exceptions import ValidationError

TRUTHY = {"on", "true", "1", "yes"}


def parse_flag(value) -> bool:
    """Checkbox-style flag: "on" / "true" / "1" / "yes" (any case) mean True."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY


def blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def parse(model: type[BaseModel], **values) -> BaseModel:
    """Validate raw request values into model; errors become a 400 ValidationError."""
    try:
        return model.model_validate(values)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "body"
        msg = first.get("msg", "invalid value").removeprefix("Value error, ")
        raise ValidationError(f"{field}: {msg}") from e


MAX_PAGE = 1_000_000
MAX_LIMIT = 100


class PageParams(BaseModel):
    """
    page / limit; anything absent, non-numeric or below 1 falls back to the default.
    Values above MAX_PAGE / MAX_LIMIT are clamped so OFFSET and LIMIT stay in integer range.
    """
    page: int = 1
    limit: int = 10

    @field_validator("page", "limit", mode="before")
    @classmethod
    def _positive_or_default(cls, v, info):
        default = cls.model_fields[info.field_name].default
        try:
            n = int(str(v).strip())
        except (TypeError, ValueError):
            return default
        if n < 1:
            return default
        return min(n, MAX_PAGE if info.field_name == "page" else MAX_LIMIT)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return -(-total // self.limit)
