"""Structured search filters extracted from a user query."""

from typing import Any, Dict, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from shopally.utils import logger

# Filters that, when present, mean the user asked for an explicit constraint and
# the catalog's own ordering should be kept.
CONSTRAINT_FILTERS = ("min_price", "max_price", "delivery_days_max")


class SearchFilters(BaseModel):
    """
    Closed set of search filters produced once per request by the query parser.

    Providers may return ``min_sale_price``/``max_sale_price``/``delivery_days``;
    these are accepted as aliases. Unknown keys are dropped and a value that
    cannot be coerced becomes None without affecting the other fields.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)

    keywords: Optional[str] = None
    category: Optional[str] = None
    category_ids: Optional[str] = None
    min_price: Optional[float] = Field(default=None, validation_alias=AliasChoices("min_price", "min_sale_price"))
    max_price: Optional[float] = Field(default=None, validation_alias=AliasChoices("max_price", "max_sale_price"))
    delivery_days_max: Optional[int] = Field(default=None, validation_alias=AliasChoices("delivery_days_max", "delivery_days"))
    target_currency: Optional[str] = None
    target_language: Optional[str] = None
    ship_to_country: Optional[str] = None
    sort: Optional[str] = None
    page_no: Optional[int] = None
    page_size: Optional[int] = None
    is_etb: Optional[bool] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        """Treat blank strings as absent."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("category_ids", mode="before")
    @classmethod
    def stringify_category_ids(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        if isinstance(value, (list, tuple)):
            return ",".join(str(v) for v in value) or None
        return value

    @field_validator("delivery_days_max", "page_no", "page_size", mode="before")
    @classmethod
    def coerce_int(cls, value: Any) -> Any:
        # "7.0" and 7.0 are both acceptable day counts
        if isinstance(value, str):
            value = value.strip()
            try:
                return int(float(value))
            except ValueError:
                return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @field_validator("*", mode="wrap")
    @classmethod
    def drop_invalid(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        """Replace a value that cannot be coerced with None so the other filters survive."""
        try:
            return handler(value)
        except ValidationError:
            logger.warning("⚠️ Dropping invalid filter %s=%r", info.field_name, value)
            return None

    def to_filters(self) -> Dict[str, Any]:
        """Return the filters as a dict with null and empty-string values pruned."""
        return {key: value for key, value in self.model_dump().items() if value is not None and value != ""}

    def has_constraints(self) -> bool:
        """Check whether a price or delivery constraint was extracted."""
        pruned = self.to_filters()
        return any(name in pruned for name in CONSTRAINT_FILTERS)
