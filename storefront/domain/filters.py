# storefront/domain/filters.py
import math
from decimal import Decimal, InvalidOperation
from typing import Annotated, Dict, Iterable, Literal, Tuple, Union

from pydantic import BaseModel, Field

RESERVED_KEYS = ("page", "ordering")


class BoolFilter(BaseModel):
    kind: Literal["bool"] = "bool"
    value: bool


class NumberFilter(BaseModel):
    kind: Literal["number"] = "number"
    value: float


class TextFilter(BaseModel):
    kind: Literal["text"] = "text"
    value: str


FilterValue = Annotated[Union[BoolFilter, NumberFilter, TextFilter], Field(discriminator="kind")]


class ProductQuery(BaseModel):
    """Parametry listingu produktów po sparsowaniu query stringa."""

    page: int = Field(default=1, ge=1)
    ordering: str | None = None
    filters: Dict[str, FilterValue] = Field(default_factory=dict)


def parse_filter_value(raw: str) -> BoolFilter | NumberFilter | TextFilter:
    """
    Reguły koercji:
    - "true" / "false" -> bool
    - skończony literał dziesiętny -> number
    - cała reszta -> text
    """
    if raw == "true":
        return BoolFilter(value=True)
    if raw == "false":
        return BoolFilter(value=False)

    stripped = raw.strip()
    if stripped:
        try:
            number = Decimal(stripped)
        except InvalidOperation:
            number = None
        if number is not None and number.is_finite():
            return NumberFilter(value=float(number))

    return TextFilter(value=raw)


def parse_product_query(params: Iterable[Tuple[str, str]]) -> ProductQuery:
    filters: Dict[str, FilterValue] = {}
    page = 1
    ordering = None

    #kolejne wystapienie tego samego klucza nadpisuje poprzednie
    for key, raw in params:
        if key == "page":
            try:
                page = max(int(raw), 1)
            except ValueError:
                page = 1
        elif key == "ordering":
            ordering = raw or None
        else:
            filters[key] = parse_filter_value(raw)

    return ProductQuery(page=page, ordering=ordering, filters=filters)


def _render(value: FilterValue) -> str | None:
    if isinstance(value, BoolFilter):
        return "true" if value.value else "false"
    if isinstance(value, NumberFilter):
        if math.isfinite(value.value) and value.value.is_integer():
            return str(int(value.value))
        return repr(value.value)
    return value.value or None


def to_api_params(query: ProductQuery, category: str | None = None) -> Dict[str, str]:
    """Odwrotny krok: typowane filtry -> parametry dla backendu."""
    params: Dict[str, str] = {"page": str(query.page)}
    if category:
        params["category"] = category
    if query.ordering:
        params["ordering"] = query.ordering

    for key, value in query.filters.items():
        rendered = _render(value)
        if rendered is not None:
            params[key] = rendered
    return params
