from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# Outbound parameter precedence when more than one predicate is present.
PREDICATE_PARAMS: tuple[tuple[str, str], ...] = (
    ("query", "q"),
    ("region", "region"),
    ("category", "category"),
    ("country", "country"),
)


class FilterState(BaseModel):
    """The single active discovery predicate.

    Every setter returns a fresh state holding only the new predicate, so a
    region never coexists with a category, a country or a free-text query.
    An empty value yields the empty state, which lists the whole catalog.
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    region: str = ""
    category: str = ""
    country: str = ""

    def set_query(self, text: str | None) -> "FilterState":
        return FilterState(query=(text or "").strip())

    def set_region(self, region: str | None) -> "FilterState":
        return FilterState(region=(region or "").strip())

    def set_category(self, category: str | None) -> "FilterState":
        return FilterState(category=(category or "").strip())

    def set_country(self, country: str | None) -> "FilterState":
        return FilterState(country=(country or "").strip())

    def clear(self) -> "FilterState":
        return FilterState()

    @property
    def active(self) -> tuple[str, str] | None:
        for field_name, _ in PREDICATE_PARAMS:
            value = getattr(self, field_name)
            if value:
                return field_name, value
        return None

    @property
    def is_empty(self) -> bool:
        return self.active is None

    def to_query_params(self) -> dict[str, str]:
        for field_name, param in PREDICATE_PARAMS:
            value = getattr(self, field_name)
            if value:
                return {param: value}
        return {}
