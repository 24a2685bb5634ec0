"""Search intent models — What the caller wants to find, independent of query DSL.

Each intent is a frozen pydantic model tagged by ``kind`` so that a
``SearchIntent`` can be parsed from plain data (config files, CLI, JSON):

    >>> TypeAdapter(SearchIntent).validate_python({"kind": "match", "field": "name", "text": "laptop"})
    MatchIntent(kind='match', field='name', text='laptop', page=None)

Open-ended parts of the engine grammar (bool sub-clauses, fuzziness,
aggregation specs) are carried as ``JsonValue`` fragments and passed through
to the engine untouched.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue

QueryDocument = dict[str, JsonValue]
"""Engine-native query body (nested JSON-compatible mapping)."""


class _Intent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PageWindow(_Intent):
    """Result window requested by the caller.

    Unset fields are left to the engine defaults (``from=0``, ``size=10``).
    """

    from_: int | None = Field(default=None, alias="from", description="Starting offset")
    size: int | None = Field(default=None, description="Number of hits per page")


class MatchIntent(_Intent):
    """Full-text match on a single field."""

    kind: Literal["match"] = "match"
    field: str
    text: str
    page: PageWindow | None = None


class MultiMatchIntent(_Intent):
    """One query string fanned out across an ordered list of fields."""

    kind: Literal["multi_match"] = "multi_match"
    text: str
    fields: tuple[str, ...] = Field(description="Ordered field list; order sets boost precedence")
    page: PageWindow | None = None


class BoolIntent(_Intent):
    """Boolean composition of caller-built sub-clauses."""

    kind: Literal["bool"] = "bool"
    must: tuple[JsonValue, ...] = ()
    should: tuple[JsonValue, ...] = ()
    must_not: tuple[JsonValue, ...] = ()
    filter: tuple[JsonValue, ...] = ()


class RangeIntent(_Intent):
    """Numeric or date range filter on a single field."""

    kind: Literal["range"] = "range"
    field: str
    bounds: dict[str, JsonValue] = Field(description="Any of gte / gt / lte / lt")


class FuzzyIntent(_Intent):
    """Typo-tolerant term match; edit distance is computed by the engine."""

    kind: Literal["fuzzy"] = "fuzzy"
    field: str
    text: str
    fuzziness: JsonValue = Field(default="AUTO", description="Edit distance or the engine's 'AUTO' token")


class PhraseIntent(_Intent):
    """Phrase match allowing ``slop`` term displacements."""

    kind: Literal["phrase"] = "phrase"
    field: str
    phrase: str
    slop: int = 0


class AggregationIntent(_Intent):
    """Metric/bucket aggregations only; no hits are requested."""

    kind: Literal["aggregation"] = "aggregation"
    aggregations: dict[str, JsonValue]


SearchIntent = Annotated[
    MatchIntent | MultiMatchIntent | BoolIntent | RangeIntent | FuzzyIntent | PhraseIntent | AggregationIntent,
    Field(discriminator="kind"),
]
