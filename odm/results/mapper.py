"""Reconstruction of typed entities from store responses."""

from types import MappingProxyType
from typing import Any, TypeVar

from pydantic import ValidationError
from pydantic_core import to_json

from odm.exceptions import IncompleteResultError
from odm.interfaces import ISerializer
from odm.mapping import EntityMapping
from odm.results.models import SearchHit, SearchHits, TotalHitsRelation


T = TypeVar("T")


class ResultMapper:
    """Maps search and get responses back to entities.

    `_source` keys are renamed from store names to logical names, `_id` fills
    the id field and `_version` the version field. A hit without any id raises
    `IncompleteResultError`, as does a hit lacking a required attribute
    because of source filtering. Either aborts the whole page unless
    `skip_incomplete_hits` is set, in which case the hit is dropped and counted
    in `SearchHits.skipped_hits`.
    """

    def __init__(self, *, serializer: ISerializer, skip_incomplete_hits: bool = False) -> None:
        """Initialize ResultMapper with a serializer and an incomplete-hit policy."""
        self._serializer = serializer
        self._skip_incomplete_hits = skip_incomplete_hits

    def map_search(self, response: dict[str, Any], entity_type: type[T], mapping: EntityMapping) -> SearchHits[T]:
        """Map a search or scroll response to a page of hits."""
        raw_hits = response.get("hits", {})
        hits: list[SearchHit[T]] = []
        skipped = 0
        for raw_hit in raw_hits.get("hits", []):
            try:
                hits.append(self.map_hit(raw_hit, entity_type, mapping))
            except IncompleteResultError:
                if not self._skip_incomplete_hits:
                    raise
                skipped += 1

        total, relation = self._total(raw_hits.get("total"))
        return SearchHits(
            hits=tuple(hits),
            total=total,
            total_relation=relation,
            max_score=raw_hits.get("max_score"),
            aggregations=response.get("aggregations"),
            scroll_id=response.get("_scroll_id"),
            skipped_hits=skipped,
        )

    def map_hit(self, hit: dict[str, Any], entity_type: type[T], mapping: EntityMapping) -> SearchHit[T]:
        """Map one raw hit to a search hit."""
        fields = self._fields(hit, mapping)
        content = self._to_entity(hit, entity_type, mapping, fields)
        return SearchHit(
            content=content,
            id=hit.get("_id"),
            index=hit.get("_index"),
            score=hit.get("_score"),
            sort_values=tuple(hit.get("sort", ())),
            routing=hit.get("_routing"),
            highlight_fields=MappingProxyType(
                {name: tuple(fragments) for name, fragments in hit.get("highlight", {}).items()}
            ),
            fields=MappingProxyType(fields),
            version=hit.get("_version"),
        )

    def map_document(self, response: dict[str, Any], entity_type: type[T], mapping: EntityMapping) -> T:
        """Map a get response to an entity."""
        return self._to_entity(response, entity_type, mapping, self._fields(response, mapping))

    def _to_entity(
        self,
        hit: dict[str, Any],
        entity_type: type[T],
        mapping: EntityMapping,
        fields: dict[str, tuple[Any, ...]],
    ) -> T:
        document = mapping.from_store(hit.get("_source") or {})

        # Projected values fill attributes the source does not carry; the store
        # returns every field as an array, so single values are unwrapped.
        for name, values in fields.items():
            if name not in document and mapping.field(name) is not None:
                document[name] = values[0] if len(values) == 1 else list(values)

        if document.get(mapping.id_field) is None:
            if hit.get("_id") is None:
                raise IncompleteResultError(
                    f"Hit for {entity_type.__name__} carries no value for id field '{mapping.id_field}'", hit
                )
            document[mapping.id_field] = hit["_id"]

        if mapping.version_field is not None and hit.get("_version") is not None:
            document[mapping.version_field] = hit["_version"]

        try:
            return self._serializer.from_bytes(to_json(document), entity_type)
        except ValidationError as e:
            missing = [
                ".".join(str(part) for part in error["loc"]) for error in e.errors() if error["type"] == "missing"
            ]
            if not missing:
                raise
            raise IncompleteResultError(
                f"Hit for {entity_type.__name__} lacks required fields: {', '.join(missing)}", hit
            ) from e

    def _fields(self, hit: dict[str, Any], mapping: EntityMapping) -> dict[str, tuple[Any, ...]]:
        """Values of projected fields, keyed by logical name."""
        return {mapping.logical_name(name): tuple(values) for name, values in hit.get("fields", {}).items()}

    def _total(self, total: Any) -> tuple[int | None, TotalHitsRelation]:
        if total is None:
            return None, TotalHitsRelation.OFF
        if isinstance(total, int):
            return total, TotalHitsRelation.EQUAL_TO
        return total.get("value"), TotalHitsRelation(total.get("relation", "eq"))
