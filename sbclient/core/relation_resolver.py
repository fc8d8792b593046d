"""Relation resolution for fetched stories.

Replaces relation identifiers (story UUIDs) inside a story's content tree
with the referenced stories. Only fields named by the caller as
'component.field' are touched. Resolution is best-effort: identifiers with
no known story are left as-is (scalar fields) or dropped (list fields).
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from sbclient.domain.errors import ConfigurationError
from sbclient.domain.models.common import ApiResponse, RelationField, StoryUuid
from sbclient.domain.models.content import Component, Sequence, classify

logger = logging.getLogger(__name__)

RELATION_BATCH_SIZE = 50

StoriesFetcher = Callable[[Dict[str, Any]], Awaitable[ApiResponse]]


def parse_relation_fields(value: Union[str, List[str], None]) -> List[RelationField]:
    """Normalizes the resolve_relations parameter into qualifiers.

    Args:
        value: A comma separated string or a list of 'component.field' names.

    Returns:
        The list of qualifiers (empty when value is empty or None).

    Raises:
        ConfigurationError: If the value or any entry is malformed.
    """
    if value is None:
        return []
    if isinstance(value, str):
        entries = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple)):
        if not all(isinstance(part, str) for part in value):
            raise ConfigurationError("resolve_relations entries must be strings")
        entries = [part.strip() for part in value if part.strip()]
    else:
        raise ConfigurationError(
            f"resolve_relations must be a string or a list of strings, got {type(value).__name__}"
        )

    for entry in entries:
        component, _, field_name = entry.partition(".")
        if not component or not field_name:
            raise ConfigurationError(f"Invalid relation field {entry!r}; expected 'component.field'")
    return [RelationField(entry) for entry in entries]


def chunk(items: List[Any], size: int = RELATION_BATCH_SIZE) -> List[List[Any]]:
    """Splits items into consecutive batches of at most size elements."""
    return [items[i:i + size] for i in range(0, len(items), size)]


class RelationResolver:
    """Fills relation fields from a per-client Relation Table."""

    def __init__(self, fetch_stories: StoriesFetcher, relations: Optional[Dict[StoryUuid, Any]] = None):
        """Initializes the resolver.

        Args:
            fetch_stories: Coroutine issuing a story list request for params.
            relations: The Relation Table (story uuid -> story). Additive only.
        """
        self.fetch_stories = fetch_stories
        self.relations: Dict[StoryUuid, Any] = relations if relations is not None else {}

    async def _collect_relations(self, response_data: Dict[str, Any], version: Optional[str]) -> List[Dict[str, Any]]:
        rel_uuids = response_data.get("rel_uuids")
        if not rel_uuids:
            return list(response_data.get("rels") or [])

        relations: List[Dict[str, Any]] = []
        batches = chunk(list(rel_uuids))
        logger.debug(f"Fetching {len(rel_uuids)} related stories in {len(batches)} batch(es).")
        for batch in batches:
            res = await self.fetch_stories({
                "per_page": RELATION_BATCH_SIZE,
                "version": version,
                "by_uuids": ",".join(batch),
            })
            relations.extend((res.data or {}).get("stories") or [])
        return relations

    async def resolve(self, response_data: Dict[str, Any], params: Dict[str, Any]) -> None:
        """Resolves relations of every story in response_data, in place.

        Args:
            response_data: Parsed response body holding 'story' or 'stories'.
            params: The request parameters ('resolve_relations', 'version').
        """
        fields = parse_relation_fields(params.get("resolve_relations"))
        if not fields:
            raise ConfigurationError("resolve_relations must name at least one 'component.field'")

        for story in await self._collect_relations(response_data, params.get("version")):
            uuid = story.get("uuid") if isinstance(story, dict) else None
            if uuid:
                self.relations[StoryUuid(uuid)] = story

        if response_data.get("story"):
            self.insert_relations(response_data["story"], fields)
        else:
            for story in response_data.get("stories") or []:
                self.insert_relations(story, fields)

    def insert_relations(self, story: Dict[str, Any], fields: List[str]) -> None:
        """Rewrites the eligible relation fields of one story in place."""
        self._enrich(story.get("content"), frozenset(fields))

    def _resolve_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.relations.get(value, value)
        if isinstance(value, list):
            return [self.relations[uuid] for uuid in value if isinstance(uuid, str) and uuid in self.relations]
        return value

    def _enrich(self, node: Any, fields: frozenset) -> None:
        variant = classify(node)
        if isinstance(variant, Sequence):
            for item in variant.items:
                self._enrich(item, fields)
        elif isinstance(variant, Component):
            for name in list(variant.fields):
                if variant.qualified(name) in fields:
                    variant.fields[name] = self._resolve_value(variant.fields[name])
                # Resolved stories may carry relation fields of their own
                self._enrich(variant.fields[name], fields)
