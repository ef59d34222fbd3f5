"""Browse-time search, facet filtering and related-object scoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .models import ArchiveObject

SAME_COLLECTION_SCORE = 3
SAME_TYPE_SCORE = 2
SHARED_KEYWORD_SCORE = 1
SHARED_MAKER_SCORE = 2


@dataclass(slots=True)
class Facets:
    """Distinct filter values available across a set of objects."""

    object_types: list[str] = field(default_factory=list)
    collections: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)


def _searchable_text(obj: ArchiveObject) -> str:
    parts = [
        obj.title,
        obj.about_text,
        obj.object_type,
        obj.collection,
        obj.origin,
        obj.designer,
        obj.maker,
        obj.object_number,
        *obj.keywords,
    ]
    return " ".join(part for part in parts if part).lower()


def matches_query(obj: ArchiveObject, query: str) -> bool:
    """Return True when ``query`` occurs case-insensitively in the object's text."""
    needle = query.strip().lower()
    if not needle:
        return True
    return needle in _searchable_text(obj)


def filter_objects(
    objects: Iterable[ArchiveObject],
    *,
    query: Optional[str] = None,
    object_type: Optional[str] = None,
    collection: Optional[str] = None,
    keyword: Optional[str] = None,
) -> list[ArchiveObject]:
    """Apply the browse filters; empty filters match everything."""
    results = []
    for obj in objects:
        if query and not matches_query(obj, query):
            continue
        if object_type and obj.object_type != object_type:
            continue
        if collection and obj.collection != collection:
            continue
        if keyword and keyword not in obj.keywords:
            continue
        results.append(obj)
    return results


def facet_values(objects: Iterable[ArchiveObject]) -> Facets:
    """Collect sorted distinct object types, collections and keywords."""
    types: set[str] = set()
    collections: set[str] = set()
    keywords: set[str] = set()
    for obj in objects:
        if obj.object_type:
            types.add(obj.object_type)
        if obj.collection:
            collections.add(obj.collection)
        keywords.update(keyword for keyword in obj.keywords if keyword)
    return Facets(
        object_types=sorted(types),
        collections=sorted(collections),
        keywords=sorted(keywords, key=str.lower),
    )


def _maker_names(obj: ArchiveObject) -> set[str]:
    return {name for name in (obj.maker, obj.designer) if name}


def relatedness(current: ArchiveObject, other: ArchiveObject) -> int:
    """Score how closely ``other`` relates to ``current``."""
    score = 0
    if current.collection and other.collection == current.collection:
        score += SAME_COLLECTION_SCORE
    if current.object_type and other.object_type == current.object_type:
        score += SAME_TYPE_SCORE
    score += SHARED_KEYWORD_SCORE * len(set(current.keywords) & set(other.keywords))
    score += SHARED_MAKER_SCORE * len(_maker_names(current) & _maker_names(other))
    return score


def related_objects(
    current: ArchiveObject,
    objects: Sequence[ArchiveObject],
    *,
    limit: int = 3,
) -> list[ArchiveObject]:
    """Return up to ``limit`` objects sharing the most traits with ``current``."""
    scored = [
        (relatedness(current, other), other) for other in objects if other.id != current.id
    ]
    ranked = sorted((pair for pair in scored if pair[0] > 0), key=lambda pair: -pair[0])
    return [other for _, other in ranked[:limit]]


__all__ = [
    "Facets",
    "facet_values",
    "filter_objects",
    "matches_query",
    "related_objects",
    "relatedness",
]
