"""Tests for browse search, facets and related objects."""

from archivist.catalog import ArchiveObject, load_sample_objects
from archivist.catalog.search import (
    facet_values,
    filter_objects,
    matches_query,
    related_objects,
    relatedness,
)


def test_matches_query_is_case_insensitive() -> None:
    obj = ArchiveObject(id="1", title="Copper Lantern", keywords=["lighting"], maker="Van Erp")

    assert matches_query(obj, "copper")
    assert matches_query(obj, "LIGHTING")
    assert matches_query(obj, "van erp")
    assert matches_query(obj, "  ")
    assert not matches_query(obj, "oak")


def test_filter_objects_combines_filters() -> None:
    samples = load_sample_objects()

    fixtures = filter_objects(samples, collection="Original Fixtures")
    assert [obj.id for obj in fixtures] == ["2", "4"]

    entry = filter_objects(samples, collection="Original Fixtures", keyword="entry", query="iron")
    assert [obj.id for obj in entry] == ["4"]

    assert filter_objects(samples) == samples
    assert filter_objects(samples, object_type="Spaceship") == []


def test_facet_values_are_sorted_and_distinct() -> None:
    facets = facet_values(load_sample_objects())

    assert facets.collections == sorted(set(facets.collections))
    assert "Original Fixtures" in facets.collections
    assert "Fixture" in facets.object_types
    assert facets.keywords.count("original") == 1


def test_relatedness_scores_shared_traits() -> None:
    current = ArchiveObject(
        id="1",
        collection="Fixtures",
        object_type="Lamp",
        keywords=["copper", "entry"],
        designer="Julia Morgan",
    )
    other = ArchiveObject(
        id="2",
        collection="Fixtures",
        object_type="Lamp",
        keywords=["copper"],
        maker="Julia Morgan",
    )

    assert relatedness(current, other) == 3 + 2 + 1 + 2


def test_related_objects_ranks_by_score() -> None:
    samples = load_sample_objects()
    lantern = next(obj for obj in samples if obj.id == "2")

    related = related_objects(lantern, samples)

    assert [obj.id for obj in related] == ["4", "1", "3"]


def test_related_objects_excludes_unrelated_and_self() -> None:
    lonely = ArchiveObject(id="99", title="Meteorite", collection="Space")

    assert related_objects(lonely, [lonely, *load_sample_objects()]) == []
