"""Unit tests for model grouping, filtering and pagination."""

import random

import pytest

from llm_bench.core.grouping import (
    filter_by_favorite,
    filter_by_search_term,
    find_group,
    group_by_model,
    latest_for_model,
    paginate,
)


@pytest.fixture
def sample_records(make_record):
    return [
        make_record(1, model="A", minutes=0),
        make_record(2, model="A", minutes=10),
        make_record(3, model="B", minutes=5),
    ]


class TestGroupByModel:
    """Test version grouping."""

    def test_two_groups(self, sample_records):
        groups = {group.model: group for group in group_by_model(sample_records)}

        assert set(groups) == {"A", "B"}
        assert groups["A"].has_multiple_versions is True
        assert groups["A"].latest_data.id == 2
        assert [r.id for r in groups["A"].all_versions] == [2, 1]
        assert groups["B"].has_multiple_versions is False
        assert groups["B"].version_count == 1

    def test_groups_ordered_by_latest_version(self, sample_records):
        assert [group.model for group in group_by_model(sample_records)] == ["A", "B"]

    def test_stable_under_reordering(self, sample_records):
        expected = [(g.model, g.latest_data.id, [r.id for r in g.all_versions]) for g in group_by_model(sample_records)]

        shuffled = list(sample_records)
        for seed in range(5):
            random.Random(seed).shuffle(shuffled)
            result = [(g.model, g.latest_data.id, [r.id for r in g.all_versions]) for g in group_by_model(shuffled)]
            assert result == expected

    def test_timestamp_ties_broken_by_id(self, make_record):
        records = [make_record(5, model="A"), make_record(7, model="A"), make_record(6, model="A")]

        group = group_by_model(records)[0]

        assert [r.id for r in group.all_versions] == [7, 6, 5]

    def test_missing_model_grouped_under_empty_name(self, make_record):
        groups = group_by_model([make_record(1, model=None), make_record(2, model="A")])

        assert sorted(group.model for group in groups) == ["", "A"]

    def test_empty_input(self):
        assert group_by_model([]) == []

    def test_to_dict_uses_dashboard_field_names(self, sample_records):
        data = group_by_model(sample_records)[0].to_dict()

        assert set(data) == {"model", "latestData", "createdAt", "allVersions", "hasMultipleVersions"}
        assert data["latestData"]["id"] == 2
        assert data["createdAt"] == data["latestData"]["createdAt"].replace("Z", "+00:00")


class TestFilters:
    """Test search and favorite filters."""

    def test_empty_search_returns_all(self, sample_records):
        groups = group_by_model(sample_records)

        assert filter_by_search_term(groups, "") == groups
        assert filter_by_search_term(groups, "   ") == groups
        assert filter_by_search_term(groups, None) == groups

    def test_search_is_case_insensitive_substring(self, make_record):
        groups = group_by_model(
            [make_record(1, model="Meta-Llama-3-8B"), make_record(2, model="mistral-7b")]
        )

        assert [g.model for g in filter_by_search_term(groups, "llama")] == ["Meta-Llama-3-8B"]
        assert [g.model for g in filter_by_search_term(groups, "7B")] == ["mistral-7b"]
        assert filter_by_search_term(groups, "gpt") == []

    def test_search_term_whitespace_is_significant(self, make_record):
        groups = group_by_model([make_record(1, model="llama"), make_record(2, model="llama 3")])

        assert [g.model for g in filter_by_search_term(groups, "llama ")] == ["llama 3"]

    def test_favorite_in_older_version_keeps_group(self, make_record):
        groups = group_by_model(
            [
                make_record(1, model="A", minutes=0, favorite=True),
                make_record(2, model="A", minutes=10),
                make_record(3, model="B", minutes=5),
            ]
        )

        assert [g.model for g in filter_by_favorite(groups, True)] == ["A"]
        assert filter_by_favorite(groups, False) == groups


class TestLookups:
    """Test single-model lookups."""

    def test_latest_for_model(self, sample_records):
        assert latest_for_model(sample_records, "A").id == 2
        assert latest_for_model(sample_records, "missing") is None

    def test_find_group(self, sample_records):
        groups = group_by_model(sample_records)

        assert find_group(groups, "B").latest_data.id == 3
        assert find_group(groups, "C") is None


class TestPaginate:
    """Test pagination helper."""

    def test_pages(self):
        items = list(range(25))

        page = paginate(items, page=3, per_page=10)

        assert page["items"] == [20, 21, 22, 23, 24]
        assert page["total"] == 25
        assert page["total_pages"] == 3

    def test_empty(self):
        page = paginate([], page=1, per_page=10)

        assert page["items"] == []
        assert page["total_pages"] == 1

    def test_page_past_end(self):
        assert paginate([1, 2], page=5, per_page=10)["items"] == []

    @pytest.mark.parametrize("page,per_page", [(0, 10), (1, 0)])
    def test_invalid_parameters(self, page, per_page):
        with pytest.raises(ValueError):
            paginate([1], page=page, per_page=per_page)
