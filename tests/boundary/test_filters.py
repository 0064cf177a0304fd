"""
Tests for payload filter builders and validation.
"""

import pytest

from vector_service.boundary.vdb.filters import (
    combine_filters_and,
    combine_filters_or,
    create_doc_id_filter,
    create_exclude_doc_id_filter,
    create_in_filter,
    create_match_filter,
    create_metadata_filter,
    create_range_filter,
    validate_filter,
)
from vector_service.boundary.vdb.memory_index import filter_matches
from vector_service.boundary.vdb.vector_schemas import PayloadFilter


class TestBuilders:
    def test_match_filter(self):
        assert create_match_filter("category", "energy").to_dict() == {
            "must": [{"key": "category", "match": {"value": "energy"}}]
        }

    def test_range_filter_omits_unset_bounds(self):
        assert create_range_filter("year", gte=2020, lt=2024).to_dict() == {
            "must": [{"key": "year", "range": {"gte": 2020, "lt": 2024}}]
        }

    def test_in_filter_uses_should(self):
        result = create_in_filter("tag", ["a", "b"]).to_dict()

        assert result == {
            "should": [
                {"key": "tag", "match": {"value": "a"}},
                {"key": "tag", "match": {"value": "b"}},
            ]
        }

    def test_doc_id_filter(self):
        assert create_doc_id_filter("doc-1").to_dict() == {
            "must": [{"key": "docId", "match": {"value": "doc-1"}}]
        }

    def test_exclude_doc_id_filter(self):
        result = create_exclude_doc_id_filter(["x", "y"])

        assert [c.match.value for c in result.must_not] == ["x", "y"]
        assert result.must is None

    def test_metadata_filter(self):
        result = create_metadata_filter({"lang": "en", "published": True})

        assert {c.key: c.match.value for c in result.must} == {"lang": "en", "published": True}

    def test_combine_and_keeps_in_filter_as_one_group(self):
        # Arrange
        combined = combine_filters_and(
            create_in_filter("category", ["a", "b"]),
            create_match_filter("lang", "en"),
        )

        # Act / Assert
        assert filter_matches({"category": "a", "lang": "en"}, combined)
        assert filter_matches({"category": "b", "lang": "en"}, combined)
        assert not filter_matches({"category": "c", "lang": "en"}, combined)
        assert not filter_matches({"category": "a", "lang": "de"}, combined)

    def test_combine_and_merges_must_and_must_not(self):
        combined = combine_filters_and(
            create_match_filter("a", 1),
            create_in_filter("b", [2, 3]),
            create_exclude_doc_id_filter(["z"]),
        )

        assert combined.to_dict() == {
            "must": [
                {"key": "a", "match": {"value": 1}},
                {
                    "should": [
                        {"key": "b", "match": {"value": 2}},
                        {"key": "b", "match": {"value": 3}},
                    ]
                },
            ],
            "must_not": [{"key": "docId", "match": {"value": "z"}}],
        }
        assert filter_matches({"a": 1, "b": 3, "docId": "y"}, combined)
        assert not filter_matches({"a": 1, "b": 3, "docId": "z"}, combined)

    def test_combine_or_flattens_single_conditions(self):
        combined = combine_filters_or(create_match_filter("a", 1), create_in_filter("b", [2, 3]))

        assert [c.key for c in combined.should] == ["a", "b", "b"]
        assert combined.must is None

    def test_combine_or_keeps_and_groups(self):
        combined = combine_filters_or(
            create_metadata_filter({"lang": "en", "published": True}),
            create_match_filter("pinned", True),
        )

        assert filter_matches({"lang": "en", "published": True}, combined)
        assert filter_matches({"pinned": True}, combined)
        assert not filter_matches({"lang": "en", "published": False}, combined)

    def test_combine_or_keeps_exclusions_scoped(self):
        combined = combine_filters_or(
            create_exclude_doc_id_filter(["x"]),
            create_match_filter("pinned", True),
        )

        assert filter_matches({"docId": "x", "pinned": True}, combined)
        assert not filter_matches({"docId": "x"}, combined)

    def test_combined_filter_round_trips_through_validation(self):
        combined = combine_filters_and(
            create_in_filter("category", ["a", "b"]),
            create_match_filter("lang", "en"),
        )
        raw = combined.to_dict()

        assert validate_filter(raw) == []
        assert PayloadFilter.model_validate(raw).to_dict() == raw


class TestValidateFilter:
    def test_valid_filter(self):
        raw = {
            "must": [{"key": "category", "match": {"value": "energy"}}],
            "must_not": [{"key": "year", "range": {"lt": 2000}}],
        }

        assert validate_filter(raw) == []

    def test_empty_filter_is_valid(self):
        assert validate_filter({}) == []

    @pytest.mark.parametrize("raw", [None, [], "must", 5])
    def test_non_object_filter(self, raw):
        assert validate_filter(raw) == ["Filter must be an object"]

    def test_unknown_clause(self):
        errors = validate_filter({"filter": []})

        assert errors == ["Invalid filter key: filter. Valid keys are: must, should, must_not"]

    def test_clause_must_be_array(self):
        assert validate_filter({"must": {"key": "a"}}) == ["must must be an array"]

    def test_condition_without_match_or_range(self):
        errors = validate_filter({"should": [{"key": "a"}]})

        assert errors == ["should[0]: Condition must have either 'match' or 'range' field"]

    def test_condition_with_both_match_and_range(self):
        errors = validate_filter(
            {"must": [{"key": "a", "match": {"value": 1}, "range": {"gte": 0}}]}
        )

        assert errors == ["must[0]: Condition cannot have both 'match' and 'range' fields"]

    def test_missing_key(self):
        errors = validate_filter({"must": [{"match": {"value": 1}}]})

        assert errors == ["must[0]: Condition must have a string 'key' field"]

    def test_match_without_value(self):
        errors = validate_filter({"must": [{"key": "a", "match": {}}]})

        assert errors == ["must[0]: 'match' must have a 'value' field"]

    def test_match_value_must_be_scalar(self):
        errors = validate_filter({"must": [{"key": "a", "match": {"value": {"nested": 1}}}]})

        assert errors == ["must[0]: 'match.value' must be a string, number or boolean"]

    def test_invalid_range_key_and_value(self):
        errors = validate_filter({"must": [{"key": "a", "range": {"between": 1, "gte": "x"}}]})

        assert errors == [
            "must[0]: Invalid range key 'between'. Valid keys are: gte, lte, gt, lt",
            "must[0]: Range value 'gte' must be a number",
        ]

    def test_empty_range(self):
        errors = validate_filter({"must": [{"key": "a", "range": {}}]})

        assert errors == ["must[0]: 'range' must have at least one of: gte, lte, gt, lt"]

    def test_reports_every_error(self):
        errors = validate_filter(
            {
                "bogus": [],
                "must": [{"key": "a"}, "not-a-condition"],
                "should": "nope",
            }
        )

        assert len(errors) == 4
        assert "must[1]: Condition must be an object" in errors

    def test_nested_filter_is_valid(self):
        raw = {
            "must": [
                {"key": "lang", "match": {"value": "en"}},
                {"should": [{"key": "tag", "match": {"value": "a"}}]},
            ]
        }

        assert validate_filter(raw) == []

    def test_nested_filter_errors_carry_path(self):
        errors = validate_filter({"must": [{"should": [{"key": "tag"}], "extra": []}]})

        assert errors == [
            "must[0].Invalid filter key: extra. Valid keys are: must, should, must_not",
            "must[0].should[0]: Condition must have either 'match' or 'range' field",
        ]
