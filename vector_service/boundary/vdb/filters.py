"""
Payload filter builders and validation.

Helpers that build PayloadFilter objects for common cases and validate
untrusted filter dicts coming from API requests.

Dependencies: pydantic
System role: Filter construction for vector search and deletion
"""

from typing import Any

from vector_service.boundary.vdb.vector_schemas import (
    DOC_ID_KEY,
    FieldCondition,
    MatchScalar,
    MatchValue,
    PayloadFilter,
    RangeCondition,
)

FILTER_CLAUSES = ("must", "should", "must_not")
RANGE_KEYS = ("gte", "lte", "gt", "lt")


def create_match_filter(key: str, value: MatchScalar) -> PayloadFilter:
    return PayloadFilter(must=[FieldCondition(key=key, match=MatchValue(value=value))])


def create_range_filter(
    key: str,
    gte: float | None = None,
    lte: float | None = None,
    gt: float | None = None,
    lt: float | None = None,
) -> PayloadFilter:
    return PayloadFilter(
        must=[FieldCondition(key=key, range=RangeCondition(gte=gte, lte=lte, gt=gt, lt=lt))]
    )


def create_in_filter(key: str, values: list[MatchScalar]) -> PayloadFilter:
    """Match any of the values (OR)."""
    return PayloadFilter(
        should=[FieldCondition(key=key, match=MatchValue(value=v)) for v in values]
    )


def create_not_in_filter(key: str, values: list[MatchScalar]) -> PayloadFilter:
    return PayloadFilter(
        must_not=[FieldCondition(key=key, match=MatchValue(value=v)) for v in values]
    )


def combine_filters_and(*filters: PayloadFilter) -> PayloadFilter:
    """
    Combine filters with AND logic.

    must and must_not clauses are merged; each input's should group is kept
    as a nested filter so it still requires only one of its conditions.
    """
    must: list[FieldCondition | PayloadFilter] = []
    must_not: list[FieldCondition | PayloadFilter] = []
    for f in filters:
        must.extend(f.must or [])
        if f.should:
            must.append(PayloadFilter(should=f.should))
        must_not.extend(f.must_not or [])
    return PayloadFilter(must=must or None, must_not=must_not or None)


def combine_filters_or(*filters: PayloadFilter) -> PayloadFilter:
    """
    Combine filters with OR logic.

    Single-condition and pure should inputs are flattened into the result's
    should clause; any other input is nested whole so its own must/must_not
    semantics survive.
    """
    should: list[FieldCondition | PayloadFilter] = []
    for f in filters:
        if f.should is None and f.must_not is None and f.must and len(f.must) == 1:
            should.append(f.must[0])
        elif f.must is None and f.must_not is None and f.should:
            should.extend(f.should)
        else:
            should.append(f)
    return PayloadFilter(should=should or None)


def create_doc_id_filter(doc_id: str) -> PayloadFilter:
    return create_match_filter(DOC_ID_KEY, doc_id)


def create_metadata_filter(metadata: dict[str, MatchScalar]) -> PayloadFilter:
    return PayloadFilter(
        must=[FieldCondition(key=k, match=MatchValue(value=v)) for k, v in metadata.items()]
    )


def create_exclude_doc_id_filter(doc_ids: list[str]) -> PayloadFilter:
    return create_not_in_filter(DOC_ID_KEY, doc_ids)


def _is_nested_filter(condition: Any) -> bool:
    return (
        isinstance(condition, dict)
        and "key" not in condition
        and any(clause in condition for clause in FILTER_CLAUSES)
    )


def _validate_condition(condition: Any, path: str) -> list[str]:
    if not isinstance(condition, dict):
        return [f"{path}: Condition must be an object"]

    errors: list[str] = []
    key = condition.get("key")
    if not key or not isinstance(key, str):
        errors.append(f"{path}: Condition must have a string 'key' field")

    has_match = "match" in condition
    has_range = "range" in condition
    if not has_match and not has_range:
        errors.append(f"{path}: Condition must have either 'match' or 'range' field")
    if has_match and has_range:
        errors.append(f"{path}: Condition cannot have both 'match' and 'range' fields")

    if has_match:
        match = condition["match"]
        if not isinstance(match, dict):
            errors.append(f"{path}: 'match' must be an object")
        elif "value" not in match or match["value"] is None:
            errors.append(f"{path}: 'match' must have a 'value' field")
        elif not isinstance(match["value"], (str, int, float, bool)):
            errors.append(f"{path}: 'match.value' must be a string, number or boolean")

    if has_range:
        rng = condition["range"]
        if not isinstance(rng, dict):
            errors.append(f"{path}: 'range' must be an object")
        else:
            if not rng:
                errors.append(f"{path}: 'range' must have at least one of: {', '.join(RANGE_KEYS)}")
            for range_key, value in rng.items():
                if range_key not in RANGE_KEYS:
                    errors.append(
                        f"{path}: Invalid range key '{range_key}'. "
                        f"Valid keys are: {', '.join(RANGE_KEYS)}"
                    )
                elif isinstance(value, bool) or not isinstance(value, (int, float)):
                    errors.append(f"{path}: Range value '{range_key}' must be a number")

    return errors


def validate_filter(raw: Any) -> list[str]:
    """
    Validate a filter dict.

    Args:
        raw: Filter as received from a client

    Returns:
        list[str]: Every problem found; empty when the filter is valid
    """
    if not isinstance(raw, dict):
        return ["Filter must be an object"]

    errors = [
        f"Invalid filter key: {key}. Valid keys are: {', '.join(FILTER_CLAUSES)}"
        for key in raw
        if key not in FILTER_CLAUSES
    ]

    for clause in FILTER_CLAUSES:
        conditions = raw.get(clause)
        if conditions is None:
            continue
        if not isinstance(conditions, list):
            errors.append(f"{clause} must be an array")
            continue
        for i, condition in enumerate(conditions):
            path = f"{clause}[{i}]"
            if _is_nested_filter(condition):
                errors.extend(f"{path}.{error}" for error in validate_filter(condition))
            else:
                errors.extend(_validate_condition(condition, path))

    return errors
