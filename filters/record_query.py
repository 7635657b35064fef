"""
Record queries: free-text search, filter predicates, sorting and the
option lists offered by each filter control.

All functions are pure: they return new tuples and never touch the input
collection.
"""

from typing import Iterable, Optional, Sequence, Tuple

from peta_usaha.filters.filter_engine import upstream_of
from peta_usaha.models.data_models import (
    AreaUnit,
    BusinessRecord,
    FilterField,
    FilterState,
    SortDirection,
    SortKey,
    SortSpec,
)

# Fields searched by the free-text box (OR semantics)
SEARCH_FIELDS: Tuple[str, ...] = ("name", "address", "sls", "sub_district", "district")

_SORT_ATTR = {
    SortKey.NAME: "name",
    SortKey.MAP_TYPE: "map_type",
    SortKey.CATEGORY: "category",
    SortKey.DISTRICT: "district",
}


def record_value(record: BusinessRecord, filter_field: FilterField, unit: AreaUnit) -> str:
    """The record attribute a filter field compares against."""
    if filter_field is FilterField.MAP_TYPE:
        return record.map_type
    if filter_field is FilterField.CATEGORY:
        return record.category
    if filter_field is FilterField.DATA_SOURCE:
        return record.data_source
    if filter_field is FilterField.DISTRICT:
        return record.district
    if filter_field is FilterField.SUB_DISTRICT:
        return record.sub_district
    if filter_field is FilterField.AREA_VALUE:
        return record.area_value(unit)
    return unit.value


def matches_search(record: BusinessRecord, query: str) -> bool:
    """Case-insensitive substring match on any search field."""
    q = query.lower()
    return any(q in getattr(record, attr).lower() for attr in SEARCH_FIELDS)


def matches_filters(record: BusinessRecord, state: FilterState) -> bool:
    """AND of every non-wildcard filter field."""
    for filter_field in FilterField:
        if filter_field is FilterField.AREA_UNIT or state.is_wildcard(filter_field):
            continue
        if record_value(record, filter_field, state.area_unit) != state.get(filter_field):
            return False
    return True


def sort_records(
    records: Sequence[BusinessRecord], sort: Optional[SortSpec]
) -> Tuple[BusinessRecord, ...]:
    """Stable, case-insensitive sort; input order when sort.key is None."""
    if sort is None or sort.key is None:
        return tuple(records)
    attr = _SORT_ATTR[sort.key]
    return tuple(
        sorted(
            records,
            key=lambda r: getattr(r, attr).lower(),
            reverse=sort.direction is SortDirection.DESC,
        )
    )


def matching_records(
    records: Iterable[BusinessRecord],
    state: FilterState,
    search_text: str = "",
    sort: Optional[SortSpec] = None,
) -> Tuple[BusinessRecord, ...]:
    """
    Records matching search text and filters, optionally sorted.

    Order of application:
    1. free-text search (blank text = no constraint)
    2. non-wildcard filter fields, AND-ed
    3. sort

    Args:
        records: Source collection (not modified)
        state: Filter state
        search_text: Free text typed in the search box
        sort: Optional sort column/direction

    Returns:
        New tuple, a subsequence of records unless sorted
    """
    query = search_text.strip()
    result = [
        r
        for r in records
        if (not query or matches_search(r, query)) and matches_filters(r, state)
    ]
    return sort_records(result, sort)


def filter_options(
    records: Iterable[BusinessRecord], state: FilterState, filter_field: FilterField
) -> Tuple[str, ...]:
    """
    Sorted unique values a filter control should offer.

    Only non-wildcard fields strictly upstream of filter_field restrict the
    candidates, so a control never hides its own current alternatives.
    area_value lists SLS or blok sensus ids depending on the area unit.
    """
    if filter_field is FilterField.AREA_UNIT:
        return tuple(unit.value for unit in AreaUnit)

    upstream = [
        f
        for f in upstream_of(filter_field)
        if f is not FilterField.AREA_UNIT and not state.is_wildcard(f)
    ]
    values = set()
    for record in records:
        if all(
            record_value(record, f, state.area_unit) == state.get(f) for f in upstream
        ):
            value = record_value(record, filter_field, state.area_unit)
            if value:
                values.add(value)
    return tuple(sorted(values))
