"""Filter State Engine: cascading filters, search, sort and option lists."""

from .filter_engine import (
    ENABLEMENT_PARENT,
    RESET_CHAIN,
    FilterEngine,
    apply_filter,
    downstream_of,
    is_disabled,
    reset_filters,
    select_record_filters,
    upstream_of,
)
from .record_query import (
    filter_options,
    matches_search,
    matching_records,
    sort_records,
)

__all__ = [
    "ENABLEMENT_PARENT",
    "RESET_CHAIN",
    "FilterEngine",
    "apply_filter",
    "downstream_of",
    "is_disabled",
    "reset_filters",
    "select_record_filters",
    "upstream_of",
    "filter_options",
    "matches_search",
    "matching_records",
    "sort_records",
]
