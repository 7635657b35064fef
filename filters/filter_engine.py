#!/usr/bin/env python3
"""
Filter State Engine - Hierarchical Filter Cascade

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Own the current filter selection and enforce the
hierarchical dependency rules between filter fields.

Reset chain (setting a field resets everything after it to "all"):

    jenis_peta → kbli_kategori → sumber_data → kecamatan → kelurahan_desa → area_value

area_unit (SLS vs. blok sensus) sits outside the chain; changing it only
resets area_value.

Enablement (a control is disabled while any ancestor is "all"):

    kbli_kategori  ← jenis_peta
    sumber_data    ← jenis_peta, and only for the data-source map type (prelist)
    kecamatan      ← kbli_kategori
    kelurahan_desa ← kecamatan
    area_value     ← kelurahan_desa

Key Functions:
1. apply_filter(): pure transition with cascading reset
2. is_disabled(): disablement predicate, monotonic along the chain
3. select_record_filters(): filter-equivalent selection of one record
4. FilterEngine: stateful owner (state, selected record, search text)

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import dataclasses
import logging
from typing import Dict, Optional, Tuple, Union

from peta_usaha.config_types import FilterConfig
from peta_usaha.errors import FilterMisuseError
from peta_usaha.models.data_models import (
    ALL,
    AreaUnit,
    BusinessRecord,
    FilterField,
    FilterState,
    state_attr,
)

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# 🔗 DEPENDENCY CHAIN
# ═══════════════════════════════════════════════════════════════════════════

RESET_CHAIN: Tuple[FilterField, ...] = (
    FilterField.MAP_TYPE,
    FilterField.CATEGORY,
    FilterField.DATA_SOURCE,
    FilterField.DISTRICT,
    FilterField.SUB_DISTRICT,
    FilterField.AREA_VALUE,
)

ENABLEMENT_PARENT: Dict[FilterField, FilterField] = {
    FilterField.CATEGORY: FilterField.MAP_TYPE,
    FilterField.DATA_SOURCE: FilterField.MAP_TYPE,
    FilterField.DISTRICT: FilterField.CATEGORY,
    FilterField.SUB_DISTRICT: FilterField.DISTRICT,
    FilterField.AREA_VALUE: FilterField.SUB_DISTRICT,
}

FieldLike = Union[FilterField, str]


def downstream_of(filter_field: FilterField) -> Tuple[FilterField, ...]:
    """Fields reset to "all" when filter_field is set."""
    if filter_field is FilterField.AREA_UNIT:
        return (FilterField.AREA_VALUE,)
    idx = RESET_CHAIN.index(filter_field)
    return RESET_CHAIN[idx + 1 :]


def upstream_of(filter_field: FilterField) -> Tuple[FilterField, ...]:
    """Chain fields strictly before filter_field (empty for area_unit)."""
    if filter_field is FilterField.AREA_UNIT:
        return ()
    idx = RESET_CHAIN.index(filter_field)
    return RESET_CHAIN[:idx]


def enablement_ancestors(filter_field: FilterField) -> Tuple[FilterField, ...]:
    """Transitive enablement parents, nearest first."""
    ancestors = []
    parent = ENABLEMENT_PARENT.get(filter_field)
    while parent is not None:
        ancestors.append(parent)
        parent = ENABLEMENT_PARENT.get(parent)
    return tuple(ancestors)


# ═══════════════════════════════════════════════════════════════════════════
# 🔄 PURE TRANSITIONS
# ═══════════════════════════════════════════════════════════════════════════


def coerce_area_unit(value: Union[AreaUnit, str]) -> AreaUnit:
    """Accept an AreaUnit or its string value.

    Raises:
        FilterMisuseError: For an unknown unit string
    """
    if isinstance(value, AreaUnit):
        return value
    for unit in AreaUnit:
        if unit.value == value:
            return unit
    raise FilterMisuseError(f"unknown area unit: {value!r}")


def apply_filter(
    state: FilterState, filter_field: FilterField, value: Union[AreaUnit, str]
) -> FilterState:
    """
    Set one field and cascade resets downstream.

    Args:
        state: Current filter state (not modified)
        filter_field: Field to set
        value: New value ("all" for wildcard; AreaUnit or its string for area_unit)

    Returns:
        New FilterState. Upstream fields are untouched; every downstream
        field is "all". Changing area_unit resets area_value only when the
        unit actually changes.
    """
    if filter_field is FilterField.AREA_UNIT:
        unit = coerce_area_unit(value)
        if unit is state.area_unit:
            return state
        return dataclasses.replace(state, area_unit=unit, area_value=ALL)

    changes = {state_attr(filter_field): value}
    for descendant in downstream_of(filter_field):
        changes[state_attr(descendant)] = ALL
    return dataclasses.replace(state, **changes)


def reset_filters() -> FilterState:
    """All fields wildcard, area unit back to SLS."""
    return FilterState()


def is_disabled(
    filter_field: FilterField,
    state: FilterState,
    data_source_map_type: str = "prelist",
) -> bool:
    """
    Whether a filter control is disabled.

    jenis_peta and area_unit are never disabled. Any other field is
    disabled while any enablement ancestor is "all"; sumber_data is also
    disabled unless jenis_peta is the data-source map type.
    """
    if filter_field in (FilterField.MAP_TYPE, FilterField.AREA_UNIT):
        return False
    if any(state.is_wildcard(a) for a in enablement_ancestors(filter_field)):
        return True
    if filter_field is FilterField.DATA_SOURCE:
        return state.map_type != data_source_map_type
    return False


def select_record_filters(record: BusinessRecord) -> FilterState:
    """
    Filter state equivalent to drilling down to one record.

    Every chain field takes the record's own attribute; the area unit is
    SLS and area_value is the record's SLS id. The disablement predicate is
    not consulted: a listing record still sets its sumber_data.
    """
    return FilterState(
        map_type=record.map_type,
        category=record.category,
        data_source=record.data_source,
        district=record.district,
        sub_district=record.sub_district,
        area_unit=AreaUnit.SLS,
        area_value=record.sls,
    )


# ═══════════════════════════════════════════════════════════════════════════
# 🏛️ STATEFUL ENGINE
# ═══════════════════════════════════════════════════════════════════════════


class FilterEngine:
    """
    Owner of the current filter selection.

    Every transition replaces self.state with a new frozen FilterState, so
    snapshots handed out earlier never change.

    Misuse (unknown field, concrete value on a disabled field) raises
    FilterMisuseError in strict mode; otherwise it is logged and ignored.
    """

    def __init__(self, config: Optional[FilterConfig] = None) -> None:
        self.config = config or FilterConfig()
        self.state = FilterState()
        self.selected_record: Optional[BusinessRecord] = None
        self.search_text = ""

    def resolve_field(self, filter_field: FieldLike) -> Optional[FilterField]:
        """Map a FilterField or UI key/name to a FilterField."""
        if isinstance(filter_field, FilterField):
            return filter_field
        resolved = FilterField.from_string(str(filter_field))
        if resolved is None:
            self._misuse(f"unknown filter field: {filter_field!r}")
        return resolved

    def is_disabled(self, filter_field: FieldLike) -> bool:
        resolved = self.resolve_field(filter_field)
        if resolved is None:
            return True
        return is_disabled(resolved, self.state, self.config.data_source_map_type)

    def set(self, filter_field: FieldLike, value: Union[AreaUnit, str]) -> FilterState:
        """
        Set a filter field (UI control change).

        Args:
            filter_field: FilterField or its UI key (e.g. "kecamatan")
            value: New value, "all" for wildcard

        Returns:
            The new (or unchanged, on ignored misuse) FilterState
        """
        resolved = self.resolve_field(filter_field)
        if resolved is None:
            return self.state

        if is_disabled(resolved, self.state, self.config.data_source_map_type):
            if value == ALL:
                return self.state
            self._misuse(
                f"filter {resolved.value} is disabled, refusing value {value!r} "
                f"(state: {self.state.as_dict()})"
            )
            return self.state

        try:
            new_state = apply_filter(self.state, resolved, value)
        except FilterMisuseError as e:
            self._misuse(str(e))
            return self.state

        if new_state != self.state:
            logger.debug(f"Filter {resolved.value} = {value!r}")
        self.state = new_state
        return self.state

    def set_search(self, text: str) -> None:
        self.search_text = text

    def reset(self) -> FilterState:
        """All filters to wildcard; clears the selected record and search text."""
        self.state = reset_filters()
        self.selected_record = None
        self.search_text = ""
        return self.state

    def select_record(self, record: BusinessRecord) -> FilterState:
        """Select a record and drill every filter down to it."""
        self.selected_record = record
        self.state = select_record_filters(record)
        if is_disabled(
            FilterField.DATA_SOURCE, self.state, self.config.data_source_map_type
        ) and not self.state.is_wildcard(FilterField.DATA_SOURCE):
            logger.debug(
                f"Record {record.id} sets sumber_data={record.data_source!r} "
                f"on a disabled control (jenis_peta={record.map_type!r})"
            )
        return self.state

    def _misuse(self, message: str) -> None:
        if self.config.strict:
            raise FilterMisuseError(message)
        logger.warning(f"Unexpected filter request ignored: {message}")
