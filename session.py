#!/usr/bin/env python3
"""
Peta Usaha - Explorer Session

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Own the four engines (filters, boundary levels,
visibility, view sync) for one map session and run the settle loop for
every intent:

    filter change → matching records → view command → zoom threshold
    → boundary level transition → visibility recomputation

The loop is one-directional. View commands are idempotent, so a derived
view feeding back into the viewport cannot re-trigger itself; a dispatch
settles within the call plus one debounce interval.

Key Features:
1. dispatch(intent) → new frozen SessionSnapshot
2. subscribe(listener) → unsubscribe callable
3. Debounced visibility results are published as a fresh snapshot
4. close() disarms the debounce timer and drops listeners

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from peta_usaha.boundaries.boundary_info import (
    BoundaryInfo,
    boundary_info,
    city_outline,
    find_boundary,
)
from peta_usaha.boundaries.level_machine import BoundaryLevelMachine
from peta_usaha.boundaries.visibility import VisibilityEngine
from peta_usaha.config_types import AppConfig
from peta_usaha.errors import GeometryError
from peta_usaha.filters.filter_engine import FilterEngine
from peta_usaha.filters.record_query import filter_options, matching_records
from peta_usaha.models.data_models import (
    BoundaryFeature,
    BoundaryLevel,
    BoundaryLevelState,
    BusinessRecord,
    Datasets,
    FilterField,
    FilterState,
    LevelTransition,
    MapView,
    SortSpec,
    ViewportState,
)
from peta_usaha.models.intents import (
    BoundaryFocused,
    FeatureHovered,
    FeatureSelected,
    FilterChanged,
    FiltersReset,
    ForceMediumToggled,
    Intent,
    PanChanged,
    RecordSelected,
    SearchChanged,
    SortChanged,
    ZoomChanged,
)
from peta_usaha.viewport.geometry_utils import (
    Bounds,
    bounds_to_center,
    viewport_bounds_for,
)
from peta_usaha.viewport.timers import AsyncioClock, Clock
from peta_usaha.viewport.view_sync import MapViewSynchronizer, google_maps_link

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Everything a presentation layer needs to render one frame.

    Attributes:
        filters: Current filter selection
        search_text: Free-text search box content
        sort: Table sort column/direction
        records: Filtered (and sorted) business records
        selected_record: Record chosen via "navigate to business"
        viewport: Current center/zoom/bounds
        level: Active boundary level with hover/selection
        visible: Visible features of the active culled level (empty at COARSE)
        view_command: Last view command issued, None before the first
        errors: Collection name -> load failure
    """

    filters: FilterState
    search_text: str
    sort: SortSpec
    records: Tuple[BusinessRecord, ...]
    selected_record: Optional[BusinessRecord]
    viewport: ViewportState
    level: BoundaryLevelState
    visible: Tuple[BoundaryFeature, ...]
    view_command: Optional[MapView] = None
    errors: Mapping[str, str] = field(default_factory=dict, compare=False)


Listener = Callable[[SessionSnapshot], None]


class ExplorerSession:
    """
    State container for one interactive map session.

    Usage:
        session = ExplorerSession(datasets, app_config)
        unsubscribe = session.subscribe(render)
        session.dispatch(FilterChanged(FilterField.DISTRICT, "MEDAN BARU"))
        ...
        session.close()

    The default clock is AsyncioClock, so pans are debounced on the running
    event loop. A session driven outside a loop (scripts, tests) must be
    given an explicit clock such as VirtualClock.
    """

    def __init__(
        self,
        datasets: Datasets,
        app_config: Optional[AppConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.datasets = datasets
        self.config = app_config or AppConfig()
        self._listeners: List[Listener] = []
        self._dispatching = True  # until the first snapshot exists
        self._closed = False

        view_cfg = self.config.view_sync
        self._filters = FilterEngine(self.config.filters)
        self._sort = SortSpec()
        self._sync = MapViewSynchronizer(view_cfg)
        self._view_command: Optional[MapView] = None
        self._viewport = ViewportState(
            center=view_cfg.default_center,
            zoom=view_cfg.default_zoom,
            bounds=self._estimate_bounds(view_cfg.default_center, view_cfg.default_zoom),
        )
        self._levels = BoundaryLevelMachine(
            self.config.boundary_zoom,
            datasets.available_levels,
            initial_zoom=view_cfg.default_zoom,
        )
        self._visibility = VisibilityEngine(
            datasets,
            clock or AsyncioClock(),
            self.config.visibility,
            on_update=self._on_visibility_update,
        )
        self._visibility.set_active_level(self._levels.level, self._viewport.bounds)
        self._records = self._query()
        self._snapshot = self._build_snapshot()
        self._dispatching = False

        if datasets.errors:
            logger.warning(
                f"Session started with unavailable collections: {sorted(datasets.errors)}"
            )

    # ═══════════════════════════════════════════════════════════════════════
    # 📤 PUBLIC API
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a snapshot listener.

        Returns:
            Callable that removes the listener (safe to call twice)
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, intent: Intent) -> SessionSnapshot:
        """
        Apply one intent and publish the settled snapshot.

        Args:
            intent: Any message from peta_usaha.models.intents

        Returns:
            The new snapshot (also sent to every listener)
        """
        if self._closed:
            logger.warning(f"Ignoring {type(intent).__name__} on a closed session")
            return self._snapshot

        handler = self._handlers().get(type(intent))
        if handler is None:
            raise TypeError(f"Unsupported intent: {intent!r}")

        self._dispatching = True
        try:
            handler(intent)
        finally:
            self._dispatching = False
        self._publish()
        return self._snapshot

    def close(self) -> None:
        """Disarm the debounce timer and drop listeners. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._visibility.close()
        self._listeners.clear()
        logger.debug("Session closed")

    # Read-only helpers for the presentation layer

    def filter_options(self, filter_field: FilterField) -> Tuple[str, ...]:
        """Values the given filter control should offer."""
        return filter_options(self.datasets.records, self._filters.state, filter_field)

    def is_disabled(self, filter_field: FilterField) -> bool:
        return self._filters.is_disabled(filter_field)

    def display_info(self) -> BoundaryInfo:
        """Overlay text for the hovered (else selected) boundary."""
        return boundary_info(self._levels.state.display)

    def city_outline(self) -> Optional[Dict[str, Any]]:
        return city_outline(self.datasets.coarse)

    def external_link(self, record: BusinessRecord) -> str:
        return google_maps_link(record, self.config.view_sync.external_map_zoom)

    # ═══════════════════════════════════════════════════════════════════════
    # 🔀 INTENT HANDLERS
    # ═══════════════════════════════════════════════════════════════════════

    def _handlers(self) -> Dict[type, Callable[[Any], None]]:
        return {
            FilterChanged: self._on_filter_changed,
            SearchChanged: self._on_search_changed,
            SortChanged: self._on_sort_changed,
            FiltersReset: self._on_filters_reset,
            RecordSelected: self._on_record_selected,
            BoundaryFocused: self._on_boundary_focused,
            ZoomChanged: self._on_zoom_changed,
            PanChanged: self._on_pan_changed,
            FeatureHovered: self._on_feature_hovered,
            FeatureSelected: self._on_feature_selected,
            ForceMediumToggled: self._on_force_medium_toggled,
        }

    def _on_filter_changed(self, intent: FilterChanged) -> None:
        self._filters.set(intent.field, intent.value)
        self._refresh_records()

    def _on_search_changed(self, intent: SearchChanged) -> None:
        self._filters.set_search(intent.text)
        self._refresh_records()

    def _on_sort_changed(self, intent: SortChanged) -> None:
        self._sort = self._sort.toggled(intent.key)
        self._records = self._query()

    def _on_filters_reset(self, intent: FiltersReset) -> None:
        self._filters.reset()
        self._refresh_records()

    def _on_record_selected(self, intent: RecordSelected) -> None:
        self._filters.select_record(intent.record)
        # Close-up on the record wins over the records-derived framing
        self._records = self._query()
        self._apply_view(self._sync.fly_to(intent.record))

    def _on_boundary_focused(self, intent: BoundaryFocused) -> None:
        feature = find_boundary(self.datasets.features_for(intent.level), intent.name)
        if feature is None:
            logger.debug(f"No {intent.level.value} boundary named {intent.name!r}")
            return
        try:
            bounds = feature.bounds
        except GeometryError as e:
            logger.warning(f"Cannot focus {intent.level.value} {intent.name!r}: {e}")
            return

        view_cfg = self.config.view_sync
        max_zoom = (
            view_cfg.district_fit_max_zoom
            if intent.level is BoundaryLevel.COARSE
            else view_cfg.sub_district_fit_max_zoom
        )
        self._apply_view(self._sync.fit(bounds, max_zoom))
        if feature.level is self._levels.level:
            self._levels.select(feature)

    def _on_zoom_changed(self, intent: ZoomChanged) -> None:
        center = tuple(intent.center or self._viewport.center)
        # The map did not report its box: estimate it at the new zoom
        bounds = (
            intent.bounds
            if intent.bounds is not None
            else self._estimate_bounds(center, intent.zoom)
        )
        self._move_viewport(ViewportState(center=center, zoom=intent.zoom, bounds=bounds))

    def _on_pan_changed(self, intent: PanChanged) -> None:
        center = tuple(intent.center or bounds_to_center(intent.bounds))
        self._move_viewport(
            ViewportState(center=center, zoom=self._viewport.zoom, bounds=intent.bounds)
        )

    def _on_feature_hovered(self, intent: FeatureHovered) -> None:
        self._levels.hover(intent.feature)

    def _on_feature_selected(self, intent: FeatureSelected) -> None:
        self._levels.select(intent.feature)

    def _on_force_medium_toggled(self, intent: ForceMediumToggled) -> None:
        transition = self._levels.set_force_medium(intent.enabled)
        if transition is not None:
            self._on_level_transition(transition)

    # ═══════════════════════════════════════════════════════════════════════
    # 🔁 SETTLE LOOP
    # ═══════════════════════════════════════════════════════════════════════

    def _query(self) -> Tuple[BusinessRecord, ...]:
        return matching_records(
            self.datasets.records,
            self._filters.state,
            self._filters.search_text,
            self._sort,
        )

    def _refresh_records(self) -> None:
        self._records = self._query()
        self._apply_view(self._sync.sync(self._records))

    def _apply_view(self, command: Optional[MapView]) -> None:
        """Move the viewport to a new view command (None: unchanged)."""
        if command is None:
            return
        self._view_command = command
        bounds = self._estimate_bounds(command.center, command.zoom)
        self._viewport = ViewportState(center=command.center, zoom=command.zoom, bounds=bounds)
        self._settle_level(command.zoom, bounds)

    def _move_viewport(self, viewport: ViewportState) -> None:
        """Viewport moved by the map itself (zoomend/moveend)."""
        self._viewport = viewport
        # Echo of our own command keeps it; a user move lets it be reissued
        if not self._sync.matches(viewport.center, viewport.zoom):
            self._sync.forget()
        self._settle_level(viewport.zoom, viewport.bounds)

    def _settle_level(self, zoom: int, bounds: Optional[Bounds]) -> None:
        transition = self._levels.on_zoom(zoom)
        if transition is not None:
            self._on_level_transition(transition)
        elif bounds is not None:
            self._visibility.on_viewport_changed(bounds)

    def _on_level_transition(self, transition: LevelTransition) -> None:
        logger.info(
            f"Boundary level {transition.previous.label} → {transition.current.label}"
        )
        self._visibility.on_level_changed(transition, self._viewport.bounds)

    def _estimate_bounds(self, center: Tuple[float, float], zoom: int) -> Bounds:
        view_cfg = self.config.view_sync
        return viewport_bounds_for(
            center, zoom, view_cfg.viewport_width_px, view_cfg.viewport_height_px
        )

    # ═══════════════════════════════════════════════════════════════════════
    # 📣 PUBLISHING
    # ═══════════════════════════════════════════════════════════════════════

    def _build_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            filters=self._filters.state,
            search_text=self._filters.search_text,
            sort=self._sort,
            records=self._records,
            selected_record=self._filters.selected_record,
            viewport=self._viewport,
            level=self._levels.state,
            visible=self._visibility.visible(self._levels.level),
            view_command=self._view_command,
            errors=self.datasets.errors,
        )

    def _publish(self) -> None:
        self._snapshot = self._build_snapshot()
        for listener in list(self._listeners):
            listener(self._snapshot)

    def _on_visibility_update(self, level: BoundaryLevel) -> None:
        # Immediate recomputes during a dispatch are published by dispatch()
        if self._dispatching:
            return
        self._publish()
