#!/usr/bin/env python3
"""
Map View Synchronizer and viewport utility tests

Auto-zoom breakpoints, idempotent view commands, boundary fitting, the
external map link, bounds estimation and the clocks behind the debounce.
"""

import asyncio

import pytest

from peta_usaha.config_types import ViewSyncConfig
from peta_usaha.models.data_models import MapView
from peta_usaha.viewport.geometry_utils import (
    Bounds,
    bounds_to_center,
    points_bounds,
    viewport_bounds_for,
)
from peta_usaha.viewport.timers import AsyncioClock, Debouncer, VirtualClock
from peta_usaha.viewport.view_sync import (
    MapViewSynchronizer,
    fit_bounds,
    google_maps_link,
    view_for,
    zoom_for_span,
)


# ============================================================================
# AUTO-ZOOM
# ============================================================================


class TestViewFor:
    """Center/zoom derived from the filtered records."""

    def test_wide_latitude_spread(self, record_factory):
        records = [
            record_factory(id=str(i), latitude=lat, longitude=98.67)
            for i, lat in enumerate([3.50, 3.52, 3.70])
        ]
        view = view_for(records)

        assert view.center[0] == pytest.approx(3.60)
        assert view.center[1] == pytest.approx(98.67)
        assert view.zoom == 10

    def test_empty_leaves_view_unchanged(self):
        assert view_for([]) is None

    def test_single_record_zooms_close(self, record_factory):
        record = record_factory()
        assert view_for([record]) == MapView(center=(3.58, 98.66), zoom=15)

    def test_larger_span_wins(self, record_factory):
        records = [
            record_factory(id="a", latitude=3.580, longitude=98.60),
            record_factory(id="b", latitude=3.581, longitude=98.63),
        ]
        assert view_for(records).zoom == 13

    @pytest.mark.parametrize(
        "span,zoom",
        [(0.0, 15), (0.005, 15), (0.01, 13), (0.03, 13), (0.05, 12), (0.1, 12), (0.2, 12), (0.25, 10)],
    )
    def test_breakpoints(self, span, zoom):
        assert zoom_for_span(span) == zoom

    def test_custom_breakpoints(self):
        config = ViewSyncConfig(span_breakpoints=((0.02, 16),), fallback_zoom=11)
        assert zoom_for_span(0.01, config) == 16
        assert zoom_for_span(0.1, config) == 11

    def test_fit_bounds_is_capped(self):
        tiny = Bounds(98.660, 3.580, 98.661, 3.581)
        assert fit_bounds(tiny, max_zoom=13).zoom == 13
        assert fit_bounds(tiny, max_zoom=16).zoom == 15


class TestMapViewSynchronizer:
    """View commands are only issued when they change."""

    def test_sync_is_idempotent(self, records):
        sync = MapViewSynchronizer()
        first = sync.sync(records)

        assert first is not None
        assert sync.sync(records) is None
        assert sync.last_command == first

    def test_empty_records_keep_last_command(self, records):
        sync = MapViewSynchronizer()
        first = sync.sync(records)
        assert sync.sync(()) is None
        assert sync.last_command == first

    def test_fly_to(self, records):
        sync = MapViewSynchronizer()
        command = sync.fly_to(records[2])

        assert command == MapView(center=(3.59, 98.67), zoom=16)
        assert sync.fly_to(records[2]) is None
        assert sync.fly_to(records[3]) is not None

    def test_forget_reissues_same_target(self, records):
        sync = MapViewSynchronizer()
        command = sync.fly_to(records[2])

        assert sync.matches((3.59, 98.67), 16)
        assert not sync.matches((3.59, 98.67), 11)
        sync.forget()
        assert sync.last_command is None
        assert sync.fly_to(records[2]) == command

    def test_fit_then_same_fit(self):
        sync = MapViewSynchronizer()
        bounds = Bounds(98.60, 3.55, 98.66, 3.60)
        assert sync.fit(bounds, 13) is not None
        assert sync.fit(bounds, 13) is None


def test_google_maps_link(record_factory):
    record = record_factory(name="Warung Makan & Kopi", latitude=3.58, longitude=98.66)
    assert google_maps_link(record) == (
        "https://www.google.com/maps?q=3.58,98.66&z=16&t=m&hl=id"
        "&label=Warung%20Makan%20%26%20Kopi"
    )


# ============================================================================
# GEOMETRY UTILITIES
# ============================================================================


class TestGeometryUtils:
    def test_points_bounds_takes_lat_lon(self):
        bounds = points_bounds([(3.5, 98.6), (3.7, 98.7)])
        assert bounds == Bounds(98.6, 3.5, 98.7, 3.7)
        assert points_bounds([]) is None

    def test_center_is_lat_lon(self):
        assert bounds_to_center(Bounds(98.6, 3.5, 98.8, 3.7)) == pytest.approx((3.6, 98.7))

    def test_intersects_is_closed(self):
        a = Bounds(0.0, 0.0, 1.0, 1.0)
        assert a.intersects(Bounds(1.0, 1.0, 2.0, 2.0))
        assert not a.intersects(Bounds(1.1, 0.0, 2.0, 1.0))

    def test_viewport_estimate_contains_center(self):
        bounds = viewport_bounds_for((3.5952, 98.6722), 12, 1024, 768)
        lat, lon = bounds_to_center(bounds)

        assert bounds.min_lon < 98.6722 < bounds.max_lon
        assert bounds.min_lat < 3.5952 < bounds.max_lat
        assert lon == pytest.approx(98.6722)
        # world is 256 * 2**12 px wide at zoom 12
        assert bounds.lon_span == pytest.approx(1024 * 360.0 / (256 * 2**12))

    def test_viewport_estimate_shrinks_with_zoom(self):
        wide = viewport_bounds_for((3.6, 98.67), 12, 1024, 768)
        close = viewport_bounds_for((3.6, 98.67), 16, 1024, 768)
        assert close.lon_span < wide.lon_span
        assert close.lat_span < wide.lat_span


# ============================================================================
# CLOCKS AND DEBOUNCE
# ============================================================================


class TestClocks:
    def test_virtual_clock_fires_in_due_order(self):
        clock = VirtualClock()
        fired = []
        clock.call_later(0.3, lambda: fired.append("late"))
        clock.call_later(0.1, lambda: fired.append("early"))

        assert clock.advance(0.2) == 1
        assert fired == ["early"]
        assert clock.advance(0.2) == 1
        assert fired == ["early", "late"]

    def test_virtual_clock_cancel(self):
        clock = VirtualClock()
        handle = clock.call_later(0.1, lambda: pytest.fail("cancelled timer fired"))
        handle.cancel()
        assert clock.pending == 0
        assert clock.advance(1.0) == 0

    def test_debouncer_coalesces_bursts(self):
        clock = VirtualClock()
        calls = []
        debouncer = Debouncer(clock, 0.2, lambda: calls.append(clock.now))

        for _ in range(5):
            debouncer.schedule()
            clock.advance(0.05)
        assert calls == []

        clock.advance(0.5)
        assert len(calls) == 1
        assert not debouncer.armed

    def test_asyncio_clock(self):
        async def scenario():
            clock = AsyncioClock()
            fired = []
            clock.call_later(0.01, lambda: fired.append(True))
            cancelled = clock.call_later(0.01, lambda: fired.append(False))
            cancelled.cancel()
            await asyncio.sleep(0.05)
            return fired

        assert asyncio.run(scenario()) == [True]

    def test_asyncio_clock_outside_a_loop(self):
        with pytest.raises(RuntimeError, match="running event loop"):
            AsyncioClock().call_later(0.01, lambda: None)
