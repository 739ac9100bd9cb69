import pytest

from routedraw.errors import SessionNotActive
from routedraw.models.domain import DistanceEstimate, DistanceProvenance, DrawingStatus, GeoPoint, RouteRecord
from routedraw.services.drawing.collection import RouteCollection
from routedraw.services.drawing.session import DrawingSession


def _estimate(meters: float) -> DistanceEstimate:
    return DistanceEstimate(meters, DistanceProvenance.ROUTED)


def test_start_captures_start_point():
    session = DrawingSession()
    start = GeoPoint(40.0, -74.0)

    session.start(start)

    assert session.status is DrawingStatus.ACTIVE
    assert session.path == [start]
    assert session.start_point == start
    assert session.live_distance.meters == 0.0


def test_extend_keeps_every_point_and_returns_snapshot():
    session = DrawingSession()
    session.start(GeoPoint(40.0, -74.0))

    first = session.extend(GeoPoint(40.0, -74.0))
    second = session.extend(GeoPoint(40.001, -74.0))

    assert len(first) == 2
    assert len(second) == 3
    assert len(session.path) == 3


def test_stale_distance_for_shorter_path_is_discarded():
    session = DrawingSession()
    session.start(GeoPoint(40.0, -74.0))
    session.extend(GeoPoint(40.001, -74.0))
    session.extend(GeoPoint(40.002, -74.0))
    generation = session.generation

    assert session.apply_distance(generation, 3, _estimate(300.0))
    assert not session.apply_distance(generation, 2, _estimate(150.0))
    assert session.live_distance.meters == 300.0


def test_lower_fallback_estimate_does_not_shrink_live_distance():
    session = DrawingSession()
    session.start(GeoPoint(40.0, -74.0))
    session.extend(GeoPoint(40.01, -74.0))
    session.extend(GeoPoint(40.02, -74.0))
    generation = session.generation

    assert session.apply_distance(generation, 2, _estimate(5000.0))
    assert not session.apply_distance(generation, 3, DistanceEstimate(1200.0, DistanceProvenance.STRAIGHT_LINE))
    assert session.live_distance.meters == 5000.0
    assert session.live_distance.provenance is DistanceProvenance.ROUTED
    # The longer path still counts as the latest resolution.
    assert not session.apply_distance(generation, 2, _estimate(6000.0))


def test_results_from_previous_session_are_discarded():
    session = DrawingSession()
    session.start(GeoPoint(40.0, -74.0))
    old_generation = session.generation
    session.cancel()
    session.start(GeoPoint(41.0, -74.0))

    assert not session.apply_distance(old_generation, 5, _estimate(999.0))
    assert session.live_distance.meters == 0.0


def test_finish_returns_path_and_resets():
    session = DrawingSession()
    session.start(GeoPoint(40.0, -74.0))
    session.extend(GeoPoint(40.01, -74.0))

    path = session.finish()

    assert path == (GeoPoint(40.0, -74.0), GeoPoint(40.01, -74.0))
    assert session.status is DrawingStatus.IDLE
    assert session.path == []
    assert session.start_point is None


def test_finish_while_idle_raises():
    with pytest.raises(SessionNotActive):
        DrawingSession().finish()


def test_extend_while_idle_raises():
    with pytest.raises(SessionNotActive):
        DrawingSession().extend(GeoPoint(40.0, -74.0))


def test_start_twice_raises():
    session = DrawingSession()
    session.start(GeoPoint(40.0, -74.0))
    with pytest.raises(RuntimeError):
        session.start(GeoPoint(40.0, -74.0))


def test_reserved_slot_keeps_its_place_until_filled():
    collection = RouteCollection()
    first = RouteRecord.from_path([GeoPoint(1.0, 1.0), GeoPoint(1.0, 2.0)], _estimate(10.0))
    second = RouteRecord.from_path([GeoPoint(2.0, 1.0), GeoPoint(2.0, 2.0)], _estimate(20.0))

    slot = collection.reserve()
    collection.append(second)
    assert collection.all() == (second,)
    assert len(collection) == 1

    collection.fill(slot, first)

    assert collection.all() == (first, second)
    with pytest.raises(ValueError):
        collection.fill(slot, second)


def test_route_collection_keeps_commit_order():
    collection = RouteCollection()
    first = RouteRecord.from_path([GeoPoint(1.0, 1.0), GeoPoint(1.0, 2.0)], _estimate(10.0))
    second = RouteRecord.from_path([GeoPoint(2.0, 1.0), GeoPoint(2.0, 2.0)], _estimate(20.0))

    collection.append(first)
    collection.append(second)

    assert collection.all() == (first, second)
    assert len(collection) == 2
    collection.clear()
    assert collection.all() == ()


def test_route_record_endpoints():
    record = RouteRecord.from_path([GeoPoint(1.0, 1.0), GeoPoint(1.5, 1.0), GeoPoint(2.0, 2.0)], _estimate(10.0))

    assert record.start_point == GeoPoint(1.0, 1.0)
    assert record.end_point == GeoPoint(2.0, 2.0)
    assert isinstance(record.path, tuple)


def test_negative_distance_is_rejected():
    with pytest.raises(ValueError):
        DistanceEstimate(-1.0)
