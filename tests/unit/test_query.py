from asset_discovery.common.models import Bounds
from asset_discovery.discovery.query import build_overpass_query


BOUNDS = Bounds(min_lat=49.15, min_lon=-2.3, max_lat=49.31, max_lon=-1.95)
BBOX = "49.150000,-2.300000,49.310000,-1.950000"


def test_build_overpass_query_is_deterministic():
    first = build_overpass_query(BOUNDS)
    second = build_overpass_query(Bounds(min_lat=49.15, min_lon=-2.3, max_lat=49.31, max_lon=-1.95))
    assert first.encode("utf-8") == second.encode("utf-8")


def test_build_overpass_query_requests_every_category():
    query = build_overpass_query(BOUNDS)
    for clause in (
        f'way["building"]({BBOX});',
        f'relation["building"]({BBOX});',
        f'way["highway"]({BBOX});',
        f'way["power"="line"]({BBOX});',
        f'node["power"="tower"]({BBOX});',
        f'node["power"="pole"]({BBOX});',
        f'way["railway"]({BBOX});',
        f'node["amenity"="hospital"]({BBOX});',
        f'node["amenity"="fire_station"]({BBOX});',
        f'way["amenity"="hospital"]({BBOX});',
        f'way["amenity"="fire_station"]({BBOX});',
    ):
        assert clause in query


def test_build_overpass_query_shares_one_bbox_and_asks_for_geometry():
    query = build_overpass_query(BOUNDS)
    assert query.count(f"({BBOX})") == 11
    assert query.startswith("[out:json][timeout:60];")
    assert query.endswith("out geom;")


def test_build_overpass_query_uses_configured_timeout():
    assert build_overpass_query(BOUNDS, timeout_seconds=180).startswith("[out:json][timeout:180];")
