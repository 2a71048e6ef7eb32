import pytest

from asset_discovery.common.errors import ElementError
from asset_discovery.common.models import RawElement
from asset_discovery.discovery.convert import ASSET_TYPES, build_geometry, classify, convert_element

RING = ((0.2, 0.2), (0.2, 0.3), (0.3, 0.3), (0.2, 0.2))


def _way(tags, geometry=RING, element_id=10):
    return RawElement(type="way", id=element_id, geometry=geometry, tags=tags)


def test_classify_precedence_building_beats_highway():
    assert classify({"building": "yes", "highway": "service"}) == "building"


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        ({"highway": "primary"}, "road"),
        ({"power": "line"}, "power_line"),
        ({"power": "tower"}, "power_infrastructure"),
        ({"power": "pole"}, "power_infrastructure"),
        ({"railway": "rail"}, "railway"),
        ({"amenity": "hospital"}, "hospital"),
        ({"amenity": "fire_station"}, "fire_station"),
        ({"highway": "residential", "railway": "tram"}, "road"),
        ({"power": "line", "railway": "rail"}, "power_line"),
        ({"railway": "rail", "amenity": "hospital"}, "railway"),
    ],
)
def test_classify_table(tags, expected):
    assert classify(tags) == expected


@pytest.mark.parametrize(
    "tags",
    [{}, {"power": "substation"}, {"amenity": "school"}, {"building": ""}, {"name": "x"}],
)
def test_classify_unmatched_tags_drop(tags):
    assert classify(tags) is None


def test_asset_types_are_listed_in_precedence_order():
    assert ASSET_TYPES == (
        "building",
        "road",
        "power_line",
        "power_infrastructure",
        "railway",
        "hospital",
        "fire_station",
    )


def test_closed_building_way_becomes_polygon():
    geometry = build_geometry(_way({"building": "yes"}))
    assert geometry == {
        "type": "Polygon",
        "coordinates": [[[0.2, 0.2], [0.3, 0.2], [0.3, 0.3], [0.2, 0.2]]],
    }


def test_closed_way_without_building_tag_becomes_line():
    geometry = build_geometry(_way({"highway": "service"}))
    assert geometry["type"] == "LineString"
    assert geometry["coordinates"][0] == geometry["coordinates"][-1]


def test_building_way_with_three_points_is_a_line():
    geometry = build_geometry(_way({"building": "yes"}, geometry=((0.0, 0.0), (0.0, 1.0), (0.0, 0.0))))
    assert geometry["type"] == "LineString"


def test_open_building_way_is_a_line():
    geometry = build_geometry(_way({"building": "yes"}, geometry=((0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0))))
    assert geometry["type"] == "LineString"


def test_way_with_fewer_than_two_points_is_dropped():
    assert convert_element(_way({"highway": "track"}, geometry=((0.0, 0.0),))) is None
    assert convert_element(_way({"highway": "track"}, geometry=())) is None


def test_node_becomes_point_in_lon_lat_order():
    asset = convert_element(RawElement(type="node", id=7, lat=51.5, lon=-0.12, tags={"power": "pole"}))
    assert asset.asset_type == "power_infrastructure"
    assert asset.geometry == {"type": "Point", "coordinates": [-0.12, 51.5]}


def test_node_without_coordinate_raises_element_error():
    with pytest.raises(ElementError):
        convert_element(RawElement(type="node", id=8, tags={"amenity": "hospital"}))


@pytest.mark.parametrize("tags", [{"building": "yes"}, {"highway": "primary"}, {"amenity": "hospital"}])
def test_relation_never_produces_an_asset(tags):
    relation = RawElement(type="relation", id=9, geometry=RING, tags=tags)
    assert convert_element(relation) is None


def test_unknown_element_type_is_dropped():
    assert convert_element(RawElement(type="area", id=1, lat=0.0, lon=0.0, tags={"building": "yes"})) is None


def test_properties_are_tags_plus_provenance():
    asset = convert_element(_way({"building": "yes", "name": "Depot"}, element_id=4001))
    assert asset.properties == {
        "building": "yes",
        "name": "Depot",
        "osm_id": "4001",
        "osm_type": "way",
    }
    assert asset.to_dict()["asset_type"] == "building"
