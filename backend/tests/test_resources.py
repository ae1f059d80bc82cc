from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from resources.decode import decode_page, resource_to_api
from resources.query import (
    InvalidQueryError,
    list_page,
    parse_list_query,
    sort_resources,
)
from resources.seed import dataset_from_dict, load_dataset
from resources.types import Resource


def _r(id, way=None, municipality=None, category=None, **props):
    return Resource(
        id=id,
        kind="containers",
        lon=-8.6,
        lat=41.15,
        category=category,
        way_name=way,
        municipality_name=municipality,
        props=props,
    )


def test_decode_keeps_metadata_and_integer_ids():
    page = decode_page(
        "trucks",
        {
            "total": 1,
            "trucks": [
                {
                    "id": 7,
                    "licensePlate": "AA-00-BB",
                    "geoJson": {
                        "type": "Feature",
                        "geometry": {"type": "Point", "coordinates": [-8.6, 41.15, 12.0]},
                        "properties": {},
                    },
                }
            ],
        },
        limit=10,
        offset=0,
    )
    (truck,) = page.items
    assert truck.id == "7"
    assert truck.kind == "trucks"
    assert truck.props == {"licensePlate": "AA-00-BB"}
    assert truck.way_name is None


def test_decode_rejects_non_objects_and_bad_geometry():
    with pytest.raises(ValueError):
        decode_page("containers", [], limit=10, offset=0)
    with pytest.raises(ValidationError):
        decode_page(
            "containers",
            {
                "total": 1,
                "items": [
                    {
                        "id": "x",
                        "geoJson": {
                            "type": "Feature",
                            "geometry": {"type": "LineString", "coordinates": [0, 0]},
                        },
                    }
                ],
            },
            limit=10,
            offset=0,
        )


def test_resource_to_api_is_the_wire_shape():
    r = _r("c1", way="Rua A", municipality="Porto", category="paper", createdAt="t0")
    out = resource_to_api(r)
    assert out["id"] == "c1"
    assert out["category"] == "paper"
    assert out["createdAt"] == "t0"
    assert out["geoJson"]["geometry"]["coordinates"] == [-8.6, 41.15]
    assert out["geoJson"]["properties"] == {"wayName": "Rua A", "municipalityName": "Porto"}


def test_parse_list_query_validates_pagination_and_sort():
    q = parse_list_query("containers", {"limit": "5", "offset": "10", "sort": "wayName", "order": "desc"})
    assert (q.limit, q.offset, q.sort, q.order) == (5, 10, "wayName", "desc")

    for params, field_name in [
        ({"limit": "0"}, "limit"),
        ({"limit": "101"}, "limit"),
        ({"limit": "ten"}, "limit"),
        ({"offset": "-1"}, "offset"),
        ({"sort": "licensePlate"}, "sort"),
        ({"order": "up"}, "order"),
        ({"logicalOperator": "xor"}, "logicalOperator"),
    ]:
        with pytest.raises(InvalidQueryError) as exc:
            parse_list_query("containers", params)
        assert exc.value.field_name == field_name

    # Trucks may sort by license plate.
    assert parse_list_query("trucks", {"sort": "licensePlate"}).sort == "licensePlate"


def test_location_filters_combine_with_logical_operator():
    resources = [
        _r("1", way="Rua Augusta", municipality="Lisboa"),
        _r("2", way="Avenida da Liberdade", municipality="Lisboa"),
        _r("3", way="Rua de Santa Catarina", municipality="Porto"),
    ]
    q_and = parse_list_query("containers", {"wayName": "rua", "municipalityName": "LISBOA"})
    items, total = list_page(resources, q_and)
    assert [r.id for r in items] == ["1"]
    assert total == 1

    q_or = parse_list_query(
        "containers", {"wayName": "rua", "municipalityName": "lisboa", "logicalOperator": "or"}
    )
    items, total = list_page(resources, q_or)
    assert sorted(r.id for r in items) == ["1", "2", "3"]


def test_sort_puts_missing_values_last_and_breaks_ties_on_id():
    resources = [
        _r("b", createdAt="2024-02-01"),
        _r("c"),
        _r("a", createdAt="2024-02-01"),
        _r("d", createdAt="2024-01-01"),
    ]
    asc = sort_resources(resources, sort="createdAt", order="asc")
    assert [r.id for r in asc] == ["d", "a", "b", "c"]
    desc = sort_resources(resources, sort="createdAt", order="desc")
    assert [r.id for r in desc] == ["a", "b", "d", "c"]


def test_list_page_slices_after_sorting():
    resources = [_r(f"{i:02d}", category="glass") for i in range(25)]
    q = parse_list_query("containers", {"limit": "10", "offset": "20"})
    items, total = list_page(resources, q)
    assert total == 25
    assert [r.id for r in items] == ["20", "21", "22", "23", "24"]


def test_dataset_loads_from_json_and_yaml(tmp_path):
    data = {
        "containers": [
            {
                "id": "c1",
                "category": "metal",
                "geoJson": {
                    "type": "Feature",
                    "geometry": {"type": "Point", "coordinates": [-9.0, 38.0]},
                },
            }
        ],
        "warehouses": [],
    }
    jp = tmp_path / "seed.json"
    jp.write_text(json.dumps(data), encoding="utf-8")
    ds = load_dataset(jp)
    assert [r.id for r in ds["containers"]] == ["c1"]
    assert ds["trucks"] == []

    yp = tmp_path / "seed.yaml"
    yp.write_text(
        "containers:\n"
        "  - id: c2\n"
        "    category: organic\n"
        "    geoJson:\n"
        "      type: Feature\n"
        "      geometry: {type: Point, coordinates: [-9.1, 38.1]}\n",
        encoding="utf-8",
    )
    assert load_dataset(yp)["containers"][0].category == "organic"

    with pytest.raises(ValueError):
        dataset_from_dict({"containers": {"id": "nope"}})
