from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from backend.db.errors import BlobParseError
from backend.db.fetcher import parse_properties
from backend.db.mappers import RecordShapeError, map_property


def test_field_names_match_case_insensitively():
    prop = map_property(
        {
            "propertyid": "P101",
            "PROPERTYNAME": "Ocean View Tower",
            "Address": "1 Shore Rd",
            "features": ["Pool"],
            "HIGHLIGHTS": ["Views"],
            "transportation": [{"TYPE": "Ferry", "station": "Pier 3", "DISTANCE": "0.4 miles"}],
            "spaces": [
                {
                    "spaceID": "S1",
                    "spacename": "Penthouse",
                    "TYPE": "Office",
                    "Size": 1200,
                    "rentroll": [{"MONTH": "Jan", "YEAR": 2023, "rent": 5000}],
                }
            ],
        }
    )
    assert prop.id == "P101"
    assert prop.name == "Ocean View Tower"
    assert prop.address == "1 Shore Rd"
    assert prop.transportation[0].station == "Pier 3"
    assert prop.transportation[0].line is None
    space = prop.spaces[0]
    assert (space.id, space.name, space.type, space.size) == ("S1", "Penthouse", "Office", 1200)
    assert space.rent_roll[0].year == 2023
    assert space.rent_roll[0].rent == Decimal("5000")


def test_unknown_fields_are_ignored_and_defaults_apply():
    prop = map_property(
        {
            "PropertyId": "P1",
            "PropertyName": "Plain",
            "Landlord": "Nobody",
            "Spaces": [{"SpaceId": "S1", "SpaceName": "A", "Floor": 3, "RentRoll": [{"Month": "Feb", "Rent": 10}]}],
        }
    )
    assert prop.address is None
    assert prop.features == [] and prop.highlights == [] and prop.transportation == []
    space = prop.spaces[0]
    assert space.type is None and space.size is None
    assert space.rent_roll[0].year == datetime.now().year


def test_order_of_spaces_and_rent_roll_is_preserved():
    prop = map_property(
        {
            "PropertyId": "P1",
            "PropertyName": "Ordered",
            "Spaces": [
                {"SpaceId": "S9", "SpaceName": "Last alphabetically", "RentRoll": [
                    {"Month": "Mar", "Rent": 3}, {"Month": "Jan", "Rent": 1}, {"Month": "Feb", "Rent": 2},
                ]},
                {"SpaceId": "S1", "SpaceName": "A first", "RentRoll": []},
            ],
        }
    )
    assert [s.id for s in prop.spaces] == ["S9", "S1"]
    assert [r.month for r in prop.spaces[0].rent_roll] == ["Mar", "Jan", "Feb"]
    assert prop.spaces[0].latest_rent == Decimal("2")
    assert prop.spaces[1].latest_rent is None


def test_wire_names_are_used_when_serializing():
    prop = map_property(
        {"PropertyId": "P1", "PropertyName": "X", "Spaces": [
            {"SpaceId": "S1", "SpaceName": "A", "RentRoll": [{"Month": "Jan", "year": 2024, "Rent": 4500.5}]}
        ]}
    )
    data = prop.model_dump(mode="json", by_alias=True)
    assert data["PropertyId"] == "P1"
    assert data["Spaces"][0]["RentRoll"][0] == {"Month": "Jan", "year": 2024, "Rent": 4500.5}


@pytest.mark.parametrize(
    "record",
    [
        {"PropertyName": "No id"},
        {"PropertyId": "P1", "PropertyName": "Bad rent", "Spaces": [
            {"SpaceId": "S1", "SpaceName": "A", "RentRoll": [{"Month": "Jan", "Rent": -1}]}
        ]},
        {"PropertyId": "P1", "PropertyName": "Bad size", "Spaces": [{"SpaceId": "S1", "SpaceName": "A", "size": -5}]},
        {"PropertyId": "P1", "PropertyName": "No distance", "Transportation": [{"Type": "Bus"}]},
    ],
)
def test_invalid_records_fail_validation(record):
    with pytest.raises(ValidationError):
        map_property(record)


def test_wrong_shapes_are_rejected():
    with pytest.raises(RecordShapeError):
        map_property(["not", "an", "object"])
    with pytest.raises(RecordShapeError):
        map_property({"PropertyId": "P1", "PropertyName": "X", "Spaces": {"SpaceId": "S1"}})


def test_parse_is_all_or_nothing():
    body = b'[{"PropertyId": "P1", "PropertyName": "Good"}, {"PropertyId": "P2"}]'
    with pytest.raises(BlobParseError) as excinfo:
        parse_properties([body])
    assert "PropertyName" in str(excinfo.value) or "name" in str(excinfo.value)


def test_parse_keeps_rent_exact():
    body = b'[{"PropertyId": "P1", "PropertyName": "X", "Spaces": [{"SpaceId": "S1", "SpaceName": "A", "RentRoll": [{"Month": "Jan", "Rent": 4500.55}]}]}]'
    [prop] = parse_properties([body])
    assert prop.spaces[0].rent_roll[0].rent == Decimal("4500.55")


def test_text_fields_are_kept_verbatim_and_blanks_become_none():
    prop = map_property(
        {
            "PropertyId": "P1",
            "PropertyName": "Verbatim",
            "address": "  12 Quay St ",
            "Transportation": [{"Type": "Rail", "Line": " Red ", "Station": "", "Distance": "1 mile"}],
            "Spaces": [{"SpaceId": "S1", "SpaceName": "A", "type": None}],
        }
    )
    assert prop.address == "  12 Quay St "
    assert prop.transportation[0].line == " Red "
    assert prop.transportation[0].station is None
    assert prop.spaces[0].type is None
