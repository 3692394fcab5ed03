"""Map raw blob records onto the property models.

Every entity has an explicit alias table from lower-cased wire names to model
field names. Keys are folded once per record, so ``propertyid``,
``PropertyId`` and ``PROPERTYID`` all land on ``Property.id``; anything not in
the table is dropped.
"""

from typing import Any, Dict, List, Mapping

from ..models.property import Property, RentRoll, Space, TransportationInfo
from ..utils.coerce import blank_to_none

PROPERTY_FIELDS = {
    "propertyid": "id",
    "propertyname": "name",
    "address": "address",
    "features": "features",
    "highlights": "highlights",
    "transportation": "transportation",
    "spaces": "spaces",
}

TRANSPORTATION_FIELDS = {
    "type": "type",
    "line": "line",
    "station": "station",
    "distance": "distance",
}

SPACE_FIELDS = {
    "spaceid": "id",
    "spacename": "name",
    "type": "type",
    "size": "size",
    "rentroll": "rent_roll",
}

RENT_ROLL_FIELDS = {
    "month": "month",
    "year": "year",
    "rent": "rent",
}


class RecordShapeError(ValueError):
    """A record was not a JSON object where one was expected."""


def fold_keys(record: Any, table: Mapping[str, str], entity: str) -> Dict[str, Any]:
    if not isinstance(record, dict):
        raise RecordShapeError(f"{entity} entry must be an object, got {type(record).__name__}")
    folded: Dict[str, Any] = {}
    for key, value in record.items():
        name = table.get(str(key).lower())
        # first spelling wins when a payload repeats a key in different case
        if name is not None and name not in folded:
            folded[name] = value
    return folded


def _list(value: Any, entity: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise RecordShapeError(f"{entity} must be an array, got {type(value).__name__}")
    return value


def _drop_none(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


def map_transportation(record: Any) -> TransportationInfo:
    fields = fold_keys(record, TRANSPORTATION_FIELDS, "Transportation")
    fields["line"] = blank_to_none(fields.get("line"))
    fields["station"] = blank_to_none(fields.get("station"))
    return TransportationInfo.model_validate(_drop_none(fields))


def map_rent_roll(record: Any) -> RentRoll:
    fields = fold_keys(record, RENT_ROLL_FIELDS, "RentRoll")
    return RentRoll.model_validate(_drop_none(fields))


def map_space(record: Any) -> Space:
    fields = fold_keys(record, SPACE_FIELDS, "Space")
    fields["type"] = blank_to_none(fields.get("type"))
    fields["rent_roll"] = [map_rent_roll(r) for r in _list(fields.get("rent_roll"), "RentRoll")]
    return Space.model_validate(_drop_none(fields))


def map_property(record: Any) -> Property:
    fields = fold_keys(record, PROPERTY_FIELDS, "Property")
    fields["address"] = blank_to_none(fields.get("address"))
    fields["features"] = [str(f) for f in _list(fields.get("features"), "Features")]
    fields["highlights"] = [str(h) for h in _list(fields.get("highlights"), "Highlights")]
    fields["transportation"] = [
        map_transportation(t) for t in _list(fields.get("transportation"), "Transportation")
    ]
    fields["spaces"] = [map_space(s) for s in _list(fields.get("spaces"), "Spaces")]
    return Property.model_validate(_drop_none(fields))
