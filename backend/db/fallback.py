"""Fixed sample portfolio served when the blob cannot be read."""

from __future__ import annotations

from decimal import Decimal
from typing import List

from ..models.property import Property, RentRoll, Space, TransportationInfo

FALLBACK_YEAR = 2024
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun")


def _rent_roll(*rents: int) -> List[RentRoll]:
    return [
        RentRoll(month=month, year=FALLBACK_YEAR, rent=Decimal(rent))
        for month, rent in zip(MONTHS, rents)
    ]


def fallback_properties() -> List[Property]:
    """Return a freshly built copy of the sample portfolio."""

    return [
        Property(
            id="PROP001",
            name="Downtown Corporate Center",
            address="123 Main Street, Downtown",
            features=[
                "24/7 Security with keycard access",
                "State-of-the-art fitness center",
                "Multiple conference rooms",
                "Covered parking garage",
                "On-site cafeteria",
                "High-speed fiber internet",
            ],
            highlights=[
                "Prime downtown location with city views",
                "LEED Gold certified building",
                "Recently renovated with modern amenities",
                "Walking distance to major transit hubs",
            ],
            transportation=[
                TransportationInfo(type="Subway", line="Green Line", distance="0.3 miles"),
                TransportationInfo(type="Bus", line="Route 15", distance="0.1 miles"),
                TransportationInfo(type="Bike Share", station="Downtown Station", distance="0.2 miles"),
            ],
            spaces=[
                Space(
                    id="SP001",
                    name="Executive Suite A",
                    type="Office",
                    size=1500,
                    rent_roll=_rent_roll(4500, 4500, 4650, 4650, 4800, 4800),
                ),
                Space(
                    id="SP002",
                    name="Open Floor Plan B",
                    type="Office",
                    size=2200,
                    rent_roll=_rent_roll(6600, 6600, 6800, 6800, 7000, 7000),
                ),
                Space(
                    id="SP003",
                    name="Conference Center C",
                    type="Meeting",
                    size=800,
                    rent_roll=_rent_roll(2400, 2400, 2500, 2500, 2600, 2600),
                ),
            ],
        ),
        Property(
            id="PROP002",
            name="Industrial Business Park",
            address="456 Industrial Blvd, Manufacturing District",
            features=[
                "Free parking for 200+ vehicles",
                "Loading docks with hydraulic lifts",
                "24/7 security patrol",
                "On-site maintenance team",
                "Climate-controlled storage",
                "Truck-friendly access roads",
            ],
            highlights=[
                "Strategic location near major highways",
                "Flexible warehouse and office combinations",
                "Competitive lease rates",
                "Established business community",
            ],
            transportation=[
                TransportationInfo(type="Bus", line="Route 22", distance="0.5 miles"),
                TransportationInfo(type="Highway", line="Interstate 95", distance="1.2 miles"),
            ],
            spaces=[
                Space(
                    id="SP004",
                    name="Warehouse Unit 1",
                    type="Warehouse",
                    size=5000,
                    rent_roll=_rent_roll(8500, 8500, 8750, 8750, 9000, 9000),
                ),
                Space(
                    id="SP005",
                    name="Office Suite 2",
                    type="Office",
                    size=1200,
                    rent_roll=_rent_roll(3000, 3000, 3100, 3100, 3200, 3200),
                ),
            ],
        ),
    ]
