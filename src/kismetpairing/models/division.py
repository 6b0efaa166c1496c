"""Rating bands: divisions, classes and teams."""

# Kismet Pairing
# Copyright (C) 2025  Kismet Pairing developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from kismetpairing.constants import DEFAULT_RATING_CEILING, DEFAULT_RATING_FLOOR


@dataclass
class RatingBand:
    """A named, inclusive rating range.

    Attributes
    ----------
    id : str
        Identifier.
    name : str
        Display name.
    rating_floor : int
        Lowest rating in the band.
    rating_ceiling : int
        Highest rating in the band.
    """

    id: str
    name: str
    rating_floor: int = DEFAULT_RATING_FLOOR
    rating_ceiling: int = DEFAULT_RATING_CEILING

    def contains(self, rating: float) -> bool:
        return self.rating_floor <= rating <= self.rating_ceiling

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "rating_floor": self.rating_floor,
            "rating_ceiling": self.rating_ceiling,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        return cls(
            id=str(data["id"]),
            name=data.get("name", str(data["id"])),
            rating_floor=int(
                data.get("rating_floor", data.get("ratingFloor", DEFAULT_RATING_FLOOR))
            ),
            rating_ceiling=int(
                data.get(
                    "rating_ceiling", data.get("ratingCeiling", DEFAULT_RATING_CEILING)
                )
            ),
        )


class Division(RatingBand):
    """An independent pairing and ranking pool."""


class PlayerClass(RatingBand):
    """A reporting class within the field (e.g. "A", "B", "C")."""


@dataclass
class Team:
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        return cls(id=str(data["id"]), name=data.get("name", str(data["id"])))


Band = TypeVar("Band", bound=RatingBand)


def _highest_matching_band(rating: float, bands: Sequence[Band]) -> Optional[Band]:
    for band in sorted(bands, key=lambda b: b.rating_floor, reverse=True):
        if band.contains(rating):
            return band
    return None


def assign_division(rating: float, divisions: List[Division]) -> Optional[Division]:
    """Pick the division for a rating.

    Divisions are checked from the highest floor down; the first whose band
    contains the rating wins. A rating outside every band falls back to the
    division with the lowest floor.

    Returns:
        The chosen division, or None if ``divisions`` is empty
    """
    if not divisions:
        return None
    match = _highest_matching_band(rating, divisions)
    if match is not None:
        return match
    return min(divisions, key=lambda d: d.rating_floor)


def assign_class(rating: float, classes: List[PlayerClass]) -> Optional[PlayerClass]:
    """Pick the reporting class for a rating, or None if no band contains it."""
    return _highest_matching_band(rating, classes)
