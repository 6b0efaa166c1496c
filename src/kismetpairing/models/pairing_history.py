"""Pairing history used for rematch checks."""

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

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from kismetpairing.models.match import Match


@dataclass
class PairingHistory:
    """
    Tracks which players have already met.

    Attributes
    ----------
    encounters : Counter of frozenset of str
        Number of meetings per unordered player pair. Byes are not recorded.
    """

    encounters: Counter = field(default_factory=Counter)

    @classmethod
    def from_matches(cls, matches: Iterable[Match]) -> "PairingHistory":
        """Build history from every non-bye match, pending or completed."""
        history = cls()
        for match in matches:
            if match.player_b_id is not None:
                history.add_pairing(match.player_a_id, match.player_b_id)
        return history

    def add_pairing(self, player1_id: str, player2_id: str) -> None:
        """Record that two players have been paired."""
        self.encounters[frozenset({player1_id, player2_id})] += 1

    def have_played(self, player1_id: str, player2_id: str) -> bool:
        """Check if two players have previously played each other."""
        return self.times_played(player1_id, player2_id) > 0

    def times_played(self, player1_id: str, player2_id: str) -> int:
        return self.encounters.get(frozenset({player1_id, player2_id}), 0)
