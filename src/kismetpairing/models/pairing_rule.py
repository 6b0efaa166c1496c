"""Per-round pairing rule."""

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
from typing import Any, Dict, Optional

from kismetpairing.constants import (
    DEFAULT_QUARTILE_SCHEME,
    METHOD_SWISS,
    PAIRING_METHOD_ALIASES,
    SOURCE_PREVIOUS_ROUND,
    STANDINGS_SOURCE_ALIASES,
)


@dataclass
class PairingRule:
    """How the rounds in ``[start_round, end_round]`` are paired.

    Attributes
    ----------
    start_round, end_round : int
        Inclusive round range.
    pairing_method : str
        One of ``kismetpairing.constants.PAIRING_METHODS``.
    standings_source : str
        ``"previous_round"``, ``"lagged"`` (two rounds back) or ``"round0"``
        (initial ratings only).
    allowed_repeats : int
        Advisory repeat allowance; Swiss already minimises repeats.
    quartile_pairing_scheme : str or None
        Quartile crossing for the Australian draw.
    id : int or None
        Assigned by the rule store.
    """

    start_round: int
    end_round: int
    pairing_method: str = METHOD_SWISS
    standings_source: str = SOURCE_PREVIOUS_ROUND
    allowed_repeats: int = 0
    quartile_pairing_scheme: Optional[str] = None
    id: Optional[int] = None

    def covers(self, round_number: int) -> bool:
        return self.start_round <= round_number <= self.end_round

    @property
    def scheme(self) -> str:
        return self.quartile_pairing_scheme or DEFAULT_QUARTILE_SCHEME

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "start_round": self.start_round,
            "end_round": self.end_round,
            "pairing_method": self.pairing_method,
            "standings_source": self.standings_source,
            "allowed_repeats": self.allowed_repeats,
            "quartile_pairing_scheme": self.quartile_pairing_scheme,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PairingRule":
        """Deserialize a rule, accepting director-facing method names."""
        method = data.get("pairing_method", data.get("pairingMethod", METHOD_SWISS))
        source = data.get(
            "standings_source", data.get("standingsSource", SOURCE_PREVIOUS_ROUND)
        )
        return cls(
            id=data.get("id"),
            start_round=int(data.get("start_round", data.get("startRound"))),
            end_round=int(data.get("end_round", data.get("endRound"))),
            pairing_method=PAIRING_METHOD_ALIASES.get(method, method),
            standings_source=STANDINGS_SOURCE_ALIASES.get(source, source),
            allowed_repeats=int(
                data.get("allowed_repeats", data.get("allowedRepeats", 0))
            ),
            quartile_pairing_scheme=data.get(
                "quartile_pairing_scheme", data.get("quartilePairingScheme")
            ),
        )
