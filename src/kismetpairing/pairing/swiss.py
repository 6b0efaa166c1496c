"""Swiss pairing by score groups with floater carry-down.

Players are grouped by their score in the input standings and groups are
processed from the top. Each group is ordered by rank, with any floater from
the group above placed first; an odd group sends its lowest-ranked player
down as the next floater. The group is split into halves and each top-half
player meets the first bottom-half player they have not played. If taking
the first such player would later force a rematch, the halves are searched
for an assignment in which every pairing is fresh. Only when none exists is
a rematch taken, rather than leaving a player unpaired.
"""

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

from typing import Callable, Dict, List, Optional, Sequence

from kismetpairing.constants import METHOD_SWISS
from kismetpairing.exceptions import NoPairingAvailableException
from kismetpairing.models import (
    Match,
    PairingHistory,
    Player,
    Standing,
    TournamentConfig,
)
from kismetpairing.pairing.base import PairingAlgorithm, are_teammates
from kismetpairing.utils import setup_logger

logger = setup_logger(__name__)

OpponentFilter = Callable[[Player, Player], bool]

# placements tried before giving up on a fully fresh assignment
MAX_SEARCH_STEPS = 10000


class SwissPairing(PairingAlgorithm):
    """Score-group Swiss pairing with rematch avoidance."""

    method = METHOD_SWISS

    def pair(
        self,
        config: TournamentConfig,
        round_number: int,
        players: Sequence[Player],
        standings: Sequence[Standing],
        history: PairingHistory,
    ) -> List[Match]:
        lookup = self.standings_by_player(standings)
        filters = self._opponent_filters(config, round_number, history)

        matches: List[Match] = []
        floater: Optional[Player] = None
        for score, group in self._score_groups(players, lookup):
            group = self.sort_by_rank(group, lookup)
            if floater is not None:
                group.insert(0, floater)
            floater = group.pop() if len(group) % 2 else None
            if floater is not None:
                logger.debug(
                    "Round %s: %s floats down from score group %s",
                    round_number,
                    floater.name,
                    score,
                )

            mid = len(group) // 2
            top_half = group[:mid]
            bottom_half = group[mid:]
            opponents = self._strict_assignment(top_half, bottom_half, filters[0])
            if opponents is None:
                opponents = []
                for player_a in top_half:
                    player_b = self._choose_opponent(
                        player_a, bottom_half, filters, round_number
                    )
                    bottom_half.remove(player_b)
                    opponents.append(player_b)
            for player_a, player_b in zip(top_half, opponents):
                matches.append(self.make_match(config, round_number, player_a, player_b))

        if floater is not None:
            logger.error(
                "Round %s: %s left unpaired after all score groups; byes should "
                "have evened the pool",
                round_number,
                floater.name,
            )
        return matches

    @staticmethod
    def _score_groups(players: Sequence[Player], lookup: Dict[str, Standing]):
        groups: Dict[float, List[Player]] = {}
        for player in players:
            standing = lookup.get(player.id)
            score = standing.score if standing is not None else 0.0
            groups.setdefault(score, []).append(player)
        for score in sorted(groups, reverse=True):
            yield score, groups[score]

    @staticmethod
    def _opponent_filters(
        config: TournamentConfig, round_number: int, history: PairingHistory
    ) -> List[OpponentFilter]:
        """Acceptable-opponent tests, strictest first."""

        def fresh(a: Player, b: Player) -> bool:
            return not history.have_played(a.id, b.id)

        def anyone(a: Player, b: Player) -> bool:
            return True

        if not config.separates_teammates(round_number):
            return [fresh, anyone]

        def not_teammate(a: Player, b: Player) -> bool:
            return not are_teammates(a, b)

        def fresh_not_teammate(a: Player, b: Player) -> bool:
            return fresh(a, b) and not_teammate(a, b)

        return [fresh_not_teammate, not_teammate, fresh, anyone]

    @staticmethod
    def _strict_assignment(
        top_half: List[Player],
        bottom_half: List[Player],
        accept: OpponentFilter,
    ) -> Optional[List[Player]]:
        """Find a bottom-half opponent for each top-half player, all passing ``accept``.

        Depth-first in the greedy candidate order, so the greedy pairing is
        returned whenever it already works. Returns None when no such
        assignment exists or after ``MAX_SEARCH_STEPS`` placements.
        """
        chosen: List[Player] = []
        used = set()
        steps = 0

        def place(index: int) -> bool:
            nonlocal steps
            if index == len(top_half):
                return True
            for candidate in bottom_half:
                if candidate.id in used or not accept(top_half[index], candidate):
                    continue
                steps += 1
                if steps > MAX_SEARCH_STEPS:
                    return False
                used.add(candidate.id)
                chosen.append(candidate)
                if place(index + 1):
                    return True
                used.discard(candidate.id)
                chosen.pop()
            return False

        return chosen if place(0) else None

    @staticmethod
    def _choose_opponent(
        player: Player,
        candidates: List[Player],
        filters: List[OpponentFilter],
        round_number: int,
    ) -> Player:
        for level, accept in enumerate(filters):
            for candidate in candidates:
                if accept(player, candidate):
                    if level > 0:
                        logger.warning(
                            "Round %s: %s vs %s paired at relaxation level %s",
                            round_number,
                            player.name,
                            candidate.name,
                            level,
                        )
                    return candidate
        raise NoPairingAvailableException(
            f"No opponent left for {player.name}", round_number=round_number
        )
