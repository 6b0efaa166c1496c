"""Derived standings records."""

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

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from kismetpairing.models.division import Team
from kismetpairing.models.player import Player


@dataclass
class LastGameInfo:
    """Summary of a player's most recent completed game.

    Attributes
    ----------
    round : int
        Round of the game.
    result : str
        ``W``, ``L``, ``T``, ``B`` (bye) or ``F`` (forfeit).
    player_score, opponent_score : int
        Scores from the player's side.
    opponent_seed : int or None
        Seed of the opponent, None for a bye.
    """

    round: int
    result: str
    player_score: int
    opponent_score: int
    opponent_seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "result": self.result,
            "player_score": self.player_score,
            "opponent_score": self.opponent_score,
            "opponent_seed": self.opponent_seed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LastGameInfo":
        return cls(
            round=data["round"],
            result=data["result"],
            player_score=data["player_score"],
            opponent_score=data["opponent_score"],
            opponent_seed=data.get("opponent_seed"),
        )


@dataclass
class Standing:
    """One player's line in the standings.

    Standings are recomputed on demand and never stored as the record of
    truth; snapshots of them are kept per round as a cache.

    Attributes
    ----------
    rank : int
        Position within the player's division, starting at 1.
    player : Player
        The player as of the computation.
    score : float
        Weighted score including byes.
    wins, losses : float
        Win/loss counters; a tie adds 0.5 to both.
    cumulative_spread : int
        Sum of (own score - opponent score) over completed games.
    buchholz : float
        Sum of opponents' final scores.
    median_buchholz : float
        Buchholz without the highest and lowest opponent, with 3+ opponents.
    last_game : LastGameInfo or None
        Most recent completed game.
    current_rating : int or None
        Rating plus ``rating_change``.
    rating_change : int or None
        Rounded provisional rating delta for this event.
    clinch_status : str or None
        ``"clinched"`` for a division leader who cannot be caught.
    team_name : str or None
        Team label when team names are displayed.
    """

    rank: int
    player: Player
    score: float = 0.0
    wins: float = 0.0
    losses: float = 0.0
    cumulative_spread: int = 0
    buchholz: float = 0.0
    median_buchholz: float = 0.0
    last_game: Optional[LastGameInfo] = None
    current_rating: Optional[int] = None
    rating_change: Optional[int] = None
    clinch_status: Optional[str] = None
    team_name: Optional[str] = None

    @property
    def player_id(self) -> str:
        return self.player.id

    def to_dict(self) -> Dict[str, Any]:
        """Serialize standing to dictionary."""
        return {
            "rank": self.rank,
            "player": self.player.to_dict(),
            "score": self.score,
            "wins": self.wins,
            "losses": self.losses,
            "cumulative_spread": self.cumulative_spread,
            "buchholz": self.buchholz,
            "median_buchholz": self.median_buchholz,
            "last_game": self.last_game.to_dict() if self.last_game else None,
            "current_rating": self.current_rating,
            "rating_change": self.rating_change,
            "clinch_status": self.clinch_status,
            "team_name": self.team_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Standing":
        """Deserialize standing from dictionary."""
        last_game = data.get("last_game")
        return cls(
            rank=data["rank"],
            player=Player.from_dict(data["player"]),
            score=data.get("score", 0.0),
            wins=data.get("wins", 0.0),
            losses=data.get("losses", 0.0),
            cumulative_spread=data.get("cumulative_spread", 0),
            buchholz=data.get("buchholz", 0.0),
            median_buchholz=data.get("median_buchholz", 0.0),
            last_game=LastGameInfo.from_dict(last_game) if last_game else None,
            current_rating=data.get("current_rating"),
            rating_change=data.get("rating_change"),
            clinch_status=data.get("clinch_status"),
            team_name=data.get("team_name"),
        )


@dataclass
class TeamStanding:
    """A team's aggregate line, built from its best players."""

    rank: int
    team: Team
    total_score: float = 0.0
    contributing_players: List[Standing] = field(default_factory=list)
    total_cumulative_spread: int = 0


@dataclass
class PostTournamentRating:
    """Final rating report line for one player."""

    player_id: str
    player_name: str
    division_id: Optional[str]
    old_rating: int
    new_rating: int
    change: int
    performance_rating: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "division_id": self.division_id,
            "old_rating": self.old_rating,
            "new_rating": self.new_rating,
            "change": self.change,
            "performance_rating": self.performance_rating,
        }
