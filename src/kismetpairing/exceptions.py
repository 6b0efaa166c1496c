"""Exceptions for use in Kismet Pairing"""

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

from typing import Any, Dict, Optional

# ========== Base Application Exception ==========


class KismetPairingException(Exception):
    """Base exception for all Kismet Pairing errors.

    All custom exceptions in the application should inherit from this class.
    The optional context (tournament, round, division) identifies the unit of
    work that failed so a caller can retry exactly that unit.
    """

    def __init__(
        self,
        message: str,
        tournament_id: Optional[str] = None,
        round_number: Optional[int] = None,
        division_id: Optional[str] = None,
    ):
        self.message = message
        self.tournament_id = tournament_id
        self.round_number = round_number
        self.division_id = division_id
        super().__init__(self._format())

    @property
    def context(self) -> Dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "round": self.round_number,
            "division_id": self.division_id,
        }

    def _format(self) -> str:
        parts = [
            f"{key}={value}" for key, value in self.context.items() if value is not None
        ]
        if not parts:
            return self.message
        return f"{self.message} [{', '.join(parts)}]"


# ========== Configuration Exceptions ==========


class ConfigurationException(KismetPairingException):
    """Base exception for configuration errors; tournament state is unchanged."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when a tournament configuration fails validation."""

    pass


class MissingConfigurationException(ConfigurationException):
    """Raised when no configuration exists for a tournament."""

    pass


class OverlappingPairingRulesException(ConfigurationException):
    """Raised when two pairing rules cover the same round."""

    pass


class NoPairingRuleException(ConfigurationException):
    """Raised when no pairing rule covers the requested round."""

    pass


class RoundOutOfRangeException(ConfigurationException):
    """Raised when pairing is requested beyond the tournament's total rounds."""

    pass


# ========== Pairing Exceptions ==========


class PairingException(KismetPairingException):
    """Base exception for pairing-related errors."""

    pass


class InvalidPairingException(PairingException):
    """Raised when a pairing configuration is invalid."""

    pass


class NoPairingAvailableException(PairingException):
    """Raised when no valid pairing can be generated."""

    pass


class InsufficientPlayersException(PairingException):
    """Raised when a division has fewer than two active players."""

    pass


class DivisionPairingException(PairingException):
    """Raised when one or more divisions could not be paired.

    Sibling divisions that paired successfully have already been persisted;
    ``failures`` maps each failed division id to its underlying error.
    """

    def __init__(
        self,
        message: str,
        failures: Dict[str, Exception],
        tournament_id: Optional[str] = None,
        round_number: Optional[int] = None,
    ):
        self.failures = failures
        super().__init__(message, tournament_id, round_number)


# ========== Tournament Exceptions ==========


class TournamentException(KismetPairingException):
    """Base exception for tournament-related errors."""

    pass


class TournamentStateException(TournamentException):
    """Raised when tournament is in an invalid state for the requested operation."""

    pass


class TournamentNotFoundException(TournamentException):
    """Raised when a tournament does not exist in the store."""

    pass


# ========== Player Exceptions ==========


class PlayerException(KismetPairingException):
    """Base exception for player-related errors."""

    pass


class PlayerNotFoundException(PlayerException):
    """Raised when a requested player does not exist in the tournament."""

    pass


class InvalidPlayerDataException(PlayerException):
    """Raised when player data is invalid or incomplete."""

    pass


# ========== Result Exceptions ==========


class ResultException(KismetPairingException):
    """Base exception for game result errors."""

    pass


class InvalidResultException(ResultException):
    """Raised when a game result is invalid."""

    pass


class MatchNotFoundException(ResultException):
    """Raised when a referenced match does not exist."""

    pass


class ScoresSavedPairingFailedException(ResultException):
    """Raised when scores were persisted but pairing the next round failed.

    The scores are not rolled back. Pairing can be retried for
    ``round_number`` once the cause is fixed.
    """

    pass


# ========== Store Exceptions ==========


class StoreException(KismetPairingException):
    """Base exception for storage collaborator errors."""

    pass


class StoreUnavailableException(StoreException):
    """Raised when the storage collaborator cannot be reached."""

    pass
