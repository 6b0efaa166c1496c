"""Input validation helpers for roster and score data.

These return a :class:`ValidationResult` so callers can choose between
reporting the problem and raising; the ``*_strict`` variants raise.
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

from typing import Any, Optional

from kismetpairing.constants import DEFAULT_RATING_CEILING
from kismetpairing.exceptions import (
    InvalidPlayerDataException,
    InvalidResultException,
)

# Highest plausible single-game Scrabble score
MAX_GAME_SCORE = 1500


class ValidationResult:
    """Result of a validation operation.

    Attributes:
        is_valid: Whether the validation passed
        error_message: Human-readable error message if invalid
        sanitized_value: Cleaned/normalized value if valid
    """

    def __init__(
        self,
        is_valid: bool,
        error_message: Optional[str] = None,
        sanitized_value: Any = None,
    ):
        self.is_valid = is_valid
        self.error_message = error_message
        self.sanitized_value = sanitized_value

    def __bool__(self) -> bool:
        """Allow using result in boolean context: if result: ..."""
        return self.is_valid

    def __repr__(self) -> str:
        if self.is_valid:
            return f"ValidationResult(VALID, {self.sanitized_value!r})"
        return f"ValidationResult(INVALID, {self.error_message!r})"


# ========== Rating Validation ==========


def validate_rating(rating: Any) -> ValidationResult:
    """Validate a player rating.

    Args:
        rating: Rating as int, float or numeric string

    Returns:
        ValidationResult whose sanitized value is an int
    """
    if rating is None or (isinstance(rating, str) and not rating.strip()):
        return ValidationResult(is_valid=False, error_message="Rating is required")
    try:
        value = int(round(float(rating)))
    except (TypeError, ValueError):
        return ValidationResult(
            is_valid=False, error_message=f"Rating must be a number: {rating!r}"
        )
    if value < 0 or value > DEFAULT_RATING_CEILING:
        return ValidationResult(
            is_valid=False,
            error_message=f"Rating must be between 0 and {DEFAULT_RATING_CEILING}: {value}",
        )
    return ValidationResult(is_valid=True, sanitized_value=value)


def validate_rating_strict(rating: Any) -> int:
    """Validate a rating and raise if invalid.

    Raises:
        InvalidPlayerDataException: If the rating is invalid
    """
    result = validate_rating(rating)
    if not result:
        raise InvalidPlayerDataException(result.error_message)
    return result.sanitized_value


# ========== Score Validation ==========


def validate_game_score(score: Any) -> ValidationResult:
    """Validate a single Scrabble game score."""
    if isinstance(score, bool) or score is None:
        return ValidationResult(is_valid=False, error_message="Score is required")
    try:
        value = int(score)
    except (TypeError, ValueError):
        return ValidationResult(
            is_valid=False, error_message=f"Score must be an integer: {score!r}"
        )
    if value != score:
        return ValidationResult(
            is_valid=False, error_message=f"Score must be a whole number: {score!r}"
        )
    if value < -MAX_GAME_SCORE or value > MAX_GAME_SCORE:
        return ValidationResult(
            is_valid=False, error_message=f"Score out of range: {value}"
        )
    return ValidationResult(is_valid=True, sanitized_value=value)


def validate_score_pair_strict(score_a: Any, score_b: Any) -> tuple:
    """Validate both sides of a result and raise if either is invalid.

    Raises:
        InvalidResultException: If either score is invalid
    """
    checked = []
    for score in (score_a, score_b):
        result = validate_game_score(score)
        if not result:
            raise InvalidResultException(result.error_message)
        checked.append(result.sanitized_value)
    return tuple(checked)
