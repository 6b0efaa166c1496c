import pytest

from kismetpairing.tournament import RatingUpdater, performance_rating
from kismetpairing.tournament.rating import game_outcome


def test_expected_score():
    assert RatingUpdater.expected_score(1500, 1500) == 0.5
    assert RatingUpdater.expected_score(1900, 1500) == pytest.approx(0.90909, abs=1e-5)
    favourite = RatingUpdater.expected_score(1700, 1500)
    assert favourite + RatingUpdater.expected_score(1500, 1700) == pytest.approx(1.0)


def test_game_outcome():
    assert game_outcome(400, 350) == 1.0
    assert game_outcome(350, 400) == 0.0
    assert game_outcome(400, 400) == 0.5


def test_changes_are_symmetric():
    updater = RatingUpdater(k_factor=24)
    change = updater.apply_game("a", 1500, "b", 1500, 400, 300)
    assert change == pytest.approx(12.0)
    assert updater.deltas["b"] == pytest.approx(-12.0)


def test_live_ratings_make_deltas_path_dependent():
    updater = RatingUpdater(k_factor=24)
    updater.apply_game("a", 1500, "b", 1500, 400, 300)
    updater.apply_game("a", 1500, "b", 1500, 300, 400)
    # one win and one loss each, yet the second game was played at 1512 v 1488
    assert updater.deltas["a"] == pytest.approx(-0.83, abs=0.01)
    assert updater.rounded_delta("a") == -1
    assert updater.rounded_delta("b") == 1
    assert updater.rounded_delta("nobody") == 0


def test_rounding_is_half_up():
    updater = RatingUpdater()
    updater.deltas.update({"x": 2.5, "y": -2.5})
    assert updater.rounded_delta("x") == 3
    assert updater.rounded_delta("y") == -2


def test_performance_rating():
    assert performance_rating([], fallback=1500) == 1500
    assert performance_rating([(1600, 1.0), (1400, 0.0)], fallback=0) == 1500
    assert performance_rating([(1600, 1.0)], fallback=0) == 2000
    assert performance_rating([(1600, 0.5)], fallback=0) == 1600
