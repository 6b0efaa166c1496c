import pytest

from kismetpairing.models import (
    Match,
    PairingRule,
    Player,
    Standing,
    TournamentConfig,
    assign_seeds,
)
from kismetpairing.store import InMemoryStore
from kismetpairing.tournament import TournamentEngine

TID = "t1"


def make_players(ratings, division_id="open", prefix="p"):
    """Players p1..pN with the given ratings, seeded by rating."""
    players = [
        Player(id=f"{prefix}{i + 1}", name=f"Player {i + 1}", rating=r, division_id=division_id)
        for i, r in enumerate(ratings)
    ]
    return assign_seeds(players)


def make_standings(players, scores):
    """Standings ranked in the order given, with the given scores."""
    return [
        Standing(rank=i + 1, player=p, score=s)
        for i, (p, s) in enumerate(zip(players, scores))
    ]


def completed(match_id, round_number, a, b, score_a, score_b, **kwargs):
    return Match(
        tournament_id=TID,
        round=round_number,
        player_a_id=a,
        player_b_id=b,
        score_a=score_a,
        score_b=score_b,
        status="completed",
        id=match_id,
        **kwargs,
    )


def pair_set(matches):
    return {frozenset(m.player_ids) for m in matches if not m.is_bye}


@pytest.fixture
def config():
    return TournamentConfig(tournament_id=TID, name="Club Night", total_rounds=7)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def engine(store):
    return TournamentEngine(store)


@pytest.fixture
def swiss_event(engine):
    """A 4-player, 3-round Swiss event with round 1 not yet paired."""
    engine.create_tournament(TournamentConfig(tournament_id=TID, total_rounds=3))
    engine.save_pairing_rules(TID, [PairingRule(1, 3, "swiss", "previous_round")])
    engine.add_players(
        TID,
        [
            ("Alice", 1800, None, "a"),
            ("Bob", 1600, None, "b"),
            ("Cara", 1400, None, "c"),
            ("Dan", 1200, None, "d"),
        ],
    )
    return engine
