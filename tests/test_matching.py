import asyncio
import random

import pytest

from conftest import FirstPickRandom, InMemoryStore, follow_cycle, people
from giftcycle.services.matching import build_attempt, chunked, make_match
from giftcycle.services.participants import MatchSettings, Participant
from giftcycle.services.validation import validate_match
from giftcycle.services.match_warnings import WarningKind


def imbalanced_people():
    return people("a1", "a2", "a3", group="G1") + people("b1", "b2", group="G2")


@pytest.mark.parametrize("size", [2, 3, 4, 7, 12])
@pytest.mark.parametrize("seed", [1, 7, 42])
def test_attempt_without_groups_is_single_cycle(size, seed):
    participants = people(*range(size))
    attempt = build_attempt(participants, use_groups=True, rng=random.Random(seed))

    assert attempt.success
    mapping = dict(attempt.edges)
    assert len(attempt.edges) == size
    assert set(mapping) == set(range(size))
    assert all(giver != recipient for giver, recipient in attempt.edges)
    assert sorted(follow_cycle(mapping, 0)) == list(range(size))


def test_attempt_respects_groups_while_walking():
    participants = (
        people("a1", "a2", group="G1") + people("b1", "b2", group="G2") + people("c1", "c2", group="G3")
    )
    groups = {p.id: p.group for p in participants}
    for seed in range(20):
        attempt = build_attempt(participants, use_groups=True, rng=random.Random(seed))
        if attempt.success:
            assert all(groups[giver] != groups[recipient] for giver, recipient in attempt.edges)


def test_attempt_closing_edge_in_same_group_fails():
    attempt = build_attempt(imbalanced_people(), use_groups=True, rng=FirstPickRandom())

    assert not attempt.success
    assert attempt.edges == (
        ("a1", "b1"),
        ("b1", "a2"),
        ("a2", "b2"),
        ("b2", "a3"),
        ("a3", "a1"),
    )


def test_attempt_dead_end_returns_partial_edges():
    participants = people("b1", "b2", group="G2") + people("a1", "a2", "a3", group="G1")
    attempt = build_attempt(participants, use_groups=True, rng=FirstPickRandom())

    assert not attempt.success
    assert attempt.edges == (("b1", "a1"), ("a1", "b2"), ("b2", "a2"))


def test_attempt_ignores_groups_when_disabled():
    participants = people("a1", "a2", "a3", group="G1")
    attempt = build_attempt(participants, use_groups=False, rng=random.Random(3))

    assert attempt.success
    assert len(attempt.edges) == 3


def test_attempt_ungrouped_participant_may_give_to_anyone():
    participants = [Participant(id="x"), Participant(id="a", group="G"), Participant(id="b", group="G")]
    attempt = build_attempt(participants, use_groups=True, rng=FirstPickRandom())

    assert attempt.edges[0] == ("x", "a")
    assert not attempt.success


def test_attempt_with_single_participant_is_not_a_success():
    attempt = build_attempt(people("solo"), use_groups=True, rng=random.Random(1))
    assert attempt.edges == (("solo", "solo"),)
    assert not attempt.success


def test_attempt_with_no_participants():
    attempt = build_attempt([], use_groups=True, rng=random.Random(1))
    assert attempt.edges == ()
    assert not attempt.success


def test_chunked_splits_into_ordered_batches():
    edges = [(i, i + 1) for i in range(120)]
    batches = list(chunked(edges, 50))
    assert [len(batch) for batch in batches] == [50, 50, 20]
    assert [edge for batch in batches for edge in batch] == edges


def test_make_match_four_people_scenario():
    store = InMemoryStore(people("A", "B", "C", "D"))
    outcome = asyncio.run(make_match(store, MatchSettings(view="all"), seed=11))

    assert outcome.success
    assert outcome.attempts == 1
    mapping = {pid: store.assignment_of(pid) for pid in "ABCD"}
    assert sorted(follow_cycle(mapping, "A")) == ["A", "B", "C", "D"]
    assert validate_match(list(store.participants.values())).is_valid


def test_make_match_writes_in_batches_of_fifty():
    store = InMemoryStore(people(*range(120)))
    outcome = asyncio.run(make_match(store, MatchSettings(), rng=random.Random(5)))

    assert outcome.success
    assert [len(batch) for batch in store.batches] == [50, 50, 20]
    written = [edge for batch in store.batches for edge in batch]
    assert tuple(written) == outcome.edges
    assert store.reads == 1


def test_make_match_honours_smaller_batch_size():
    store = InMemoryStore(people(*range(10)))
    asyncio.run(make_match(store, MatchSettings(batch_size=4), rng=random.Random(5)))
    assert [len(batch) for batch in store.batches] == [4, 4, 2]


def test_make_match_imbalanced_groups_exhausts_attempts():
    store = InMemoryStore(imbalanced_people())
    outcome = asyncio.run(make_match(store, MatchSettings(), rng=FirstPickRandom()))

    assert not outcome.success
    assert outcome.attempts == 5
    assert len(store.batches) == 5
    assert store.assignment_of("a3") == "a1"

    result = validate_match(list(store.participants.values()), MatchSettings())
    assert not result.is_valid
    assert [w.key for w in result.warnings] == [(WarningKind.SAME_GROUP_ASSIGNMENT, "a3", "a1")]


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_make_match_imbalanced_groups_never_succeeds(seed):
    store = InMemoryStore(imbalanced_people())
    outcome = asyncio.run(make_match(store, MatchSettings(max_attempts=3), seed=seed))

    assert not outcome.success
    assert outcome.attempts == 3
    assert outcome.seed == seed
    assert len(store.batches) == 3
    assert not validate_match(list(store.participants.values())).is_valid


def test_make_match_successful_output_validates():
    participants = (
        people(*range(0, 4), group="G1") + people(*range(4, 8), group="G2") + people(*range(8, 12))
    )
    for seed in range(10):
        store = InMemoryStore(participants)
        outcome = asyncio.run(make_match(store, MatchSettings(), seed=seed))
        result = validate_match(list(store.participants.values()), MatchSettings())
        if outcome.success:
            assert result.is_valid
        assert 1 <= outcome.attempts <= 5


def test_make_match_same_seed_is_deterministic():
    first = asyncio.run(make_match(InMemoryStore(people(*range(8))), MatchSettings(), seed=99))
    second = asyncio.run(make_match(InMemoryStore(people(*range(8))), MatchSettings(), seed=99))
    assert first.edges == second.edges


def test_make_match_without_participants_writes_nothing():
    store = InMemoryStore([])
    outcome = asyncio.run(make_match(store, MatchSettings(), seed=1))

    assert not outcome.success
    assert outcome.attempts == 0
    assert store.batches == []


def test_match_settings_reject_oversized_batches():
    with pytest.raises(ValueError):
        MatchSettings(batch_size=51)
    with pytest.raises(ValueError):
        MatchSettings(max_attempts=0)
