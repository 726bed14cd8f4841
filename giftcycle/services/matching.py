from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from loguru import logger

from giftcycle.services.participants import (
    AssignmentEdge,
    AssignmentWriter,
    MatchSettings,
    Participant,
    ParticipantStore,
)


@dataclass(frozen=True)
class MatchAttempt:
    edges: Tuple[AssignmentEdge, ...]
    success: bool


@dataclass(frozen=True)
class MatchOutcome:
    success: bool
    attempts: int
    edges: Tuple[AssignmentEdge, ...]
    seed: Optional[int] = None


def build_attempt(
    participants: Sequence[Participant],
    use_groups: bool,
    rng: random.Random,
) -> MatchAttempt:
    """Walk the participants in random order, linking each to the next.

    Every step picks the next participant uniformly among those left that are
    not in the current participant's group. A step with no candidates ends the
    attempt early. The last participant is linked back to the first one even
    when they share a group, in which case the attempt is not a success.
    """
    if not participants:
        return MatchAttempt(edges=(), success=False)

    remaining: List[Participant] = list(participants)
    first = remaining.pop(rng.randrange(len(remaining)))
    current = first
    edges: List[AssignmentEdge] = []

    while remaining:
        if use_groups and current.group is not None:
            candidates = [p for p in remaining if not current.same_group(p)]
        else:
            candidates = remaining
        if not candidates:
            return MatchAttempt(edges=tuple(edges), success=False)

        chosen = rng.choice(candidates)
        remaining.remove(chosen)
        edges.append((current.id, chosen.id))
        current = chosen

    edges.append((current.id, first.id))
    closes_cleanly = not (use_groups and current.same_group(first))
    return MatchAttempt(edges=tuple(edges), success=closes_cleanly and len(participants) > 1)


def chunked(edges: Sequence[AssignmentEdge], size: int) -> Iterator[Sequence[AssignmentEdge]]:
    for start in range(0, len(edges), size):
        yield edges[start:start + size]


async def persist_attempt(writer: AssignmentWriter, attempt: MatchAttempt, batch_size: int) -> int:
    written = 0
    for batch in chunked(attempt.edges, batch_size):
        await writer.write_assignments(batch)
        written += len(batch)
    return written


async def make_match(
    store: ParticipantStore,
    settings: MatchSettings,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> MatchOutcome:
    """Generate and store a gift cycle for every participant in ``settings.view``.

    Each attempt is written as soon as it is built, so the store always holds
    the most recent attempt. Running out of attempts is reported through
    ``MatchOutcome.success`` rather than raised.
    """
    if rng is None:
        if seed is None:
            seed = random.randint(1, 2**31 - 1)
        rng = random.Random(seed)

    log = logger.bind(view=settings.view, seed=seed)
    participants = list(await store.list_participants(settings.view))
    if not participants:
        log.info("No participants to match")
        return MatchOutcome(success=False, attempts=0, edges=(), seed=seed)

    attempt = MatchAttempt(edges=(), success=False)
    attempts = 0
    while attempts < settings.max_attempts:
        attempts += 1
        attempt = build_attempt(participants, settings.use_groups, rng)
        written = await persist_attempt(store, attempt, settings.batch_size)
        log.bind(attempt=attempts).debug(
            "Attempt finished: success={success}, edges={written}",
            success=attempt.success,
            written=written,
        )
        if attempt.success:
            log.info("Match generated after {attempts} attempt(s)", attempts=attempts)
            break
    else:
        log.warning(
            "No valid match after {attempts} attempts, keeping the last one",
            attempts=attempts,
        )

    return MatchOutcome(success=attempt.success, attempts=attempts, edges=attempt.edges, seed=seed)
