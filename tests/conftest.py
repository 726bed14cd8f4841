import random
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from giftcycle.db.models import Base
from giftcycle.services.participants import MAX_WRITE_BATCH, Participant


class InMemoryStore:
    def __init__(self, participants: Sequence[Participant]) -> None:
        self.participants: Dict[object, Participant] = {p.id: p for p in participants}
        self.batches: List[List[tuple]] = []
        self.reads = 0

    async def list_participants(self, view) -> List[Participant]:
        self.reads += 1
        return list(self.participants.values())

    async def write_assignments(self, batch) -> None:
        assert len(batch) <= MAX_WRITE_BATCH
        self.batches.append(list(batch))
        for giver_id, recipient_id in batch:
            current = self.participants[giver_id]
            self.participants[giver_id] = replace(current, recipients=(recipient_id,))

    def assignment_of(self, participant_id) -> Optional[object]:
        recipients = self.participants[participant_id].recipients
        return recipients[0] if len(recipients) == 1 else None


class FirstPickRandom(random.Random):
    """Always picks the first candidate."""

    def randrange(self, start, stop=None, step=1):
        return 0 if stop is None else start

    def choice(self, seq):
        return seq[0]


def people(*ids, group=None):
    return [Participant(id=participant_id, group=group) for participant_id in ids]


def follow_cycle(mapping, start):
    seen = [start]
    current = mapping[start]
    while current != start:
        seen.append(current)
        current = mapping[current]
    return seen


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()
