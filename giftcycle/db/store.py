from __future__ import annotations

from typing import Dict, Hashable, List, Optional, Sequence

from loguru import logger

from giftcycle.db import repo
from giftcycle.db.session import get_session
from giftcycle.services.participants import MAX_WRITE_BATCH, AssignmentEdge, Participant


class SqlParticipantStore:
    """Participant store backed by the SQLAlchemy models.

    A view is an exchange id. Every write batch runs in its own session and is
    committed on its own, so a failure midway leaves earlier batches in place.
    """

    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory

    async def list_participants(self, view: Optional[Hashable]) -> Sequence[Participant]:
        with get_session(self._session_factory) as session:
            return load_participants(session, int(view))

    async def write_assignments(self, batch: Sequence[AssignmentEdge]) -> None:
        if len(batch) > MAX_WRITE_BATCH:
            raise ValueError(
                f"Cannot write {len(batch)} assignments at once, the limit is {MAX_WRITE_BATCH}."
            )
        with get_session(self._session_factory) as session:
            written = repo.replace_assignments(session, batch)
        logger.bind(size=written).debug("Assignment batch written")


def load_participants(session, exchange_id: int) -> List[Participant]:
    rows = repo.list_exchange_participants(session, exchange_id)
    recipients: Dict[int, List[int]] = {row.id: [] for row in rows}
    for giver_id, recipient_id in repo.list_recipient_ids(session, list(recipients)):
        recipients[giver_id].append(recipient_id)

    return [
        Participant(
            id=row.id,
            group=row.group_id,
            recipients=tuple(recipients[row.id]),
            name=row.display_name,
        )
        for row in rows
    ]


def participant_labels(participants: Sequence[Participant]) -> Dict[Hashable, str]:
    return {participant.id: participant.name or f"#{participant.id}" for participant in participants}

