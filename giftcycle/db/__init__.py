from giftcycle.db.models import (
    Base,
    Exchange,
    GiftGroup,
    Participant,
    participant_assignments,
)
from giftcycle.db.session import SessionLocal, get_session, init_engine

__all__ = [
    "Base",
    "Exchange",
    "GiftGroup",
    "Participant",
    "participant_assignments",
    "SessionLocal",
    "get_session",
    "init_engine",
]
