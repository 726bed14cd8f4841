from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select

from giftcycle.db.models import Exchange, GiftGroup, Participant, participant_assignments


def get_exchange_by_telegram_id(session, telegram_id: int) -> Optional[Exchange]:
    return session.scalar(select(Exchange).where(Exchange.telegram_id == telegram_id))


def get_exchange_by_id(session, exchange_id: int) -> Optional[Exchange]:
    return session.get(Exchange, exchange_id)


def get_or_create_exchange(session, telegram_id: int, title: Optional[str]) -> Exchange:
    exchange = get_exchange_by_telegram_id(session, telegram_id)
    if exchange:
        if title and exchange.title != title:
            exchange.title = title
        return exchange

    exchange = Exchange(telegram_id=telegram_id, title=title)
    session.add(exchange)
    session.flush()
    return exchange


def get_participant(session, exchange_id: int, telegram_id: int) -> Optional[Participant]:
    return session.scalar(
        select(Participant).where(
            Participant.exchange_id == exchange_id,
            Participant.telegram_id == telegram_id,
        )
    )


def add_participant(
    session,
    exchange_id: int,
    display_name: str,
    telegram_id: Optional[int] = None,
) -> Participant:
    participant = Participant(exchange_id=exchange_id, display_name=display_name, telegram_id=telegram_id)
    session.add(participant)
    session.flush()
    return participant


def list_exchange_participants(session, exchange_id: int) -> List[Participant]:
    return list(
        session.scalars(
            select(Participant).where(Participant.exchange_id == exchange_id).order_by(Participant.id)
        ).all()
    )


def count_exchange_participants(session, exchange_id: int) -> int:
    return session.scalar(
        select(func.count()).select_from(Participant).where(Participant.exchange_id == exchange_id)
    )


def get_or_create_group(session, exchange_id: int, name: str, color: Optional[str] = None) -> GiftGroup:
    group = session.scalar(
        select(GiftGroup).where(GiftGroup.exchange_id == exchange_id, GiftGroup.name == name)
    )
    if group:
        return group

    group = GiftGroup(exchange_id=exchange_id, name=name, color=color)
    session.add(group)
    session.flush()
    return group


def list_groups(session, exchange_id: int) -> List[GiftGroup]:
    return list(
        session.scalars(
            select(GiftGroup).where(GiftGroup.exchange_id == exchange_id).order_by(GiftGroup.name)
        ).all()
    )


def set_participant_group(session, participant: Participant, group: Optional[GiftGroup]) -> None:
    participant.group = group


def list_recipient_ids(session, giver_ids: Sequence[int]) -> List[Tuple[int, int]]:
    if not giver_ids:
        return []
    rows = session.execute(
        select(participant_assignments.c.giver_id, participant_assignments.c.recipient_id)
        .where(participant_assignments.c.giver_id.in_(giver_ids))
        .order_by(participant_assignments.c.giver_id, participant_assignments.c.recipient_id)
    )
    return [(giver_id, recipient_id) for giver_id, recipient_id in rows]


def replace_assignments(session, batch: Iterable[Tuple[int, int]]) -> int:
    rows = [{"giver_id": giver_id, "recipient_id": recipient_id} for giver_id, recipient_id in batch]
    if not rows:
        return 0
    giver_ids = sorted({row["giver_id"] for row in rows})
    session.execute(
        delete(participant_assignments).where(participant_assignments.c.giver_id.in_(giver_ids))
    )
    session.execute(participant_assignments.insert(), rows)
    return len(rows)


def set_assignments(session, giver_id: int, recipient_ids: Iterable[int]) -> None:
    session.execute(delete(participant_assignments).where(participant_assignments.c.giver_id == giver_id))
    rows = [{"giver_id": giver_id, "recipient_id": recipient_id} for recipient_id in recipient_ids]
    if rows:
        session.execute(participant_assignments.insert(), rows)


def clear_assignments(session, exchange_id: int) -> None:
    giver_ids = select(Participant.id).where(Participant.exchange_id == exchange_id)
    session.execute(
        delete(participant_assignments).where(participant_assignments.c.giver_id.in_(giver_ids))
    )
