from __future__ import annotations

import html
from dataclasses import dataclass, replace
from typing import List, Optional

from loguru import logger

from giftcycle.db import Exchange, Participant, get_session, repo
from giftcycle.db.store import SqlParticipantStore, load_participants, participant_labels
from giftcycle.services.match_warnings import ValidationResult, format_report
from giftcycle.services.matching import MatchOutcome, make_match
from giftcycle.services.participants import MatchSettings
from giftcycle.services.validation import validate_match


class MatchError(RuntimeError):
    pass


@dataclass(frozen=True)
class JoinResult:
    added: bool
    message: str
    exchange: Exchange
    participant: Participant


def format_participant_label(
    telegram_username: Optional[str],
    first_name: Optional[str],
    last_name: Optional[str],
    telegram_id: int,
) -> str:
    full_name = " ".join(filter(None, [first_name, last_name]))
    if full_name:
        return full_name
    if telegram_username:
        return f"@{telegram_username}"
    return f"user-{telegram_id}"


def join_exchange(
    session,
    telegram_user_id: int,
    display_name: str,
    exchange_telegram_id: int,
    exchange_title: Optional[str],
) -> JoinResult:
    exchange = repo.get_or_create_exchange(session, exchange_telegram_id, exchange_title)
    participant = repo.get_participant(session, exchange.id, telegram_user_id)
    if participant:
        return JoinResult(False, "You are already in this gift exchange!", exchange, participant)

    participant = repo.add_participant(session, exchange.id, display_name, telegram_id=telegram_user_id)
    logger.bind(exchange_id=exchange.id, participant_id=participant.id).info("Participant joined")
    return JoinResult(True, "You have joined the gift exchange!", exchange, participant)


def set_group(
    session,
    exchange: Exchange,
    telegram_user_id: int,
    group_name: Optional[str],
) -> Optional[Participant]:
    participant = repo.get_participant(session, exchange.id, telegram_user_id)
    if not participant:
        return None

    group = None
    if group_name:
        group = repo.get_or_create_group(session, exchange.id, group_name.strip())
    repo.set_participant_group(session, participant, group)
    return participant


def list_participants(session, exchange: Exchange) -> List[str]:
    lines = []
    groups = {group.id: group.name for group in repo.list_groups(session, exchange.id)}
    for participant in repo.list_exchange_participants(session, exchange.id):
        label = html.escape(participant.display_name)
        if participant.group_id in groups:
            label += f" ({html.escape(groups[participant.group_id])})"
        lines.append(label)
    return lines


def check_exchange(session, exchange: Exchange, settings: MatchSettings) -> ValidationResult:
    return validate_match(load_participants(session, exchange.id), settings)


def render_check(session, exchange: Exchange, settings: MatchSettings) -> str:
    participants = load_participants(session, exchange.id)
    result = validate_match(participants, settings)
    labels = {key: html.escape(value) for key, value in participant_labels(participants).items()}
    return format_report(result, labels)


def should_confirm(result: ValidationResult) -> bool:
    """A valid stored match is only replaced after the user confirms it."""
    return result.is_valid


async def run_match(
    session_factory,
    exchange_id: int,
    settings: MatchSettings,
    seed: Optional[int] = None,
) -> MatchOutcome:
    with get_session(session_factory) as session:
        if repo.get_exchange_by_id(session, exchange_id) is None:
            raise MatchError("This chat has no gift exchange yet.")
    if settings.view != exchange_id:
        settings = replace(settings, view=exchange_id)

    store = SqlParticipantStore(session_factory)
    outcome = await make_match(store, settings, seed=seed)
    logger.bind(exchange_id=exchange_id, seed=outcome.seed).info(
        "Match run finished: success={success}, attempts={attempts}",
        success=outcome.success,
        attempts=outcome.attempts,
    )
    return outcome


def reset_exchange(session, exchange: Exchange) -> None:
    repo.clear_assignments(session, exchange.id)
    logger.bind(exchange_id=exchange.id).info("Assignments cleared")
