from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Hashable, Iterator, List, Mapping, Optional, Sequence, Tuple

from giftcycle.services.match_warnings import MatchWarning, ValidationResult, WarningKind
from giftcycle.services.participants import MatchSettings, Participant


def collect_givers(participants: Sequence[Participant]) -> Mapping[Hashable, Tuple[Hashable, ...]]:
    """Map every referenced recipient id to the ordered ids of its givers.

    Keys keep the order in which recipients are first referenced. Recipients
    that are not part of ``participants`` are included as well.
    """
    givers: Dict[Hashable, List[Hashable]] = {}
    for participant in participants:
        for recipient_id in participant.recipients:
            givers.setdefault(recipient_id, []).append(participant.id)
    return MappingProxyType({recipient_id: tuple(ids) for recipient_id, ids in givers.items()})


def _giver_warnings(
    participants: Sequence[Participant],
    known: Mapping[Hashable, Participant],
    use_groups: bool,
) -> Iterator[MatchWarning]:
    for participant in participants:
        recipients = participant.recipients
        if not recipients:
            yield MatchWarning(WarningKind.NO_ASSIGNMENT, giver=participant.id)
            continue

        if len(recipients) > 1:
            yield MatchWarning(WarningKind.MULTIPLE_ASSIGNMENTS, giver=participant.id)
            continue

        recipient_id = recipients[0]
        if recipient_id == participant.id:
            yield MatchWarning(WarningKind.SELF_ASSIGNMENT, giver=participant.id)
        elif use_groups:
            recipient = known.get(recipient_id)
            if recipient is None:
                yield MatchWarning(WarningKind.INVALID_ASSIGNMENT, giver=participant.id)
            elif participant.same_group(recipient):
                yield MatchWarning(
                    WarningKind.SAME_GROUP_ASSIGNMENT,
                    giver=participant.id,
                    recipient=recipient.id,
                )


def _recipient_warnings(
    participants: Sequence[Participant],
    givers: Mapping[Hashable, Tuple[Hashable, ...]],
) -> Iterator[MatchWarning]:
    for participant in participants:
        if participant.id not in givers:
            yield MatchWarning(WarningKind.NO_GIVERS, recipient=participant.id)

    for recipient_id, giver_ids in givers.items():
        if len(giver_ids) > 1:
            yield MatchWarning(WarningKind.MULTIPLE_GIVERS, recipient=recipient_id)


def validate_match(
    participants: Optional[Sequence[Participant]],
    settings: Optional[MatchSettings] = None,
) -> ValidationResult:
    if not participants:
        return ValidationResult.from_warnings(())

    participants = list(participants)
    use_groups = settings.use_groups if settings is not None else True
    known = {participant.id: participant for participant in participants}
    givers = collect_givers(participants)

    warnings: List[MatchWarning] = []
    warnings.extend(_giver_warnings(participants, known, use_groups))
    warnings.extend(_recipient_warnings(participants, givers))
    return ValidationResult.from_warnings(warnings)
