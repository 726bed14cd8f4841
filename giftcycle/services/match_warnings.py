from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Hashable, Iterable, Mapping, Optional, Tuple


class WarningKind(str, enum.Enum):
    NO_ASSIGNMENT = "no_assignment"
    MULTIPLE_ASSIGNMENTS = "multiple_assignments"
    SELF_ASSIGNMENT = "self_assignment"
    INVALID_ASSIGNMENT = "invalid_assignment"
    SAME_GROUP_ASSIGNMENT = "same_group_assignment"
    NO_GIVERS = "no_givers"
    MULTIPLE_GIVERS = "multiple_givers"


@dataclass(frozen=True)
class MatchWarning:
    kind: WarningKind
    giver: Optional[Hashable] = None
    recipient: Optional[Hashable] = None

    @property
    def key(self) -> Tuple[WarningKind, Optional[Hashable], Optional[Hashable]]:
        return (self.kind, self.giver, self.recipient)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    warnings: Tuple[MatchWarning, ...]

    @classmethod
    def from_warnings(cls, warnings: Iterable[MatchWarning]) -> "ValidationResult":
        collected = tuple(warnings)
        return cls(is_valid=not collected, warnings=collected)


def _label(labels: Mapping[Hashable, str], participant_id: Optional[Hashable]) -> str:
    if participant_id in labels:
        return labels[participant_id]
    return f"#{participant_id}"


def describe_warning(warning: MatchWarning, labels: Mapping[Hashable, str]) -> str:
    giver = _label(labels, warning.giver)
    recipient = _label(labels, warning.recipient)

    if warning.kind == WarningKind.NO_ASSIGNMENT:
        return f"{giver} isn't assigned to give to anyone"
    if warning.kind == WarningKind.MULTIPLE_ASSIGNMENTS:
        return f"{giver} is assigned to give to multiple people"
    if warning.kind == WarningKind.SELF_ASSIGNMENT:
        return f"{giver} is assigned to themself!"
    if warning.kind == WarningKind.INVALID_ASSIGNMENT:
        return f"{giver} is assigned to someone who isn't part of this exchange"
    if warning.kind == WarningKind.SAME_GROUP_ASSIGNMENT:
        return f"{giver} is assigned to {recipient} but they're both in the same group."
    if warning.kind == WarningKind.NO_GIVERS:
        return f"Nobody is assigned to give to {recipient}"
    if warning.kind == WarningKind.MULTIPLE_GIVERS:
        return f"Multiple people are assigned to give to {recipient}"
    raise ValueError(f"Unknown warning kind: {warning.kind}")


def format_report(
    result: ValidationResult,
    labels: Mapping[Hashable, str],
    assignment_label: str = "assignment",
) -> str:
    if result.is_valid:
        return f"Success! A perfect gift assignment is stored in the {assignment_label} field!"

    count = len(result.warnings)
    header = "There is 1 issue" if count == 1 else f"There are {count} issues"
    lines = [header]
    lines.extend(f"- {describe_warning(warning, labels)}" for warning in result.warnings)
    return "\n".join(lines)
