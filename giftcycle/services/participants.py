from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional, Protocol, Sequence, Tuple

MAX_WRITE_BATCH = 50
DEFAULT_MAX_ATTEMPTS = 5

AssignmentEdge = Tuple[Hashable, Hashable]


@dataclass(frozen=True)
class Participant:
    id: Hashable
    group: Optional[Hashable] = None
    recipients: Tuple[Hashable, ...] = ()
    name: Optional[str] = None

    def same_group(self, other: "Participant") -> bool:
        return self.group is not None and other.group is not None and self.group == other.group


@dataclass(frozen=True)
class MatchSettings:
    """Per-call configuration shared by the generator and the validator.

    ``view`` selects which participants are in scope, ``use_groups`` turns the
    same-group exclusion on or off.
    """

    view: Optional[Hashable] = None
    use_groups: bool = True
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    batch_size: int = MAX_WRITE_BATCH

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if not 1 <= self.batch_size <= MAX_WRITE_BATCH:
            raise ValueError(f"batch_size must be between 1 and {MAX_WRITE_BATCH}.")


class ParticipantSource(Protocol):
    async def list_participants(self, view: Optional[Hashable]) -> Sequence[Participant]:
        ...


class AssignmentWriter(Protocol):
    async def write_assignments(self, batch: Sequence[AssignmentEdge]) -> None:
        ...


class ParticipantStore(ParticipantSource, AssignmentWriter, Protocol):
    pass
