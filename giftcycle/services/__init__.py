from giftcycle.services.match_warnings import MatchWarning, ValidationResult, WarningKind
from giftcycle.services.matching import MatchOutcome, make_match
from giftcycle.services.participants import MatchSettings, Participant
from giftcycle.services.validation import validate_match

__all__ = [
    "MatchOutcome",
    "MatchSettings",
    "MatchWarning",
    "Participant",
    "ValidationResult",
    "WarningKind",
    "make_match",
    "validate_match",
]
