import pytest

from giftcycle.services.match_warnings import (
    MatchWarning,
    ValidationResult,
    WarningKind,
    describe_warning,
    format_report,
)

LABELS = {1: "Alice", 2: "Bob"}


@pytest.mark.parametrize(
    "warning, expected",
    [
        (MatchWarning(WarningKind.NO_ASSIGNMENT, giver=1), "Alice isn't assigned to give to anyone"),
        (MatchWarning(WarningKind.MULTIPLE_ASSIGNMENTS, giver=1), "Alice is assigned to give to multiple people"),
        (MatchWarning(WarningKind.SELF_ASSIGNMENT, giver=1), "Alice is assigned to themself!"),
        (
            MatchWarning(WarningKind.SAME_GROUP_ASSIGNMENT, giver=1, recipient=2),
            "Alice is assigned to Bob but they're both in the same group.",
        ),
        (MatchWarning(WarningKind.NO_GIVERS, recipient=2), "Nobody is assigned to give to Bob"),
        (MatchWarning(WarningKind.MULTIPLE_GIVERS, recipient=2), "Multiple people are assigned to give to Bob"),
    ],
)
def test_describe_warning(warning, expected):
    assert describe_warning(warning, LABELS) == expected


def test_describe_warning_falls_back_to_id():
    warning = MatchWarning(WarningKind.INVALID_ASSIGNMENT, giver=7)
    assert describe_warning(warning, LABELS).startswith("#7 is assigned to someone")


def test_validation_result_from_warnings():
    assert ValidationResult.from_warnings([]).is_valid
    result = ValidationResult.from_warnings([MatchWarning(WarningKind.NO_GIVERS, recipient=1)])
    assert not result.is_valid
    assert result.warnings[0].key == (WarningKind.NO_GIVERS, None, 1)


def test_format_report_success():
    report = format_report(ValidationResult.from_warnings([]), LABELS, assignment_label="Giving to")
    assert report == "Success! A perfect gift assignment is stored in the Giving to field!"


def test_format_report_lists_issues():
    result = ValidationResult.from_warnings(
        [
            MatchWarning(WarningKind.NO_ASSIGNMENT, giver=1),
            MatchWarning(WarningKind.NO_GIVERS, recipient=2),
        ]
    )
    assert format_report(result, LABELS).splitlines() == [
        "There are 2 issues",
        "- Alice isn't assigned to give to anyone",
        "- Nobody is assigned to give to Bob",
    ]


def test_warning_kind_values():
    assert WarningKind.SAME_GROUP_ASSIGNMENT.value == "same_group_assignment"
    assert WarningKind("no_givers") is WarningKind.NO_GIVERS
