"""Default violation catalogue and threshold policy used when seeding a new organisation."""

from __future__ import annotations

from ..core.enums import SeverityLevel

_MINOR = SeverityLevel.MINOR
_MODERATE = SeverityLevel.MODERATE
_SERIOUS = SeverityLevel.SERIOUS
_CRITICAL = SeverityLevel.CRITICAL
_IMMEDIATE = SeverityLevel.IMMEDIATE_TERMINATION

# (name, severity, default points, description)
DEFAULT_CATEGORIES: list[tuple[str, SeverityLevel, int, str | None]] = [
    ("Clock-in 1-15 minutes late", _MINOR, 1, None),
    ("Clock-out late - unapproved OT under 15 min", _MINOR, 1, None),
    ("Minor dress code/uniform violation", _MINOR, 1, None),
    ("Late timesheet submission", _MINOR, 1, None),
    ("Clock-in 16-30 minutes late", _MINOR, 2, None),
    ("Unapproved overtime 15-30 minutes", _MINOR, 2, None),
    ("Failure to notify supervisor of absence (but did call)", _MINOR, 2, None),
    ("Minor cleanliness/housekeeping issue", _MINOR, 2, None),
    ("Progress notes not completed by end of shift", _MODERATE, 3, None),
    ("Failure to follow communication protocols", _MODERATE, 3, None),
    ("Unapproved overtime over 30 minutes", _MODERATE, 3, None),
    ("Clock-in more than 30 minutes late", _MODERATE, 3, None),
    ("Missing required training deadline", _MODERATE, 3, None),
    ("Failure to complete shift checklist", _MODERATE, 3, None),
    ("Inadequate shift documentation", _MODERATE, 4, None),
    ("Failure to report maintenance issues", _MODERATE, 4, None),
    ("Personal cell phone use during prohibited times", _MODERATE, 4, None),
    ("Failure to attend mandatory meeting (without approval)", _MODERATE, 4, None),
    ("Late medication administration (per eMAR)", _SERIOUS, 5, None),
    ("Progress notes missing after 24 hours", _SERIOUS, 5, None),
    ("Failure to document incident/injury", _SERIOUS, 5, None),
    ("Leaving shift early without approval", _SERIOUS, 5, None),
    ("Unauthorized visitors at site", _SERIOUS, 5, None),
    ("No-call/no-show", _SERIOUS, 6, None),
    ("Insubordination", _SERIOUS, 6, None),
    ("Failure to follow Individual Service Plan (ISP)", _SERIOUS, 6, None),
    ("Failure to maintain required supervision levels", _SERIOUS, 6, None),
    ("Sleeping during non-overnight awake shift", _SERIOUS, 6, None),
    ("Sleeping on overnight awake shift", _CRITICAL, 8, None),
    ("Client funds mishandling (minor)", _CRITICAL, 8, None),
    ("Unauthorized disclosure of client information", _CRITICAL, 8, None),
    ("Medication not administered at all", _CRITICAL, 10, None),
    ("Falsifying documentation", _CRITICAL, 10, None),
    ("Second no-call/no-show within 90 days", _CRITICAL, 10, None),
    ("Failure to report suspected abuse/neglect", _CRITICAL, 10, None),
    ("Working under the influence (unconfirmed)", _CRITICAL, 10, None),
    ("Leaving clients unsupervised", _CRITICAL, 10, None),
    ("Abuse, neglect, or exploitation of clients", _IMMEDIATE, 0, "Immediate suspension pending investigation"),
    ("Confirmed HIPAA violation", _IMMEDIATE, 0, "Immediate suspension pending investigation"),
    ("Positive drug/alcohol test", _IMMEDIATE, 0, "Immediate termination"),
    ("Theft of company or client property", _IMMEDIATE, 0, "Immediate termination"),
    ("Physical altercation with staff or client", _IMMEDIATE, 0, "Immediate termination"),
    ("Gross misconduct", _IMMEDIATE, 0, "Immediate suspension pending investigation"),
    ("Falsifying employment documents", _IMMEDIATE, 0, "Immediate termination"),
    ("Criminal conduct on premises", _IMMEDIATE, 0, "Immediate termination"),
]

# (min, max, action required, description)
DEFAULT_THRESHOLDS: list[tuple[int, int, str, str]] = [
    (1, 5, "Coaching", "Documented verbal coaching session"),
    (6, 9, "Verbal Warning", "Formal verbal warning with documentation"),
    (10, 13, "Written Warning", "Written warning in personnel file"),
    (14, 17, "Final Warning + PIP", "Final written warning with Performance Improvement Plan"),
    (18, 999, "Termination", "Employment termination"),
]


def numbered_categories() -> list[dict]:
    """Default categories with a display order restarting at 1 within each severity."""

    out: list[dict] = []
    counters: dict[SeverityLevel, int] = {}
    for name, severity, points, description in DEFAULT_CATEGORIES:
        counters[severity] = counters.get(severity, 0) + 1
        out.append(
            {
                "category_name": name,
                "severity_level": severity,
                "default_points": points,
                "description": description,
                "display_order": counters[severity],
            }
        )
    return out
