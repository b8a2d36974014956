"""
Best-effort parser for the review text people post in Slack.

The expected shape is loose, roughly:

    Pork Bun Palace:
    Taste: 8/10
    Presentation: 6/10
    Value for money: 9/10
    Taste
    Soft bun, crackling was spot on.
    Presentation
    Paper bag, some grease.
    Value for Money
    Two for a fiver.

Nothing here raises on malformed input. Whatever cannot be found is left as
None (or NaN for unreadable scores) and reported as a ParseIssue.
"""
import math
import re
from typing import List, Optional, Tuple

from snackit.review.models import ParseIssue, ParseResult, Review
from snackit.review.slug import slugify

SCORE_LABELS: Tuple[Tuple[str, str], ...] = (
    ("taste", "taste: "),
    ("presentation", "presentation: "),
    ("vfm", "value for money: "),
)

BODY_HEADINGS: Tuple[Tuple[str, str], ...] = (
    ("taste_body", "Taste"),
    ("presentation_body", "Presentation"),
    ("vfm_body", "Value for Money"),
)

_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)


def clean_slack_text(text: str) -> str:
    """Drop Slack bold markers, they would otherwise end up in titles and headings."""
    return text.replace("*", "")


def to_number(raw: str) -> float:
    """Loose numeric conversion: blank is 0, anything unreadable is NaN."""
    s = raw.strip()
    if not s:
        return 0.0
    if not _NUMBER.match(s):
        return math.nan
    return float(s)


def parse_title(text: str) -> str:
    return text.split("\n")[0].replace(":", "")


def parse_score(text: str, label: str) -> Optional[float]:
    m = re.search(re.escape(label), text, re.IGNORECASE)
    if m is None:
        return None
    return to_number(text[m.end():m.end() + 2])


def parse_body(lines: List[str], heading: str) -> Tuple[Optional[str], Optional[str]]:
    """Return (body, problem) for the line following an exact heading line."""
    try:
        idx = lines.index(heading)
    except ValueError:
        return None, "missing_heading"
    if idx + 1 >= len(lines):
        return None, "missing_body"
    return lines[idx + 1], None


def parse_review(text: str, username: Optional[str]) -> ParseResult:
    issues: List[ParseIssue] = []

    title = parse_title(text)
    if not title.strip():
        issues.append(ParseIssue("title", "empty_title", "first line is blank"))
    elif not slugify(title):
        # page would land at /index.html
        issues.append(ParseIssue("title", "empty_slug", f"{title!r} has no URL-safe characters"))

    scores = {}
    for key, label in SCORE_LABELS:
        value = parse_score(text, label)
        if value is None:
            issues.append(ParseIssue(key, "missing_label", f"no {label.strip()!r} found"))
        elif math.isnan(value):
            issues.append(ParseIssue(key, "not_a_number", f"text after {label.strip()!r} is not a number"))
        scores[key] = value

    lines = text.split("\n")
    bodies = {}
    for key, heading in BODY_HEADINGS:
        body, problem = parse_body(lines, heading)
        if problem:
            issues.append(ParseIssue(key, problem, f"heading {heading!r}"))
        bodies[key] = body

    review = Review(title=title, username=username, **scores, **bodies)
    return ParseResult(review=review, issues=issues)
