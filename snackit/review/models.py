import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from snackit.review.slug import slugify


@dataclass
class Review:
    title: Optional[str]
    taste: Optional[float] = None
    presentation: Optional[float] = None
    vfm: Optional[float] = None  # value for money
    taste_body: Optional[str] = None
    presentation_body: Optional[str] = None
    vfm_body: Optional[str] = None
    username: Optional[str] = None

    @property
    def slug(self) -> str:
        return slugify(self.title or "")


Problem = Literal["missing_label", "not_a_number", "missing_heading", "missing_body", "empty_title", "empty_slug"]


@dataclass
class ParseIssue:
    field: str
    problem: Problem
    detail: str = ""


@dataclass
class ParseResult:
    review: Review
    issues: List[ParseIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self.review)
        # NaN is not valid JSON
        for k in ("taste", "presentation", "vfm"):
            if isinstance(data[k], float) and math.isnan(data[k]):
                data[k] = "NaN"
        data["slug"] = self.review.slug
        data["issues"] = [asdict(i) for i in self.issues]
        return data


class SlackMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    text: str


class SlackUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class SlackPayload(BaseModel):
    """The subset of a Slack message action payload the webhook reads."""

    model_config = ConfigDict(extra="ignore")

    message: SlackMessage
    user: SlackUser
