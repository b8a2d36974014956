import html
import math
from typing import Iterable, Optional, Tuple

from snackit.review.models import Review
from snackit.review.slug import slugify

# <sergey-import> tags are resolved by the Sergey static site build in the
# content repo, not here.
POST_TEMPLATE = """<sergey-import src="header" />
<main class="review">
  <h1>##TITLE##</h1>
  <dl class="scores">
    <dt>Taste</dt><dd>##TASTESCORE##/10</dd>
    <dt>Presentation</dt><dd>##PRESENTSCORE##/10</dd>
    <dt>Value for money</dt><dd>##VFMSCORE##/10</dd>
  </dl>
  <h2>Taste</h2>
  <p>##TASTEBODY##</p>
  <h2>Presentation</h2>
  <p>##PRESENTBODY##</p>
  <h2>Value for Money</h2>
  <p>##VFMBODY##</p>
  <p class="author">Reviewed by ##AUTHOR##</p>
</main>
<sergey-import src="footer" />
"""

LIST_TEMPLATE = '<li><a href="/##SLUG##/">##TITLE##</a></li>'


def format_score(value: Optional[float]) -> Optional[str]:
    if value is None:
        return None
    if math.isnan(value):
        return "NaN"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def fill(template: str, values: Iterable[Tuple[str, Optional[str]]], escape: bool = False) -> str:
    """
    Replace the first occurrence of each placeholder, in order. A None value
    leaves its placeholder in place. Values are inserted raw unless escape=True.
    """
    out = template
    for placeholder, value in values:
        if value is None:
            continue
        out = out.replace(placeholder, html.escape(value) if escape else value, 1)
    return out


def render_post(review: Review, escape: bool = False) -> str:
    return fill(
        POST_TEMPLATE,
        [
            ("##TITLE##", review.title),
            ("##TASTESCORE##", format_score(review.taste)),
            ("##PRESENTSCORE##", format_score(review.presentation)),
            ("##VFMSCORE##", format_score(review.vfm)),
            ("##TASTEBODY##", review.taste_body),
            ("##PRESENTBODY##", review.presentation_body),
            ("##VFMBODY##", review.vfm_body),
            ("##AUTHOR##", review.username),
        ],
        escape,
    )


def render_list_item(title: str, escape: bool = False) -> str:
    return fill(LIST_TEMPLATE, [("##SLUG##", slugify(title)), ("##TITLE##", title)], escape)
