import math

from snackit.review.parser import clean_slack_text, parse_review, to_number

REVIEW = """*Example Review:*
*Taste:* 10/10
*Presentation:* 7 /10
*Value for money:* 9.5
*Taste*
Loved it
*Presentation*
Came in a box
*Value for Money*
Cheap as chips"""


def parsed(text=REVIEW, user="alice"):
    return parse_review(clean_slack_text(text), user)


def test_clean_slack_text_strips_asterisks():
    assert clean_slack_text("*bold* and **more**") == "bold and more"


def test_title_and_slug():
    r = parsed().review
    assert r.title == "Example Review"
    assert r.slug == "example-review"


def test_title_removes_every_colon():
    r = parse_review("Pie: the sequel:\nTaste", "bob").review
    assert r.title == "Pie the sequel"


def test_scores_two_chars_after_label():
    r = parsed().review
    assert r.taste == 10
    assert r.presentation == 7  # "7 " trims to 7
    assert r.vfm == 9  # only "9." is read


def test_score_label_case_insensitive():
    r = parse_review("X\ntASTE: 42 points", "u").review
    assert r.taste == 42


def test_score_with_slash_is_nan():
    result = parse_review("X\nTaste: 8/10", "u")
    assert math.isnan(result.review.taste)
    assert any(i.field == "taste" and i.problem == "not_a_number" for i in result.issues)


def test_missing_score_label_is_none():
    result = parse_review("X\nnothing here", "u")
    assert result.review.presentation is None
    problems = {(i.field, i.problem) for i in result.issues}
    assert ("presentation", "missing_label") in problems
    assert ("vfm", "missing_label") in problems


def test_label_at_end_reads_as_zero():
    assert parse_review("X\nTaste: ", "u").review.taste == 0


def test_bodies_follow_exact_headings():
    r = parsed().review
    assert r.taste_body == "Loved it"
    assert r.presentation_body == "Came in a box"
    assert r.vfm_body == "Cheap as chips"
    assert r.username == "alice"


def test_heading_must_match_exactly():
    result = parse_review("X\ntaste\nLoved it\nTaste \nnope", "u")
    assert result.review.taste_body is None
    assert any(i.field == "taste_body" and i.problem == "missing_heading" for i in result.issues)


def test_heading_on_last_line_has_no_body():
    result = parse_review("X\nValue for Money", "u")
    assert result.review.vfm_body is None
    assert any(i.field == "vfm_body" and i.problem == "missing_body" for i in result.issues)


def test_complete_review_has_no_issues():
    text = "T:\nTaste: 9 \nPresentation: 8 \nValue for money: 7 \nTaste\na\nPresentation\nb\nValue for Money\nc"
    result = parse_review(text, "u")
    assert result.ok, result.issues
    d = result.as_dict()
    assert d["slug"] == "t" and d["issues"] == []


def test_empty_title_reported():
    result = parse_review("\nTaste: 5", "u")
    assert any(i.problem == "empty_title" for i in result.issues)


def test_as_dict_encodes_nan():
    d = parse_review("X\nTaste: ab", "u").as_dict()
    assert d["taste"] == "NaN"


def test_to_number():
    assert to_number("12") == 12
    assert to_number(" 3") == 3
    assert to_number("") == 0
    assert to_number(".5") == 0.5
    assert math.isnan(to_number("ab"))
    assert math.isnan(to_number("0x"))


def test_title_without_url_safe_chars_reported():
    result = parse_review("!!!:\nTaste: 5 ", "u")
    assert result.review.title == "!!!"
    assert result.review.slug == ""
    assert any(i.field == "title" and i.problem == "empty_slug" for i in result.issues)
    assert not any(i.problem == "empty_title" for i in result.issues)
