import re

# ASCII-only word class to keep slugs URL-safe
_WS = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w\-]+", re.ASCII)
_DASHES = re.compile(r"--+")


def slugify(title: str) -> str:
    s = _WS.sub("-", title.lower())
    s = _NON_WORD.sub("", s)
    s = _DASHES.sub("-", s)
    return s.strip("-")
