#!/usr/bin/env python3
"""
Parses a review text the way the webhook would and prints what it found.
Usage: python scripts/preview_review.py [path/to/review.txt] [--html] [--author NAME]
Reads stdin when no path is given. Exits with status 2 when the parse reported issues.
"""
import argparse
import json
import sys
from pathlib import Path


def main(argv=None):
    ap = argparse.ArgumentParser(description="Preview how a Slack review will be published")
    ap.add_argument("path", nargs="?", help="review text file (default: stdin)")
    ap.add_argument("--html", action="store_true", help="print the rendered page instead of the parse report")
    ap.add_argument("--author", default="preview", help="display name to render as the author")
    args = ap.parse_args(argv)

    # Ensure project root is importable
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    from snackit.render.templates import render_list_item, render_post
    from snackit.review.parser import clean_slack_text, parse_review

    if args.path:
        p = Path(args.path)
        if not p.exists():
            print(f"Review file not found: {p}")
            sys.exit(1)
        text = p.read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()

    result = parse_review(clean_slack_text(text), args.author)
    if args.html:
        print(render_post(result.review))
        print(render_list_item(result.review.title or ""))
    else:
        print(json.dumps(result.as_dict(), indent=2))

    if not result.ok:
        for issue in result.issues:
            print(f"{issue.field}: {issue.problem} ({issue.detail})", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
