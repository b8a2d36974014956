import base64
import importlib
import json

import httpx
import pytest

from snackit.publish.github import GitHubClient
from snackit.publish.publisher import Publisher
from snackit.runtime.config import Settings

REPO_PREFIX = "/repos/trys/javasnack"


class FakeGitHub:
    """Answers the five publish calls; set fail_on to a step name to return 500 there."""

    def __init__(self, index: str = "<li>old</li>", fail_on: str | None = None):
        self.index = index
        self.fail_on = fail_on
        self.calls = []

    def _step(self, request: httpx.Request) -> str:
        path = request.url.path[len(REPO_PREFIX):]
        if request.method == "GET" and path.startswith("/git/ref/heads/"):
            return "get_ref"
        if request.method == "GET" and path.startswith("/contents/"):
            return "get_index"
        if request.method == "POST" and path == "/git/trees":
            return "create_tree"
        if request.method == "POST" and path == "/git/commits":
            return "create_commit"
        if request.method == "PATCH" and path.startswith("/git/refs/heads/"):
            return "update_ref"
        return "unknown"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        step = self._step(request)
        body = json.loads(request.content) if request.content else None
        self.calls.append({
            "step": step,
            "path": request.url.path,
            "params": dict(request.url.params),
            "json": body,
            "auth": request.headers.get("authorization"),
        })
        if step == self.fail_on or step == "unknown":
            return httpx.Response(500, json={"message": "boom"})
        if step == "get_ref":
            return httpx.Response(200, json={"object": {"sha": "base123"}})
        if step == "get_index":
            content = base64.encodebytes(self.index.encode("utf-8")).decode("ascii")
            return httpx.Response(200, json={"content": content, "encoding": "base64"})
        if step == "create_tree":
            return httpx.Response(201, json={"sha": "tree456"})
        if step == "create_commit":
            return httpx.Response(201, json={"sha": "commit789"})
        return httpx.Response(200, json={"ref": "refs/heads/master", "object": {"sha": body["sha"]}})

    def call(self, step: str):
        return next(c for c in self.calls if c["step"] == step)


def make_publisher(settings: Settings, fake: FakeGitHub) -> Publisher:
    client = GitHubClient(settings.owner, settings.repo, settings.github_token, transport=httpx.MockTransport(fake))
    return Publisher(client, settings.branch, settings.index_path, settings.commit_message,
                     force=settings.force_update_ref, escape_html=settings.escape_html)


@pytest.fixture
def settings():
    return Settings(secret="s3cret", github_token="tok")


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def metrics_paths(tmp_path, monkeypatch):
    # store/publishes read their paths at import time
    monkeypatch.setenv("METRICS_PATH", str(tmp_path / "metrics.json"))
    monkeypatch.setenv("PUBLISHES_PATH", str(tmp_path / "publishes.jsonl"))
    store = importlib.reload(importlib.import_module("snackit.metrics.store"))
    publishes = importlib.reload(importlib.import_module("snackit.metrics.publishes"))
    return store, publishes
