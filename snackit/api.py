import json
import logging
import secrets
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import parse_qs

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from snackit.errors import PayloadError, PublishError, Unauthorized
from snackit.metrics import publishes as publish_log
from snackit.metrics import store as metrics_store
from snackit.publish.github import GitHubClient
from snackit.publish.publisher import Publisher
from snackit.render.templates import render_post
from snackit.review.models import SlackPayload
from snackit.review.parser import clean_slack_text, parse_review
from snackit.runtime.config import Settings
from snackit.version import __version__

logger = logging.getLogger("snackit.api")

WEBHOOK_PATH = "/snack-it"


def check_secret(provided: Optional[str], expected: Optional[str]) -> None:
    # An unconfigured secret locks the endpoint rather than opening it
    if not expected or provided is None:
        raise Unauthorized()
    if not secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        raise Unauthorized()


def load_payload(body: bytes) -> SlackPayload:
    """Decode the urlencoded Slack body and validate the JSON in its payload field."""
    fields = parse_qs(body.decode("utf-8"), keep_blank_values=True)
    raw = fields.get("payload")
    if not raw:
        raise PayloadError("Missing payload field")
    try:
        data = json.loads(raw[0])
    except ValueError as e:
        raise PayloadError(f"Invalid payload JSON: {e}") from e
    message = data.get("message") if isinstance(data, dict) else None
    if not isinstance(message, dict) or message.get("type") != "message":
        raise PayloadError("Payload must be a message")
    try:
        return SlackPayload.model_validate(data)
    except ValidationError as e:
        raise PayloadError(str(e)) from e


def _reject_reason(e: Exception) -> str:
    if isinstance(e, Unauthorized):
        return "unauthorized"
    if isinstance(e, PayloadError):
        return "bad_payload"
    if isinstance(e, PublishError):
        return "publish_failed"
    return "error"


def build_publisher(settings: Settings) -> Publisher:
    client = GitHubClient(
        settings.owner,
        settings.repo,
        settings.github_token,
        api_url=settings.api_url,
        timeout=settings.timeout_sec,
    )
    return Publisher(
        client,
        branch=settings.branch,
        index_path=settings.index_path,
        commit_message=settings.commit_message,
        force=settings.force_update_ref,
        escape_html=settings.escape_html,
    )


def create_app(settings: Optional[Settings] = None, publisher: Optional[Publisher] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    publisher = publisher or build_publisher(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        publisher.client.close()

    app = FastAPI(title="SnackIt Webhook", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.publisher = publisher

    def handle(secret: Optional[str], body: bytes) -> str:
        check_secret(secret, settings.secret)
        payload = load_payload(body)

        result = parse_review(clean_slack_text(payload.message.text), payload.user.name)
        review = result.review
        if not result.ok:
            for issue in result.issues:
                metrics_store.inc(f"parse_issue:{issue.problem}")
            logger.warning(f"review {review.title!r} parsed with issues: {[f'{i.field}:{i.problem}' for i in result.issues]}")

        # publisher owns the flag so page and index item are escaped alike
        post = render_post(review, publisher.escape_html)
        title = review.title or ""
        try:
            run = publisher.publish(title, post, review.slug)
        except PublishError as e:
            publish_log.append({
                "title": title,
                "slug": review.slug,
                "error": str(e.cause),
                "failed_step": e.step,
                "completed": e.completed,
            })
            raise
        publish_log.append({
            "title": title,
            "slug": review.slug,
            "author": review.username,
            "commit": run.commit_sha,
            "issues": len(result.issues),
        })
        return run.commit_sha or ""

    @app.post(WEBHOOK_PATH)
    async def snack_it(request: Request, secret: Optional[str] = None):
        metrics_store.inc("received")
        try:
            body = await request.body()
            await run_in_threadpool(handle, secret, body)
        except Exception as e:
            logger.exception(f"webhook rejected: {e}")
            metrics_store.inc(f"rejected:{_reject_reason(e)}")
            return PlainTextResponse(str(e), status_code=400)
        metrics_store.inc("published")
        return PlainTextResponse("Snacked!", status_code=200)

    @app.middleware("http")
    async def not_implemented(request: Request, call_next):
        # Any verb, including ones no route declares, gets the same answer
        if request.url.path == WEBHOOK_PATH and request.method != "POST":
            metrics_store.inc("not_implemented")
            return PlainTextResponse("Nothing to see here...", status_code=501)
        return await call_next(request)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok", "version": __version__}

    @app.get("/version")
    def version():
        return {"version": __version__}

    @app.get("/metrics")
    def metrics():
        return metrics_store.get_all()

    @app.get("/metrics/rejected")
    def metrics_rejected():
        return metrics_store.get_prefixed("rejected")

    @app.get("/metrics/prom")
    def metrics_prom():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/publishes")
    def publishes(limit: int = 50):
        return publish_log.tail(limit)

    return app
