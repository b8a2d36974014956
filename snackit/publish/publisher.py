import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from snackit.errors import PublishError
from snackit.metrics.prom_registry import publish_latency_hist
from snackit.publish.github import GitHubClient
from snackit.render.templates import render_list_item

logger = logging.getLogger("snackit.publisher")

STEPS = ("get_ref", "get_index", "create_tree", "create_commit", "update_ref")


@dataclass
class PublishRun:
    """State of one publish sequence; filled in as each step completes."""

    slug: str
    completed: List[str] = field(default_factory=list)
    base_sha: Optional[str] = None
    tree_sha: Optional[str] = None
    commit_sha: Optional[str] = None

    def orphans(self) -> Dict[str, str]:
        # Objects created upstream that no ref points at yet
        if "update_ref" in self.completed:
            return {}
        out = {}
        if self.tree_sha:
            out["tree"] = self.tree_sha
        if self.commit_sha:
            out["commit"] = self.commit_sha
        return out


class Publisher:
    """
    Writes a rendered review page plus the updated index fragment to the
    content repo as a single commit, then moves the branch to it.

    The ref update is forced: two publishes racing between get_ref and
    update_ref end with the last one winning and the other commit dropped
    from the branch. That is accepted; nothing here detects it.
    """

    def __init__(self, client: GitHubClient, branch: str, index_path: str, commit_message: str,
                 force: bool = True, escape_html: bool = False):
        self.client = client
        self.branch = branch
        self.index_path = index_path
        self.commit_message = commit_message
        self.force = force
        self.escape_html = escape_html

    def page_path(self, slug: str) -> str:
        return f"{slug}/index.html"

    def publish(self, title: str, post_html: str, slug: str) -> PublishRun:
        run = PublishRun(slug=slug)
        start = time.time()
        step = STEPS[0]
        try:
            run.base_sha = self.client.get_ref(self.branch)
            run.completed.append(step)
            logger.debug(f"{slug}: {self.branch} at {run.base_sha}")

            step = "get_index"
            current_index = self.client.get_file_text(self.index_path, ref=self.branch)
            run.completed.append(step)

            step = "create_tree"
            index = render_list_item(title, self.escape_html) + "\n" + current_index
            run.tree_sha = self.client.create_tree(
                run.base_sha, {self.page_path(slug): post_html, self.index_path: index}
            )
            run.completed.append(step)

            step = "create_commit"
            run.commit_sha = self.client.create_commit(self.commit_message, run.tree_sha, [run.base_sha])
            run.completed.append(step)

            step = "update_ref"
            self.client.update_ref(self.branch, run.commit_sha, force=self.force)
            run.completed.append(step)
        except Exception as e:
            self._compensate(run, step, e)
            raise PublishError(step, e, run.completed) from e
        finally:
            publish_latency_hist.observe((time.time() - start) * 1000.0)
        logger.info(f"{slug}: published commit {run.commit_sha} to {self.branch}")
        return run

    def _compensate(self, run: PublishRun, step: str, error: Exception) -> None:
        # Unreferenced git objects cannot be deleted through the API; GitHub
        # garbage-collects them. Record them so the partial publish is traceable.
        logger.error(f"{run.slug}: publish failed at {step} after {run.completed or 'no steps'}: {error}")
        orphans = run.orphans()
        if orphans:
            logger.warning(f"{run.slug}: left unreferenced objects {orphans}, {self.branch} not moved")
