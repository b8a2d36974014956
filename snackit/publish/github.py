import base64
from typing import Any, Dict, List, Optional

import httpx


class GitHubClient:
    """
    Thin wrapper around the GitHub Git Data / Contents REST API, scoped to one
    owner/repo. Every call raises httpx.HTTPStatusError on a non-2xx response.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: Optional[str],
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.owner = owner
        self.repo = repo
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=f"{api_url.rstrip('/')}/repos/{owner}/{repo}",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        resp = self._client.request(method, path, **kwargs)
        resp.raise_for_status()
        return resp.json()

    def get_ref(self, branch: str) -> str:
        """Return the sha the branch currently points at."""
        data = self._request("GET", f"/git/ref/heads/{branch}")
        return data["object"]["sha"]

    def get_file_text(self, path: str, ref: Optional[str] = None) -> str:
        params = {"ref": ref} if ref else None
        data = self._request("GET", f"/contents/{path}", params=params)
        return base64.b64decode(data.get("content") or "").decode("utf-8")

    def create_tree(self, base_tree: str, files: Dict[str, str]) -> str:
        tree: List[Dict[str, str]] = [
            {"path": path, "mode": "100644", "type": "blob", "content": content}
            for path, content in files.items()
        ]
        data = self._request("POST", "/git/trees", json={"base_tree": base_tree, "tree": tree})
        return data["sha"]

    def create_commit(self, message: str, tree: str, parents: List[str]) -> str:
        data = self._request("POST", "/git/commits", json={"message": message, "tree": tree, "parents": parents})
        return data["sha"]

    def update_ref(self, branch: str, sha: str, force: bool = True) -> Dict[str, Any]:
        return self._request("PATCH", f"/git/refs/heads/{branch}", json={"sha": sha, "force": force})
