import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def get_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Resolve a secret such as SECRET or GITHUB_TOKEN.
    Provider is chosen by SECRET_PROVIDER env: env|file. Default: env.
    - env: read from environment variable NAME
    - file: read from the path in NAME_FILE (or NAME when it looks like a path),
      which is how mounted Docker/Kubernetes secrets are usually exposed

    SECRET_PROVIDER_MODE: permissive|strict (default: permissive).
    - permissive: fall back to the plain env value if the file cannot be read
    - strict: raise instead of falling back
    """
    provider = os.getenv("SECRET_PROVIDER", "env").lower()
    mode = os.getenv("SECRET_PROVIDER_MODE", "permissive").lower()
    if provider == "file":
        path_env = os.getenv(f"{name}_FILE")
        inline = os.getenv(name)
        path = path_env or (inline if (inline or "").startswith(("/", "./", "../")) else None)
        if path:
            p = Path(path)
            if p.exists():
                try:
                    return p.read_text(encoding="utf-8").strip()
                except OSError as e:
                    if mode == "strict":
                        raise RuntimeError(f"Failed reading secret file for {name}: {path}: {e}")
            elif mode == "strict":
                raise FileNotFoundError(f"Secret file not found for {name}: {path}")
        elif mode == "strict":
            raise RuntimeError(f"SECRET_PROVIDER=file but no file path provided for {name} (set {name}_FILE)")
    return os.getenv(name, default)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    secret: Optional[str] = None
    github_token: Optional[str] = None
    owner: str = "trys"
    repo: str = "javasnack"
    branch: str = "master"
    index_path: str = "_imports/reviews.html"
    commit_message: str = "New JavaSnack!"
    api_url: str = "https://api.github.com"
    timeout_sec: float = 30.0
    force_update_ref: bool = True
    escape_html: bool = False
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment. Called once at startup."""
        return cls(
            secret=get_secret("SECRET"),
            github_token=get_secret("GITHUB_TOKEN"),
            owner=os.getenv("GITHUB_OWNER", cls.owner),
            repo=os.getenv("GITHUB_REPO", cls.repo),
            branch=os.getenv("GITHUB_BRANCH", cls.branch),
            index_path=os.getenv("INDEX_PATH", cls.index_path),
            commit_message=os.getenv("COMMIT_MESSAGE", cls.commit_message),
            api_url=os.getenv("GITHUB_API_URL", cls.api_url).rstrip("/"),
            timeout_sec=float(os.getenv("GITHUB_TIMEOUT_SEC", "30")),
            force_update_ref=_flag("FORCE_UPDATE_REF", "true"),
            escape_html=_flag("ESCAPE_HTML", "false"),
            api_host=os.getenv("API_HOST", cls.api_host),
            api_port=int(os.getenv("API_PORT", "8080")),
        )
