import json
import logging
import os
from threading import RLock
from typing import Dict

from .prom_registry import inc_counter as prom_inc

log = logging.getLogger("snackit.metrics")

_lock = RLock()
_path = os.getenv("METRICS_PATH", "data/metrics/metrics.json")


def _ensure_dir():
    d = os.path.dirname(_path) or "."
    os.makedirs(d, exist_ok=True)


def _read() -> Dict[str, int]:
    if not os.path.exists(_path):
        return {}
    try:
        with open(_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        log.warning(f"metrics file {_path} unreadable, starting empty: {e}")
        return {}


def _write(data: Dict[str, int]):
    _ensure_dir()
    with open(_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def inc(key: str, by: int = 1):
    with _lock:
        data = _read()
        data[key] = int(data.get(key, 0)) + by
        _write(data)
    prom_inc(key, by)


def get_all() -> Dict[str, int]:
    with _lock:
        return _read()


def get_prefixed(prefix: str) -> Dict[str, int]:
    """Counters under 'prefix:' with the prefix stripped, e.g. rejected:* -> {reason: n}."""
    data = get_all()
    p = f"{prefix}:"
    return {k[len(p):]: v for k, v in data.items() if k.startswith(p)}
