"""Load/save scenario and UI parameters. Configs live in configs/ as {seed}_{name}.json (+ optional .npz state)."""

import json
import logging
import re
from pathlib import Path

import numpy as np

from fluid.constants import DEFAULT_HEIGHT, DEFAULT_SOURCE_INTERVAL, DEFAULT_TICK_RATE, DEFAULT_WIDTH
from fluid.scenario import RULE_DEFAULTS

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent / "configs"
LAST_FILE = CONFIG_DIR / "last.txt"

# In-memory index of (seed, name) so we avoid disk access for exists/dropdown.
_CONFIG_INDEX: set[tuple[int, str]] = set()

_MERGE_KEYS = (
    "tick_rate", "source_interval", "sources", "sources_enabled", "obstacles", "ledges",
    "seed", "lock_seed", "actual_seed_used", "render_scale", "view_mode", "tick_count",
    *RULE_DEFAULTS,
)


def refresh_index() -> None:
    """Rebuild _CONFIG_INDEX from disk. Call at startup and after external changes."""
    global _CONFIG_INDEX
    _CONFIG_INDEX = set()
    if not CONFIG_DIR.exists():
        return
    for f in CONFIG_DIR.glob("*.json"):
        stem = f.stem
        if "_" not in stem:
            continue
        first, rest = stem.split("_", 1)
        try:
            _CONFIG_INDEX.add((int(first), rest))
        except ValueError:
            continue
    logger.debug("Config index: %d entries", len(_CONFIG_INDEX))


def _sanitize_name(name: str) -> str:
    s = (name or "").strip()
    s = re.sub(r"[^\w\s-]", "", s)
    s = re.sub(r"[\s-]+", "_", s).strip("_")
    return s[:64] or "unnamed"


def config_id(seed: int, name: str) -> str:
    return f"{seed}_{_sanitize_name(name)}"


def get_config_path(seed: int, name: str) -> Path:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR / f"{config_id(seed, name)}.json"


def get_state_path(seed: int, name: str) -> Path:
    return CONFIG_DIR / f"{config_id(seed, name)}.npz"


def list_configs() -> list[tuple[int, str]]:
    """Return (seed, name) for each saved config, from in-memory index."""
    return sorted(_CONFIG_INDEX, key=lambda x: (x[1].lower(), x[0]))


def get_last_config() -> tuple[int, str] | None:
    if not LAST_FILE.exists():
        return None
    try:
        raw = LAST_FILE.read_text().strip()
        if "_" not in raw:
            return None
        first, rest = raw.split("_", 1)
        return (int(first), rest)
    except (ValueError, OSError):
        return None


def set_last_config(seed: int, name: str) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    LAST_FILE.write_text(config_id(seed, name))


def load_config(path: Path | str | None = None) -> dict:
    if path is None:
        last = get_last_config()
        if last is None:
            return _default_config()
        path = get_config_path(last[0], last[1])
    p = Path(path)
    if not p.exists():
        return _default_config()
    with open(p, "r") as f:
        data = json.load(f)
    logger.info("Loaded config %s", p.name)
    return _merge_defaults(data)


def save_config(
    params: dict,
    actual_seed: int,
    name: str,
    tick_count: int = 0,
    state: dict | None = None,
) -> None:
    """Save config and optional grid state. actual_seed used for filename; name from UI."""
    path = get_config_path(actual_seed, name)
    out = {**params, "actual_seed_used": actual_seed, "tick_count": tick_count}
    with open(path, "w") as f:
        json.dump(out, f, indent=2)
    if state is not None:
        np.savez_compressed(
            get_state_path(actual_seed, name),
            level=state["level"],
            obstacle=state["obstacle"],
            tick_count=np.int64(state["tick_count"]),
        )
    set_last_config(actual_seed, name)
    _CONFIG_INDEX.add((actual_seed, _sanitize_name(name)))
    logger.info("Saved config %s (tick %d, state %s)", path.name, tick_count, "yes" if state is not None else "no")


def load_state(seed: int, name: str) -> dict | None:
    """Return {'level': ndarray, 'obstacle': ndarray, 'tick_count': int} or None."""
    p = get_state_path(seed, name)
    if not p.exists():
        return None
    try:
        with np.load(p, allow_pickle=False) as data:
            return {
                "level": data["level"].astype(np.float64),
                "obstacle": data["obstacle"].astype(bool),
                "tick_count": int(data["tick_count"]),
            }
    except (KeyError, OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable state %s: %s", p.name, exc)
        return None


def _default_config() -> dict:
    return {
        "world": {"width": DEFAULT_WIDTH, "height": DEFAULT_HEIGHT},
        "tick_rate": DEFAULT_TICK_RATE,
        "source_interval": DEFAULT_SOURCE_INTERVAL,
        "sources": [[0, DEFAULT_WIDTH // 2]],
        "sources_enabled": True,
        "obstacles": [],
        "ledges": 3,
        "seed": -1,
        "lock_seed": False,
        "render_scale": 1,
        "view_mode": "default",
        **RULE_DEFAULTS,
    }


def _merge_defaults(data: dict) -> dict:
    d = _default_config()
    if "world" in data:
        d["world"] = {**d["world"], **data["world"]}
    for k in _MERGE_KEYS:
        if k in data:
            d[k] = data[k]
    return d


def config_exists(actual_seed: int, name: str) -> bool:
    """Use in-memory index; no disk access."""
    return (actual_seed, _sanitize_name(name)) in _CONFIG_INDEX


def delete_config(seed: int, name: str) -> None:
    """Remove config and state from disk and index. Clear last if this was last."""
    key = (seed, _sanitize_name(name))
    _CONFIG_INDEX.discard(key)
    get_config_path(seed, name).unlink(missing_ok=True)
    get_state_path(seed, name).unlink(missing_ok=True)
    last = get_last_config()
    if last and last == key:
        LAST_FILE.unlink(missing_ok=True)
    logger.info("Deleted config %s", config_id(seed, name))
