from __future__ import annotations

import numpy as np

from . import debug

_seen: set[str] = set()


def log_once(key: str, message: str) -> None:
    if debug.is_verbose() and key not in _seen:
        _seen.add(key)
        debug.log(message)


def reset_once(key: str | None = None) -> None:
    """Forget `key` (or every key) so the next `log_once` call prints again."""
    if key is None:
        _seen.clear()
    else:
        _seen.discard(key)


def log_counts(label: str, counts: dict[str, int]) -> None:
    if not debug.is_verbose():
        return
    body = " ".join(f"{name}={value}" for name, value in counts.items())
    debug.log(f"{label}: {body}")


def log_angles(name: str, angles: np.ndarray) -> None:
    """Summarise an angle grid: shape, range and the mean flow direction."""
    if not debug.is_verbose():
        return
    if angles.size == 0:
        debug.log(f"{name}: shape={angles.shape} empty")
        return
    mean_dir = float(np.arctan2(np.sin(angles).mean(), np.cos(angles).mean()))
    debug.log(
        f"{name}: shape={angles.shape} dtype={angles.dtype} "
        f"min={float(angles.min()):.6g} max={float(angles.max()):.6g} "
        f"mean_dir={mean_dir:.6g}"
    )
