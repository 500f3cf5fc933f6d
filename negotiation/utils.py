from __future__ import annotations

import datetime as _dt
import json
import math
from typing import Any


def safe_int(x: Any, default: int = 0) -> int:
    try:
        if x is None:
            return int(default)
        return int(x)
    except Exception:
        return int(default)


def safe_float(x: Any, default: float = 0.0) -> float:
    try:
        if x is None:
            return float(default)
        v = float(x)
        if math.isnan(v) or math.isinf(v):
            return float(default)
        return float(v)
    except Exception:
        return float(default)


def clamp(x: Any, lo: float, hi: float) -> float:
    v = safe_float(x, lo)
    if v < lo:
        return float(lo)
    if v > hi:
        return float(hi)
    return float(v)


def clamp01(x: Any) -> float:
    return clamp(x, 0.0, 1.0)


def lerp(lo: float, hi: float, t: float) -> float:
    return float(lo) + float(t) * (float(hi) - float(lo))


def _to_int32(n: int) -> int:
    n &= 0xFFFFFFFF
    if n >= 0x80000000:
        n -= 0x100000000
    return n


def rolling_hash32(text: str) -> int:
    """Signed 32-bit rolling hash (h * 31 + code) over UTF-16 code units.

    Matches the hash used by save files written by the desktop client, so
    seeded quirks stay identical for existing careers.
    """
    h = 0
    data = str(text).encode("utf-16-le")
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = _to_int32((h << 5) - h + code)
    return h


def seeded_u01(*parts: Any) -> float:
    """Deterministic pseudo-random in [0, 1) from identity strings.

    Parts are joined with '-' before hashing. Pure function: no RNG state,
    identical output across calls and processes.
    """
    key = "-".join(str(p) for p in parts)
    return (abs(rolling_hash32(key)) % 10000) / 10000.0


def seeded_signed(*parts: Any) -> float:
    """Same seed mapped onto [-1, 1)."""
    return seeded_u01(*parts) * 2.0 - 1.0


def round_money(amount: float) -> int:
    """Round half away from zero for positive money values (JS Math.round parity)."""
    return int(math.floor(float(amount) + 0.5))


def age_in_year(date_of_birth: Any, game_year: int, *, default: int = 27) -> int:
    """Age in whole years at the given season year, from an ISO birth date."""
    if date_of_birth is None:
        return int(default)
    s = str(date_of_birth).strip()[:10]
    try:
        born = _dt.date.fromisoformat(s)
    except Exception:
        try:
            born = _dt.date(int(s[:4]), 1, 1)
        except Exception:
            return int(default)
    return int(game_year) - int(born.year)


def json_dumps(obj: Any) -> str:
    """Stable JSON dump for logs/payload validation."""
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), sort_keys=True, default=str)
