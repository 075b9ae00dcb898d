# adhealth/utils/math.py
import math
from typing import Any, Optional

import pandas as pd

# A set of all strings that should be treated as null, case-insensitive.
NULL_STRINGS = {"N/A", "NA", "NONE", "NAN", "—", "-", "NOT ENTERED"}


def safe_div(n: Optional[float], d: Optional[float], default: float = 0.0) -> float:
    """Divide, resolving None / zero / non-finite results to `default`."""
    if n is None or d in (None, 0):
        return default
    try:
        out = n / d
    except ZeroDivisionError:
        return default
    return out if math.isfinite(out) else default


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def r1(x):
    return None if x is None else round(float(x), 1)


def r2(x):
    return None if x is None else round(float(x), 2)


def to_float(x: Any) -> Optional[float]:
    """Safely convert a cell to float; `$`, `,` and whitespace are stripped."""
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, (int, float)):
        return float(x) if math.isfinite(x) else None
    try:
        if pd.isna(x):
            return None
    except (TypeError, ValueError):
        return None

    s = str(x).strip()
    if s == "" or s.upper() in NULL_STRINGS:
        return None
    s = s.replace("$", "").replace(",", "")
    try:
        val = float(s)
    except ValueError:
        return None
    return val if math.isfinite(val) else None


def num(x: Any) -> float:
    """Metric cell as a float; missing or unparseable is 0."""
    v = to_float(x)
    return 0.0 if v is None else v
