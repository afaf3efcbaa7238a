"""Normalization utilities for JSON-safe analysis output.

Analyzer metrics are computed with pandas and may carry NaN for positions
without enough history, or numpy scalar types. Everything handed to the
presentation layer goes through this module first:

1. NaN/inf sanitization: replaced with null for JSON safety
2. numpy scalars: converted to plain Python numbers
3. Enums: replaced by their value
4. Canonical dumps: sorted keys, minimal separators, allow_nan=False
"""

from __future__ import annotations

import json
import math
from enum import Enum
from typing import Any

import numpy as np


def canonical_dumps(obj: Any) -> str:
    """Produce canonical JSON string with sorted keys and minimal separators.

    Uses allow_nan=False to fail fast if NaN/inf values slip through
    sanitization. This ensures JSON validity across all parsers.
    """
    return json.dumps(
        sanitize_nan_inf(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def _is_nan_or_inf(x: Any) -> bool:
    """Check if value is NaN or inf, handling numpy types safely."""
    if isinstance(x, bool):
        return False
    try:
        # Works for float, numpy.float64, etc.
        return math.isnan(x) or math.isinf(x)
    except (TypeError, ValueError):
        # Not a numeric type that supports isnan/isinf
        return False


def _is_negative_zero(x: Any) -> bool:
    """Check if value is -0.0 (which creates diff noise)."""
    if isinstance(x, bool):
        return False
    try:
        return x == 0.0 and math.copysign(1.0, x) < 0
    except (TypeError, ValueError):
        return False


def sanitize_nan_inf(obj: Any) -> Any:
    """Recursively replace NaN, inf, -inf with None and -0.0 with 0.0.

    Also unwraps numpy scalars and Enum members so the result only holds
    types the stdlib json encoder understands.
    """
    if isinstance(obj, dict):
        return {k: sanitize_nan_inf(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_nan_inf(item) for item in obj]
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, np.generic):
        return sanitize_nan_inf(obj.item())
    elif _is_nan_or_inf(obj):
        return None
    elif _is_negative_zero(obj):
        return 0.0
    return obj
