#!/usr/bin/env python3
"""
General utilities for the mechanics demos.
"""
import math
from typing import Optional


def try_float(val) -> Optional[float]:
    """Parse val as a finite float, or return None."""
    try:
        f = float(val)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f
