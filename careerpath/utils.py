# careerpath/utils.py
# Normalization, formatting, and lenient JSON helpers.

import hashlib
import json
import math
import re
from numbers import Real
from typing import Any, Dict, Iterable, List, Optional


_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*|\s*```\s*$")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


def clean_text(value: Any) -> str:
    """Collapse whitespace in provider/AI text; non-strings become ''."""
    if not isinstance(value, str):
        return ""
    return re.sub(r"\s+", " ", value).strip()


def uniq_preserve_order(items: Iterable[str]) -> List[str]:
    """Deduplicate while preserving first-seen order."""
    seen = set()
    out: List[str] = []
    for it in items:
        if it in seen:
            continue
        seen.add(it)
        out.append(it)
    return out


def stable_id(*parts: str) -> str:
    """Create a deterministic identifier from a set of string parts."""
    joined = "|".join(p.strip() for p in parts if p is not None)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


def _as_amount(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if not value or not math.isfinite(value):
        return None
    return float(value)


def format_money(value: float) -> str:
    return f"${round(value):,}"


def format_salary(salary_min: Any, salary_max: Any) -> Optional[str]:
    """
    Format optional provider salary bounds:
      - both -> "$40,000 - $60,000"
      - min  -> "$40,000+"
      - max  -> "Up to $60,000"
    Returns None when neither bound is a usable number.
    """
    lo, hi = _as_amount(salary_min), _as_amount(salary_max)
    if lo and hi:
        return f"{format_money(lo)} - {format_money(hi)}"
    if lo:
        return f"{format_money(lo)}+"
    if hi:
        return f"Up to {format_money(hi)}"
    return None


def format_score(score: float) -> str:
    return f"{score:g}%"


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence if present."""
    return _FENCE_RE.sub("", text or "").strip()


def extract_json_block(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse the outermost JSON object found in the text.
    Tolerates code fences, leading/trailing prose, and trailing commas.
    Returns None when no object can be parsed.
    """
    cleaned = strip_code_fences(text)
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        return None
    block = _TRAILING_COMMA_RE.sub(r"\1", cleaned[start:end + 1])
    try:
        data = json.loads(block)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
