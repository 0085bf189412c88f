# blueprints/enrollments/services.py
from __future__ import annotations
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from flask import current_app

Number = Union[int, float]

def score_bounds() -> Tuple[Number, Number]:
    cfg = current_app.config
    return cfg.get("SCORE_MIN", 0), cfg.get("SCORE_MAX", 100)

def parse_score(raw: Any) -> Number:
    """Form value -> score on the configured scale, or ValueError."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValueError("оценка не указана")
    try:
        value = float(str(raw).strip().replace(",", "."))
    except ValueError:
        raise ValueError("оценка должна быть числом") from None
    if not math.isfinite(value):
        raise ValueError("оценка должна быть числом")
    lo, hi = score_bounds()
    if value < lo or value > hi:
        raise ValueError(f"оценка должна быть от {lo} до {hi}")
    return int(value) if value.is_integer() else round(value, 2)

def is_passing(score: Optional[Number]) -> bool:
    if score is None:
        return False
    return score >= current_app.config.get("SCORE_PASSING", 60)

def collect_scores(form_items: Iterable[Tuple[str, str]], prefix: str = "score_"
                   ) -> Tuple[List[Dict[str, Number]], List[str]]:
    """``score_<studentId>`` fields -> ``[{studentId, score}]`` + rejected ids.

    Blank fields are skipped, invalid ones are reported and not sent.
    """
    scores: List[Dict[str, Number]] = []
    rejected: List[str] = []
    for key, raw in form_items:
        if not key.startswith(prefix):
            continue
        sid = key[len(prefix):]
        if not sid.isdigit() or not str(raw).strip():
            continue
        try:
            scores.append({"studentId": int(sid), "score": parse_score(raw)})
        except ValueError:
            rejected.append(sid)
    return scores, rejected
