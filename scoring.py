# scoring.py
"""
Score calculation for a visit's checklist.

Everything here is pure: no session, no I/O. Inputs may be ORM rows,
pydantic schemas or plain dicts, anything exposing the fields by attribute
or by key.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

EXCELENTE = "EXCELENTE"
OTIMO = "ÓTIMO"
SATISFATORIO = "SATISFATÓRIO"
REGULAR = "REGULAR"
INSUFICIENTE = "INSUFICIENTE"

# (lower bound inclusive, label) เรียงจากมากไปน้อย
EVALUATION_LADDER = (
    (100, EXCELENTE),
    (93, OTIMO),
    (80, SATISFATORIO),
    (70, REGULAR),
)

# weight -> (points, penalty)
WEIGHT_TABLE = {
    1: (50, -100),
    2: (100, -200),
}

MONTHS = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]


@dataclass(frozen=True)
class ScoreResult:
    total_score: int
    max_score: int
    percentage: int
    evaluation: str

    def as_dict(self) -> dict:
        return asdict(self)


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def points_for(weight: Any) -> tuple:
    """(points, penalty) ของ weight; อะไรที่ไม่ใช่ 2 ถือเป็น weight 1"""
    return WEIGHT_TABLE[2] if weight == 2 else WEIGHT_TABLE[1]


def get_evaluation(percentage: Any) -> str:
    try:
        pct = float(percentage)
    except (TypeError, ValueError):
        return INSUFICIENTE
    if math.isnan(pct):
        return INSUFICIENTE
    for threshold, label in EVALUATION_LADDER:
        if pct >= threshold:
            return label
    return INSUFICIENTE


def calculate_score(results: Optional[Iterable[Any]], types: Optional[Iterable[Any]]) -> ScoreResult:
    """
    Weighted compliance score of one visit.

    - only active types count; each adds its points to max_score
    - "ok" adds the points, "irregular" adds the (negative) penalty,
      no result (pending) adds nothing
    - percentage = round(total / max * 100), clamped to [0, 100]
    """
    by_type = {}
    for r in results or ():
        type_id = _field(r, "inspection_type_id")
        if type_id is None:
            continue
        # ถ้ามีซ้ำ ใช้ตัวแรกเหมือนหน้า dashboard เดิม
        by_type.setdefault(type_id, _field(r, "status"))

    total_score = 0
    max_score = 0
    for t in types or ():
        if t is None or not _field(t, "active", False):
            continue
        points, penalty = points_for(_field(t, "weight"))
        max_score += points

        status = by_type.get(_field(t, "id"))
        if status == "ok":
            total_score += points
        elif status == "irregular":
            total_score += penalty

    if max_score > 0:
        percentage = _round_half_up(total_score / max_score * 100)
        percentage = min(100, max(0, percentage))
    else:
        percentage = 0

    return ScoreResult(
        total_score=total_score,
        max_score=max_score,
        percentage=percentage,
        evaluation=get_evaluation(percentage),
    )


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def monthly_percentages(visits: Iterable[Any], year: int) -> List[dict]:
    """Average visit percentage per month of `year` (chart series)."""
    buckets: List[List[float]] = [[] for _ in MONTHS]
    for v in visits or ():
        d = _as_date(_field(v, "visit_date"))
        if d is None or d.year != year:
            continue
        try:
            buckets[d.month - 1].append(float(_field(v, "percentage", 0) or 0))
        except (TypeError, ValueError):
            continue

    out = []
    for i, month in enumerate(MONTHS):
        values = buckets[i]
        avg = _round_half_up(sum(values) / len(values)) if values else 0
        out.append({
            "month": month,
            "month_number": i + 1,
            "percentage": avg,
            "visits": len(values),
            "has_data": bool(values),
        })
    return out
