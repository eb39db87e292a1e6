# services/checklist.py
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import (
    Branch, Visit, InspectionType, InspectionResult,
    STATUS_IRREGULAR, RESULT_STATUSES,
)
from scoring import calculate_score, ScoreResult


def active_types(db: Session):
    return (
        db.query(InspectionType)
          .filter(InspectionType.active.is_(True))
          .order_by(InspectionType.number.asc())
          .all()
    )


def next_type_number(db: Session) -> int:
    """ลำดับถัดไป = max(number) + 1 (ตารางว่าง = 1)"""
    current = db.query(func.max(InspectionType.number)).scalar()
    return (current or 0) + 1


def apply_score(db: Session, visit: Visit) -> ScoreResult:
    """คำนวณคะแนนใหม่จากผลใน DB แล้วเขียน snapshot ลง visit (ยังไม่ commit)"""
    results = (
        db.query(InspectionResult)
          .filter(InspectionResult.visit_id == visit.id)
          .all()
    )
    score = calculate_score(results, active_types(db))
    visit.total_score = score.total_score
    visit.max_score = score.max_score
    visit.percentage = score.percentage
    visit.evaluation = score.evaluation
    return score


def current_visit(db: Session, branch_id: str) -> Optional[Visit]:
    return (
        db.query(Visit)
          .filter(Visit.branch_id == branch_id)
          .order_by(Visit.visit_date.desc(), Visit.created_at.desc())
          .first()
    )


def create_visit(
    db: Session,
    *,
    branch: Branch,
    inspector_id: Optional[str],
    visit_date: Optional[date] = None,
    notes: Optional[str] = None,
) -> Visit:
    visit = Visit(
        branch_id=branch.id,
        inspector_id=inspector_id,
        visit_date=visit_date or date.today(),
        notes=notes,
    )
    db.add(visit)
    db.flush()
    apply_score(db, visit)
    db.commit()
    db.refresh(visit)
    return visit


def record_result(
    db: Session,
    *,
    visit: Visit,
    inspection_type_id: str,
    status: str,
    observations: Optional[str] = None,
) -> ScoreResult:
    """
    Upsert the (visit, type) result, then recompute and persist the visit's
    score in the same transaction.
    """
    if status not in RESULT_STATUSES:
        raise ValueError(f"invalid status: {status}")

    # observation เก็บเฉพาะตอน irregular
    obs = (observations or "").strip() if status == STATUS_IRREGULAR else ""

    try:
        existing = (
            db.query(InspectionResult)
              .filter(InspectionResult.visit_id == visit.id,
                      InspectionResult.inspection_type_id == inspection_type_id)
              .first()
        )
        if existing:
            existing.status = status
            existing.observations = obs
        else:
            db.add(InspectionResult(
                visit_id=visit.id,
                inspection_type_id=inspection_type_id,
                status=status,
                observations=obs,
            ))
        db.flush()

        score = apply_score(db, visit)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(visit)
    return score


def clear_result(db: Session, *, visit: Visit, inspection_type_id: str) -> ScoreResult:
    """Back to pending: drop the row and recompute."""
    try:
        (
            db.query(InspectionResult)
              .filter(InspectionResult.visit_id == visit.id,
                      InspectionResult.inspection_type_id == inspection_type_id)
              .delete(synchronize_session=False)
        )
        db.flush()
        score = apply_score(db, visit)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(visit)
    return score
