# routers/v1/visits.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from deps.auth import get_current_user
from deps.authz import require_admin
from models import Branch, Visit, InspectionResult, InspectionType, User
from schemas import (
    VisitCreate, VisitUpdate, VisitOut, VisitDetailOut,
    InspectionResultIn, InspectionResultOut,
)
from services import checklist

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/visits", tags=["visits"])


# ---------------------------
# Helpers
# ---------------------------
def _get_visit_or_404(db: Session, visit_id: str) -> Visit:
    v = db.get(Visit, visit_id)
    if not v:
        raise HTTPException(404, "Visit not found")
    return v

def _get_branch_or_404(db: Session, branch_id: str) -> Branch:
    b = db.get(Branch, branch_id)
    if not b:
        raise HTTPException(404, "Branch not found")
    return b

def _results(db: Session, visit_id: str) -> List[InspectionResult]:
    return (
        db.query(InspectionResult)
          .filter(InspectionResult.visit_id == visit_id)
          .all()
    )

def _detail(db: Session, v: Visit) -> VisitDetailOut:
    out = VisitDetailOut.model_validate(v)
    out.results = [InspectionResultOut.model_validate(r) for r in _results(db, v.id)]
    return out


# ---------------------------
# Visits
# ---------------------------
@router.get("", response_model=List[VisitOut])
def list_visits(
    branch_id: Optional[str] = None,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    q = db.query(Visit)
    if branch_id:
        q = q.filter(Visit.branch_id == branch_id)
    return q.order_by(Visit.visit_date.desc(), Visit.created_at.desc()).all()

@router.get("/current", response_model=Optional[VisitDetailOut])
def get_current_visit(
    branch_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    _get_branch_or_404(db, branch_id)
    v = checklist.current_visit(db, branch_id)
    return _detail(db, v) if v else None

@router.get("/{visit_id}", response_model=VisitDetailOut)
def get_visit(visit_id: str, db: Session = Depends(get_db), _user: User = Depends(get_current_user)):
    return _detail(db, _get_visit_or_404(db, visit_id))

@router.post("", response_model=VisitDetailOut, status_code=201)
def create_visit(payload: VisitCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    branch = _get_branch_or_404(db, payload.branch_id)
    v = checklist.create_visit(
        db,
        branch=branch,
        inspector_id=admin.id,
        visit_date=payload.visit_date,
        notes=payload.notes,
    )
    logger.info("visit %s created for branch %s by %s", v.id, branch.id, admin.id)
    return _detail(db, v)

@router.put("/{visit_id}", response_model=VisitOut)
def update_visit(
    visit_id: str,
    payload: VisitUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    v = _get_visit_or_404(db, visit_id)
    data = payload.model_dump(exclude_unset=True)
    if "visit_date" in data and data["visit_date"] is None:
        raise HTTPException(400, "'visit_date' is required")
    for k, val in data.items():
        setattr(v, k, val)
    db.commit()
    db.refresh(v)
    return v

@router.delete("/{visit_id}", status_code=204)
def delete_visit(visit_id: str, db: Session = Depends(get_db), _admin: User = Depends(require_admin)):
    v = _get_visit_or_404(db, visit_id)
    db.delete(v)
    db.commit()
    return None


# ---------------------------
# Checklist results
# ---------------------------
@router.get("/{visit_id}/results", response_model=List[InspectionResultOut])
def list_results(visit_id: str, db: Session = Depends(get_db), _user: User = Depends(get_current_user)):
    _get_visit_or_404(db, visit_id)
    return _results(db, visit_id)

@router.put("/{visit_id}/results/{inspection_type_id}", response_model=VisitDetailOut)
def set_result(
    visit_id: str,
    inspection_type_id: str,
    payload: InspectionResultIn,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    v = _get_visit_or_404(db, visit_id)
    if not db.get(InspectionType, inspection_type_id):
        raise HTTPException(404, "Inspection type not found")

    checklist.record_result(
        db,
        visit=v,
        inspection_type_id=inspection_type_id,
        status=payload.status,
        observations=payload.observations,
    )
    return _detail(db, v)

@router.delete("/{visit_id}/results/{inspection_type_id}", response_model=VisitDetailOut)
def clear_result(
    visit_id: str,
    inspection_type_id: str,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    v = _get_visit_or_404(db, visit_id)
    checklist.clear_result(db, visit=v, inspection_type_id=inspection_type_id)
    return _detail(db, v)
