# routers/v1/reports.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from deps.auth import get_current_user
from models import Visit
from schemas import MonthlyPoint
from scoring import monthly_percentages

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/monthly", response_model=List[MonthlyPoint])
def monthly(
    year: Optional[int] = Query(None, ge=2000, le=2100),   # ไม่ส่ง = ปีปัจจุบัน
    branch_id: Optional[str] = None,                        # ไม่ส่ง = ทุกสาขา
    db: Session = Depends(get_db),
    _user=Depends(get_current_user),
):
    year = year or date.today().year
    q = (
        db.query(Visit.visit_date, Visit.percentage)
          .filter(Visit.visit_date >= date(year, 1, 1),
                  Visit.visit_date <= date(year, 12, 31))
    )
    if branch_id:
        q = q.filter(Visit.branch_id == branch_id)

    rows = [{"visit_date": d, "percentage": p} for d, p in q.all()]
    return monthly_percentages(rows, year)
