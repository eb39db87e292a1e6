# routers/v1/inspection_types.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from deps.auth import get_current_user
from deps.authz import require_admin
from generic_router import make_crud_router
from models import InspectionType
from schemas import InspectionTypeCreate, InspectionTypeUpdate, InspectionTypeOut
from services.checklist import next_type_number


def _routes(router: APIRouter):
    @router.get("", response_model=List[InspectionTypeOut])
    def list_types(
        active_only: bool = False,
        category: str | None = None,
        db: Session = Depends(get_db),
        _user=Depends(get_current_user),
    ):
        q = db.query(InspectionType)
        if active_only:
            q = q.filter(InspectionType.active.is_(True))
        if category:
            q = q.filter(InspectionType.category == category)
        return q.order_by(InspectionType.number.asc()).all()

    @router.get("/categories", response_model=List[str])
    def list_categories(
        active_only: bool = False,
        db: Session = Depends(get_db),
        _user=Depends(get_current_user),
    ):
        # เรียงตามลำดับที่ปรากฏครั้งแรกใน checklist
        q = db.query(InspectionType.category, InspectionType.number)
        if active_only:
            q = q.filter(InspectionType.active.is_(True))
        seen = []
        for category, _n in q.order_by(InspectionType.number.asc()).all():
            if category not in seen:
                seen.append(category)
        return seen

    @router.post("/{item_id}/toggle-active", response_model=InspectionTypeOut)
    def toggle_active(item_id: str, db: Session = Depends(get_db), _admin=Depends(require_admin)):
        t = db.get(InspectionType, item_id)
        if not t:
            raise HTTPException(404, "Not found")
        t.active = not t.active
        db.commit()
        db.refresh(t)
        return t


def _before_create(db: Session, data: dict):
    data["number"] = next_type_number(db)
    data["active"] = True


def _before_update(db: Session, obj, data: dict):
    for k in ("category", "description"):
        if k in data:
            v = (data[k] or "").strip()
            if not v:
                raise HTTPException(400, f"'{k}' is required")
            data[k] = v
    for k in ("number", "weight", "active"):
        if k in data and data[k] is None:
            data.pop(k)


router = make_crud_router(
    InspectionType,
    "inspection-types",
    create_schema=InspectionTypeCreate,
    update_schema=InspectionTypeUpdate,
    out_schema=InspectionTypeOut,
    include_list=False,
    extend=_routes,
    before_create=_before_create,
    before_update=_before_update,
)
