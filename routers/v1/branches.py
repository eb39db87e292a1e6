# routers/v1/branches.py
from fastapi import HTTPException

from generic_router import make_crud_router
from models import Branch
from schemas import BranchCreate, BranchUpdate, BranchOut


def _before_update(db, obj, data: dict):
    if "name" in data and data["name"] is None:
        raise HTTPException(400, "'name' is required")


router = make_crud_router(
    Branch,
    "branches",
    create_schema=BranchCreate,
    update_schema=BranchUpdate,
    out_schema=BranchOut,
    list_order_by=Branch.name.asc(),
    before_update=_before_update,
)
