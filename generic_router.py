from typing import Callable, List, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from database import get_db
from deps.auth import get_current_user
from deps.authz import require_admin
from utils import sa_update_from_dict

def make_crud_router(
    Model,
    prefix: str,
    *,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    out_schema: Type[BaseModel],
    list_order_by=None,
    include_list: bool = True,
    extend: Optional[Callable[[APIRouter], None]] = None,
    before_create: Optional[Callable[[Session, dict], None]] = None,
    before_update: Optional[Callable[[Session, object, dict], None]] = None,
    before_delete: Optional[Callable[[Session, object], None]] = None,
):
    """
    สร้าง CRUD router ให้ Model:
    - GET /{prefix}            : list        (login)
    - GET /{prefix}/{id}       : get one     (login)
    - POST /{prefix}           : create      (admin)
    - PUT /{prefix}/{id}       : update      (admin)
    - DELETE /{prefix}/{id}    : delete      (admin)

    `extend(router)` is called first so its fixed paths win over /{id}.
    """
    router = APIRouter(prefix=f"/{prefix}", tags=[prefix])

    if extend:
        extend(router)

    def _get_or_404(db: Session, item_id: str):
        obj = db.get(Model, item_id)
        if not obj:
            raise HTTPException(status_code=404, detail="Not found")
        return obj

    if include_list:
        @router.get("", response_model=List[out_schema])
        def list_items(db: Session = Depends(get_db), _user=Depends(get_current_user)):
            stmt = select(Model)
            if list_order_by is not None:
                stmt = stmt.order_by(list_order_by)
            return db.scalars(stmt).all()

    @router.get("/{item_id}", response_model=out_schema)
    def get_item(item_id: str, db: Session = Depends(get_db), _user=Depends(get_current_user)):
        return _get_or_404(db, item_id)

    @router.post("", response_model=out_schema, status_code=status.HTTP_201_CREATED)
    def create_item(
        payload: create_schema,
        db: Session = Depends(get_db),
        _admin=Depends(require_admin),
    ):
        data = payload.model_dump()
        if before_create:
            before_create(db, data)

        obj = Model()
        sa_update_from_dict(obj, data)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    @router.put("/{item_id}", response_model=out_schema)
    def update_item(
        item_id: str,
        payload: update_schema,
        db: Session = Depends(get_db),
        _admin=Depends(require_admin),
    ):
        obj = _get_or_404(db, item_id)
        data = payload.model_dump(exclude_unset=True)

        if before_update:
            before_update(db, obj, data)

        sa_update_from_dict(obj, data)
        db.commit()
        db.refresh(obj)
        return obj

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_item(item_id: str, db: Session = Depends(get_db), _admin=Depends(require_admin)):
        obj = _get_or_404(db, item_id)
        if before_delete:
            before_delete(db, obj)
        db.delete(obj)
        db.commit()
        return None

    return router
