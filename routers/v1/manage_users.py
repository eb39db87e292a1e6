# routers/v1/manage_users.py
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from database import get_db
from services import role_admin

router = APIRouter(prefix="/functions", tags=["manage-users"])


@router.api_route("/manage-users", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def manage_users(
    request: Request,
    action: Optional[str] = None,
    db: Session = Depends(get_db),
    # session แยกสำหรับตรวจ token เท่านั้น
    verify_db: Session = Depends(get_db, use_cache=False),
):
    body = await request.body() if request.method == "POST" else None

    status_code, payload = await run_in_threadpool(
        role_admin.handle,
        db,
        method=request.method,
        action=action,
        authorization=request.headers.get("authorization"),
        body=body,
        verify_db=verify_db,
    )

    if isinstance(payload, str):
        return PlainTextResponse(payload, status_code=status_code, headers=role_admin.CORS_HEADERS)
    return JSONResponse(payload, status_code=status_code, headers=role_admin.CORS_HEADERS)
