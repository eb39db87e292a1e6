# routers/v1/__init__.py
from fastapi import APIRouter

from . import auth, branches, inspection_types, visits, reports, manage_users

api_v1 = APIRouter()
api_v1.include_router(auth.router)
api_v1.include_router(branches.router)
api_v1.include_router(inspection_types.router)
api_v1.include_router(visits.router)
api_v1.include_router(reports.router)

# role administration อยู่นอก /api/v1 (path เดียวกับ function เดิม)
functions_router = manage_users.router

__all__ = ["api_v1", "functions_router"]
