from __future__ import annotations

from typing import Optional, Literal, List
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

# =========================
# ===== Base (Pydantic v2)
# =========================
class APIBase(BaseModel):
    """
    Base สำหรับทุก schema:
    - from_attributes=True: รองรับแปลงจาก ORM (SQLAlchemy)
    """
    model_config = ConfigDict(from_attributes=True)


RoleLiteral = Literal["admin", "employee"]
StatusLiteral = Literal["ok", "irregular"]
WeightLiteral = Literal[1, 2]


def _strip_required(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("must not be empty")
    return v


# =========================================
# ================= Auth ==================
# =========================================
class SignUpIn(BaseModel):
    email: str
    password: str = Field(min_length=6)
    full_name: str = ""

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if "@" not in v:
            raise ValueError("invalid email")
        return v


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MeOut(APIBase):
    id: str
    email: str
    full_name: str = ""
    role: RoleLiteral = "employee"
    is_admin: bool = False


# =========================================
# ========== Role administration ==========
# =========================================
class ManagedUserOut(APIBase):
    """หนึ่งแถวของ list users: identity + profile + role (มีค่า default)"""
    id: str
    email: Optional[str] = None
    full_name: str = ""
    role: RoleLiteral = "employee"
    created_at: Optional[datetime] = None


class SetRoleIn(BaseModel):
    user_id: str
    role: RoleLiteral

    @field_validator("user_id")
    @classmethod
    def _user_id(cls, v: str) -> str:
        return _strip_required(v)


# =========================================
# =============== Branches ================
# =========================================
class BranchCreate(BaseModel):
    name: str
    manager_name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _strip_required(v)


class BranchUpdate(BaseModel):
    name: Optional[str] = None
    manager_name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _strip_required(v)


class BranchOut(APIBase):
    id: str
    name: str
    manager_name: Optional[str] = None
    created_at: Optional[datetime] = None


# =========================================
# =========== Inspection Types ============
# =========================================
class InspectionTypeCreate(BaseModel):
    category: str
    description: str
    weight: WeightLiteral = 1

    @field_validator("category", "description")
    @classmethod
    def _required(cls, v: str) -> str:
        return _strip_required(v)


class InspectionTypeUpdate(BaseModel):
    number: Optional[int] = Field(default=None, ge=1)
    category: Optional[str] = None
    description: Optional[str] = None
    weight: Optional[WeightLiteral] = None
    active: Optional[bool] = None


class InspectionTypeOut(APIBase):
    id: str
    number: int
    category: str
    description: str
    weight: int
    active: bool


# =========================================
# ================ Visits =================
# =========================================
class VisitCreate(BaseModel):
    branch_id: str
    visit_date: Optional[date] = None    # ไม่ส่ง = วันนี้
    notes: Optional[str] = None


class VisitUpdate(BaseModel):
    visit_date: Optional[date] = None
    notes: Optional[str] = None


class VisitOut(APIBase):
    id: str
    branch_id: str
    inspector_id: Optional[str] = None
    visit_date: date
    notes: Optional[str] = None
    total_score: int
    max_score: int
    percentage: int
    evaluation: str
    created_at: Optional[datetime] = None


# =========================================
# ========== Inspection Results ===========
# =========================================
class InspectionResultIn(BaseModel):
    status: StatusLiteral
    observations: Optional[str] = None


class InspectionResultOut(APIBase):
    id: str
    visit_id: str
    inspection_type_id: str
    status: StatusLiteral
    observations: Optional[str] = None


class VisitDetailOut(VisitOut):
    results: List[InspectionResultOut] = []


# =========================================
# ================ Reports ================
# =========================================
class MonthlyPoint(BaseModel):
    month: str
    month_number: int
    percentage: int
    visits: int
    has_data: bool
