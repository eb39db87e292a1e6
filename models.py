# models.py
import uuid
from datetime import date

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship, validates

from database import Base


def new_id() -> str:
    return str(uuid.uuid4())


ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"
ROLES = (ROLE_ADMIN, ROLE_EMPLOYEE)

STATUS_OK = "ok"
STATUS_IRREGULAR = "irregular"
RESULT_STATUSES = (STATUS_OK, STATUS_IRREGULAR)


# =========================================
# ============ Users / Roles ==============
# =========================================

class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    user_role = relationship(
        "UserRole",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_users_active", "is_active"),)

    @property
    def role(self) -> str:
        return self.user_role.role if self.user_role else ROLE_EMPLOYEE

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self):
        return f"<User(email={self.email})>"


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    full_name = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile(user_id={self.user_id}, full_name={self.full_name})>"


class UserRole(Base):
    __tablename__ = "user_roles"
    id = Column(String(36), primary_key=True, default=new_id)
    # หนึ่ง user มีได้ role เดียว
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    role = Column(String(20), nullable=False, default=ROLE_EMPLOYEE)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="user_role")

    __table_args__ = (
        CheckConstraint("role IN ('admin','employee')", name="ck_user_roles_role"),
    )

    def __repr__(self):
        return f"<UserRole(user_id={self.user_id}, role={self.role})>"


# =========================================
# =============== Branches ================
# =========================================

class Branch(Base):
    __tablename__ = "branches"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    manager_name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    visits = relationship(
        "Visit",
        back_populates="branch",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Branch(name={self.name})>"


# =========================================
# =========== Inspection Types ============
# =========================================

class InspectionType(Base):
    __tablename__ = "inspection_types"
    id = Column(String(36), primary_key=True, default=new_id)
    number = Column(Integer, nullable=False, index=True)
    category = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    weight = Column(Integer, nullable=False, default=1)
    # soft delete: inactive ไม่ถูกนับคะแนน แต่ยังอยู่ในประวัติ
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("weight IN (1, 2)", name="ck_inspection_types_weight"),
        Index("ix_inspection_types_active_number", "active", "number"),
    )

    @validates("weight")
    def _validate_weight(self, key, value):
        if value not in (1, 2):
            raise ValueError("weight must be 1 or 2")
        return value

    def __repr__(self):
        return f"<InspectionType(number={self.number}, weight={self.weight}, active={self.active})>"


# =========================================
# ================ Visits =================
# =========================================

class Visit(Base):
    __tablename__ = "visits"
    id = Column(String(36), primary_key=True, default=new_id)
    branch_id = Column(
        String(36),
        ForeignKey("branches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    inspector_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    visit_date = Column(Date, nullable=False, default=date.today)
    notes = Column(Text, nullable=True)

    # snapshot ของคะแนน (คำนวณใหม่ทุกครั้งที่แก้ผลตรวจ)
    total_score = Column(Integer, nullable=False, default=0)
    max_score = Column(Integer, nullable=False, default=0)
    percentage = Column(Integer, nullable=False, default=0)
    evaluation = Column(String, nullable=False, default="INSUFICIENTE")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    branch = relationship("Branch", back_populates="visits")
    inspector = relationship("User")
    results = relationship(
        "InspectionResult",
        back_populates="visit",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_visits_branch_date", "branch_id", "visit_date"),
    )

    def __repr__(self):
        return f"<Visit(branch_id={self.branch_id}, visit_date={self.visit_date}, percentage={self.percentage})>"


class InspectionResult(Base):
    __tablename__ = "inspection_results"
    id = Column(String(36), primary_key=True, default=new_id)
    visit_id = Column(
        String(36),
        ForeignKey("visits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # ไม่ cascade: ลบ type แล้วผลเก่ายังอยู่ (คะแนน = 0)
    inspection_type_id = Column(String(36), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    observations = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    visit = relationship("Visit", back_populates="results")

    __table_args__ = (
        UniqueConstraint("visit_id", "inspection_type_id", name="uq_inspection_results_visit_type"),
        CheckConstraint("status IN ('ok','irregular')", name="ck_inspection_results_status"),
    )

    def __repr__(self):
        return f"<InspectionResult(visit_id={self.visit_id}, type={self.inspection_type_id}, status={self.status})>"
