# deps/authz.py
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from deps.auth import get_current_user
from models import User, UserRole, ROLE_ADMIN

def has_role(db: Session, user_id: str, role: str) -> bool:
    q = db.query(UserRole.id).filter(UserRole.user_id == user_id, UserRole.role == role)
    return db.query(q.exists()).scalar()

def require_role(role: str):
    """อ่านได้ทุกคนที่ login, เขียนได้เฉพาะ role ที่กำหนด (ตรวจจาก DB ทุก request)"""
    def dep(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> User:
        if not has_role(db, user.id, role):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                                detail=f"Missing role: {role}")
        return user
    return dep

require_admin = require_role(ROLE_ADMIN)
