# routers/v1/auth.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from deps.auth import get_current_user, get_password_hash, login_for_access_token
from models import User, Profile
from schemas import SignUpIn, TokenOut, MeOut

router = APIRouter(prefix="/auth", tags=["auth"])

# OAuth2 form: username = email
router.add_api_route("/token", login_for_access_token, methods=["POST"], response_model=TokenOut)


@router.post("/signup", response_model=MeOut, status_code=201)
def signup(payload: SignUpIn, db: Session = Depends(get_db)):
    if email_taken(db, payload.email):
        raise HTTPException(409, "Email already exists")

    u = User(email=payload.email, password_hash=get_password_hash(payload.password))
    # ไม่สร้าง user_roles: ไม่มีแถว = employee
    u.profile = Profile(full_name=(payload.full_name or "").strip())
    db.add(u)
    try:
        db.commit()
    except IntegrityError:
        # สมัครพร้อมกันด้วย email เดียวกัน: unique index กันไว้
        db.rollback()
        raise HTTPException(409, "Email already exists")
    db.refresh(u)
    return _me(u)


@router.get("/me", response_model=MeOut)
def me(user: User = Depends(get_current_user)):
    return _me(user)


def email_taken(db: Session, email: str) -> bool:
    return db.query(User).filter(User.email == email).first() is not None


def _me(u: User) -> MeOut:
    return MeOut(
        id=u.id,
        email=u.email,
        full_name=u.profile.full_name if u.profile else "",
        role=u.role,
        is_admin=u.is_admin,
    )
