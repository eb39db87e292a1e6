# create_admin.py
"""
สร้าง (หรือยกระดับ) admin คนแรก: ทางเดียวที่ได้ admin โดยไม่ต้องมี admin อยู่แล้ว

    python create_admin.py admin@example.com --password secret123 --name "Admin"
"""
import argparse

from sqlalchemy.orm import Session

from database import Base, SessionLocal, engine
from deps.auth import get_password_hash
from models import User, Profile, UserRole, ROLE_ADMIN


def ensure_admin(db: Session, email: str, password: str | None = None, full_name: str = "") -> User:
    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user:
        if not password:
            raise ValueError("password is required for a new user")
        user = User(email=email, password_hash=get_password_hash(password))
        user.profile = Profile(full_name=full_name)
        db.add(user)
        db.flush()
    elif password:
        user.password_hash = get_password_hash(password)

    role = db.query(UserRole).filter(UserRole.user_id == user.id).first()
    if role:
        role.role = ROLE_ADMIN
    else:
        db.add(UserRole(user_id=user.id, role=ROLE_ADMIN))
    db.commit()
    db.refresh(user)
    return user


def main():
    ap = argparse.ArgumentParser(description="Create or promote an admin user.")
    ap.add_argument("email")
    ap.add_argument("--password", help="Required when the user does not exist yet")
    ap.add_argument("--name", default="", help="Full name for a new user")
    args = ap.parse_args()

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = ensure_admin(db, args.email, args.password, args.name)
        print(f"✅ {user.email} is admin")
    except ValueError as e:
        print(f"❌ {e}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
