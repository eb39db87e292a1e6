# database.py
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from config import DATABASE_URL


def make_engine(url: str, **kwargs):
    # sqlite ใช้ได้หลาย thread เฉพาะเมื่อปิด check_same_thread
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,   # ช่วยตัด connection ที่ตายแล้ว
        future=True,
        **kwargs,
    )


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()

def get_db() -> Generator[Session, None, None]:
    """Dependency สำหรับ FastAPI: เปิด session ต่อคำขอ แล้วปิดให้เสมอ"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
