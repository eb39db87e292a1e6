# main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_LEVEL
from database import Base, engine
import models  # noqa: F401  (register tables)
from routers.v1 import api_v1, functions_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

FUNCTIONS_PREFIX = "/functions/"


class AppCORSMiddleware(CORSMiddleware):
    """CORS ของทั้งแอป ยกเว้น /functions/* ที่ตอบ preflight และ header เอง"""

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http" and scope["path"].startswith(FUNCTIONS_PREFIX):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


def create_app(create_tables: bool = True, cors_origins=None) -> FastAPI:
    app = FastAPI(title="Food Safety Inspections API", version="1.0")

    origins = CORS_ORIGINS if cors_origins is None else cors_origins
    allow_all = "*" in origins
    app.add_middleware(
        AppCORSMiddleware,
        allow_origins=["*"] if allow_all else origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if create_tables:
        # dev: สร้างตารางให้เลย, production ใช้ alembic upgrade head
        Base.metadata.create_all(bind=engine)

    @app.get("/ping")
    def ping():
        return {"status": "ok"}

    app.include_router(api_v1, prefix="/api/v1")
    app.include_router(functions_router)

    logger.info("app ready (%d routes)", len(app.routes))
    return app


app = create_app()
