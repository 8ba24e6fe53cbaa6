# todo_api/main.py
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# 루트 .env 로딩 (설정 객체 생성 전에 한 번)
load_dotenv()

from fastapi import FastAPI, HTTPException  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from sqlmodel import text  # noqa: E402

from todo_api.core.cache import get_cache  # noqa: E402
from todo_api.core.config import Settings, get_settings  # noqa: E402
from todo_api.core.error_handlers import register_exception_handlers  # noqa: E402
from todo_api.core.logging_config import setup_logging  # noqa: E402
from todo_api.core.rate_limit import RateLimitMiddleware  # noqa: E402
from todo_api.db.session import engine  # noqa: E402

# 라우터
from todo_api.routers import auth, todo, user  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # 종료 시 캐시 연결 정리
    get_cache().close()
    logger.info("cache closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    # 설정 검증을 첫 요청이 아닌 기동 시점에 수행 (JWT_SECRET 누락 시 여기서 실패)
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Todo API", version=settings.app_version, lifespan=lifespan)

    app.add_middleware(RateLimitMiddleware, limit_per_minute=settings.rate_limit_per_min)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # 라우터 등록
    app.include_router(auth.auth_router, prefix=settings.api_prefix)
    app.include_router(user.user_router, prefix=settings.api_prefix)
    app.include_router(todo.router, prefix=settings.api_prefix)

    @app.get("/health")
    def health_app():
        return {"ok": True}

    @app.get("/health/db")
    def health_db():
        # Migration is a deployment concern. Runtime only verifies DB connectivity.
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"ok": True}
        except Exception:
            logger.exception("database health check failed")
            raise HTTPException(status_code=500, detail="Database connection failed")

    logger.info("Todo API %s ready (prefix=%s)", settings.app_version, settings.api_prefix)
    return app


app = create_app()
