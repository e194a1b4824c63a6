from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
from slowapi.errors import RateLimitExceeded
from dotenv import load_dotenv
from typing import Optional
import logging

load_dotenv()
from core.config import settings
from core.exceptions import AuthError
from core.rate_limit import limiter, rate_limit_exceeded_handler
from db import SessionLocal
from middleware.session import ServerSessionMiddleware
from storage.session_store import MemorySessionStore, SessionStore, SqlSessionStore
from routers.auth_router import router as auth_router
from routers.oauth_router import router as oauth_router
from routers.admin_router import router as admin_router
from routers.admin_usuarios_router import router as admin_usuarios_router
from routers.admin_academias_router import router as admin_academias_router
from routers.academias_router import router as academias_router
from routers.academia_router import router as academia_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_session_store() -> SessionStore:
    if settings.SESSION_STORE == "database":
        return SqlSessionStore(SessionLocal)
    return MemorySessionStore()


def create_app(session_store: Optional[SessionStore] = None) -> FastAPI:
    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="""
API de autenticação e multi-tenancy do GymSync.

Fluxo:
1. Login local, Google ou OIDC da plataforma (sessão por cookie)
2. Seleção da academia ativa
3. Rotas escopadas pela academia resolvida
""",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        ServerSessionMiddleware,
        store=session_store if session_store is not None else build_session_store(),
        secret_key=settings.SESSION_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        same_site="lax",
        https_only=settings.is_production,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Captura exceções não tratadas para que a resposta 500
        passe pelo CORSMiddleware e inclua os headers corretos."""
        logger.exception("Erro não tratado em %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Erro interno do servidor"},
        )

    app.include_router(auth_router, prefix="/api")
    app.include_router(oauth_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")
    app.include_router(admin_usuarios_router, prefix="/api")
    app.include_router(admin_academias_router, prefix="/api")
    app.include_router(academias_router, prefix="/api")
    app.include_router(academia_router, prefix="/api")

    return app


app = create_app()
