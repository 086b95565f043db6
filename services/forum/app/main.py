from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.boards.router import router as boards_router
from app.database import close_db, init_db
from app.dependencies import get_settings
from app.threads.router import router as threads_router
from app.users.router import router as users_router
from shared.middleware.error_handler import (
    error_envelope_middleware,
    http_exception_handler,
    validation_exception_handler,
)
from shared.middleware.request_id import request_id_middleware

# Swagger tag groups displayed in the OpenAPI docs sidebar
_OPENAPI_TAGS = [
    {
        "name": "Boards",
        "description": (
            "Board metadata and the board activity feed: threads ordered by latest "
            "post or comment, with per-viewer counts of what is new since their last "
            "visit or notification dismissal."
        ),
    },
    {
        "name": "Threads",
        "description": (
            "Thread contents, the secret identities assumed in a thread, and thread "
            "visit recording."
        ),
    },
    {
        "name": "Users",
        "description": "Per-user signals such as dismissing all notifications.",
    },
    {
        "name": "Health",
        "description": "Liveness probe.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db(settings.forum_database_url)
    yield
    await close_db()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Forum Service",
        description=(
            "Read-mostly access to boards, threads, posts and comments. Serves the "
            "board activity feed, where threads are annotated with what is new to the "
            "viewer."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=_OPENAPI_TAGS,
        lifespan=lifespan,
    )

    # CORS must be registered first (runs last in middleware stack)
    # so that preflight OPTIONS requests get CORS headers before any auth check.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(boards_router, prefix="/api/v1")
    app.include_router(threads_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health() -> dict:
        """Lightweight liveness probe. Does not hit the database."""
        return {"status": "ok", "service": "forum"}

    return app


app = create_app()
