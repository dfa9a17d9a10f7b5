import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from budgetflow.config import get_settings
from budgetflow.domain.errors import (
    ConcurrentModificationError,
    ExternalStoreError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _seed_admin_user() -> None:
    """Create the bootstrap admin user if it does not exist yet."""
    from budgetflow.database import SessionLocal
    from budgetflow.models.user_profile import UserProfile
    from budgetflow.utils.constants import Role
    from budgetflow.utils.security import hash_password

    db = SessionLocal()
    try:
        count = db.query(UserProfile).count()
        logger.info("[SEED] Users in DB: %d", count)
        admin = db.query(UserProfile).filter(UserProfile.username == settings.ADMIN_USERNAME).first()
        if admin is None:
            db.add(
                UserProfile(
                    username=settings.ADMIN_USERNAME,
                    email=settings.ADMIN_EMAIL,
                    password_hash=hash_password(settings.ADMIN_PASSWORD),
                    full_name="BudgetFlow Administrator",
                    role=Role.ADMIN.value,
                    is_active=True,
                )
            )
            db.commit()
            logger.info("[SEED] Admin created: %s", settings.ADMIN_USERNAME)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[SEED] Could not seed admin user: %s", exc)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure the schema exists, then the admin account
    import budgetflow.models  # noqa: F401
    from budgetflow.database import Base, engine

    Base.metadata.create_all(bind=engine)
    _seed_admin_user()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Domain error -> HTTP status
# ---------------------------------------------------------------------------


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation failed.",
            "violations": [v.as_dict() for v in exc.violations],
        },
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "status": exc.status, "event": exc.event},
    )


@app.exception_handler(ConcurrentModificationError)
async def concurrent_modification_handler(
    request: Request, exc: ConcurrentModificationError
) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(ExternalStoreError)
async def external_store_handler(request: Request, exc: ExternalStoreError) -> JSONResponse:
    logger.error("%s %s failed in the store: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "The data store is unavailable. Try again later."},
    )


@app.get(f"{settings.API_PREFIX}/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from budgetflow.routers import auth  # noqa: E402

app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"])

# Budget records and lifecycle
from budgetflow.routers import budgets  # noqa: E402

app.include_router(
    budgets.router,
    prefix=f"{settings.API_PREFIX}/budgets",
    tags=["Budgets"],
)

# Departments / cost centers
from budgetflow.routers import departments  # noqa: E402

app.include_router(
    departments.router,
    prefix=f"{settings.API_PREFIX}/departments",
    tags=["Departments"],
)

# User administration
from budgetflow.routers import users  # noqa: E402

app.include_router(
    users.router,
    prefix=f"{settings.API_PREFIX}/users",
    tags=["Users"],
)

# Reports & analytics
from budgetflow.routers import reports  # noqa: E402

app.include_router(
    reports.router,
    prefix=f"{settings.API_PREFIX}/reports",
    tags=["Reports"],
)

# Export (CSV + Excel + PDF)
from budgetflow.routers import export  # noqa: E402

app.include_router(
    export.router,
    prefix=f"{settings.API_PREFIX}/export",
    tags=["Export"],
)

# Application preferences
from budgetflow.routers import settings as settings_router  # noqa: E402

app.include_router(
    settings_router.router,
    prefix=f"{settings.API_PREFIX}/settings",
    tags=["Settings"],
)
