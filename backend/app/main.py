from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from app.config import get_settings
from app.database import engine, Base
from app.logging_config import setup_logging, get_logger
from app.routers import dashboard, handovers, patients, seed, users
from app.routers import auth as auth_router
from app import models  # noqa: F401  registers tables on Base.metadata

setup_logging()
logger = get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("handover_api_started", environment=settings.environment)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Nurse Handover API",
    description="Staff auth, patient records and ISBAR handover reports from recorded audio",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Patient data must not be kept in browser or proxy caches."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
        response.headers["Expires"] = "0"
        response.headers["Pragma"] = "no-cache"
        return response


app.add_middleware(NoCacheMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_error", path=request.url.path, method=request.method, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(auth_router.password_router, prefix="/api", tags=["Auth"])
app.include_router(users.router, prefix="/api/user", tags=["User"])
app.include_router(patients.router, prefix="/api/patients", tags=["Patients"])
app.include_router(handovers.router, prefix="/api/handovers", tags=["Handovers"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(seed.router, prefix="/api", tags=["Development"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "nurse-handover-api"}
