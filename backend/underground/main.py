from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from underground.core.config import get_settings
from underground.core.database import init_models
from underground.core.errors import UndergroundError
from underground.routers import admin, auth, events, invites, users
from underground.utils.logger import get_logger

logger = get_logger("api")

settings = get_settings()

app = FastAPI(
    title="SH Underground API",
    description="Community map and calendar with invite-only registration",
    version="0.1.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "InternalError", "message": "An unexpected error occurred"},
        )
    logger.debug(f"{request.method} {request.url.path} -> {response.status_code}")
    return response

@app.exception_handler(UndergroundError)
async def underground_error_handler(request: Request, exc: UndergroundError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    details = "; ".join(
        f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "InvalidInput", "message": details or "Invalid request data"},
    )

@app.on_event("startup")
async def startup():
    await init_models()

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(invites.router)
app.include_router(events.router)
app.include_router(admin.router)

@app.get("/")
async def root():
    return {"message": "Welcome to SH Underground API"}

@app.get("/health")
async def health_check():
    return {"status": "ok"}
