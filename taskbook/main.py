import logging

from .config import CORS_ORIGINS, LOG_LEVEL

# Log configuration (before other imports)
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from .database import create_tables  # noqa: E402
from .errors import TaskbookError, ValidationError  # noqa: E402
from .routers import auth, tasks  # noqa: E402

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Taskbook API",
    description="Multi-user task management API",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TaskbookError)
async def taskbook_error_handler(request: Request, exc: TaskbookError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _field_name(loc) -> str:
    # loc is ("query", "month") or ("body", "title"); a bare ("body",) means the whole payload
    parts = [str(part) for part in loc[1:]]
    return ".".join(parts) if parts else str(loc[0])


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    fields = sorted({_field_name(err["loc"]) for err in exc.errors()})
    error = ValidationError(f"Invalid request field(s): {', '.join(fields)}")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(tasks.router, prefix="/api", tags=["tasks"])

# Create tables on startup
@app.on_event("startup")
def on_startup():
    create_tables()

@app.get("/")
def read_root():
    return {"message": "Taskbook API"}

@app.get("/health")
def health_check():
    return {"status": "healthy"}
