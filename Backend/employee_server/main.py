# main.py
import os
import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from employee_server.database import get_db, ping, check_connection, init_db
from employee_server.errors import EmployeeServerError
from employee_server.routers import employees_router, users_router
from employee_server.schemas.common import ErrorResponse, HealthResponse
from employee_server.uploads import UPLOAD_DIR
from employee_server.utils import error_resp

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PUBLIC_DIR = os.getenv("PUBLIC_DIR", os.path.join(BASE_DIR, "public"))
EMPLOYEE_HOST = os.getenv("EMPLOYEE_HOST", "0.0.0.0")
EMPLOYEE_PORT = int(os.getenv("EMPLOYEE_PORT", 3055))

DEFAULT_CORS_ORIGINS = [
    "http://13.49.68.57:8221",  # login server
    "http://13.49.68.57:3055",  # employee server
    "http://13.49.68.57:5500",  # live server
    "http://127.0.0.1:5500",
    "http://13.49.68.57:5501",
]
_raw_origins = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = (
    [o.strip().rstrip("/") for o in _raw_origins.split(",") if o.strip()]
    if _raw_origins
    else DEFAULT_CORS_ORIGINS
)

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # both calls exit the process on failure
    check_connection()
    init_db()
    logger.info("Employee server ready on port %s", EMPLOYEE_PORT)
    yield


app = FastAPI(
    title="Employee Server",
    version="1.0.0",
    description="Employee management API",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers: {"error": ...} bodies, "details" for server-side failures
@app.exception_handler(EmployeeServerError)
async def employee_server_error_handler(request: Request, exc: EmployeeServerError):
    return error_resp(exc.message, status_code=exc.status_code, details=exc.details)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    return error_resp("Server error", status_code=500, details=str(exc))


@app.get("/api/health", response_model=HealthResponse, responses={500: {"model": ErrorResponse}})
def health_check(db: Session = Depends(get_db)):
    try:
        ping(db)
    except Exception as e:
        logger.error("Health check error: %s", e, exc_info=True)
        return error_resp("Database connection failed", status_code=500, details=str(e))
    return {"status": "Database connection OK"}


@app.get("/employees", include_in_schema=False)
def employees_page():
    """Serve the employee management page"""
    return FileResponse(os.path.join(PUBLIC_DIR, "employees.html"))


# Include routers
app.include_router(users_router.router)
app.include_router(employees_router.router)

# Serve uploaded images statically so frontend can fetch them
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")
# Public assets last: the root mount would otherwise shadow the API
app.mount("/", StaticFiles(directory=PUBLIC_DIR, html=True), name="public")


def run():
    uvicorn.run("employee_server.main:app", host=EMPLOYEE_HOST, port=EMPLOYEE_PORT)


if __name__ == "__main__":
    run()
