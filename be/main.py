"""
Main FastAPI Application Entry Point

Back-office API for project planning: projects, phases, sub-phases and tasks,
timeline recalculation, status cascades, revenues, monthly charges and the
planning export (JSON and PDF).

Key Features:
- CORS middleware for the admin console and the client portal
- Database readiness check and table creation on startup
- One error envelope for every failure: {"detail": "<message>"}

Environment Variables:
- HOST, PORT: bind address for `python main.py` (default 127.0.0.1:8003)
- CORS_ORIGINS: comma separated list of allowed origins
- SECRET_KEY, ALGORITHM: access token verification (see APIs.Core)
- Database settings: see Database.session
"""

import logging
import os
from contextlib import asynccontextmanager

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    handlers=[
        logging.StreamHandler(),  # Console output
    ]
)

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from APIs import Core
from APIs.Planning.MonthlyChargeRoute import monthlyChargeRoute
from APIs.Planning.PhaseRoute import phaseRoute
from APIs.Planning.ProjectRoute import projectRoute
from APIs.Planning.ProjectTypeRoute import projectTypeRoute
from APIs.Planning.RevenueRoute import revenueRoute
from APIs.Planning.TaskRoute import taskRoute
from Planning.errors import PlanningError

# Import models so SQLAlchemy registers every table
from Models.Admin.AuditLog import AuditLog
from Models.Admin.Client import Client
from Models.Admin.User import User
from Models.Planning.ProjectType import ProjectCategory, ProjectType
from Models.Planning.Project import Project

# Database configuration
from Database.session import engine, Base, wait_for_database

load_dotenv()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    wait_for_database(engine)
    # Create all database tables on startup
    Base.metadata.create_all(bind=engine)
    if not Core.SECRET_KEY:
        logger.error("SECRET_KEY is not set; every access token will be rejected")
    logger.info("Planning API ready")
    yield


# Initialize FastAPI application
app = FastAPI(
    title="Project Planning API",
    description="Projects, phases, tasks, timeline and planning export for the back-office and client portal",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlanningError)
async def planning_error_handler(request: Request, exc: PlanningError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected payload on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "invalid input"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "unexpected error"})


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}


# Register API routers
app.include_router(projectRoute)        # Projects, status, recalculation and export
app.include_router(phaseRoute)          # Project phases
app.include_router(taskRoute)           # Tasks, sub-phases and task comments
app.include_router(revenueRoute)        # Project revenues
app.include_router(monthlyChargeRoute)  # Monthly maintenance charges
app.include_router(projectTypeRoute)    # Project categories and types

# Application entry point
if __name__ == "__main__":
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8003")))
