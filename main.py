from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

import schemas
import crud
import logic
from auth import Identity, get_current_identity
from database import create_db_and_tables, get_db
from errors import ApiError, StoreError, serialize_store_error
from settings import get_settings, Settings
from request_id_middleware import RequestIdMiddleware
from observability import init_observability


# Initialise observability before creating app
init_observability()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("Database tables initialized")
    yield


app = FastAPI(
    title="Job Board",
    description="Users, job postings and saved jobs",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestIdMiddleware)


# --- Error mapping --- #
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if isinstance(exc, StoreError):
        logger.error("Store error", error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error", exc_info=exc)
    return JSONResponse(status_code=500, content=serialize_store_error(exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", exc_info=exc)
    return JSONResponse(status_code=500, content=serialize_store_error(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected request body", errors=exc.errors())
    return JSONResponse(status_code=400, content={"message": "Invalid request body."})


# --- User Endpoints ---
@app.get("/api/user", response_model=List[schemas.User], tags=["Users"])
def list_users_endpoint(db: Session = Depends(get_db)):
    return crud.list_users(db)


@app.post("/api/user", response_model=schemas.User, tags=["Users"])
def create_user_endpoint(
    user: schemas.UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return logic.register_user(db, user, settings)


@app.post("/api/user/login", response_model=schemas.LoginResponse, tags=["Auth"])
def login_endpoint(
    credentials: schemas.Credentials,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return logic.login(db, credentials, settings)


@app.get("/api/user/saved-jobs", response_model=schemas.SavedJobs, tags=["Saved Jobs"])
def get_saved_jobs_endpoint(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return logic.get_saved_jobs(db, identity)


@app.put("/api/user/save-job/{job_id}", response_model=schemas.User, tags=["Saved Jobs"])
def save_job_endpoint(
    job_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return logic.save_job(db, identity, job_id)


@app.put("/api/user/unsave-job/{job_id}", response_model=schemas.User, tags=["Saved Jobs"])
def unsave_job_endpoint(
    job_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return logic.unsave_job(db, identity, job_id)


@app.delete("/api/user/{user_id}", response_model=schemas.User, tags=["Users"])
def delete_user_endpoint(user_id: str, db: Session = Depends(get_db)):
    return crud.delete_user(db, logic.parse_id(user_id))


# --- Job Endpoints ---
@app.get("/api/job", response_model=List[schemas.Job], tags=["Jobs"])
def list_jobs_endpoint(db: Session = Depends(get_db)):
    return crud.list_jobs(db)


@app.post("/api/job", response_model=schemas.Job, tags=["Jobs"])
def create_job_endpoint(job: schemas.JobCreate, db: Session = Depends(get_db)):
    return logic.create_job(db, job)


@app.delete("/api/job/{job_id}", response_model=schemas.Job, tags=["Jobs"])
def delete_job_endpoint(job_id: str, db: Session = Depends(get_db)):
    return crud.delete_job(db, logic.parse_id(job_id))


# --- Authenticated test route ---
@app.get("/protected", response_class=PlainTextResponse, tags=["Auth"])
def protected(identity: Identity = Depends(get_current_identity)):
    """Echo the id carried by a valid bearer token."""
    return f"User {identity.user_id} authenticated"


# --- Main execution --- (for running with uvicorn)
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
