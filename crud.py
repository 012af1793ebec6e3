from sqlalchemy.orm import Session

import models
import schemas
from errors import RecordNotFound


# --- User CRUD ---
def list_users(db: Session):
    return db.query(models.User).order_by(models.User.id).all()


def get_user_by_id(db: Session, user_id: int):
    """Get a user by their primary key ID."""
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email).first()


def _require_user(db: Session, user_id: int) -> models.User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise RecordNotFound("User", user_id)
    return user


def _require_job(db: Session, job_id: int) -> models.Job:
    job = db.query(models.Job).filter(models.Job.id == job_id).first()
    if job is None:
        raise RecordNotFound("Job", job_id)
    return job


def create_user(db: Session, email: str, password_hash: str):
    db_user = models.User(email=email, password_hash=password_hash)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def delete_user(db: Session, user_id: int):
    """Delete a user; their saved_jobs rows go with them, the jobs stay."""
    db_user = _require_user(db, user_id)
    deleted = schemas.User.model_validate(db_user)
    db.delete(db_user)
    db.commit()
    return deleted


# --- Saved jobs ---
def list_saved_jobs(db: Session, user_id: int):
    return _require_user(db, user_id).saved_jobs


def save_job(db: Session, user_id: int, job_id: int):
    """Connect a job to the user's saved set. Saving twice is a no-op."""
    db_user = _require_user(db, user_id)
    db_job = _require_job(db, job_id)
    if db_job not in db_user.saved_jobs:
        db_user.saved_jobs.append(db_job)
        db.commit()
        db.refresh(db_user)
    return db_user


def unsave_job(db: Session, user_id: int, job_id: int):
    """Disconnect a job from the user's saved set if it is there."""
    db_user = _require_user(db, user_id)
    db_job = _require_job(db, job_id)
    if db_job in db_user.saved_jobs:
        db_user.saved_jobs.remove(db_job)
        db.commit()
        db.refresh(db_user)
    return db_user


# --- Job CRUD ---
def list_jobs(db: Session):
    return db.query(models.Job).order_by(models.Job.id).all()


def create_job(db: Session, job: schemas.JobCreate):
    db_job = models.Job(
        company=job.company,
        logo=job.logo,
        position=job.position,
        role=job.role,
        level=job.level,
        posted_at=job.posted_at,
        contract=job.contract,
        location=job.location,
        languages=list(job.languages),
        tools=list(job.tools),
    )
    db.add(db_job)
    db.commit()
    db.refresh(db_job)
    return db_job


def delete_job(db: Session, job_id: int):
    """Delete a job; it disappears from every user's saved set."""
    db_job = _require_job(db, job_id)
    deleted = schemas.Job.model_validate(db_job)
    db.delete(db_job)
    db.commit()
    return deleted
