import re
from typing import Any, Iterable, List

import structlog
from sqlalchemy.orm import Session

import crud
import schemas
from auth import Identity, issue_token
from errors import ValidationError
from passwords import hash_password, verify_password
from settings import Settings

# Set up logging
logger = structlog.get_logger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?)0*(\d+)")

# Ids are stored as signed 64-bit integers
MAX_ID = 2**63 - 1

LOGIN_MISMATCH = "Email and password do not match."

REQUIRED_JOB_FIELDS = (
    "company",
    "logo",
    "position",
    "role",
    "level",
    "posted_at",
    "contract",
    "location",
)


# ---------------------------------------------------------------------------
# Input checks
# ---------------------------------------------------------------------------
def parse_id(value: Any, message: str = "ID parameter is NaN.") -> int:
    """Parse an id from a path segment or token claim.

    Only the leading integer prefix counts (``"12abc"`` is 12). No prefix and
    zero are both rejected, as is anything outside the signed 64-bit range;
    negatives pass and later come back as not found.
    """
    if isinstance(value, bool):
        raise ValidationError(message)
    if isinstance(value, int):
        parsed = value
    else:
        match = _LEADING_INT.match(str(value)) if value is not None else None
        if match is None:
            raise ValidationError(message)
        sign, digits = match.groups()
        # Anything past 19 digits cannot be a stored id; checked before int() so
        # huge segments never reach the int/str conversion limit
        if len(digits) > len(str(MAX_ID)):
            raise ValidationError(message)
        parsed = -int(digits) if sign == "-" else int(digits)

    if not parsed or abs(parsed) > MAX_ID:
        raise ValidationError(message)
    return parsed


def _missing(payload: Any, fields: Iterable[str]) -> List[str]:
    # Absent, null and empty strings all count as missing
    return [name for name in fields if not getattr(payload, name, None)]


def identity_user_id(identity: Identity) -> int:
    return parse_id(identity.user_id, "Token user ID is NaN.")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
def register_user(db: Session, payload: schemas.UserCreate, settings: Settings):
    if _missing(payload, ("email", "password")):
        raise ValidationError("Email and password are required.")

    if crud.get_user_by_email(db, payload.email):
        logger.info("Registration rejected, email in use")
        raise ValidationError("Email is already registered.")

    password_hash = hash_password(payload.password, rounds=settings.password_hash_rounds)
    user = crud.create_user(db, email=payload.email, password_hash=password_hash)
    logger.info("User registered", user_id=user.id)
    return user


def login(db: Session, credentials: schemas.Credentials, settings: Settings) -> schemas.LoginResponse:
    if _missing(credentials, ("email", "password")):
        raise ValidationError("Email and password are required.")

    user = crud.get_user_by_email(db, credentials.email)
    # Same answer for unknown email and wrong password
    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.info("Login failed")
        raise ValidationError(LOGIN_MISMATCH)

    token = issue_token(user.id, settings.jwt_secret, settings.token_expires_seconds)
    logger.info("Login successful", user_id=user.id)
    return schemas.LoginResponse(message="Login successful.", token=token)


# ---------------------------------------------------------------------------
# Saved jobs
# ---------------------------------------------------------------------------
def get_saved_jobs(db: Session, identity: Identity) -> schemas.SavedJobs:
    user_id = identity_user_id(identity)
    jobs = crud.list_saved_jobs(db, user_id)
    return schemas.SavedJobs(saved_jobs=[schemas.Job.model_validate(job) for job in jobs])


def save_job(db: Session, identity: Identity, raw_job_id: str):
    user_id = identity_user_id(identity)
    job_id = parse_id(raw_job_id, "Job ID parameter is NaN.")
    user = crud.save_job(db, user_id, job_id)
    logger.info("Job saved", user_id=user_id, job_id=job_id)
    return user


def unsave_job(db: Session, identity: Identity, raw_job_id: str):
    user_id = identity_user_id(identity)
    job_id = parse_id(raw_job_id, "Job ID parameter is NaN.")
    user = crud.unsave_job(db, user_id, job_id)
    logger.info("Job unsaved", user_id=user_id, job_id=job_id)
    return user


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------
def create_job(db: Session, payload: schemas.JobCreate):
    missing = _missing(payload, REQUIRED_JOB_FIELDS)
    if missing:
        # Report wire names, e.g. postedAt
        names = [schemas.JobCreate.model_fields[name].serialization_alias or name for name in missing]
        raise ValidationError(f"Missing required fields: {', '.join(names)}.")

    job = crud.create_job(db, payload)
    logger.info("Job created", job_id=job.id)
    return job
