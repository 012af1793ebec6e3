from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# --- User ---
class Credentials(BaseModel):
    # Presence is checked by the handlers so a missing field is a 400, not a 422
    email: Optional[str] = None
    password: Optional[str] = None


class UserCreate(Credentials):
    pass


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    password_hash: str


class LoginResponse(BaseModel):
    message: str
    token: str


# --- Job ---
class JobBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    company: Optional[str] = None
    logo: Optional[str] = None
    position: Optional[str] = None
    role: Optional[str] = None
    level: Optional[str] = None
    posted_at: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("postedAt", "posted_at"),
        serialization_alias="postedAt",
    )
    contract: Optional[str] = None
    location: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)


class JobCreate(JobBase):
    pass


class Job(JobBase):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int


class SavedJobs(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    saved_jobs: List[Job] = Field(
        default_factory=list,
        validation_alias=AliasChoices("savedJobs", "saved_jobs"),
        serialization_alias="savedJobs",
    )
