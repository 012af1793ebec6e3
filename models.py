from sqlalchemy.orm import relationship
from sqlalchemy import Column, Integer, String, ForeignKey, JSON, Table
from database import Base


# Plain join table: membership only, no ordering or timestamps.
saved_jobs = Table(
    "saved_jobs",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("job_id", Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    saved_jobs = relationship(
        "Job",
        secondary=saved_jobs,
        back_populates="saved_by_users",
        order_by="Job.id",
    )


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    company = Column(String, nullable=False)
    logo = Column(String, nullable=False)
    position = Column(String, nullable=False)
    role = Column(String, nullable=False)
    level = Column(String, nullable=False)
    posted_at = Column(String, nullable=False)
    contract = Column(String, nullable=False)
    location = Column(String, nullable=False)
    languages = Column(JSON, nullable=False, default=list)
    tools = Column(JSON, nullable=False, default=list)

    saved_by_users = relationship(
        "User",
        secondary=saved_jobs,
        back_populates="saved_jobs",
    )
