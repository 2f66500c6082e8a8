"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Table names are pinned so the SQL seed files in `migrations/` can
target them directly.
"""

from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

PENDING = "PENDIENTE"
APPROVED = "APROBADA"


class Student(SQLModel, table=True):
    """A student, identified by a unique email."""
    __tablename__ = "student"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, nullable=False, unique=True)


class Career(SQLModel, table=True):
    """A degree program."""
    __tablename__ = "career"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str


class Subject(SQLModel, table=True):
    """A subject, independent of the careers that offer it.

    `uri` points at the course page and `meet` at its video-call room;
    both are optional.
    """
    __tablename__ = "subject"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    uri: Optional[str] = None
    meet: Optional[str] = None


class CareerSubject(SQLModel, table=True):
    """A subject as offered within a career.

    Fields:
    - `type`: `OBLIGATORIA` or `ELECTIVA`
    - `hours`, `points`: workload and credit inside this career
    - `correlative_id`: optional prerequisite subject id
    """
    __tablename__ = "career_subject"
    __table_args__ = (UniqueConstraint("career_id", "subject_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    career_id: int = Field(foreign_key="career.id", index=True)
    subject_id: int = Field(foreign_key="subject.id", index=True)
    type: str
    hours: int = 0
    points: int = 0
    correlative_id: Optional[int] = Field(default=None, foreign_key="subject.id")


class StudentCareer(SQLModel, table=True):
    """Enrollment of a student in a career."""
    __tablename__ = "student_career"
    __table_args__ = (UniqueConstraint("student_id", "career_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="student.id", index=True)
    career_id: int = Field(foreign_key="career.id")


class StudentCareerSubject(SQLModel, table=True):
    """Approval status of a career subject for one student."""
    __tablename__ = "student_career_subject"
    __table_args__ = (UniqueConstraint("student_id", "career_subject_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="student.id", index=True)
    career_subject_id: int = Field(foreign_key="career_subject.id")
    status: str = PENDING
    description: Optional[str] = Field(default=None, max_length=128)


class Professorship(SQLModel, table=True):
    """A course section of a career subject."""
    __tablename__ = "professorship"

    id: Optional[int] = Field(default=None, primary_key=True)
    career_subject_id: int = Field(foreign_key="career_subject.id", index=True)
    name: str


class Schedule(SQLModel, table=True):
    """One weekly meeting of a professorship.

    `day` is 1 (Monday) to 7 (Sunday); `start` and `end` are stored as
    `HH:MM:SS` strings.
    """
    __tablename__ = "schedule"

    id: Optional[int] = Field(default=None, primary_key=True)
    professorship_id: int = Field(foreign_key="professorship.id", index=True)
    day: int
    start: str
    end: str
