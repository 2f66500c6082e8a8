"""Repository classes encapsulating database operations.

Repositories are the storage layer: they issue parametrized queries,
map rows to small record models and report two conditions distinctly,
`NotFoundError` and `AlreadyExistsError`. Any other database error
propagates unchanged.

Multi-step writes run inside `_transaction`, which commits only when
every step succeeds and rolls back on any exception.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from pydantic import BaseModel
from sqlalchemy import and_, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from . import models

logger = logging.getLogger("student_api.repositories")


class NotFoundError(Exception):
    """No row matched the query."""

    def __init__(self, message: str = "storage: resource not found"):
        super().__init__(message)


class AlreadyExistsError(Exception):
    """A unique constraint rejected the insert."""

    def __init__(self, message: str = "storage: resource already exists"):
        super().__init__(message)


class StudentSubjectRecord(BaseModel):
    id: int
    correlative_id: int = 0
    name: str
    type: str
    status: str
    description: Optional[str] = None


class SubjectDetailsRecord(BaseModel):
    id: int
    hours: int
    points: int
    name: str
    type: str
    uri: Optional[str] = None
    meet: Optional[str] = None


class ProfessorshipScheduleRecord(BaseModel):
    name: str
    day: int
    start: str
    end: str


@contextmanager
def _transaction(session: Session) -> Iterator[Session]:
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


class StudentRepository:
    """Students, their careers and the status of their subjects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, name: str, email: str) -> models.Student:
        """Insert a student; raise `AlreadyExistsError` if the email is taken."""
        student = models.Student(name=name, email=email)
        self.session.add(student)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info("duplicate student email=%s", email)
            raise AlreadyExistsError() from e
        self.session.refresh(student)
        return student

    def get_career_ids(self, email: str) -> List[int]:
        """Return the ids of the careers `email` is enrolled in.

        An empty enrollment list is reported as `NotFoundError`; at this
        level it cannot be told apart from an unknown student.
        """
        stmt = (
            select(models.StudentCareer.career_id)
            .join(models.Student, models.StudentCareer.student_id == models.Student.id)
            .where(models.Student.email == email)
        )
        ids = self.session.exec(stmt).all()
        if not ids:
            raise NotFoundError()
        return [int(i) for i in ids]

    def assign_to_career(self, email: str, career_id: str) -> None:
        """Enroll the student in `career_id` in a single transaction."""
        with _transaction(self.session):
            student_id = self._get_student_id(email)

            count_stmt = select(func.count()).select_from(models.Career).where(models.Career.id == int(career_id))
            if self.session.exec(count_stmt).one() == 0:
                raise NotFoundError("could not find career: storage: resource not found")

            self.session.add(models.StudentCareer(student_id=student_id, career_id=int(career_id)))
            self.session.flush()

    def update_subject(
        self,
        email: str,
        career_id: str,
        subject_id: str,
        status: str,
        description: Optional[str],
    ) -> models.StudentCareerSubject:
        """Upsert the student's status row for a career subject.

        Runs as one transaction: resolve the student, check the student is
        enrolled in the career, resolve the career subject, then insert or
        update the status row.
        """
        with _transaction(self.session):
            student_id = self._get_student_id(email)

            enrolled = self.session.exec(
                select(models.StudentCareer.id).where(
                    models.StudentCareer.student_id == student_id,
                    models.StudentCareer.career_id == int(career_id),
                )
            ).first()
            if enrolled is None:
                raise NotFoundError("could not find student career: storage: resource not found")

            career_subject_id = self.session.exec(
                select(models.CareerSubject.id).where(
                    models.CareerSubject.career_id == int(career_id),
                    models.CareerSubject.subject_id == int(subject_id),
                )
            ).first()
            if career_subject_id is None:
                raise NotFoundError("could not find career subject: storage: resource not found")

            existing = self.session.exec(
                select(models.StudentCareerSubject).where(
                    models.StudentCareerSubject.student_id == student_id,
                    models.StudentCareerSubject.career_subject_id == career_subject_id,
                )
            ).first()
            if existing:
                existing.status = status
                existing.description = description
                row = existing
            else:
                row = models.StudentCareerSubject(
                    student_id=student_id,
                    career_subject_id=career_subject_id,
                    status=status,
                    description=description,
                )
            self.session.add(row)
            self.session.flush()
        return row

    def _get_student_id(self, email: str) -> int:
        student_id = self.session.exec(select(models.Student.id).where(models.Student.email == email)).first()
        if student_id is None:
            raise NotFoundError("could not find student: storage: resource not found")
        return student_id


class SubjectRepository:
    """Read-only queries over the career catalog."""
    def __init__(self, session: Session):
        self.session = session

    def get_student_subjects(self, email: str, career_id: str, include_ungraded: bool = True) -> List[StudentSubjectRecord]:
        """Return every subject of the career with the student's status.

        With `include_ungraded` the status row is outer joined and missing
        statuses default to `PENDIENTE`; without it only subjects the
        student already has a status row for are returned.
        """
        cs = models.CareerSubject
        scs = models.StudentCareerSubject
        stmt = (
            select(
                cs.subject_id.label("id"),
                models.Subject.name.label("name"),
                cs.correlative_id.label("correlative_id"),
                cs.type.label("type"),
                func.coalesce(scs.status, models.PENDING).label("status"),
                scs.description.label("description"),
            )
            .select_from(models.Student)
            .join(cs, cs.career_id == int(career_id))
            .join(models.Subject, models.Subject.id == cs.subject_id)
        )
        on_status = and_(scs.student_id == models.Student.id, scs.career_subject_id == cs.id)
        stmt = stmt.outerjoin(scs, on_status) if include_ungraded else stmt.join(scs, on_status)
        stmt = stmt.where(models.Student.email == email).order_by(cs.subject_id)

        rows = self.session.exec(stmt).all()
        if not rows:
            raise NotFoundError()
        return [
            StudentSubjectRecord(
                id=r.id,
                correlative_id=r.correlative_id or 0,
                name=r.name,
                type=r.type,
                status=r.status,
                description=r.description or None,
            )
            for r in rows
        ]

    def get_subject_details(self, subject_id: str, career_id: str) -> SubjectDetailsRecord:
        """Return a subject as offered by a career."""
        cs = models.CareerSubject
        stmt = (
            select(
                models.Subject.id,
                models.Subject.name,
                models.Subject.uri,
                models.Subject.meet,
                cs.type,
                cs.hours,
                cs.points,
            )
            .select_from(cs)
            .join(models.Subject, cs.subject_id == models.Subject.id)
            .where(models.Subject.id == int(subject_id), cs.career_id == int(career_id))
            .limit(1)
        )
        row = self.session.exec(stmt).first()
        if row is None:
            raise NotFoundError()
        return SubjectDetailsRecord(
            id=row.id,
            hours=row.hours,
            points=row.points,
            name=row.name,
            type=row.type,
            uri=row.uri,
            meet=row.meet,
        )

    def get_professorships(self, subject_id: str, career_id: str) -> List[ProfessorshipScheduleRecord]:
        """Return one row per professorship meeting, ordered by day."""
        cs = models.CareerSubject
        stmt = (
            select(
                models.Professorship.name,
                models.Schedule.day,
                models.Schedule.start,
                models.Schedule.end,
            )
            .join(models.Schedule, models.Schedule.professorship_id == models.Professorship.id)
            .join(cs, models.Professorship.career_subject_id == cs.id)
            .where(cs.subject_id == int(subject_id), cs.career_id == int(career_id))
            .order_by(models.Schedule.day)
        )
        rows = self.session.exec(stmt).all()
        if not rows:
            raise NotFoundError()
        return [ProfessorshipScheduleRecord(name=r.name, day=r.day, start=r.start, end=r.end) for r in rows]
