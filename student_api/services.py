"""Business logic services used by HTTP controllers.

Services receive primitive identifiers from the handlers, call the
repositories and reshape their records into response payloads. Storage
signals are translated into a `ServiceError` whose `kind` tells the
handler which HTTP status to answer with. Any other failure is re-raised
as a `RuntimeError` carrying the same context text, which the handler
answers with 500.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel
from sqlmodel import Session

from . import repositories
from .config import settings
from .utils.schedule import day_name, trim_seconds

logger = logging.getLogger("student_api.services")

MAX_CAREERS_PER_STUDENT = 2


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    STUDENT_ALREADY_EXISTS = "student_already_exists"
    CAREER_ALREADY_ASSIGNED = "career_already_assigned"
    MAX_CAREERS_REACHED = "max_careers_reached"


class ServiceError(Exception):
    """A known business failure, tagged with its `kind`."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class UpdateStudentSubjectRequest(BaseModel):
    student_email: str
    career_id: str
    subject_id: str
    status: str
    description: Optional[str] = None


class StudentService:
    """Student enrollment and subject status operations."""
    def __init__(self, session: Session, include_ungraded: Optional[bool] = None):
        self.session = session
        self.student_repo = repositories.StudentRepository(session)
        self.subject_repo = repositories.SubjectRepository(session)
        if include_ungraded is None:
            include_ungraded = settings.INCLUDE_UNGRADED_SUBJECTS
        self.include_ungraded = include_ungraded

    def create_student(self, name: str, email: str) -> None:
        try:
            self.student_repo.create(name, email)
        except repositories.AlreadyExistsError:
            raise ServiceError(
                ErrorKind.STUDENT_ALREADY_EXISTS,
                f"could not create student [email: {email}]: student already exists",
            )
        except Exception as e:
            raise RuntimeError(f"could not create student [email: {email}]: {e}") from e

    def assign_student_to_career(self, email: str, career_id: str) -> None:
        """Enroll a student in a career.

        A student holds at most `MAX_CAREERS_PER_STUDENT` careers and cannot
        be enrolled twice in the same one. A student with no careers yet is
        reported by storage as not found, which here just means zero.
        """
        try:
            career_ids = self.student_repo.get_career_ids(email)
        except repositories.NotFoundError:
            career_ids = []
        except Exception as e:
            raise RuntimeError(f"could not get careers from student [email: {email}]: {e}") from e

        if int(career_id) in career_ids:
            raise ServiceError(
                ErrorKind.CAREER_ALREADY_ASSIGNED,
                f"student [email: {email}] is already assigned to career [career_id: {career_id}]",
            )
        if len(career_ids) >= MAX_CAREERS_PER_STUDENT:
            raise ServiceError(
                ErrorKind.MAX_CAREERS_REACHED,
                f"student [email: {email}] reached the maximum of {MAX_CAREERS_PER_STUDENT} careers",
            )

        try:
            self.student_repo.assign_to_career(email, career_id)
        except repositories.NotFoundError as e:
            raise ServiceError(
                ErrorKind.NOT_FOUND,
                f"could not assign student [email: {email}] to career [career_id: {career_id}]: {e}",
            )
        except Exception as e:
            raise RuntimeError(f"could not assign student [email: {email}] to career [career_id: {career_id}]: {e}") from e
        logger.info("student assigned email=%s career_id=%s", email, career_id)

    def get_student_subjects(self, email: str, career_id: str) -> dict:
        """Return the student's subjects and their prerequisites.

        Both maps are keyed by the subject id as a string. Every subject has
        an entry in `correlatives`, empty when it has no prerequisite.
        """
        try:
            records = self.subject_repo.get_student_subjects(email, career_id, include_ungraded=self.include_ungraded)
        except repositories.NotFoundError:
            raise ServiceError(
                ErrorKind.NOT_FOUND,
                f"could not get student subjects from [email: {email} and career_id: {career_id}]: resource not found",
            )
        except Exception as e:
            raise RuntimeError(f"could not get student subjects from [email: {email} and career_id: {career_id}]: {e}") from e

        correlatives: Dict[str, List[int]] = {}
        subjects: Dict[str, dict] = {}
        for r in records:
            key = str(r.id)
            correlatives.setdefault(key, [])
            if r.correlative_id:
                correlatives[key].append(r.correlative_id)
            subjects[key] = {
                "id": r.id,
                "name": r.name,
                "type": r.type,
                "status": r.status,
                "description": r.description,
            }
        return {"correlatives": correlatives, "subjects": subjects}

    def update_student_subject(self, req: UpdateStudentSubjectRequest) -> None:
        try:
            self.student_repo.update_subject(
                req.student_email,
                req.career_id,
                req.subject_id,
                req.status,
                req.description or None,
            )
        except repositories.NotFoundError as e:
            raise ServiceError(
                ErrorKind.NOT_FOUND,
                f"could not update subject [subject_id: {req.subject_id}] of student [email: {req.student_email}]: {e}",
            )
        except Exception as e:
            raise RuntimeError(
                f"could not update subject [subject_id: {req.subject_id}] of student [email: {req.student_email}]: {e}"
            ) from e


class SubjectService:
    """Subject catalog lookups."""
    def __init__(self, session: Session):
        self.session = session
        self.subject_repo = repositories.SubjectRepository(session)

    def get_subject_details(self, subject_id: str, career_id: str) -> dict:
        try:
            d = self.subject_repo.get_subject_details(subject_id, career_id)
        except repositories.NotFoundError:
            raise ServiceError(
                ErrorKind.NOT_FOUND,
                f"could not get subject details from [subject_id: {subject_id} and career_id: {career_id}]: resource not found",
            )
        except Exception as e:
            raise RuntimeError(f"could not get subject details from [subject_id: {subject_id} and career_id: {career_id}]: {e}") from e
        return {
            "id": d.id,
            "hours": d.hours,
            "points": d.points,
            "name": d.name,
            "type": d.type,
            "uri": d.uri,
            "meet": d.meet,
        }

    def get_professorships(self, subject_id: str, career_id: str) -> Dict[str, List[dict]]:
        """Group schedule rows by professorship name.

        Each professorship maps to its meetings sorted Monday to Sunday,
        with times shown as `HH:MM`. A row with an unknown day number or a
        malformed time fails the whole lookup with `ScheduleFormatError`.
        """
        try:
            rows = self.subject_repo.get_professorships(subject_id, career_id)
        except repositories.NotFoundError:
            raise ServiceError(
                ErrorKind.NOT_FOUND,
                f"could not get professorships from [subject_id: {subject_id} and career_id: {career_id}]: resource not found",
            )
        except Exception as e:
            raise RuntimeError(f"could not get professorships from [subject_id: {subject_id} and career_id: {career_id}]: {e}") from e

        grouped: Dict[str, list] = {}
        for r in rows:
            entry = {"day": day_name(r.day), "start": trim_seconds(r.start), "end": trim_seconds(r.end)}
            grouped.setdefault(r.name, []).append((r.day, entry))

        return {
            name: [entry for _, entry in sorted(meetings, key=lambda m: m[0])]
            for name, meetings in grouped.items()
        }
