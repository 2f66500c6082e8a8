import pytest

from student_api import repositories, services
from student_api.repositories import ProfessorshipScheduleRecord, StudentSubjectRecord
from student_api.services import ErrorKind, ServiceError, UpdateStudentSubjectRequest
from student_api.utils.schedule import ScheduleFormatError

EMAIL = "ada@example.com"


class FakeStudentRepo:
    def __init__(self, career_ids=None, assign_error=None, create_error=None):
        self.career_ids = career_ids
        self.assign_error = assign_error
        self.create_error = create_error
        self.assigned = []
        self.updates = []

    def get_career_ids(self, email):
        if not self.career_ids:
            raise repositories.NotFoundError()
        return list(self.career_ids)

    def assign_to_career(self, email, career_id):
        if self.assign_error:
            raise self.assign_error
        self.assigned.append((email, career_id))

    def update_subject(self, email, career_id, subject_id, status, description):
        self.updates.append((email, career_id, subject_id, status, description))

    def create(self, name, email):
        if self.create_error:
            raise self.create_error


class FakeSubjectRepo:
    def __init__(self, subjects=None, professorships=None, error=None):
        self.subjects = subjects or []
        self.professorships = professorships or []
        self.error = error
        self.include_ungraded = None

    def get_student_subjects(self, email, career_id, include_ungraded=True):
        self.include_ungraded = include_ungraded
        if self.error:
            raise self.error
        return self.subjects

    def get_professorships(self, subject_id, career_id):
        if self.error:
            raise self.error
        return self.professorships

    def get_subject_details(self, subject_id, career_id):
        if self.error:
            raise self.error
        return repositories.SubjectDetailsRecord(id=1, hours=240, points=8, name="Algebra", type="OBLIGATORIA")


def _student_service(student_repo=None, subject_repo=None, include_ungraded=True):
    svc = services.StudentService(None, include_ungraded=include_ungraded)
    svc.student_repo = student_repo or FakeStudentRepo()
    svc.subject_repo = subject_repo or FakeSubjectRepo()
    return svc


def _subject_service(subject_repo):
    svc = services.SubjectService(None)
    svc.subject_repo = subject_repo
    return svc


def test_assign_first_career_when_student_has_none():
    repo = FakeStudentRepo(career_ids=None)
    _student_service(student_repo=repo).assign_student_to_career(EMAIL, "1")
    assert repo.assigned == [(EMAIL, "1")]


def test_assign_same_career_twice_is_already_assigned_not_max():
    repo = FakeStudentRepo(career_ids=[1, 2])
    with pytest.raises(ServiceError) as exc:
        _student_service(student_repo=repo).assign_student_to_career(EMAIL, "2")
    assert exc.value.kind == ErrorKind.CAREER_ALREADY_ASSIGNED
    assert repo.assigned == []


def test_assign_third_career_is_max_reached():
    repo = FakeStudentRepo(career_ids=[1, 2])
    with pytest.raises(ServiceError) as exc:
        _student_service(student_repo=repo).assign_student_to_career(EMAIL, "3")
    assert exc.value.kind == ErrorKind.MAX_CAREERS_REACHED


def test_assign_maps_storage_not_found():
    repo = FakeStudentRepo(career_ids=[1], assign_error=repositories.NotFoundError("could not find career"))
    with pytest.raises(ServiceError) as exc:
        _student_service(student_repo=repo).assign_student_to_career(EMAIL, "9")
    assert exc.value.kind == ErrorKind.NOT_FOUND
    assert "could not find career" in exc.value.message


def test_assign_adds_context_to_unknown_errors():
    repo = FakeStudentRepo(career_ids=[1], assign_error=RuntimeError("connection lost"))
    with pytest.raises(RuntimeError) as exc:
        _student_service(student_repo=repo).assign_student_to_career(EMAIL, "2")
    assert not isinstance(exc.value, ServiceError)
    assert str(exc.value) == f"could not assign student [email: {EMAIL}] to career [career_id: 2]: connection lost"
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_student_subjects_adds_context_to_unknown_errors():
    subject_repo = FakeSubjectRepo(error=RuntimeError("connection lost"))
    with pytest.raises(RuntimeError) as exc:
        _student_service(subject_repo=subject_repo).get_student_subjects(EMAIL, "1")
    assert str(exc.value) == (
        f"could not get student subjects from [email: {EMAIL} and career_id: 1]: connection lost"
    )


def test_catalog_lookups_add_context_to_unknown_errors():
    svc = _subject_service(FakeSubjectRepo(error=RuntimeError("disk I/O error")))
    with pytest.raises(RuntimeError, match=r"^could not get subject details from \[subject_id: 1 and career_id: 2\]: disk I/O error$"):
        svc.get_subject_details("1", "2")
    with pytest.raises(RuntimeError, match=r"^could not get professorships from \[subject_id: 1 and career_id: 2\]: disk I/O error$"):
        svc.get_professorships("1", "2")


def test_student_subjects_builds_correlatives_for_every_subject():
    subject_repo = FakeSubjectRepo(subjects=[
        StudentSubjectRecord(id=1, correlative_id=0, name="Subject 1", type="OBLIGATORIA", status="PENDIENTE"),
        StudentSubjectRecord(id=2, correlative_id=1, name="Subject 2", type="OBLIGATORIA", status="APROBADA", description="final 8"),
    ])
    out = _student_service(subject_repo=subject_repo).get_student_subjects(EMAIL, "1")
    assert out["correlatives"] == {"1": [], "2": [1]}
    assert set(out["subjects"]) == set(out["correlatives"])
    assert out["subjects"]["2"] == {
        "id": 2,
        "name": "Subject 2",
        "type": "OBLIGATORIA",
        "status": "APROBADA",
        "description": "final 8",
    }
    assert out["subjects"]["1"]["description"] is None


def test_student_subjects_uses_configured_join_variant():
    subject_repo = FakeSubjectRepo(subjects=[
        StudentSubjectRecord(id=1, name="Subject 1", type="OBLIGATORIA", status="APROBADA"),
    ])
    _student_service(subject_repo=subject_repo, include_ungraded=False).get_student_subjects(EMAIL, "1")
    assert subject_repo.include_ungraded is False


def test_student_subjects_not_found():
    subject_repo = FakeSubjectRepo(error=repositories.NotFoundError())
    with pytest.raises(ServiceError) as exc:
        _student_service(subject_repo=subject_repo).get_student_subjects(EMAIL, "1")
    assert exc.value.kind == ErrorKind.NOT_FOUND
    assert EMAIL in str(exc.value)


def test_update_subject_turns_empty_description_into_none():
    repo = FakeStudentRepo()
    req = UpdateStudentSubjectRequest(student_email=EMAIL, career_id="1", subject_id="2", status="APROBADA", description="")
    _student_service(student_repo=repo).update_student_subject(req)
    assert repo.updates == [(EMAIL, "1", "2", "APROBADA", None)]


def test_create_student_already_exists():
    repo = FakeStudentRepo(create_error=repositories.AlreadyExistsError())
    with pytest.raises(ServiceError) as exc:
        _student_service(student_repo=repo).create_student("Ada", EMAIL)
    assert exc.value.kind == ErrorKind.STUDENT_ALREADY_EXISTS


def test_subject_details_reshape():
    out = _subject_service(FakeSubjectRepo()).get_subject_details("1", "2")
    assert out == {
        "id": 1,
        "hours": 240,
        "points": 8,
        "name": "Algebra",
        "type": "OBLIGATORIA",
        "uri": None,
        "meet": None,
    }


def test_professorships_grouped_and_sorted_by_day():
    repo = FakeSubjectRepo(professorships=[
        ProfessorshipScheduleRecord(day=1, name="C1", start="17:00:00", end="21:00:00"),
        ProfessorshipScheduleRecord(day=2, name="C1", start="9:00:00", end="12:00:00"),
        ProfessorshipScheduleRecord(day=5, name="C2", start="08:00:00", end="10:00:00"),
        ProfessorshipScheduleRecord(day=3, name="C2", start="18:00:00", end="22:00:00"),
    ])
    out = _subject_service(repo).get_professorships("1", "2")
    assert out == {
        "C1": [
            {"day": "Lunes", "start": "17:00", "end": "21:00"},
            {"day": "Martes", "start": "9:00", "end": "12:00"},
        ],
        "C2": [
            {"day": "Miércoles", "start": "18:00", "end": "22:00"},
            {"day": "Viernes", "start": "08:00", "end": "10:00"},
        ],
    }


def test_professorships_unknown_day_fails_whole_lookup():
    repo = FakeSubjectRepo(professorships=[
        ProfessorshipScheduleRecord(day=1, name="C1", start="17:00:00", end="21:00:00"),
        ProfessorshipScheduleRecord(day=9, name="C2", start="17:00:00", end="21:00:00"),
    ])
    with pytest.raises(ScheduleFormatError, match=r"\[dayNumber: 9\]"):
        _subject_service(repo).get_professorships("1", "2")


@pytest.mark.parametrize("start,end", [("17", "21:00:00"), ("17:00:00", "21")])
def test_professorships_short_time_fails(start, end):
    repo = FakeSubjectRepo(professorships=[
        ProfessorshipScheduleRecord(day=1, name="C1", start=start, end=end),
    ])
    with pytest.raises(ScheduleFormatError, match="could not trim seconds from time"):
        _subject_service(repo).get_professorships("1", "2")


def test_professorships_not_found():
    with pytest.raises(ServiceError) as exc:
        _subject_service(FakeSubjectRepo(error=repositories.NotFoundError())).get_professorships("1", "2")
    assert exc.value.kind == ErrorKind.NOT_FOUND
