import os

# Keep the import-time table creation away from the developer database.
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from student_api import models
from student_api.database import get_session
from student_api.main import app

STUDENT_EMAIL = "ada@example.com"


def _seed_catalog(session: Session):
    session.add_all([
        models.Career(id=1, name="Ingeniería en Sistemas"),
        models.Career(id=2, name="Ingeniería Industrial"),
        models.Career(id=3, name="Licenciatura en Matemática"),
        models.Subject(id=1, name="Análisis Matemático I", uri="https://campus.example.edu/am1"),
        models.Subject(id=2, name="Álgebra"),
        models.Subject(id=3, name="Análisis Matemático II", meet="https://meet.example.edu/am2"),
        models.Subject(id=4, name="Física I"),
        models.Student(id=1, name="Ada", email=STUDENT_EMAIL),
    ])
    session.add_all([
        models.CareerSubject(id=1, career_id=1, subject_id=1, type="OBLIGATORIA", hours=160, points=10),
        models.CareerSubject(id=2, career_id=1, subject_id=2, type="OBLIGATORIA", hours=160, points=10),
        models.CareerSubject(id=3, career_id=1, subject_id=3, type="OBLIGATORIA", hours=160, points=10, correlative_id=1),
        models.CareerSubject(id=4, career_id=1, subject_id=4, type="ELECTIVA", hours=64, points=4),
        models.CareerSubject(id=5, career_id=2, subject_id=1, type="OBLIGATORIA", hours=160, points=10),
    ])
    session.add_all([
        models.Professorship(id=1, career_subject_id=1, name="CATEDRA 1"),
        models.Professorship(id=2, career_subject_id=1, name="CATEDRA 2"),
        models.Professorship(id=3, career_subject_id=4, name="CATEDRA ROTA"),
    ])
    session.add_all([
        models.Schedule(professorship_id=1, day=3, start="18:00:00", end="22:00:00"),
        models.Schedule(professorship_id=1, day=1, start="17:00:00", end="21:00:00"),
        models.Schedule(professorship_id=2, day=2, start="9:00:00", end="12:00:00"),
        models.Schedule(professorship_id=3, day=9, start="9:00:00", end="12:00:00"),
    ])
    session.commit()


@pytest.fixture
def engine():
    """Fresh in-memory database with the catalog seeded."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        _seed_catalog(session)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
