import os
import tempfile

# The app lifespan bootstraps the schema against the configured engine; keep it on a throwaway database.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///" + os.path.join(tempfile.mkdtemp(), "campus_routine_test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.db.base import Base
from app.main import app
from app.models.academic_year import AcademicYear
from app.models.program import Program
from app.models.room import Room
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.services.locks import clear_coordinate_locks


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    clear_coordinate_locks()
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        clear_coordinate_locks()


@pytest.fixture()
def client(engine):
    clear_coordinate_locks()
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_coordinate_locks()


@pytest.fixture()
def seeded_db(db_session):
    """Reference data for service-level tests: one current year, one program, three teachers, two rooms."""
    year = AcademicYear(title="2025-2026", is_current=True)
    program = Program(code="BSC", name="Computer Science", department="Computing")
    teachers = [
        Teacher(full_name="Ada Rahman", short_name="AR", email="ada@example.com"),
        Teacher(full_name="Babul Hossain", short_name="BH", email="babul@example.com"),
        Teacher(full_name="Chandra Das", short_name="CD", email="chandra@example.com"),
    ]
    rooms = [Room(name="R101"), Room(name="LAB-1")]
    db_session.add_all([year, program, *teachers, *rooms])
    db_session.flush()
    subjects = [
        Subject(code="CSE301", name="Algorithms", program_id=program.id, semester=3),
        Subject(code="CSE302", name="Databases", program_id=program.id, semester=3),
        Subject(code="CSE401", name="Networks", program_id=program.id, semester=4),
    ]
    db_session.add_all(subjects)
    db_session.commit()
    return {
        "year": year.id,
        "program": program.id,
        "teachers": [teacher.id for teacher in teachers],
        "rooms": [room.id for room in rooms],
        "subjects": [subject.id for subject in subjects],
    }


@pytest.fixture()
def seeded(client):
    """The same reference data as seeded_db, created through the API."""
    year = client.post("/api/academic-years/", json={"title": "2025-2026", "is_current": True})
    assert year.status_code == 201
    program = client.post(
        "/api/programs/",
        json={"code": "bsc", "name": "Computer Science", "department": "Computing"},
    )
    assert program.status_code == 201
    program_id = program.json()["id"]

    teacher_ids = []
    for full_name, short_name, email in (
        ("Ada Rahman", "AR", "ada@example.com"),
        ("Babul Hossain", "BH", "babul@example.com"),
        ("Chandra Das", "CD", "chandra@example.com"),
    ):
        response = client.post(
            "/api/teachers/",
            json={"full_name": full_name, "short_name": short_name, "email": email},
        )
        assert response.status_code == 201
        teacher_ids.append(response.json()["id"])

    room_ids = []
    for name, room_type in (("R101", "lecture"), ("LAB-1", "lab")):
        response = client.post("/api/rooms/", json={"name": name, "type": room_type})
        assert response.status_code == 201
        room_ids.append(response.json()["id"])

    subject_ids = []
    for code, name, semester in (("CSE301", "Algorithms", 3), ("CSE302", "Databases", 3), ("CSE401", "Networks", 4)):
        response = client.post(
            "/api/subjects/",
            json={"code": code, "name": name, "program_id": program_id, "semester": semester},
        )
        assert response.status_code == 201
        subject_ids.append(response.json()["id"])

    return {
        "year": year.json()["id"],
        "program": program_id,
        "teachers": teacher_ids,
        "rooms": room_ids,
        "subjects": subject_ids,
    }
