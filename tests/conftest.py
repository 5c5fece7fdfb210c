import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from academy.core.database import Base, get_db
from academy.core.security import create_access_token
from academy.main import app
from academy.models import Class, ClassStudent, ClassTeacher, Profile, ProfileStatus, UserRole

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_profile(db):
    def _make(role="student", name=None, status=ProfileStatus.approved, **fields):
        profile = Profile(
            email=f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            name=name or role.title(),
            role=UserRole(role),
            status=status,
            **fields,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture()
def make_class(db):
    def _make(name="Class A", teachers=(), students=(), homeroom=None):
        class_ = Class(name=name, homeroom_teacher_id=homeroom.id if homeroom else None)
        db.add(class_)
        db.flush()
        teacher_ids = [t.id for t in teachers]
        if homeroom and homeroom.id not in teacher_ids:
            teacher_ids.insert(0, homeroom.id)
        for teacher_id in teacher_ids:
            db.add(
                ClassTeacher(
                    class_id=class_.id,
                    teacher_id=teacher_id,
                    is_homeroom=bool(homeroom) and teacher_id == homeroom.id,
                )
            )
        for student in students:
            db.add(ClassStudent(class_id=class_.id, student_id=student.id))
        db.commit()
        db.refresh(class_)
        return class_

    return _make


@pytest.fixture()
def auth_headers():
    def _headers(profile):
        return {"Authorization": f"Bearer {create_access_token(profile.id)}"}

    return _headers


@pytest.fixture()
def principal(make_profile):
    return make_profile("principal", name="Principal Kim")


@pytest.fixture()
def manager(make_profile):
    return make_profile("manager", name="Manager Lee")


@pytest.fixture()
def teacher(make_profile):
    return make_profile("teacher", name="Teacher Park")


@pytest.fixture()
def student(make_profile):
    return make_profile("student", name="Student Choi", parent_email="parent@example.com")
