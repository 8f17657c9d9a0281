"""
Pytest configuration and fixtures for all tests.
"""

import pytest
from types import SimpleNamespace
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pythy_backend.database import enable_sqlite_savepoints
from pythy_backend.model import (
    Assignment,
    Base,
    Course,
    CourseEnrollment,
    CourseOffering,
    Department,
    Institution,
    User,
)
from pythy_backend.permissions.catalog import role_catalog
from pythy_backend.permissions.impersonation import impersonation_registry


@pytest.fixture
def engine():
    """In-memory database shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def Session(engine):
    """Create session factory."""
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def session(Session):
    """Create a new database session with the role catalog seeded."""
    session = Session()
    role_catalog.seed(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def reset_impersonation():
    yield
    impersonation_registry._targets.clear()


@pytest.fixture
def make_user(session):
    def _make_user(email, global_role="regular_user", first_name=None, last_name=None):
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            global_role_id=global_role
        )
        session.add(user)
        session.commit()
        return user
    return _make_user


@pytest.fixture
def enroll(session):
    def _enroll(user, course_offering, course_role):
        enrollment = CourseEnrollment(
            user_id=user.id,
            course_offering_id=course_offering.id,
            course_role_id=course_role
        )
        session.add(enrollment)
        session.commit()
        return enrollment
    return _enroll


@pytest.fixture
def hierarchy(session):
    """Institution > department > course with two offerings, one assignment each."""
    institution = Institution(name="Example University", domain="example.edu")
    department = Department(name="Computer Science", abbreviation="CS", institution=institution)
    course = Course(name="Software Design", number="CS 3704", department=department)
    offering = CourseOffering(term="Fall 2026", label="01", course=course)
    other_offering = CourseOffering(term="Spring 2027", label="01", course=course)
    assignment = Assignment(name="Lab 1", course_offering=offering)
    other_assignment = Assignment(name="Lab 1", course_offering=other_offering)

    session.add_all([institution, department, course, offering, other_offering, assignment, other_assignment])
    session.commit()

    return SimpleNamespace(
        institution=institution,
        department=department,
        course=course,
        offering=offering,
        other_offering=other_offering,
        assignment=assignment,
        other_assignment=other_assignment
    )


@pytest.fixture
def people(hierarchy, make_user, enroll):
    """Users with every role combination needed by the permission tests."""
    admin = make_user("admin@example.edu", global_role="administrator")
    instructor = make_user("instructor@example.edu", global_role="instructor")
    grader = make_user("grader@example.edu")
    student = make_user("student@example.edu")
    outsider = make_user("outsider@example.edu")

    enroll(instructor, hierarchy.offering, "instructor")
    enroll(grader, hierarchy.offering, "grader")
    enroll(student, hierarchy.offering, "student")

    return SimpleNamespace(
        admin=admin,
        instructor=instructor,
        grader=grader,
        student=student,
        outsider=outsider
    )
