"""Pytest bootstrap: settings, database and factories shared by the suite."""

import itertools
import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import skillbridge` works
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("INACTIVITY_SIGNAL", "check_in")

from skillbridge import models  # noqa: E402
from skillbridge.database import Base, SessionLocal, engine  # noqa: E402
from skillbridge.services import lifecycle_service  # noqa: E402

_ids = itertools.count(1)


# ======================
# TEST DATABASE SETUP
# ======================

@pytest.fixture
def db_session():
    """Fresh schema on the shared in-memory engine for every test"""
    Base.metadata.create_all(engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(engine)


# ======================
# FACTORIES
# ======================

@pytest.fixture
def make_user(db_session):
    def _make(role=models.UserRole.LEARNER, name=None):
        n = next(_ids)
        user = models.User(
            name=name or f"{role.title()} {n}",
            email=f"{role}{n}@test.com",
            role=role,
            is_active=True,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture
def make_mentor(db_session, make_user):
    def _make(capacity=3, skills=None):
        mentor = make_user(models.UserRole.MENTOR)
        db_session.add(models.MentorProfile(
            user_id=mentor.id,
            skills=skills or ["python"],
            bio="Mentor bio",
            capacity=capacity,
            current_mentee_count=0,
        ))
        db_session.commit()
        return mentor
    return _make


@pytest.fixture
def make_active_mentorship(db_session, make_user):
    """Request + accept through the lifecycle controller"""
    def _make(mentor, learner=None):
        learner = learner or make_user(models.UserRole.LEARNER)
        requested = lifecycle_service.request_mentorship(db_session, learner.id, mentor.id, "Hi!")
        assert requested.ok, requested
        accepted = lifecycle_service.accept_request(db_session, requested.value.id, mentor.id)
        assert accepted.ok, accepted
        return accepted.value
    return _make


@pytest.fixture
def make_goal(db_session):
    def _make(mentorship, created_at=None, status=models.GoalStatus.ACTIVE, title="Learn SQL"):
        goal = models.Goal(
            mentorship_id=mentorship.id,
            learner_id=mentorship.learner_id,
            title=title,
            description="Finish the course",
            status=status,
        )
        if created_at is not None:
            goal.created_at = created_at
        db_session.add(goal)
        db_session.commit()
        return goal
    return _make


@pytest.fixture
def learner(make_user):
    return make_user(models.UserRole.LEARNER)


@pytest.fixture
def mentor(make_mentor):
    return make_mentor()


@pytest.fixture
def admin(make_user):
    return make_user(models.UserRole.ADMIN)


@pytest.fixture
def mentorship(make_active_mentorship, mentor, learner):
    return make_active_mentorship(mentor, learner)
