"""Shared test fixtures and configuration for pytest."""

import json
import os
import shutil
import tempfile

# Settings are read at import time, so the environment must be ready first
_WORKDIR = tempfile.mkdtemp(prefix="interchange-tests-")
os.environ["WORKING_DIR"] = _WORKDIR
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from interchange.config import settings
from interchange.database import Base, SessionLocal, engine, init_db
from interchange.main import app
from interchange.models import Category, Flashcard, Subject, User


@pytest.fixture(autouse=True)
def fresh_database():
    """Give every test empty tables and an empty working directory."""
    init_db()
    yield
    engine.dispose()
    Base.metadata.drop_all(bind=engine)
    for relative in (settings.QUESTION_IMAGES_DIR, settings.SNAPSHOT_STAGING_FILE):
        path = settings.resolve(relative)
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def images_dir():
    return settings.resolve(settings.QUESTION_IMAGES_DIR)


@pytest.fixture
def seeded(db):
    """Two subjects, two categories, one user and one flashcard."""
    physics = Subject(name="Physics")
    chemistry = Subject(name="Chemistry")
    db.add_all([physics, chemistry])
    db.flush()

    mechanics = Category(name="Mechanics", subject_id=physics.subject_id)
    bonding = Category(name="Bonding", subject_id=chemistry.subject_id)
    alice = User(email="alice@example.com", password="$2b$10$hashedvalue", name="Alice")
    db.add_all([mechanics, bonding, alice])
    db.flush()

    db.add(Flashcard(
        front="F = ?",
        back="m * a",
        category_id=mechanics.category_id,
        user_id=alice.user_id,
    ))
    db.commit()

    return {
        "subjects": [physics.subject_id, chemistry.subject_id],
        "categories": [mechanics.category_id, bonding.category_id],
        "user": alice.user_id,
    }


def upload_json(client, path, payload, filename="data.json"):
    """POST a JSON document as the multipart `file` field."""
    body = payload if isinstance(payload, (str, bytes)) else json.dumps(payload)
    return client.post(path, files={"file": (filename, body, "application/json")})


def sample_quiz(subject_id, category_id, title="Kinematics"):
    return {
        "title": title,
        "description": "Motion in one dimension",
        "difficulty": "DIFFICILE",
        "time_limit": 20,
        "is_exam_mode": True,
        "subject_id": subject_id,
        "category_id": category_id,
        "questions": [
            {
                "content": "Unit of acceleration?",
                "type": "SINGLE",
                "explanation": "Velocity per time",
                "options": [
                    {"text": "m/s^2", "is_correct": True},
                    {"text": "m/s", "is_correct": False},
                ],
            },
            {
                "content": "Match quantity and unit",
                "type": "MATCHING",
                "image_url": "/uploads/question-images/units.png",
                "pairs": [
                    {"left": "Force", "right": "N"},
                    {"left": "Energy", "right": "J"},
                ],
            },
        ],
    }
