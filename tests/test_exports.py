"""Tests for the bulk export endpoints, including export/import round trips."""

import io
import zipfile

from conftest import sample_quiz, upload_json
from interchange.config import settings
from interchange.models import Category, Flashcard, Quiz, Subject, User


def _strip_volatile(quizzes):
    """Drop fields that legitimately change when a quiz is created again."""
    cleaned = []
    for quiz in quizzes:
        quiz = {k: v for k, v in quiz.items() if k not in ("created_at", "updated_at")}
        quiz["questions"] = [
            dict(q, options=[{k: v for k, v in o.items() if k != "option_id"} for o in q["options"]])
            for q in quiz["questions"]
        ]
        cleaned.append(quiz)
    return cleaned


class TestJsonExport:

    def test_category_export(self, client, seeded):
        response = client.get("/export/json", params={"type": "category"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.headers["content-disposition"] == "attachment; filename=category.json"
        assert response.json() == [
            {"name": "Mechanics", "subject_id": seeded["subjects"][0]},
            {"name": "Bonding", "subject_id": seeded["subjects"][1]},
        ]

    def test_body_is_indented(self, client, seeded):
        response = client.get("/export/json", params={"type": "subject"})

        assert response.text.startswith('[\n  {\n    "name": "Physics"')

    def test_user_export_includes_stored_password(self, client, seeded):
        response = client.get("/export/json", params={"type": "user"})

        assert response.json() == [{
            "name": "Alice",
            "email": "alice@example.com",
            "password": "$2b$10$hashedvalue",
            "role": "USER",
        }]

    def test_flashcard_export_projection(self, client, seeded):
        response = client.get("/export/json", params={"type": "flashcard"})

        assert response.json() == [{
            "front": "F = ?",
            "back": "m * a",
            "difficulty": "NOUVEAU",
            "category_id": seeded["categories"][0],
            "user_id": seeded["user"],
        }]

    def test_quiz_export_projection(self, client, seeded):
        upload_json(client, "/import/quiz", sample_quiz(seeded["subjects"][0], seeded["categories"][0]))

        exported = client.get("/export/json", params={"type": "quiz"}).json()

        assert len(exported) == 1
        quiz = exported[0]
        assert list(quiz) == [
            "title", "description", "difficulty", "time_limit", "is_exam_mode",
            "created_at", "updated_at", "subject_id", "category_id", "questions",
        ]
        question = quiz["questions"][0]
        assert list(question) == ["content", "type", "image_url", "explanation", "options", "pairs"]
        assert list(question["options"][0]) == ["option_id", "text", "is_correct"]
        assert quiz["questions"][1]["pairs"] == [
            {"left": "Force", "right": "N"}, {"left": "Energy", "right": "J"}
        ]

    def test_unknown_kind_is_client_error(self, client):
        response = client.get("/export/json", params={"type": "answers"})

        assert response.status_code == 400
        assert response.json()["error"] == "unknown_kind"

    def test_unknown_kind_permissive_mode(self, client, monkeypatch):
        monkeypatch.setattr(settings, "EXPORT_STRICT_KIND", False)

        response = client.get("/export/json", params={"type": "answers"})

        assert response.status_code == 200
        assert response.json() == []


class TestRoundTrip:
    """Exporting a kind and importing the file again gives the same records."""

    def _reimport(self, client, db, kind, model):
        before = client.get("/export/json", params={"type": kind})
        db.query(model).delete()
        db.commit()

        response = upload_json(client, f"/import/{kind}", before.content, filename=f"{kind}.json")
        after = client.get("/export/json", params={"type": kind})

        assert response.status_code == 200
        return before.json(), after.json()

    def test_subjects(self, client, db):
        upload_json(client, "/import/subject", [{"name": "Physics"}, {"name": "Chemistry"}])

        before, after = self._reimport(client, db, "subject", Subject)

        assert len(before) == 2
        assert after == before

    def test_categories(self, client, db):
        physics = Subject(name="Physics")
        db.add(physics)
        db.commit()
        upload_json(client, "/import/category", [
            {"name": "Mechanics", "subject_id": physics.subject_id},
            {"name": "Optics", "subject_id": physics.subject_id},
        ])

        before, after = self._reimport(client, db, "category", Category)

        assert len(before) == 2
        assert after == before

    def test_flashcards(self, client, db, seeded):
        before, after = self._reimport(client, db, "flashcard", Flashcard)

        assert len(before) == 1
        assert after == before

    def test_users(self, client, db):
        upload_json(client, "/import/user", [
            {"email": "a@example.com", "password": "h1", "name": "A", "role": "ADMIN"},
            {"email": "b@example.com", "password": "h2", "name": "B"},
        ])
        before = client.get("/export/json", params={"type": "user"})

        db.query(User).delete()
        db.commit()
        upload_json(client, "/import/user", before.content)
        after = client.get("/export/json", params={"type": "user"})

        assert after.json() == before.json()

    def test_quizzes_with_nested_children(self, client, db, seeded):
        upload_json(client, "/import/quiz", [
            sample_quiz(seeded["subjects"][0], seeded["categories"][0], title="First"),
            sample_quiz(seeded["subjects"][1], seeded["categories"][1], title="Second"),
        ])
        before = client.get("/export/json", params={"type": "quiz"})

        for quiz in db.query(Quiz).all():
            db.delete(quiz)
        db.commit()
        upload_json(client, "/import/quiz", before.content)
        after = client.get("/export/json", params={"type": "quiz"})

        assert len(after.json()) == 2
        assert _strip_volatile(after.json()) == _strip_volatile(before.json())


class TestFileExports:

    def test_database_download(self, client, seeded):
        response = client.get("/export/db")

        assert response.status_code == 200
        assert "quizapp.db" in response.headers["content-disposition"]
        assert response.content.startswith(b"SQLite format 3")

    def test_images_zip_of_missing_directory_is_empty(self, client):
        response = client.get("/export/question-images-zip")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        assert response.headers["content-disposition"] == "attachment; filename=question-images.zip"
        assert zipfile.ZipFile(io.BytesIO(response.content)).namelist() == []

    def test_images_zip_contains_every_file(self, client, images_dir):
        images_dir.mkdir(parents=True)
        (images_dir / "a.png").write_bytes(b"A" * 50)
        (images_dir / "b.png").write_bytes(b"B" * 50)

        response = client.get("/export/question-images-zip")

        archive = zipfile.ZipFile(io.BytesIO(response.content))
        assert sorted(archive.namelist()) == ["a.png", "b.png"]
        assert archive.read("a.png") == b"A" * 50

    def test_exported_images_can_be_imported(self, client, images_dir):
        images_dir.mkdir(parents=True)
        (images_dir / "a.png").write_bytes(b"\x89PNG-round-trip")
        content = client.get("/export/question-images-zip").content
        (images_dir / "a.png").unlink()

        response = client.post(
            "/import/question-images-zip",
            files={"file": ("question-images.zip", content, "application/zip")},
        )

        assert response.status_code == 200
        assert (images_dir / "a.png").read_bytes() == b"\x89PNG-round-trip"
