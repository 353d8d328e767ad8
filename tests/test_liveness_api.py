import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

# Add the project root to the path to allow imports from 'app'
import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import app.main as main
from app.main import app

# --- Helpers ---

def _document(positions=((0.5, 0.5), (0.52, 0.51), (0.51, 0.5)), labels=(), start="0s", end="4s"):
    """Builds a provider annotation document with one face and one track."""
    return {
        "annotationResults": [{
            "faceDetectionAnnotations": [{
                "tracks": [{
                    "segment": {"startTimeOffset": start, "endTimeOffset": end},
                    "timestampedObjects": [
                        {"normalizedBoundingBox": {"left": left, "top": top}, "timeOffset": f"{i}s"}
                        for i, (left, top) in enumerate(positions)
                    ],
                }]
            }],
            "objectAnnotations": [{"entity": {"description": label}} for label in labels],
        }]
    }

# --- Fixtures ---

@pytest.fixture
def client():
    """Provides a TestClient instance for API testing, ensuring startup events are run."""
    with TestClient(app) as test_client:
        yield test_client

# --- API Tests ---

def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "running" in response.json()["message"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_evaluate_live_face(client):
    # Act
    response = client.post("/liveness/evaluate", json=_document(labels=["glasses", "Hat"]))
    data = response.json()

    # Assert
    assert response.status_code == 200
    assert data == {"passed": True, "reason": "passed", "message": "Liveness check passed."}


def test_evaluate_phone_in_frame(client):
    response = client.post("/liveness/evaluate", json=_document(labels=["cell phone"]))

    assert response.status_code == 200
    assert response.json()["passed"] is False
    assert response.json()["reason"] == "malicious_object_detected"


def test_evaluate_face_jump(client):
    response = client.post("/liveness/evaluate", json=_document(positions=((0.5, 0.5), (0.95, 0.5))))

    assert response.json()["reason"] == "inconsistent_presence_or_movement"


def test_evaluate_without_faces(client):
    document = {"annotationResults": [{"objectAnnotations": [{"entity": {"description": "person"}}]}]}

    response = client.post("/liveness/evaluate", json=document)

    assert response.json() == {
        "passed": False,
        "reason": "no_face_detected",
        "message": "No face detected. Liveness check failed.",
    }


@pytest.mark.parametrize("document", [
    {"annotationResults": []},
    {"annotationResults": [{"faceDetectionAnnotations": "none"}]},
    _document(start="5s", end="2s"),
])
def test_evaluate_unusable_document(client, document):
    response = client.post("/liveness/evaluate", json=document)

    assert response.status_code == 200
    assert response.json() == {
        "passed": False,
        "reason": "evaluation_error",
        "message": "An error occurred during liveness validation.",
    }


def test_evaluate_hides_internal_errors(client):
    """Unexpected evaluator errors surface only as the opaque evaluation_error verdict."""
    with patch.object(main.evaluator, "assess", side_effect=RuntimeError("index 3 out of range")):
        response = client.post("/liveness/evaluate", json=_document())

    assert response.status_code == 200
    assert response.json()["reason"] == "evaluation_error"
    assert "index 3" not in response.text


def test_evaluate_rejects_non_object_body(client):
    response = client.post("/liveness/evaluate", json=[1, 2, 3])

    assert response.status_code == 422


def test_config_from_environment(monkeypatch):
    monkeypatch.setenv("LIVENESS_MAX_POSITION_JUMP", "0.5")
    monkeypatch.setenv("LIVENESS_ALLOWED_WEARABLES", "hat,Cell Phone")

    with TestClient(app) as client:
        config = client.get("/liveness/config").json()
        response = client.post(
            "/liveness/evaluate",
            json=_document(positions=((0.5, 0.5), (0.95, 0.5)), labels=["cell phone"]),
        )

    assert config["max_position_jump"] == 0.5
    assert config["allowed_wearables"] == ["cell phone", "hat"]
    assert response.json()["reason"] == "passed"


@pytest.mark.parametrize("document", [
    _document(positions=((int("1" + "0" * 400), 0.5), (0.5, 0.5))),
    {"faceDetectionAnnotations": [{"tracks": [
        {"segment": {"startTimeOffset": {"seconds": int("9" * 400)}, "endTimeOffset": "1s"}}]}]},
])
def test_evaluate_out_of_range_numbers(client, document):
    response = client.post("/liveness/evaluate", json=document)

    assert response.status_code == 200
    assert response.json()["reason"] == "evaluation_error"


def test_evaluate_bare_result_without_faces(client):
    response = client.post("/liveness/evaluate", json={"segmentLabelAnnotations": []})

    assert response.status_code == 200
    assert response.json()["reason"] == "no_face_detected"
