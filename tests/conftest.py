"""
Pytest configuration and shared fixtures for all tests.

This file is automatically loaded by pytest and provides:
  - Test configuration (env vars set before the config singleton loads)
  - Factories for user documents and User models
  - A mock Firebase app for Firestore tests
"""

import os
import pytest
from unittest.mock import MagicMock


# Set at import time: roomfinder.config builds its singleton on first import,
# which happens while test modules are collected, before any fixture runs.
TEST_ENV = {
    "FIREBASE_PROJECT_ID": "test-project",
    "GOOGLE_APPLICATION_CREDENTIALS": "/config/test-serviceAccountKey.json",
    "DEFAULT_CITY": "delhi",
    "LOG_FILE_PATH": "logs/test-service.log",
    "SERVICE_TOKEN": "",
    "DEBUG": "True",
}
for _key, _value in TEST_ENV.items():
    os.environ[_key] = _value


@pytest.fixture
def make_user_doc():
    """
    Build a stored user document as Firestore returns it.

    Example:
        doc = make_user_doc("u1", cleanliness="Very Clean", location="Mumbai")
    """

    def _make(user_id, address="", completed=True, username=None, **preferences):
        return {
            "id": user_id,
            "username": username or f"user_{user_id}",
            "profile": {"fullName": f"User {user_id}", "address": address},
            "preferences": preferences,
            "profileCompleted": completed,
        }

    return _make


@pytest.fixture
def make_user(make_user_doc):
    """Build a User model from the same arguments as make_user_doc."""
    from roomfinder.schemas import User

    def _make(user_id, **kwargs):
        return User.from_document(user_id, make_user_doc(user_id, **kwargs))

    return _make


@pytest.fixture
def mock_firebase_app(monkeypatch):
    """
    Provide a mock Firebase app and Firestore client.

    Resets the cached client so get_db() picks up the mock.
    """
    from roomfinder.tools import firestore_tools

    mock_app = MagicMock()
    mock_db = MagicMock()

    monkeypatch.setattr(firestore_tools, "_db", None)
    monkeypatch.setattr("firebase_admin._apps", {"[DEFAULT]": mock_app})
    monkeypatch.setattr("firebase_admin.initialize_app", MagicMock(return_value=mock_app))
    monkeypatch.setattr("firebase_admin.firestore.client", MagicMock(return_value=mock_db))

    return {"app": mock_app, "db": mock_db}
