"""Firestore wrappers for the user store.

These helpers centralize error handling and logging so graph nodes and
routes stay focused on orchestration logic. Users live in ``users/{id}``
with ``username``, ``profile``, ``preferences`` and ``profileCompleted``.
"""

from __future__ import annotations

import os

import firebase_admin
from firebase_admin import credentials, firestore

from roomfinder.config import config
from roomfinder.utils.errors import FirestoreUnavailableError
from roomfinder.utils.logging_config import logger

USERS_COLLECTION = "users"

_db: firestore.Client | None = None


def get_db() -> firestore.Client:
    """Get a Firestore client, initializing Firebase lazily."""
    global _db

    if _db is not None:
        return _db

    try:
        if not firebase_admin._apps:
            cred_path = os.environ.get(
                "GOOGLE_APPLICATION_CREDENTIALS",
                config.GOOGLE_APPLICATION_CREDENTIALS,
            )
            if not cred_path:
                raise RuntimeError(
                    "GOOGLE_APPLICATION_CREDENTIALS is not set"
                )

            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(
                cred, {"projectId": config.FIREBASE_PROJECT_ID}
            )

        _db = firestore.client()
        return _db

    except Exception as exc:
        logger.error("Failed to initialize Firestore: %s", exc)
        raise FirestoreUnavailableError(str(exc)) from exc


def _with_id(doc) -> dict:
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


def get_user(user_id: str) -> dict | None:
    """Fetch a user document from users/{user_id}.

    Returns None if the user does not exist.
    """

    try:
        doc = get_db().collection(USERS_COLLECTION).document(user_id).get()
        if not doc.exists:
            return None
        return _with_id(doc)
    except FirestoreUnavailableError:
        raise
    except Exception as exc:
        logger.error("Failed to fetch user: %s", str(exc))
        raise FirestoreUnavailableError(str(exc)) from exc


def get_completed_profiles(exclude_user_id: str, limit: int = 500) -> list[dict]:
    """Query every user with a completed profile except ``exclude_user_id``.

    Exclusion happens in memory because Firestore cannot combine a
    document-id inequality with the equality filter without an index.
    """

    try:
        query = (
            get_db()
            .collection(USERS_COLLECTION)
            .where("profileCompleted", "==", True)
            .limit(limit)
        )
        return [
            _with_id(doc) for doc in query.stream() if doc.id != exclude_user_id
        ]
    except FirestoreUnavailableError:
        raise
    except Exception as exc:
        logger.error("Failed to query completed profiles: %s", str(exc))
        raise FirestoreUnavailableError(str(exc)) from exc


def save_preferences(user_id: str, preferences: dict) -> dict | None:
    """Replace a user's preferences and mark the profile completed.

    Returns the stored preferences, or None if the user does not exist.
    """

    try:
        ref = get_db().collection(USERS_COLLECTION).document(user_id)
        if not ref.get().exists:
            return None

        ref.update({"preferences": preferences, "profileCompleted": True})
        logger.info("Updated preferences for user %s", user_id)
        return preferences
    except FirestoreUnavailableError:
        raise
    except Exception as exc:
        logger.error("Failed to save preferences: %s", str(exc))
        raise FirestoreUnavailableError(str(exc)) from exc
