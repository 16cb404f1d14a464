"""
Firebase Admin SDK utilities for verifying ID tokens.
"""
import logging
import os
from typing import Optional

import firebase_admin
from django.conf import settings
from firebase_admin import auth, credentials
from firebase_admin import exceptions as firebase_exceptions

logger = logging.getLogger(__name__)


_app = None


def initialize_firebase() -> Optional[firebase_admin.App]:
    """
    Initialize Firebase Admin SDK from ``settings.FIREBASE_CREDENTIALS``.

    Returns:
        Firebase app instance or None if initialization fails
    """
    global _app

    if _app is not None:
        return _app

    cred_path = getattr(settings, 'FIREBASE_CREDENTIALS', '')

    if not cred_path:
        logger.warning("FIREBASE_CREDENTIALS is not set")
        return None

    if not os.path.exists(cred_path):
        logger.error(f"Firebase credentials file not found at: {cred_path}")
        return None

    try:
        cred = credentials.Certificate(cred_path)
        _app = firebase_admin.initialize_app(cred)
        logger.info("Firebase Admin SDK initialized successfully")
        return _app
    except (ValueError, OSError) as e:
        logger.error(f"Failed to initialize Firebase: {e}")
        return None


def verify_firebase_token(id_token: str) -> Optional[dict]:
    """
    Verify a Firebase ID token.

    Args:
        id_token: Firebase ID token from client

    Returns:
        Decoded token claims or None if verification fails
    """
    if initialize_firebase() is None:
        return None

    try:
        return auth.verify_id_token(id_token)
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.error(f"Token verification failed: {e}")
        return None


def get_firebase_user_email(uid: str) -> Optional[str]:
    """Look up the email on the Firebase user record, for tokens that omit it."""
    if initialize_firebase() is None:
        return None
    try:
        return auth.get_user(uid).email or None
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.warning(f"Could not load Firebase user {uid}: {e}")
        return None
