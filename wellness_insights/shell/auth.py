"""Authentication - Resolve API keys to user IDs.

Keys are issued by the account service; this module only validates them.
Never stores or logs plaintext keys.
"""

import hashlib
import logging

from google.cloud import firestore


logger = logging.getLogger(__name__)

# API key prefix for identification
API_KEY_PREFIX = "wi_"


def hash_api_key(api_key: str) -> str:
    """Hash an API key to create a user_id.

    Uses SHA256 and truncates to 32 chars for Firestore document ID.

    Args:
        api_key: The plaintext API key

    Returns:
        32-character hash to use as user_id
    """
    return hashlib.sha256(api_key.encode()).hexdigest()[:32]


def validate_api_key_format(api_key: str) -> bool:
    """Check if API key has valid format.

    Args:
        api_key: The API key to validate

    Returns:
        True if format is valid
    """
    if not api_key:
        return False
    if not api_key.startswith(API_KEY_PREFIX):
        return False
    if len(api_key) < 40:  # prefix + at least some random chars
        return False
    return True


class AuthClient:
    """Client for API key validation against Firestore."""

    def __init__(self, db: firestore.Client) -> None:
        """Initialize auth client.

        Args:
            db: Firestore client instance
        """
        self._db = db

    def _get_user_ref(self, user_id: str) -> firestore.DocumentReference:
        """Get reference to user document."""
        return self._db.collection("users").document(user_id)

    def validate_api_key(self, api_key: str) -> str | None:
        """Validate an API key and return the user_id if valid.

        Args:
            api_key: The API key to validate

        Returns:
            user_id if valid, None if invalid
        """
        if not validate_api_key_format(api_key):
            logger.warning("Invalid API key format")
            return None

        user_id = hash_api_key(api_key)
        if self.user_exists(user_id):
            logger.debug("API key validated for user: %s", user_id[:8])
            return user_id

        logger.warning("API key not found in database")
        return None

    def user_exists(self, user_id: str) -> bool:
        """Check if a user exists.

        Args:
            user_id: The user's ID

        Returns:
            True if user exists
        """
        try:
            return self._get_user_ref(user_id).get().exists
        except Exception as e:
            logger.error("Error looking up user: %s", str(e))
            return False
