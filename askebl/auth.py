"""Login validation for the dashboard."""

import re

from .config import config
from .errors import AuthenticationError
from .models import UserAccount
from .store import BankingStore

logger = config.get_logger(__name__)

USER_ID_PATTERN = re.compile(r"^\d{5}$")


def authenticate(store: BankingStore, user_id: str, password: str) -> UserAccount:
    """Validate credentials and return the matching user.

    Returns:
        The authenticated UserAccount.

    Raises:
        AuthenticationError: If the user id is not five digits, the password
            is missing, or no user matches.
    """
    user_id = user_id.strip()
    if not USER_ID_PATTERN.fullmatch(user_id):
        msg = "User ID must be exactly 5 digits"
        raise AuthenticationError(msg)

    if not password:
        msg = "Password is required"
        raise AuthenticationError(msg)

    user = store.find_user(user_id, password)
    if user is None:
        logger.warning("Failed login attempt for user %s", user_id)
        msg = "Invalid user ID or password"
        raise AuthenticationError(msg)

    logger.info("User %s logged in", user_id)
    return user
