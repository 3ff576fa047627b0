"""Admin authentication backed by Supabase Auth."""

import os
from dataclasses import dataclass
from typing import Any

from ..config import get_admin_email
from ..logging_config import get_logger, log_security_event, log_user_action
from ..ui.handlers.error import AuthenticationError, ConfigError, PersistenceError
from .relational_store import get_relational_store

logger = get_logger(__name__)


@dataclass
class AdminUser:
    """A signed-in user."""

    user_id: str
    email: str


class AdminAuthService:
    """
    Signs the admin in with email and password.

    Anyone may browse; only the configured ``ADMIN_EMAIL`` may upload or edit.
    In development, ``DEV_ADMIN_EMAIL`` signs in without a password.
    """

    def __init__(self, client: Any | None = None, admin_email: str | None = None) -> None:
        """
        Args:
            client: Supabase client, None when the store is not configured
            admin_email: Admin address (defaults to ADMIN_EMAIL)
        """
        self.client = client
        self.admin_email = admin_email or get_admin_email()
        self._development_mode = os.getenv("ENVIRONMENT", "development").lower().strip() in (
            "development",
            "dev",
            "local",
            "test",
        )

        if not self.admin_email:
            logger.warning("admin_email_not_configured", message="Nobody can edit creations")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def get_development_user(self) -> AdminUser | None:
        """Return the development admin when running locally with DEV_ADMIN_EMAIL set."""
        dev_email = os.getenv("DEV_ADMIN_EMAIL")
        if not self._development_mode or not dev_email or "@" not in dev_email:
            return None

        log_user_action("dev-admin", "development_authentication", email=dev_email)
        return AdminUser(user_id="dev-admin", email=dev_email)

    def sign_in(self, email: str, password: str) -> AdminUser:
        """
        Sign in with email and password.

        Raises:
            AuthenticationError: If the credentials are rejected or auth is not configured
        """
        if self.client is None:
            raise AuthenticationError("Authentication not configured", code="auth_not_configured")

        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            log_security_event("sign_in_failed", email=email)
            raise AuthenticationError(f"Sign in failed: {e}", details={"email": email}, original_exception=e) from e

        user = getattr(response, "user", None)
        if user is None:
            log_security_event("sign_in_failed", email=email)
            raise AuthenticationError("Sign in returned no user", details={"email": email})

        admin_user = AdminUser(user_id=str(user.id), email=user.email or email)
        log_user_action(admin_user.user_id, "sign_in", email=admin_user.email, is_admin=self.is_admin(admin_user))
        return admin_user

    def sign_out(self) -> None:
        if self.client is None:
            logger.warning("sign_out_without_auth")
            return

        try:
            self.client.auth.sign_out()
        except Exception as e:
            raise AuthenticationError(f"Sign out failed: {e}", original_exception=e) from e

    def is_admin(self, user: AdminUser | None) -> bool:
        """Check whether ``user`` may upload and edit."""
        if user is None:
            return False
        if user.user_id == "dev-admin" and self._development_mode:
            return True
        return bool(self.admin_email) and user.email.lower() == self.admin_email.lower()


_auth_service: AdminAuthService | None = None


def get_auth_service() -> AdminAuthService:
    """Get the global admin auth service, sharing the store's Supabase client."""
    global _auth_service

    if _auth_service is None:
        try:
            client = get_relational_store().client
        except (ConfigError, PersistenceError) as e:
            logger.warning("auth_unavailable", error=str(e))
            client = None
        _auth_service = AdminAuthService(client)

    return _auth_service
