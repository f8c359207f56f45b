"""Authentication endpoints."""

from ..exceptions import AuthenticationError
from ..transport import SESSION_COOKIE
from ..utils.logger import logger
from ..utils.validation import require_non_empty
from .base import ApiGroup


class AuthAPI(ApiGroup):
    """Login/logout and session state."""

    area = "auth"

    def login(self, username: str, password: str) -> bool:
        """
        Log in and keep the session cookie on the transport.

        Args:
            username: WebUI username
            password: WebUI password

        Returns:
            True on success

        Raises:
            AuthenticationError: On bad credentials or a banned IP (HTTP 403)
        """
        username = require_non_empty(username, "username")
        if password is None:
            password = ""

        logger.info(f"Logging in to {self.transport.base_url} as {username}")

        response = self._send(
            "POST",
            "login",
            operation="LOGIN",
            data={"username": username, "password": password},
        )

        if response.body.strip() != "Ok.":
            logger.error(f"Login refused for {username}")
            raise AuthenticationError(
                "Invalid username or password",
                "LOGIN_FAILED",
                status_code=response.status_code,
                body=response.body,
                endpoint=self.path("login"),
                method="POST",
            )

        # Absent when the WebUI skips auth for this client (e.g. localhost bypass)
        token = response.cookies.get(SESSION_COOKIE)
        if token:
            self.transport.session_token = token

        logger.info("Login successful")
        return True

    def logout(self) -> bool:
        """End the session and forget the cookie."""
        try:
            self._send("POST", "logout", operation="LOGOUT")
        finally:
            self.transport.session_token = None
        logger.info("Logged out")
        return True

    def is_logged_in(self) -> bool:
        """Call an authenticated endpoint with the current session."""
        try:
            self._send("GET", "/app/version", operation="CHECK_SESSION")
        except AuthenticationError:
            return False
        return True
