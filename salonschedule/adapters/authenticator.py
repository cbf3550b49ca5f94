"""
Salon API authentication with a cached bearer token.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import keyring
import requests
from keyring.errors import KeyringError

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


KEYRING_SERVICE_NAME = "salonschedule"


class ApiAuthenticator:
    """
    Logs in against ``/auth/login`` and caches the access token.

    The token is kept in the OS keyring; when no keyring backend works it
    falls back to a plaintext file (mode 600) and exposes a warning through
    ``insecure_storage_warning``.
    """

    def __init__(
        self,
        base_url: str,
        email: str,
        cache_file: Path | None = None,
        timeout: float = 30,
    ):
        """
        Initialize the authenticator.

        Args:
            base_url: API root
            email: Login e-mail of the acting user
            cache_file: Optional path to the fallback token cache file
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.timeout = timeout

        self.cache_file = cache_file or Path.home() / ".salonschedule_token_cache.json"
        self._key_identifier = f"{self.base_url}:{self.email}"
        self._keyring_supported = True
        self._cache_backend = "keyring"
        self._insecure_storage_warning: Optional[str] = None

    @property
    def cache_backend(self) -> str:
        """Return the active cache backend (keyring or file)."""
        return self._cache_backend

    @property
    def insecure_storage_warning(self) -> Optional[str]:
        """Provide a warning message when the cache falls back to plaintext storage."""
        return self._insecure_storage_warning

    def get_access_token(self, password: str | None = None, force_refresh: bool = False) -> str:
        """
        Get a valid access token, using the cache or logging in.

        Args:
            password: Password used when a fresh login is needed
            force_refresh: Log in even if a cached token exists

        Returns:
            Access token string

        Raises:
            AuthenticationError: If no cached token exists and login fails
        """
        if not force_refresh:
            cached = self._load_token()
            if cached:
                return cached

        if password is None:
            raise AuthenticationError(
                f"No cached token for {self.email}. Run 'salonschedule login' first."
            )

        return self.login(password)

    def login(self, password: str) -> str:
        """
        Log in and cache the resulting access token.

        Raises:
            AuthenticationError: If the request fails or returns no token
        """
        url = f"{self.base_url}/auth/login"

        try:
            response = requests.post(
                url,
                json={"email": self.email, "password": password},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise AuthenticationError(f"Login failed for {self.email}: {e}") from e
        except ValueError as e:
            raise AuthenticationError(f"Login returned invalid JSON: {e}") from e

        token = data.get("accessToken") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError("Login response did not contain an access token")

        self._save_token(token)
        return token

    def _load_token(self) -> Optional[str]:
        token = self._load_token_from_keyring()
        if token is None:
            token = self._load_token_from_file()
        return token

    def _load_token_from_keyring(self) -> Optional[str]:
        if not self._keyring_supported:
            return None

        try:
            return keyring.get_password(KEYRING_SERVICE_NAME, self._key_identifier)
        except KeyringError as exc:  # pragma: no cover - environment dependent
            self._handle_keyring_failure(f"reading credentials failed: {exc}")
            return None

    def _load_token_from_file(self) -> Optional[str]:
        if not self.cache_file.exists():
            return None

        try:
            with open(self.cache_file, "r", encoding="utf-8") as file_handle:
                cached = json.load(file_handle)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load token cache file %s: %s", self.cache_file, exc)
            return None

        if isinstance(cached, dict):
            return cached.get(self._key_identifier)
        return None

    def _save_token(self, token: str) -> None:
        if self._keyring_supported and self._save_token_to_keyring(token):
            return

        self._save_token_to_file(token)

    def _save_token_to_keyring(self, token: str) -> bool:
        try:
            keyring.set_password(KEYRING_SERVICE_NAME, self._key_identifier, token)
            self._cache_backend = "keyring"
            return True
        except KeyringError as exc:  # pragma: no cover - environment dependent
            self._handle_keyring_failure(f"writing credentials failed: {exc}")
            return False

    def _save_token_to_file(self, token: str) -> None:
        cached: dict = {}
        if self.cache_file.exists():
            try:
                with open(self.cache_file, "r", encoding="utf-8") as file_handle:
                    loaded = json.load(file_handle)
                if isinstance(loaded, dict):
                    cached = loaded
            except (OSError, ValueError) as exc:
                logger.warning("Discarding unreadable token cache %s: %s", self.cache_file, exc)

        cached[self._key_identifier] = token

        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.cache_file, "w", encoding="utf-8") as file_handle:
                json.dump(cached, file_handle)
            self.cache_file.chmod(0o600)
        except OSError as exc:
            logger.warning("Could not save token cache to %s: %s", self.cache_file, exc)

    def _handle_keyring_failure(self, reason: str) -> None:
        if self._keyring_supported:
            logger.warning(
                "Secure credential storage unavailable (%s). Falling back to plaintext cache.",
                reason,
            )
        self._keyring_supported = False
        self._cache_backend = "file"
        if not self._insecure_storage_warning:
            self._insecure_storage_warning = (
                f"Secure credential storage unavailable ({reason}). "
                f"Falling back to plaintext cache at {self.cache_file}."
            )

    def clear_cache(self) -> None:
        """Clear the cached token (force a new login next time)."""
        if self.cache_file.exists():
            self.cache_file.unlink()
        try:
            keyring.delete_password(KEYRING_SERVICE_NAME, self._key_identifier)
        except KeyringError as exc:
            logger.warning("Could not remove credentials from keyring: %s", exc)
