"""
API key management for UzTrans-LLMs.

Keys for the hosted translation services are looked up in three places,
first match wins: environment variables, the OS keychain (through
keyring) and finally a JSON file under the data directory. Nothing
here ever logs a key value.

Usage:
    from uztrans_llms.keys import KeyManager

    km = KeyManager()
    km.set_key("gemini", "AIza...")
    key = km.get_key("gemini")
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError

from uztrans_llms.config import DATA_DIR

logger = logging.getLogger(__name__)


# Supported services and the env vars checked for each, in order
SERVICES = {
    "gemini": ("GEMINI_API_KEY", "API_KEY"),
    "openai": ("OPENAI_API_KEY",),
}

# Which service's key each translator backend needs
BACKEND_SERVICES = {
    "gemini": "gemini",
    "google": "gemini",
    "openai": "openai",
    "gpt": "openai",
}


def service_for_backend(backend: str) -> Optional[str]:
    """Return the key service a backend authenticates with (None for demo)."""
    return BACKEND_SERVICES.get(backend.lower())


@dataclass
class KeyInfo:
    """Where a service's key was found, masked for display."""
    service: str
    is_set: bool
    source: str  # 'env', 'keyring', 'config', 'none'
    masked_value: str  # e.g., "AIza...abc1"


class KeyManager:
    """Reads and writes translation service keys.

    Lookup order is env, keychain, then ~/.uztrans/keys.json. Writes go to
    the keychain when one is usable and to the JSON file otherwise.
    """

    SERVICE_NAME = "UzTrans-LLMs"

    def __init__(self, config_file: Optional[Path] = None, use_keyring: bool = True):
        self.config_file = config_file or DATA_DIR / "keys.json"
        self._keyring_available = use_keyring and self._check_keyring()

    def _check_keyring(self) -> bool:
        """Check if a usable keyring backend is installed."""
        backend = keyring.get_keyring()
        return backend.priority > 0

    def _env_vars(self, service: str) -> tuple[str, ...]:
        return SERVICES.get(service, (f"{service.upper()}_API_KEY",))

    def _read_config(self) -> dict:
        if not self.config_file.exists():
            return {}
        try:
            config = json.loads(self.config_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable key file {self.config_file}: {e}")
            return {}
        return config if isinstance(config, dict) else {}

    def _write_config(self, config: dict) -> None:
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(config, indent=2), encoding="utf-8")
        self.config_file.chmod(0o600)  # Restrict permissions

    def _lookup(self, service: str) -> tuple[Optional[str], str]:
        """Return (key, source) for the first location holding a key."""
        for env_var in self._env_vars(service):
            if env_val := os.getenv(env_var):
                return env_val, "env"

        if self._keyring_available:
            try:
                if key := keyring.get_password(self.SERVICE_NAME, service):
                    return key, "keyring"
            except KeyringError as e:
                logger.debug(f"Keyring lookup failed for {service}: {e}")

        if key := self._read_config().get(service):
            return key, "config"

        return None, "none"

    def get_key(self, service: str) -> Optional[str]:
        """Return the key for ``service`` (gemini, openai), or None."""
        key, _ = self._lookup(service.lower())
        return key

    def set_key(self, service: str, key: str, use_keyring: bool = True) -> str:
        """Save a key and report where it went: "keyring" or "config"."""
        service = service.lower()

        if use_keyring and self._keyring_available:
            try:
                keyring.set_password(self.SERVICE_NAME, service, key)
                return "keyring"
            except KeyringError as e:
                logger.warning(f"Keyring unavailable, falling back to config file: {e}")

        config = self._read_config()
        config[service] = key
        self._write_config(config)
        return "config"

    def delete_key(self, service: str) -> bool:
        """Remove the key from every writable location. True if any held it."""
        service = service.lower()
        deleted = False

        if self._keyring_available:
            try:
                keyring.delete_password(self.SERVICE_NAME, service)
                deleted = True
            except KeyringError:
                pass  # nothing stored there

        config = self._read_config()
        if service in config:
            del config[service]
            self._write_config(config)
            deleted = True

        return deleted

    def get_key_info(self, service: str) -> KeyInfo:
        service = service.lower()
        key, source = self._lookup(service)
        return KeyInfo(
            service=service,
            is_set=key is not None,
            source=source,
            masked_value=self.mask_key(key) if key else "",
        )

    def list_keys(self) -> list[KeyInfo]:
        """List all supported services and their key status."""
        return [self.get_key_info(service) for service in SERVICES]

    @staticmethod
    def mask_key(key: str) -> str:
        """Keep the first and last four characters; hide short keys entirely."""
        if len(key) <= 12:
            return "*" * len(key)
        return f"{key[:4]}...{key[-4:]}"
