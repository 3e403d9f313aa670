"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import getpass
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from remotefs.services.pool import DEFAULT_MAX_SESSIONS

logger = logging.getLogger(__name__)


def default_known_hosts() -> str:
    return str(Path.home() / ".ssh" / "known_hosts")


@dataclass
class Settings:
    """Connection and runtime settings.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Transport
    host: str = field(default="localhost")
    port: int = field(default=22)
    username: str = field(default_factory=getpass.getuser)
    password: str | None = field(default=None, repr=False)
    private_key_path: str | None = field(default=None)
    known_hosts: str | None = field(default_factory=default_known_hosts)
    strict_host_key_checking: bool = field(default=True)

    # Remote commands
    sudo: bool = field(default=False)
    max_sessions: int = field(default=DEFAULT_MAX_SESSIONS)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from REMOTEFS_* environment variables.

        Returns:
            Settings instance with values from environment

        Raises:
            FileNotFoundError: If strict host key checking is on and no
                known_hosts file exists
        """
        strict = cls._get_bool("REMOTEFS_STRICT_HOST_KEY_CHECKING", True)
        return cls(
            host=os.getenv("REMOTEFS_HOST", "localhost"),
            port=cls._get_int("REMOTEFS_PORT", 22),
            username=os.getenv("REMOTEFS_USERNAME") or getpass.getuser(),
            password=cls._get_password(),
            private_key_path=os.getenv("REMOTEFS_PRIVATE_KEY_PATH") or None,
            known_hosts=cls._get_known_hosts(strict),
            strict_host_key_checking=strict,
            sudo=cls._get_bool("REMOTEFS_SUDO", False),
            max_sessions=cls._get_positive_int(
                "REMOTEFS_MAX_SESSIONS", DEFAULT_MAX_SESSIONS
            ),
            log_level=os.getenv("REMOTEFS_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("REMOTEFS_LOG_COLORS", True),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @classmethod
    def _get_positive_int(cls, key: str, default: int) -> int:
        value = cls._get_int(key, default)
        if value <= 0:
            logger.warning("%s must be > 0, got %d, using default %d", key, value, default)
            return default
        return value

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_password() -> str | None:
        """Get the SSH password, directly or through an indirection variable.

        REMOTEFS_PASSWORD takes precedence over REMOTEFS_PASSWORD_ENV_VAR,
        which names another variable holding the password.

        Returns:
            Password or None when neither is set
        """
        password = os.getenv("REMOTEFS_PASSWORD")
        if password is not None:
            return password

        env_var = os.getenv("REMOTEFS_PASSWORD_ENV_VAR")
        if not env_var:
            return None

        password = os.getenv(env_var, "")
        if not password:
            logger.warning("Password env var %s is empty", env_var)
        return password

    @staticmethod
    def _get_known_hosts(strict: bool) -> str | None:
        """Resolve the known_hosts path, failing closed.

        REMOTEFS_KNOWN_HOSTS=none disables verification. A custom path
        or ~/.ssh/known_hosts is used when it exists. A missing file raises
        in strict mode and disables verification otherwise.

        Returns:
            Path to known_hosts file or None to disable verification

        Raises:
            FileNotFoundError: If strict mode and the file is missing
        """
        value = os.getenv("REMOTEFS_KNOWN_HOSTS", "").strip()

        if value.lower() == "none":
            logger.critical(
                "SSH HOST KEY VERIFICATION DISABLED (REMOTEFS_KNOWN_HOSTS=none). "
                "Connections are open to MITM attacks."
            )
            return None

        path = Path(os.path.expanduser(value)) if value else Path(default_known_hosts())
        if path.exists():
            return str(path)

        if strict:
            raise FileNotFoundError(
                f"SSH host key verification required but known_hosts "
                f"not found at {path}.\n\n"
                f"To fix this:\n"
                f"1. Add host keys: ssh-keyscan <hostname> >> {path}\n"
                f"2. Or set REMOTEFS_STRICT_HOST_KEY_CHECKING=false\n"
                f"3. Or disable verification (NOT RECOMMENDED): "
                f"REMOTEFS_KNOWN_HOSTS=none"
            )

        logger.warning(
            "known_hosts not found at %s, verification disabled. This is insecure!",
            path,
        )
        return None
