"""
Configuration manager: environment / .env settings with keyring credential storage
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

import keyring
from keyring.errors import KeyringError
from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationError
from .models import ColumnLabels

logger = logging.getLogger(__name__)

DEFAULT_BOARD_ID = 125
DEFAULT_TIMEOUT = 30


def parse_name_list(raw: Optional[str]) -> List[str]:
    """Split a comma-separated list of names, dropping blank entries"""
    if not raw:
        return []
    return [name.strip() for name in raw.split(',') if name.strip()]


def normalize_base_url(raw: str) -> str:
    """Ensure the Jira URL has a scheme and no trailing slash"""
    url = raw.strip().rstrip('/')
    if '://' not in url:
        url = f"https://{url}"
    return url


@dataclass(frozen=True)
class Settings:
    """Runtime parameters for one report run"""
    jira_base_url: str
    jira_email: str
    jira_api_token: str = field(repr=False)
    default_board_id: int = DEFAULT_BOARD_ID
    column_labels: ColumnLabels = field(default_factory=ColumnLabels)
    excluded_names: List[str] = field(default_factory=list)
    preferred_order: List[str] = field(default_factory=list)
    timeout: float = DEFAULT_TIMEOUT


class ConfigManager:
    """Builds Settings from the environment, a .env file and the system keyring"""

    SERVICE_NAME = "jira-sprint-sheet"

    def __init__(self, env: Optional[Mapping[str, str]] = None, env_file: Optional[Path] = None):
        """
        Args:
            env: Explicit key/value source. When omitted, a .env file is loaded
                 into the process environment and os.environ is used.
            env_file: .env file to load (default: nearest .env from the working directory)
        """
        if env is None:
            dotenv_path = str(env_file) if env_file else find_dotenv(usecwd=True)
            if dotenv_path:
                logger.debug(f"Loading environment from {dotenv_path}")
                load_dotenv(dotenv_path)
            env = os.environ
        self.env = env

    def load_settings(self) -> Settings:
        """Resolve and validate all settings, failing fast on missing credentials"""
        base_url = self._require('JIRA_BASE_URL')
        email = self._require('JIRA_EMAIL')

        api_token = self._get('JIRA_API_KEY') or self.get_stored_token(email)
        if not api_token:
            raise ConfigurationError(
                "Jira API token is not configured",
                config_key='JIRA_API_KEY',
                remediation="Set JIRA_API_KEY or store a token with --config"
            )

        settings = Settings(
            jira_base_url=normalize_base_url(base_url),
            jira_email=email,
            jira_api_token=api_token,
            default_board_id=self._get_int('DEFAULT_BOARD_ID', DEFAULT_BOARD_ID),
            column_labels=ColumnLabels(
                developer=self._get('COLUMN_DEVELOPER') or ColumnLabels.developer,
                issue_key=self._get('COLUMN_ISSUE_KEY') or ColumnLabels.issue_key,
                issue_type=self._get('COLUMN_ISSUE_TYPE') or ColumnLabels.issue_type,
                summary=self._get('COLUMN_SUMMARY') or ColumnLabels.summary,
                assignee=self._get('COLUMN_ASSIGNEE') or ColumnLabels.assignee,
                status=self._get('COLUMN_STATUS') or ColumnLabels.status,
            ),
            excluded_names=parse_name_list(self._get('TESTERS_TO_EXCLUDE')),
            preferred_order=parse_name_list(self._get('DEVELOPER_ORDER')),
            timeout=self._get_float('JIRA_TIMEOUT', DEFAULT_TIMEOUT),
        )

        logger.info(f"Jira Base URL: {settings.jira_base_url}")
        logger.info(f"Jira Email: {settings.jira_email}")
        logger.info(f"Default Board ID: {settings.default_board_id}")
        logger.info(f"Testers to exclude: {', '.join(settings.excluded_names) or '(none)'}")
        logger.info(f"Developer order: {', '.join(settings.preferred_order) or '(alphabetical)'}")
        return settings

    def get_stored_token(self, email: str) -> Optional[str]:
        """Look up the API token saved in the system keyring"""
        try:
            return keyring.get_password(self.SERVICE_NAME, email)
        except KeyringError as e:
            logger.warning(f"Could not read API token from keyring: {e}")
            return None

    def save_api_token(self, email: str, api_token: str) -> None:
        """Save API token to the system keyring (encrypted)"""
        if not api_token:
            raise ConfigurationError("API token cannot be empty", config_key='JIRA_API_KEY')
        try:
            keyring.set_password(self.SERVICE_NAME, email, api_token)
        except KeyringError as e:
            raise ConfigurationError(
                "Could not store API token in the system keyring",
                remediation="Set JIRA_API_KEY in the environment instead",
                details=str(e)
            ) from e
        logger.info(f"API token for {email} stored in system keyring")

    def _get(self, key: str) -> Optional[str]:
        value = self.env.get(key)
        if value is None:
            return None
        value = value.strip()
        return value or None

    def _require(self, key: str) -> str:
        value = self._get(key)
        if not value:
            raise ConfigurationError(f"Missing required setting {key}", config_key=key)
        return value

    def _get_int(self, key: str, default: int) -> int:
        raw = self._get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got {raw!r}", config_key=key)

    def _get_float(self, key: str, default: float) -> float:
        raw = self._get(key)
        if raw is None:
            return default
        try:
            value = float(raw)
        except ValueError:
            raise ConfigurationError(f"{key} must be a number, got {raw!r}", config_key=key)
        if value <= 0:
            raise ConfigurationError(f"{key} must be positive, got {raw!r}", config_key=key)
        return value
