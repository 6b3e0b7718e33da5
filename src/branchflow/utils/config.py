"""Configuration management for branchflow."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv
from pydantic import ValidationError

from ..models.types import Settings
from ..storage.filesystem import JsonFileStore
from .errors import ConfigurationError
from .logger import Logger

# Load environment variables from .env file
load_dotenv()

PROJECT_CONFIG_FILE = ".branchflow.json"
GLOBAL_CONFIG_PATH = Path.home() / ".branchflow" / "config.json"

CONFIG_KEYS = ("googleAiKey", "githubToken", "linearApiKey", "linearEnabled")

# Keys the workflows cannot run without. Advisory: get_config() never
# enforces them, `config list` and the finish commands report them.
REQUIRED_CONFIG_KEYS = ("googleAiKey", "githubToken")

CONFIG_KEY_DESCRIPTIONS = {
    "googleAiKey": "Google AI (Gemini) API key",
    "githubToken": "GitHub token used by the gh CLI",
    "linearApiKey": "Linear API key",
    "linearEnabled": "Enable Linear integration (true/false)",
}

_TRUTHY = ("true", "1")


def settings_from_env(environ: Optional[Dict[str, str]] = None) -> Settings:
    """Build settings from environment variables only."""
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}

    if environ.get("GOOGLE_AI_KEY"):
        data["googleAiKey"] = environ["GOOGLE_AI_KEY"]

    token = environ.get("GH_TOKEN") or environ.get("GITHUB_TOKEN")
    if token:
        data["githubToken"] = token

    if environ.get("LINEAR_API_KEY"):
        data["linearApiKey"] = environ["LINEAR_API_KEY"]

    if "LINEAR_ENABLED" in environ:
        data["linearEnabled"] = environ["LINEAR_ENABLED"].strip().lower() in _TRUTHY

    return Settings(**data)


def parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def mask_secret(value: str) -> str:
    """Show the first and last four characters of a secret."""
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}{'*' * (len(value) - 8)}{value[-4:]}"


class ConfigManager:
    """
    Resolves settings from three sources, first match wins:

    1. project file ``./.branchflow.json``
    2. global file ``~/.branchflow/config.json``
    3. environment variables

    A file source is used whole; fields are never merged across sources.
    Writes always go to the global file.
    """

    def __init__(
        self,
        project_path: Optional[Union[str, Path]] = None,
        global_path: Optional[Union[str, Path]] = None,
        environ: Optional[Dict[str, str]] = None
    ):
        self.project_store = JsonFileStore(project_path or Path.cwd() / PROJECT_CONFIG_FILE)
        self.global_store = JsonFileStore(global_path or GLOBAL_CONFIG_PATH)
        self.environ = environ

    def _read(self, store: JsonFileStore) -> Optional[Settings]:
        if not store.exists():
            return None
        try:
            data = store.load()
            if not isinstance(data, dict):
                raise ConfigurationError(f"Expected a JSON object in {store.path}")
            return Settings(**data)
        except (ConfigurationError, ValidationError) as e:
            Logger.warning(f"Ignoring invalid config file {store.path}: {e}")
            return None

    def get_config(self) -> Settings:
        """Resolve the effective settings."""
        for store in (self.project_store, self.global_store):
            settings = self._read(store)
            if settings is not None:
                Logger.debug(f"Using config from {store.path}")
                return settings
        Logger.debug("Using config from environment")
        return settings_from_env(self.environ)

    def list_config(self) -> Settings:
        return self.get_config()

    def get_config_value(self, key: str) -> Any:
        self._check_key(key)
        return getattr(self.get_config(), key)

    def get_config_path(self) -> Path:
        """The file that is authoritative for display purposes."""
        if self.project_store.exists():
            return self.project_store.path
        return self.global_store.path

    def set_config_value(self, key: str, value: Any) -> Path:
        return self.set_config_values({key: value})

    def set_config_values(self, patch: Dict[str, Any]) -> Path:
        """Merge ``patch`` into the global file."""
        for key in patch:
            self._check_key(key)

        current = self._read(self.global_store)
        data = current.to_dict() if current else {}
        data.update(patch)

        try:
            settings = Settings(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e

        return self.global_store.save(settings.to_dict())

    def is_linear_enabled(self) -> bool:
        return self.get_config().linearEnabled is not False

    def missing_required_keys(self) -> List[str]:
        settings = self.get_config()
        return [key for key in REQUIRED_CONFIG_KEYS if not getattr(settings, key)]

    def validate_required_config(self) -> bool:
        return not self.missing_required_keys()

    @staticmethod
    def _check_key(key: str) -> None:
        if key not in CONFIG_KEYS:
            raise ConfigurationError(
                f"Unknown config key '{key}'. Valid keys: {', '.join(CONFIG_KEYS)}"
            )
