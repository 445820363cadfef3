"""
Config module for ttscli package.

Contains the persisted user preferences (API key, voice, model, provider) and
the store that reads and writes them as a JSON document.
"""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path

from .errors import ConfigParseError

# ----------------------------
# Defaults
# ----------------------------
DEFAULT_VOICE_ID = "56AoDkrOh6qfVPDXZ7Pt"
DEFAULT_MODEL_ID = "eleven_turbo_v2_5"
DEFAULT_PROVIDER = "elevenlabs"

API_KEY_ENV = "ELEVENLABS_API_KEY"
CONFIG_PATH_ENV = "TTSCLI_CONFIG"
CONFIG_FILENAME = "ttscli-config.json"

# Python attribute -> JSON key
_FIELD_KEYS = {
    "api_key": "apiKey",
    "voice_id": "voiceId",
    "model_id": "modelId",
    "provider": "provider",
}


def default_config_path() -> Path:
    """Return the config file path, honouring TTSCLI_CONFIG."""
    override = os.getenv(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / CONFIG_FILENAME


@dataclass(frozen=True)
class Config:
    api_key: str = ""
    voice_id: str = DEFAULT_VOICE_ID
    model_id: str = DEFAULT_MODEL_ID
    provider: str = DEFAULT_PROVIDER

    @classmethod
    def defaults(cls) -> "Config":
        """Config used when no file exists yet."""
        return cls(api_key=os.getenv(API_KEY_ENV) or "")

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        values = {attr: data[key] for attr, key in _FIELD_KEYS.items() if key in data}
        return cls(**values)

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for attr, key in _FIELD_KEYS.items()}

    def masked_key(self) -> str:
        """API key with all but the last four characters hidden."""
        if not self.api_key:
            return "(not set)"
        if len(self.api_key) <= 4:
            return "*" * len(self.api_key)
        return "*" * (len(self.api_key) - 4) + self.api_key[-4:]


class ConfigStore:
    """
    Reads and writes a Config at a fixed path.

    Saving always rewrites the whole document; use update() to change single
    fields so the others survive.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Config:
        """
        Load the config file.

        Returns:
            The stored Config, or defaults (API key from the environment)
            when the file does not exist.

        Raises:
            ConfigParseError: the file is not UTF-8 JSON, not a JSON object, or
                holds a non-string field.
        """
        if not self.path.exists():
            return Config.defaults()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigParseError(self.path, str(e)) from e
        if not isinstance(data, dict):
            raise ConfigParseError(self.path, "expected a JSON object")
        for key in _FIELD_KEYS.values():
            if key in data and not isinstance(data[key], str):
                raise ConfigParseError(self.path, f"{key} must be a string")
        return Config.from_dict(data)

    def save(self, config: Config) -> None:
        """Overwrite the config file with the full config."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")

    def update(self, **fields) -> Config:
        """Load, overwrite only the given fields, save. Returns the saved config."""
        config = replace(self.load(), **fields)
        self.save(config)
        return config
