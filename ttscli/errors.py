"""
Errors module for ttscli package.

Every failure the CLI distinguishes has its own exception type here.
"""


class TTSCliError(Exception):
    """Base class for ttscli errors."""


class ConfigParseError(TTSCliError, ValueError):
    """The config file exists but does not hold a JSON object."""

    def __init__(self, path, reason):
        super().__init__(f"Could not parse config file {path}: {reason}")
        self.path = path
        self.reason = reason


class MissingApiKeyError(TTSCliError):
    """No API key in the config file or the environment."""


class ProviderError(TTSCliError):
    """The TTS provider call failed."""


class PlaybackError(TTSCliError):
    """A player or notifier process could not be launched."""


class CleanupError(TTSCliError):
    """A temporary audio file could not be removed."""
