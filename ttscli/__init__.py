"""
ttscli - Text-to-speech from the command line.

A small CLI utility that converts text into speech with a hosted TTS API
(ElevenLabs or OpenAI), saves the audio, and plays it or raises a desktop
notification with whatever player the platform has installed.
"""

__version__ = "1.0.0"

from .config import Config, ConfigStore
from .model import get_provider, synthesize_to_file
from .playback import CapabilityResolver, command_exists, pick_notifier, pick_player
from .cli import main

__all__ = [
    "Config", "ConfigStore", "get_provider", "synthesize_to_file",
    "CapabilityResolver", "command_exists", "pick_notifier", "pick_player", "main",
]
