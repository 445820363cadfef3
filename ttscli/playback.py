"""
Playback module for ttscli package.

Picks the external program used to play audio or raise a desktop
notification on the running platform, and launches it detached.

Preference order is part of the contract: on Linux the players are probed
one after another in LINUX_PLAYERS order and the first installed one wins.
"""

import asyncio
import subprocess
import sys
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, List, NamedTuple, Optional, Sequence, Tuple

import regex as re

from .errors import CleanupError, PlaybackError
from .ui import print_error

CLEANUP_DELAY = 5.0

# Program and flags placed before the audio path
LINUX_PLAYERS = [
    ("mpv", ["--no-terminal"]),
    ("mplayer", ["-really-quiet"]),
    ("aplay", []),
    ("paplay", []),
]

Probe = Callable[[str], Awaitable[bool]]


class Command(NamedTuple):
    program: str
    args: Tuple[str, ...] = ()

    def argv(self) -> List[str]:
        return [self.program, *self.args]


class PlaybackRequest(NamedTuple):
    file_path: Path
    platform: str


Rule = Tuple[Callable[[], Awaitable[bool]], Callable[[], Command]]


# ----------------------------
# Probing
# ----------------------------
async def command_exists(name: str) -> bool:
    """
    Check whether an executable is on the PATH using the OS lookup command.

    Any failure (not found, lookup tool missing, permission error) counts as
    absent; this never raises.
    """
    lookup = "where" if sys.platform == "win32" else "which"
    try:
        proc = await asyncio.create_subprocess_exec(
            lookup,
            name,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        return await proc.wait() == 0
    except Exception:
        return False


async def first_match(rules: Sequence[Rule], fallback: Optional[Command] = None) -> Optional[Command]:
    """Evaluate rules in order; return the action of the first predicate that holds."""
    for predicate, action in rules:
        if await predicate():
            return action()
    return fallback


# ----------------------------
# Player strategies
# ----------------------------
class PlayerStrategy:
    """Desktop-open handler; also the fallback for unknown platforms."""

    def rules(self, audio_path: str, probe: Probe) -> List[Rule]:
        return []

    def fallback(self, audio_path: str) -> Command:
        return Command("xdg-open", (audio_path,))

    async def pick(self, audio_path: str, probe: Probe) -> Command:
        return await first_match(self.rules(audio_path, probe), self.fallback(audio_path))


class MacPlayer(PlayerStrategy):
    def fallback(self, audio_path: str) -> Command:
        return Command("afplay", (audio_path,))


class WindowsPlayer(PlayerStrategy):
    def fallback(self, audio_path: str) -> Command:
        # 'start' is a cmd builtin; the empty string is the window title.
        return Command("cmd", ("/c", "start", "", audio_path))


class LinuxPlayer(PlayerStrategy):
    def rules(self, audio_path: str, probe: Probe) -> List[Rule]:
        return [
            (partial(probe, program), partial(Command, program, (*flags, audio_path)))
            for program, flags in LINUX_PLAYERS
        ]


def player_strategy(platform: str) -> PlayerStrategy:
    if platform == "darwin":
        return MacPlayer()
    if platform == "win32":
        return WindowsPlayer()
    if platform.startswith("linux"):
        return LinuxPlayer()
    return PlayerStrategy()


async def pick_player(request: PlaybackRequest, probe: Probe = command_exists) -> Command:
    """Return the command that plays request.file_path on request.platform."""
    return await player_strategy(request.platform).pick(str(request.file_path), probe)


# ----------------------------
# Notifier strategies
# ----------------------------
def applescript_quote(text: str) -> str:
    """Quote text as an AppleScript string literal."""
    return '"' + re.sub(r'(["\\])', r"\\\1", text) + '"'


def powershell_quote(text: str) -> str:
    """Quote text as a single-quoted PowerShell string literal."""
    return "'" + re.sub(r"'", "''", text) + "'"


class NotifierStrategy:
    """No desktop notifications."""

    def rules(self, title: str, message: str, probe: Probe) -> List[Rule]:
        return []

    async def pick(self, title: str, message: str, probe: Probe) -> Optional[Command]:
        return await first_match(self.rules(title, message, probe))


class MacNotifier(NotifierStrategy):
    def rules(self, title, message, probe):
        script = f"display notification {applescript_quote(message)} with title {applescript_quote(title)}"
        return [(partial(probe, "osascript"), partial(Command, "osascript", ("-e", script)))]


class WindowsNotifier(NotifierStrategy):
    def rules(self, title, message, probe):
        script = (
            "[System.Reflection.Assembly]::LoadWithPartialName('System.Windows.Forms') | Out-Null; "
            f"[System.Windows.Forms.MessageBox]::Show({powershell_quote(message)}, {powershell_quote(title)})"
        )
        return [(partial(probe, "powershell"), partial(Command, "powershell", ("-Command", script)))]


class LinuxNotifier(NotifierStrategy):
    def rules(self, title, message, probe):
        return [(partial(probe, "notify-send"), partial(Command, "notify-send", (title, message)))]


def notifier_strategy(platform: str) -> NotifierStrategy:
    if platform == "darwin":
        return MacNotifier()
    if platform == "win32":
        return WindowsNotifier()
    if platform.startswith("linux"):
        return LinuxNotifier()
    return NotifierStrategy()


async def pick_notifier(platform: str, title: str, message: str, probe: Probe = command_exists) -> Optional[Command]:
    """Return the notification command for the platform, or None if there is none."""
    return await notifier_strategy(platform).pick(title, message, probe)


# ----------------------------
# Launching
# ----------------------------
def spawn_detached(command: Command) -> None:
    """
    Launch a command and abandon it.

    The child gets its own session and no stdio; its exit status and output
    are never observed.

    Raises:
        PlaybackError: the process could not be started.
    """
    kwargs = {}
    if sys.platform == "win32":
        kwargs["creationflags"] = subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["start_new_session"] = True
    try:
        subprocess.Popen(
            command.argv(),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            **kwargs,
        )
    except (OSError, ValueError) as e:
        raise PlaybackError(f"Could not start {command.program}: {e}") from e


class CapabilityResolver:
    """Player and notifier strategies for one platform, chosen once."""

    def __init__(self, platform: str = sys.platform, probe: Probe = command_exists, spawn=spawn_detached):
        self.platform = platform
        self.probe = probe
        self.spawn = spawn
        self.player = player_strategy(platform)
        self.notifier = notifier_strategy(platform)

    async def pick_player(self, audio_path: Path) -> Command:
        return await self.player.pick(str(audio_path), self.probe)

    async def pick_notifier(self, title: str, message: str) -> Optional[Command]:
        return await self.notifier.pick(title, message, self.probe)

    async def play(self, audio_path: Path) -> bool:
        """
        Start playing an audio file in the background.

        Returns:
            True if a player was launched, False otherwise.
        """
        command = await self.pick_player(audio_path)
        try:
            self.spawn(command)
        except PlaybackError as e:
            print_error(f"Error playing audio: {e}")
            print("Try installing an audio player like mpv, mplayer, or aplay.")
            return False
        print("Audio playback started")
        return True

    async def notify(self, title: str, message: str) -> bool:
        """Raise a desktop notification if the platform has a notifier."""
        command = await self.pick_notifier(title, message)
        if command is None:
            return False
        try:
            self.spawn(command)
        except PlaybackError as e:
            print_error(f"Error sending notification: {e}")
            return False
        return True


# ----------------------------
# Temporary file cleanup
# ----------------------------
def discard_file(path: Path) -> None:
    try:
        Path(path).unlink()
    except OSError as e:
        raise CleanupError(f"Could not remove {path}: {e}") from e


async def remove_later(path: Path, delay: float = CLEANUP_DELAY) -> None:
    """Delete a temporary file after a delay; failures are ignored."""
    await asyncio.sleep(delay)
    try:
        discard_file(path)
    except CleanupError:
        pass
