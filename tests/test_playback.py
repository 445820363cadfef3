import asyncio
import sys
from pathlib import Path

import pytest

from ttscli.errors import PlaybackError
from ttscli.playback import (
    CapabilityResolver,
    Command,
    PlaybackRequest,
    applescript_quote,
    command_exists,
    pick_notifier,
    pick_player,
    powershell_quote,
    remove_later,
    spawn_detached,
)

AUDIO = Path("/tmp/speech.mp3")


def run(coro):
    return asyncio.run(coro)


# ----------------------------
# command_exists
# ----------------------------
def test_command_exists_false_for_unknown_binary():
    assert run(command_exists("definitely-not-a-real-binary-xyz")) is False


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell expected")
def test_command_exists_true_for_sh():
    assert run(command_exists("sh")) is True


def test_command_exists_false_when_lookup_fails(monkeypatch):
    async def boom(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(asyncio, "create_subprocess_exec", boom)

    assert run(command_exists("sh")) is False


# ----------------------------
# pick_player
# ----------------------------
def test_linux_picks_aplay_after_probing_in_order(probe_factory):
    probe = probe_factory("aplay", "paplay")

    command = run(pick_player(PlaybackRequest(AUDIO, "linux"), probe))

    assert command == Command("aplay", (str(AUDIO),))
    assert probe.probed == ["mpv", "mplayer", "aplay"]


def test_linux_prefers_mpv_with_flags(probe_factory):
    probe = probe_factory("mpv", "mplayer", "aplay", "paplay")

    command = run(pick_player(PlaybackRequest(AUDIO, "linux"), probe))

    assert command.argv() == ["mpv", "--no-terminal", str(AUDIO)]
    assert probe.probed == ["mpv"]


def test_linux_mplayer_is_quiet(probe_factory):
    probe = probe_factory("mplayer")

    command = run(pick_player(PlaybackRequest(AUDIO, "linux"), probe))

    assert command.argv() == ["mplayer", "-really-quiet", str(AUDIO)]


def test_linux_without_players_falls_back_to_xdg_open(probe_factory):
    probe = probe_factory()

    command = run(pick_player(PlaybackRequest(AUDIO, "linux"), probe))

    assert command == Command("xdg-open", (str(AUDIO),))
    assert probe.probed == ["mpv", "mplayer", "aplay", "paplay"]


def test_darwin_uses_afplay_without_probing(probe_factory):
    probe = probe_factory()

    command = run(pick_player(PlaybackRequest(AUDIO, "darwin"), probe))

    assert command == Command("afplay", (str(AUDIO),))
    assert probe.probed == []


def test_windows_opens_with_default_handler(probe_factory):
    probe = probe_factory()

    command = run(pick_player(PlaybackRequest(AUDIO, "win32"), probe))

    assert command.argv() == ["cmd", "/c", "start", "", str(AUDIO)]
    assert probe.probed == []


def test_unknown_platform_uses_desktop_open(probe_factory):
    probe = probe_factory("mpv")

    command = run(pick_player(PlaybackRequest(AUDIO, "freebsd13"), probe))

    assert command == Command("xdg-open", (str(AUDIO),))
    assert probe.probed == []


# ----------------------------
# pick_notifier
# ----------------------------
def test_darwin_notifier_escapes_quotes(probe_factory):
    probe = probe_factory("osascript")

    command = run(pick_notifier("darwin", "Build", 'said "done"', probe))

    assert command.program == "osascript"
    assert command.args == ("-e", 'display notification "said \\"done\\"" with title "Build"')


def test_darwin_notifier_absent(probe_factory):
    assert run(pick_notifier("darwin", "t", "m", probe_factory())) is None


def test_windows_notifier_uses_powershell(probe_factory):
    probe = probe_factory("powershell")

    command = run(pick_notifier("win32", "Title", "it's done", probe))

    assert command.program == "powershell"
    assert command.args[0] == "-Command"
    assert "MessageBox]::Show('it''s done', 'Title')" in command.args[1]


def test_linux_notifier_uses_notify_send(probe_factory):
    probe = probe_factory("notify-send")

    command = run(pick_notifier("linux", "Title", "Body", probe))

    assert command == Command("notify-send", ("Title", "Body"))
    assert probe.probed == ["notify-send"]


def test_other_platform_has_no_notifier(probe_factory):
    probe = probe_factory("notify-send")

    assert run(pick_notifier("aix", "Title", "Body", probe)) is None
    assert probe.probed == []


def test_quoting_helpers():
    assert applescript_quote('a "b" \\ c') == '"a \\"b\\" \\\\ c"'
    assert powershell_quote("it's") == "'it''s'"


# ----------------------------
# CapabilityResolver
# ----------------------------
def test_resolver_play_spawns_picked_command(probe_factory, capsys):
    spawned = []
    resolver = CapabilityResolver("linux", probe=probe_factory("paplay"), spawn=spawned.append)

    assert run(resolver.play(AUDIO)) is True
    assert spawned == [Command("paplay", (str(AUDIO),))]
    assert "Audio playback started" in capsys.readouterr().out


def test_resolver_play_reports_spawn_failure(probe_factory, capsys):
    def failing_spawn(command):
        raise PlaybackError(f"Could not start {command.program}")

    resolver = CapabilityResolver("darwin", probe=probe_factory(), spawn=failing_spawn)

    assert run(resolver.play(AUDIO)) is False
    captured = capsys.readouterr()
    assert "Could not start afplay" in captured.err
    assert "mpv, mplayer, or aplay" in captured.out


def test_resolver_notify_without_notifier(probe_factory):
    spawned = []
    resolver = CapabilityResolver("linux", probe=probe_factory(), spawn=spawned.append)

    assert run(resolver.notify("Title", "Body")) is False
    assert spawned == []


def test_resolver_notify_spawns(probe_factory):
    spawned = []
    resolver = CapabilityResolver("linux", probe=probe_factory("notify-send"), spawn=spawned.append)

    assert run(resolver.notify("Title", "Body")) is True
    assert spawned == [Command("notify-send", ("Title", "Body"))]


# ----------------------------
# Launching and cleanup
# ----------------------------
def test_spawn_detached_missing_program():
    with pytest.raises(PlaybackError):
        spawn_detached(Command("definitely-not-a-real-binary-xyz", ("x",)))


def test_remove_later_deletes_file(tmp_path):
    audio = tmp_path / "speech.mp3"
    audio.write_bytes(b"data")

    run(remove_later(audio, delay=0))

    assert not audio.exists()


def test_remove_later_ignores_missing_file(tmp_path):
    run(remove_later(tmp_path / "gone.mp3", delay=0))
