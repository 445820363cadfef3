"""
CLI module for ttscli package.

Contains command-line argument parsing and the command actions.
"""

import argparse
import asyncio
import inspect
import os
import sys
import tempfile
from contextlib import suppress
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .config import ConfigStore, default_config_path
from .errors import CleanupError, ConfigParseError, MissingApiKeyError, ProviderError
from .model import PROVIDERS, audio_suffix, get_provider, synthesize_to_file
from .playback import CLEANUP_DELAY, CapabilityResolver, discard_file, remove_later
from .ui import print_catalog, print_error, progress_context


# ----------------------------
# Helpers
# ----------------------------
def temp_audio_path(kind: str, output_format: str) -> Path:
    """Create an empty temporary file for synthesized audio."""
    fd, name = tempfile.mkstemp(prefix=f"ttscli-{kind}-", suffix=audio_suffix(output_format))
    os.close(fd)
    return Path(name)


def resolve_voice_model(args, config, provider):
    """CLI flag, then config value, then provider default."""
    voice_id = args.voice or config.voice_id or provider.default_voice
    model_id = args.model or config.model_id or provider.default_model
    return voice_id, model_id


async def synthesize(
    provider,
    out_path: Path,
    text: str,
    voice_id: str,
    model_id: str,
    output_format: str,
    failure: str = "Error generating speech",
) -> bool:
    """Run synthesis off the event loop; report failures and return False."""
    try:
        with progress_context("Synthesizing audio (streaming)..."):
            await asyncio.to_thread(
                synthesize_to_file, provider, out_path, text, voice_id, model_id, output_format
            )
    except (ProviderError, OSError) as e:
        print_error(f"{failure}: {e}")
        return False
    return True


# ----------------------------
# Config commands
# ----------------------------
def cmd_set_key(args, store, resolver):
    store.update(api_key=args.api_key)
    print("API key saved successfully!")


def cmd_set_voice(args, store, resolver):
    store.update(voice_id=args.voice_id)
    print("Voice ID saved successfully!")


def cmd_set_model(args, store, resolver):
    store.update(model_id=args.model_id)
    print("Model ID saved successfully!")


def cmd_set_provider(args, store, resolver):
    config = store.load()
    if config.provider == args.provider:
        print(f"Provider is already {args.provider}.")
        return
    provider_cls = PROVIDERS[args.provider]
    store.update(
        provider=args.provider,
        voice_id=provider_cls.default_voice,
        model_id=provider_cls.default_model,
    )
    print(f"Provider set to {args.provider} (voice and model reset to its defaults).")


def cmd_show_config(args, store, resolver):
    config = store.load()
    print(f"Config file: {store.path}{'' if store.path.exists() else ' (not created yet)'}")
    print(f"  Provider: {config.provider}")
    print(f"  API key:  {config.masked_key()}")
    print(f"  Voice ID: {config.voice_id}")
    print(f"  Model ID: {config.model_id}")


# ----------------------------
# Provider commands
# ----------------------------
def cmd_list_voices(args, store, resolver):
    provider = get_provider(store.load())
    try:
        with progress_context("Fetching voices..."):
            voices = provider.list_voices()
    except ProviderError as e:
        print_error(str(e))
        return
    print_catalog("Available Voices", voices)


def cmd_list_models(args, store, resolver):
    provider = get_provider(store.load())
    try:
        with progress_context("Fetching models..."):
            models = provider.list_models()
    except ProviderError as e:
        print_error(str(e))
        return
    print_catalog("Available Models", models)


async def cmd_speak(args, store, resolver):
    config = store.load()
    provider = get_provider(config)
    voice_id, model_id = resolve_voice_model(args, config, provider)
    output_format = args.format or provider.default_format
    is_temp = not args.output
    out_path = temp_audio_path("speak", output_format) if is_temp else Path(args.output)

    print("Converting text to speech...")
    if not await synthesize(provider, out_path, args.text, voice_id, model_id, output_format):
        if is_temp:
            with suppress(CleanupError):
                discard_file(out_path)
        return
    print(f"Audio saved to: {out_path}")

    if args.play:
        print("Playing audio...")
        await resolver.play(out_path)
        if is_temp:
            await remove_later(out_path, CLEANUP_DELAY)


async def cmd_notify(args, store, resolver):
    config = store.load()
    provider = get_provider(config)
    voice_id, model_id = resolve_voice_model(args, config, provider)
    print(f"Notification: {args.title}")
    out_path = temp_audio_path("notify", provider.default_format)

    print("Generating notification audio...")
    if not await synthesize(
        provider, out_path, args.text, voice_id, model_id, provider.default_format,
        failure="Error generating notification",
    ):
        with suppress(CleanupError):
            discard_file(out_path)
        return

    await resolver.notify(args.title, args.text)
    await resolver.play(out_path)
    await remove_later(out_path, CLEANUP_DELAY)


# ----------------------------
# CLI setup
# ----------------------------
def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ttscli",
        description="A CLI tool for text-to-speech conversion with ElevenLabs or OpenAI.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Config file path (default: ~/.config/ttscli-config.json or $TTSCLI_CONFIG).")
    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    p = sub.add_parser("set-key", help="Set your API key.")
    p.add_argument("api_key", metavar="api-key", help="Your provider API key.")
    p.set_defaults(handler=cmd_set_key)

    p = sub.add_parser("set-voice", help="Set the default voice ID.")
    p.add_argument("voice_id", metavar="voice-id", help="Voice ID to use by default.")
    p.set_defaults(handler=cmd_set_voice)

    p = sub.add_parser("set-model", help="Set the default model ID.")
    p.add_argument("model_id", metavar="model-id", help="Model ID to use by default.")
    p.set_defaults(handler=cmd_set_model)

    p = sub.add_parser("set-provider", help="Choose the TTS provider.")
    p.add_argument("provider", choices=list(PROVIDERS), help="Provider name.")
    p.set_defaults(handler=cmd_set_provider)

    p = sub.add_parser("show-config", help="Show the current configuration.")
    p.set_defaults(handler=cmd_show_config)

    p = sub.add_parser("list-voices", help="List available voices.")
    p.set_defaults(handler=cmd_list_voices)

    p = sub.add_parser("list-models", help="List available models.")
    p.set_defaults(handler=cmd_list_models)

    p = sub.add_parser("speak", help="Convert text to speech.")
    p.add_argument("text", help="Text to convert to speech.")
    p.add_argument("-v", "--voice", help="Voice ID (overrides the configured voice).")
    p.add_argument("-m", "--model", help="Model ID (overrides the configured model).")
    p.add_argument("-o", "--output", help="Output file path (default: temporary file).")
    p.add_argument("-f", "--format", help="Output format, e.g. mp3_44100_128 (default depends on provider).")
    p.add_argument("--no-play", dest="play", action="store_false",
                   help="Don't play the audio after generating.")
    p.set_defaults(handler=cmd_speak)

    p = sub.add_parser("notify", help="Send a spoken desktop notification.")
    p.add_argument("text", help="Notification text.")
    p.add_argument("-v", "--voice", help="Voice ID (overrides the configured voice).")
    p.add_argument("-m", "--model", help="Model ID (overrides the configured model).")
    p.add_argument("-t", "--title", default="Notification", help="Notification title.")
    p.set_defaults(handler=cmd_notify)

    return parser


# ----------------------------
# Main application logic
# ----------------------------
def main(argv=None):
    """Main entry point for the ttscli application."""
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    store = ConfigStore(Path(args.config).expanduser() if args.config else default_config_path())
    resolver = CapabilityResolver(sys.platform)

    try:
        if inspect.iscoroutinefunction(args.handler):
            asyncio.run(args.handler(args, store, resolver))
        else:
            args.handler(args, store, resolver)
    except MissingApiKeyError as e:
        print_error(f"Error: {e}")
        sys.exit(1)
    except ConfigParseError as e:
        print_error(f"Error: {e}")
        sys.exit(1)
    except OSError as e:
        print_error(f"Error: {e}")
        sys.exit(1)
    except ValueError as e:
        print_error(f"Error: {e}")
        sys.exit(1)
