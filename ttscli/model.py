"""
Model module for ttscli package.

Contains the TTS provider adapters, voice/model catalogs, and audio synthesis
to file.
"""

from pathlib import Path
from typing import Dict, Iterator, List, NamedTuple, Type

from elevenlabs.client import ElevenLabs
from openai import OpenAI

from .config import DEFAULT_MODEL_ID, DEFAULT_VOICE_ID, Config
from .errors import MissingApiKeyError, ProviderError

# ----------------------------
# Constants and catalogs
# ----------------------------
DEFAULT_OUTPUT_FORMAT = "mp3_44100_128"

KNOWN_OPENAI_VOICES = [
    "alloy", "verse", "coral", "onyx", "shimmer",
    "fable", "echo", "nova", "sage", "ash", "ballad",
]

# ElevenLabs-style format prefix -> OpenAI response_format
FORMAT_MAP = {"mp3": "mp3", "wav": "wav", "opus": "opus", "aac": "aac", "flac": "flac", "pcm": "pcm"}


class CatalogEntry(NamedTuple):
    name: str
    id: str
    description: str = ""


def container_of(output_format: str) -> str:
    """Container name of an output format, e.g. 'mp3_44100_128' -> 'mp3'."""
    return output_format.split("_", 1)[0].lower()


def audio_suffix(output_format: str) -> str:
    """File suffix matching an output format."""
    return "." + container_of(output_format)


# ----------------------------
# Providers
# ----------------------------
class TTSProvider:
    """Interface every TTS backend implements."""

    name = ""
    default_voice = ""
    default_model = ""
    default_format = DEFAULT_OUTPUT_FORMAT

    def synthesize(self, voice_id: str, model_id: str, text: str, output_format: str) -> Iterator[bytes]:
        raise NotImplementedError

    def list_voices(self) -> List[CatalogEntry]:
        raise NotImplementedError

    def list_models(self) -> List[CatalogEntry]:
        raise NotImplementedError


class ElevenLabsProvider(TTSProvider):
    name = "elevenlabs"
    default_voice = DEFAULT_VOICE_ID
    default_model = DEFAULT_MODEL_ID

    def __init__(self, api_key: str, client=None):
        self.client = client or ElevenLabs(api_key=api_key)

    def synthesize(self, voice_id: str, model_id: str, text: str, output_format: str) -> Iterator[bytes]:
        # The SDK streams lazily, so request errors surface while iterating.
        try:
            audio = self.client.text_to_speech.convert(
                voice_id,
                text=text,
                model_id=model_id,
                output_format=output_format,
            )
            for chunk in audio:
                if chunk:
                    yield chunk
        except Exception as e:
            raise ProviderError(f"ElevenLabs synthesis failed: {e}") from e

    def list_voices(self) -> List[CatalogEntry]:
        try:
            response = self.client.voices.get_all()
        except Exception as e:
            raise ProviderError(f"Error fetching voices: {e}") from e
        return [CatalogEntry(v.name or "", v.voice_id, v.description or "") for v in response.voices]

    def list_models(self) -> List[CatalogEntry]:
        try:
            models = self.client.models.get_all()
        except Exception as e:
            raise ProviderError(f"Error fetching models: {e}") from e
        return [CatalogEntry(m.name or "", m.model_id, m.description or "") for m in models]


class OpenAIProvider(TTSProvider):
    name = "openai"
    default_voice = "alloy"
    default_model = "tts-1-hd"
    default_format = "mp3"

    def __init__(self, api_key: str, client=None):
        self.client = client or OpenAI(api_key=api_key)

    def synthesize(self, voice_id: str, model_id: str, text: str, output_format: str) -> Iterator[bytes]:
        fmt = FORMAT_MAP.get(container_of(output_format))
        if fmt is None:
            raise ProviderError(f"Unsupported output format for OpenAI: {output_format}")
        try:
            # Current SDK uses 'response_format' (not 'format')
            with self.client.audio.speech.with_streaming_response.create(
                model=model_id,
                voice=voice_id,
                input=text,
                response_format=fmt,
            ) as response:
                for chunk in response.iter_bytes():
                    yield chunk
        except Exception as e:
            raise ProviderError(f"OpenAI synthesis failed: {e}") from e

    def list_voices(self) -> List[CatalogEntry]:
        # No listing endpoint; availability may vary by account.
        return [CatalogEntry(v, v) for v in KNOWN_OPENAI_VOICES]

    def list_models(self) -> List[CatalogEntry]:
        try:
            models = self.client.models.list()
        except Exception as e:
            raise ProviderError(f"Error fetching models: {e}") from e
        return [CatalogEntry(m.id, m.id, f"owned by {m.owned_by}") for m in models if "tts" in m.id]


PROVIDERS: Dict[str, Type[TTSProvider]] = {
    ElevenLabsProvider.name: ElevenLabsProvider,
    OpenAIProvider.name: OpenAIProvider,
}


def get_provider(config: Config) -> TTSProvider:
    """
    Build the provider named in the config.

    Raises:
        MissingApiKeyError: the config carries no API key.
        ValueError: the provider name is unknown.
    """
    if not config.api_key:
        raise MissingApiKeyError("No API key found. Use 'set-key' command to set your API key.")
    try:
        provider_cls = PROVIDERS[config.provider]
    except KeyError:
        raise ValueError(f"Unknown provider '{config.provider}' (choose from {', '.join(PROVIDERS)})")
    return provider_cls(api_key=config.api_key)


# ----------------------------
# Audio synthesis
# ----------------------------
def synthesize_to_file(
    provider: TTSProvider,
    out_path: Path,
    text: str,
    voice_id: str,
    model_id: str,
    output_format: str,
) -> Path:
    """
    Stream synthesized speech into a file.

    Returns once the whole stream has been written.

    Args:
        provider: TTS backend
        out_path: Output file path
        text: Text to synthesize
        voice_id: Provider voice id
        model_id: Provider model id
        output_format: Output format, e.g. mp3_44100_128

    Returns:
        The path written.
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("wb") as handle:
        for chunk in provider.synthesize(voice_id, model_id, text, output_format):
            handle.write(chunk)
    return out_path
