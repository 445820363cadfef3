import json

import pytest

from fakes import RecordingProbe


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("ELEVENLABS_API_KEY", raising=False)
    monkeypatch.delenv("TTSCLI_CONFIG", raising=False)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config" / "ttscli-config.json"


@pytest.fixture
def write_config(config_path):
    def _write(data):
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data), encoding="utf-8")
        return config_path
    return _write


@pytest.fixture
def probe_factory():
    return RecordingProbe
