import http.client
import io
import os

import pytest

from gesture_chess.core import model_assets
from gesture_chess.core.model_assets import ensure_hand_landmarker_task

URL = "http://models.test/hand_landmarker.task"


class TruncatedResponse(io.BytesIO):
    def read(self, *args):
        raise http.client.IncompleteRead(b"partial", 1000)


def serve(monkeypatch, response_factory):
    calls = []

    def fake_urlopen(url, timeout=None):
        calls.append(url)
        return response_factory()

    monkeypatch.setattr(model_assets.urllib.request, "urlopen", fake_urlopen)
    return calls


def test_existing_file_is_not_downloaded(tmp_path, monkeypatch):
    path = tmp_path / "hand_landmarker.task"
    path.write_bytes(b"model")
    calls = serve(monkeypatch, lambda: io.BytesIO(b"other"))

    assert ensure_hand_landmarker_task(str(path), URL) == str(path)
    assert calls == []
    assert path.read_bytes() == b"model"


def test_download_writes_the_model(tmp_path, monkeypatch):
    path = tmp_path / "models" / "hand_landmarker.task"
    serve(monkeypatch, lambda: io.BytesIO(b"model bytes"))

    assert ensure_hand_landmarker_task(str(path), URL) == str(path)
    assert path.read_bytes() == b"model bytes"
    assert not os.path.exists(str(path) + ".part")


def test_truncated_download_leaves_nothing_behind(tmp_path, monkeypatch):
    path = tmp_path / "hand_landmarker.task"
    calls = serve(monkeypatch, TruncatedResponse)

    with pytest.raises(RuntimeError):
        ensure_hand_landmarker_task(str(path), URL)
    assert not path.exists()
    assert not os.path.exists(str(path) + ".part")

    # the next start tries again instead of trusting a broken file
    with pytest.raises(RuntimeError):
        ensure_hand_landmarker_task(str(path), URL)
    assert len(calls) == 2


def test_network_error_is_reported(tmp_path, monkeypatch):
    path = tmp_path / "hand_landmarker.task"

    def unreachable():
        raise OSError("network is unreachable")

    serve(monkeypatch, unreachable)
    with pytest.raises(RuntimeError, match="download it manually"):
        ensure_hand_landmarker_task(str(path), URL)
    assert not path.exists()
