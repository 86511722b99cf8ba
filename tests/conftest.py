import os
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _make_response(status_code=200, json_body=None, text="", chunks=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.text = text
    if isinstance(json_body, Exception):
        response.json.side_effect = json_body
    else:
        response.json.return_value = json_body
    response.iter_content.return_value = list(chunks or [])
    return response


def _gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


@pytest.fixture
def make_response():
    """Factory for stand-ins of ``requests.Response``."""

    return _make_response


@pytest.fixture
def gemini_body():
    """Factory for a successful ``generateContent`` response body."""

    return _gemini_body


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run inside an empty directory with logs and env overrides contained."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GRAYSCOUT_LOG_DIR", str(tmp_path / "logs"))
    for key in list(os.environ):
        if key.startswith("GRAYSCOUT_IMAGE_FETCHER__"):
            monkeypatch.delenv(key)
    return tmp_path
