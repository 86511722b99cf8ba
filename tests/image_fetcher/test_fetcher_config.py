from pathlib import Path

import pytest

from grayscout.apps.image_fetcher.core.config import (
    FetcherConfig,
    FetcherSettings,
    build_runtime_config,
    load_settings,
    read_api_key,
)
from grayscout.errors import ConfigError


def test_defaults_without_pyproject(isolated_cwd):
    settings = load_settings(isolated_cwd)

    assert settings.default_api_key_file == Path("googleai.key")
    assert settings.default_images_dir == Path("images")
    assert settings.default_grayscale_dir == Path("gs-images")
    assert settings.default_model == "gemini-2.5-flash-lite"
    assert settings.default_probe_timeout == pytest.approx(5.0)
    assert settings.default_generation_timeout is None
    assert settings.default_max_rounds == 10
    assert settings.default_deduplicate is False
    assert settings.default_preserve_extension is False


def test_pyproject_and_env_overrides(isolated_cwd, monkeypatch):
    (isolated_cwd / "pyproject.toml").write_text(
        "[tool.grayscout.image_fetcher]\n"
        'images_dir = "originals"\n'
        "max_rounds = 3\n"
        "deduplicate = true\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("GRAYSCOUT_IMAGE_FETCHER__MAX_ROUNDS", "7")
    monkeypatch.setenv("GRAYSCOUT_IMAGE_FETCHER__PROBE_TIMEOUT", "2.5")

    settings = load_settings(isolated_cwd)

    assert settings.default_images_dir == Path("originals")
    assert settings.default_max_rounds == 7
    assert settings.default_probe_timeout == pytest.approx(2.5)
    assert settings.default_deduplicate is True


def test_build_runtime_config_overrides(tmp_path):
    settings = FetcherSettings()

    config = build_runtime_config(
        settings=settings,
        images_dir=tmp_path / "a",
        grayscale_dir=tmp_path / "b",
        max_rounds=0,
        preserve_extension=True,
    )

    assert isinstance(config, FetcherConfig)
    assert config.images_dir == tmp_path / "a"
    assert config.grayscale_dir == tmp_path / "b"
    assert config.max_rounds == 0
    assert config.preserve_extension is True
    assert config.backend == "gemini"


@pytest.mark.parametrize(
    "overrides",
    [
        {"probe_timeout": 0},
        {"max_rounds": -1},
        {"fetch_timeout": -3.0},
        {"backend": "carrier-pigeon"},
        {"images_dir": Path("same"), "grayscale_dir": Path("same")},
    ],
)
def test_build_runtime_config_rejects_invalid_values(overrides):
    with pytest.raises(ConfigError):
        build_runtime_config(settings=FetcherSettings(), **overrides)


def test_read_api_key_uses_first_line(tmp_path):
    key_file = tmp_path / "googleai.key"
    key_file.write_text("ABC123\nsecond line\n", encoding="utf-8")

    assert read_api_key(key_file) == "ABC123"


def test_read_api_key_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="missing"):
        read_api_key(tmp_path / "nope.key")


def test_read_api_key_empty_file(tmp_path):
    key_file = tmp_path / "googleai.key"
    key_file.write_text("\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="empty"):
        read_api_key(key_file)
