"""End-to-end pipeline tests with the HTTP layer mocked out."""

import io
from unittest.mock import Mock

import pytest
from PIL import Image

from grayscout.apps.image_fetcher.core.config import FetcherSettings, build_runtime_config
from grayscout.apps.image_fetcher.core.pipeline import output_name, run_pipeline
from grayscout.errors import ConfigError, DiscoveryExhausted


def _image_bytes(fmt, colour):
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), colour).save(buffer, format=fmt)
    return buffer.getvalue()


JPEG_BYTES = _image_bytes("JPEG", (120, 30, 200))
PNG_BYTES = _image_bytes("PNG", (0, 255, 0))


@pytest.fixture
def config(isolated_cwd):
    (isolated_cwd / "googleai.key").write_text("ABC123\n", encoding="utf-8")
    return build_runtime_config(settings=FetcherSettings())


@pytest.fixture
def http(make_response, gemini_body):
    """Session mock: Gemini POSTs, HEAD probes and GET downloads."""

    session = Mock()
    session.post.side_effect = [
        make_response(json_body=gemini_body("1. http://a.com/x.jpg\n2. http://b.com/y.png")),
        make_response(json_body=gemini_body("http://a.com/x.jpg\nhttp://b.com/y.png")),
    ]
    session.head.side_effect = lambda url, **kwargs: make_response(status_code=200)
    bodies = {"http://a.com/x.jpg": JPEG_BYTES, "http://b.com/y.png": PNG_BYTES}
    session.get.side_effect = lambda url, **kwargs: make_response(chunks=[bodies[url]])
    return session


def test_end_to_end_two_images(config, http, isolated_cwd):
    report = run_pipeline(config, 2, session=http)

    assert report.urls == ["http://a.com/x.jpg", "http://b.com/y.png"]
    assert report.succeeded == 2
    assert report.failed == 0
    assert report.discovery_rounds == 1

    # Fixed naming: the PNG source is still stored as 2.jpg
    assert (isolated_cwd / "images" / "1.jpg").read_bytes() == JPEG_BYTES
    assert (isolated_cwd / "images" / "2.jpg").read_bytes() == PNG_BYTES
    for name in ("1.jpg", "2.jpg"):
        with Image.open(isolated_cwd / "gs-images" / name) as gray:
            assert gray.mode == "L"
            assert gray.format == "JPEG"

    post_kwargs = http.post.call_args_list[0].kwargs
    assert post_kwargs["params"] == {"key": "ABC123"}
    http.close.assert_not_called()


def test_preserve_extension_keeps_png(isolated_cwd, http):
    config = build_runtime_config(
        settings=FetcherSettings(), preserve_extension=True
    )

    report = run_pipeline(config, 2, api_key="ABC123", session=http)

    assert [o.original_path.name for o in report.outcomes] == ["1.jpg", "2.png"]
    with Image.open(isolated_cwd / "gs-images" / "2.png") as gray:
        assert gray.format == "PNG"


def test_failed_download_does_not_stop_batch(config, http, make_response, isolated_cwd):
    http.get.side_effect = [
        make_response(status_code=500),
        make_response(chunks=[PNG_BYTES]),
    ]

    report = run_pipeline(config, 2, session=http)

    first, second = report.outcomes
    assert not first.downloaded and not first.converted
    assert "Failed to download" in first.error
    assert second.succeeded
    assert not (isolated_cwd / "images" / "1.jpg").exists()
    assert (isolated_cwd / "gs-images" / "2.jpg").exists()


def test_undecodable_download_is_reported(config, http, make_response, isolated_cwd):
    http.get.side_effect = [
        make_response(chunks=[b"<html>not an image</html>"]),
        make_response(chunks=[JPEG_BYTES]),
    ]

    report = run_pipeline(config, 2, session=http)

    assert report.outcomes[0].downloaded and not report.outcomes[0].converted
    assert not (isolated_cwd / "gs-images" / "1.jpg").exists()
    assert report.outcomes[1].succeeded


def test_missing_key_fails_before_network(isolated_cwd):
    config = build_runtime_config(settings=FetcherSettings())
    session = Mock()

    with pytest.raises(ConfigError):
        run_pipeline(config, 2, session=session)

    session.post.assert_not_called()
    session.head.assert_not_called()
    assert not (isolated_cwd / "images").exists()


def test_zero_count_does_nothing(config):
    session = Mock()

    report = run_pipeline(config, 0, session=session)

    assert report.outcomes == []
    assert config.images_dir.is_dir()
    assert config.grayscale_dir.is_dir()
    session.post.assert_not_called()


def test_zero_count_still_requires_key(isolated_cwd):
    config = build_runtime_config(settings=FetcherSettings())

    with pytest.raises(ConfigError):
        run_pipeline(config, 0, session=Mock())

    assert not (isolated_cwd / "gs-images").exists()


def test_discovery_exhaustion_propagates(config, make_response, gemini_body):
    session = Mock()
    session.post.side_effect = lambda *args, **kwargs: make_response(
        json_body=gemini_body("http://dead.com/x.jpg")
    )
    session.head.side_effect = lambda url, **kwargs: make_response(status_code=404)
    limited = build_runtime_config(settings=FetcherSettings(), max_rounds=2)

    with pytest.raises(DiscoveryExhausted):
        run_pipeline(limited, 1, session=session)

    assert session.post.call_count == 4


@pytest.mark.parametrize(
    "url, preserve, expected",
    [
        ("http://b.com/y.png", False, "3.jpg"),
        ("http://b.com/y.png", True, "3.png"),
        ("http://b.com/y.JPEG?size=small", True, "3.jpeg"),
        ("http://b.com/y.gif", True, "3.jpg"),
        ("http://b.com/download", True, "3.jpg"),
    ],
)
def test_output_name(url, preserve, expected):
    assert output_name(3, url, preserve) == expected
