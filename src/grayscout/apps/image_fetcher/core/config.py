"""Configuration helpers for the image fetcher module."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import tomllib

from grayscout.errors import ConfigError
from grayscout.libs.llm import GEMINI_BASE_URL, GEMINI_DEFAULT_MODEL, TextBackend


_CONFIG_ENV_PREFIX = "GRAYSCOUT_IMAGE_FETCHER__"


def _find_pyproject(start: Optional[Path] = None) -> Optional[Path]:
    """Locate the closest ``pyproject.toml`` relative to *start*."""

    current = (start or Path.cwd()).resolve()
    for candidate in [current, *current.parents]:
        pyproject = candidate / "pyproject.toml"
        if pyproject.exists():
            return pyproject
    return None


def _coerce_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return default


def _coerce_int(value: object, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_optional_float(value: object, default: Optional[float]) -> Optional[float]:
    if value is None:
        return default
    if isinstance(value, str) and value.strip().lower() in {"", "none", "null"}:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_path(value: object) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value
    if isinstance(value, str) and value.strip():
        return Path(value).expanduser()
    return None


@dataclass(frozen=True)
class FetcherSettings:
    """Default configuration values sourced from project metadata."""

    default_api_key_file: Path = Path("googleai.key")
    default_images_dir: Path = Path("images")
    default_grayscale_dir: Path = Path("gs-images")
    default_backend: str = TextBackend.GEMINI.value
    default_model: str = GEMINI_DEFAULT_MODEL
    default_base_url: str = GEMINI_BASE_URL
    default_probe_timeout: float = 5.0
    # None leaves generation and downloads without a request timeout
    default_generation_timeout: Optional[float] = None
    default_fetch_timeout: Optional[float] = None
    default_max_rounds: int = 10
    default_deduplicate: bool = False
    default_preserve_extension: bool = False


@dataclass(frozen=True)
class FetcherConfig:
    """Fully resolved runtime configuration for a fetcher invocation."""

    api_key_file: Path
    images_dir: Path
    grayscale_dir: Path
    backend: str
    model: str
    base_url: str
    probe_timeout: float
    generation_timeout: Optional[float]
    fetch_timeout: Optional[float]
    max_rounds: int
    deduplicate: bool
    preserve_extension: bool


def _load_pyproject_settings(start: Optional[Path]) -> Dict[str, object]:
    pyproject = _find_pyproject(start)
    if not pyproject:
        return {}

    try:
        with pyproject.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return {}

    tool_cfg = data.get("tool", {}).get("grayscout", {})
    if not isinstance(tool_cfg, dict):
        return {}

    fetcher_cfg = tool_cfg.get("image_fetcher")
    return dict(fetcher_cfg) if isinstance(fetcher_cfg, dict) else {}


def _load_env_settings() -> Dict[str, object]:
    values: Dict[str, object] = {}
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(_CONFIG_ENV_PREFIX):
            continue
        key = env_key[len(_CONFIG_ENV_PREFIX) :].lower()
        values[key] = env_value
    return values


def load_settings(start: Optional[Path] = None) -> FetcherSettings:
    """Load project defaults, applying environment overrides when present."""

    raw = _load_pyproject_settings(start)
    raw.update(_load_env_settings())
    base = FetcherSettings()

    return FetcherSettings(
        default_api_key_file=_as_path(raw.get("api_key_file"))
        or base.default_api_key_file,
        default_images_dir=_as_path(raw.get("images_dir")) or base.default_images_dir,
        default_grayscale_dir=_as_path(raw.get("grayscale_dir"))
        or base.default_grayscale_dir,
        default_backend=str(raw.get("backend") or base.default_backend).strip(),
        default_model=str(raw.get("model") or base.default_model).strip(),
        default_base_url=str(raw.get("base_url") or base.default_base_url).strip(),
        default_probe_timeout=_coerce_optional_float(
            raw.get("probe_timeout"), base.default_probe_timeout
        )
        or base.default_probe_timeout,
        default_generation_timeout=_coerce_optional_float(
            raw.get("generation_timeout"), base.default_generation_timeout
        ),
        default_fetch_timeout=_coerce_optional_float(
            raw.get("fetch_timeout"), base.default_fetch_timeout
        ),
        default_max_rounds=_coerce_int(raw.get("max_rounds"), base.default_max_rounds),
        default_deduplicate=_coerce_bool(
            raw.get("deduplicate"), base.default_deduplicate
        ),
        default_preserve_extension=_coerce_bool(
            raw.get("preserve_extension"), base.default_preserve_extension
        ),
    )


def build_runtime_config(
    *,
    settings: FetcherSettings,
    api_key_file: Optional[Path] = None,
    images_dir: Optional[Path] = None,
    grayscale_dir: Optional[Path] = None,
    backend: Optional[str] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    probe_timeout: Optional[float] = None,
    generation_timeout: Optional[float] = None,
    fetch_timeout: Optional[float] = None,
    max_rounds: Optional[int] = None,
    deduplicate: Optional[bool] = None,
    preserve_extension: Optional[bool] = None,
) -> FetcherConfig:
    """Merge explicit overrides into *settings* and validate the result."""

    resolved_backend = backend or settings.default_backend
    try:
        TextBackend(resolved_backend)
    except ValueError as exc:
        raise ConfigError(f"Unsupported text backend: {resolved_backend}") from exc

    config = FetcherConfig(
        api_key_file=Path(api_key_file or settings.default_api_key_file),
        images_dir=Path(images_dir or settings.default_images_dir),
        grayscale_dir=Path(grayscale_dir or settings.default_grayscale_dir),
        backend=resolved_backend,
        model=model or settings.default_model,
        base_url=base_url or settings.default_base_url,
        probe_timeout=(
            probe_timeout if probe_timeout is not None else settings.default_probe_timeout
        ),
        generation_timeout=(
            generation_timeout
            if generation_timeout is not None
            else settings.default_generation_timeout
        ),
        fetch_timeout=(
            fetch_timeout if fetch_timeout is not None else settings.default_fetch_timeout
        ),
        max_rounds=max_rounds if max_rounds is not None else settings.default_max_rounds,
        deduplicate=deduplicate if deduplicate is not None else settings.default_deduplicate,
        preserve_extension=(
            preserve_extension
            if preserve_extension is not None
            else settings.default_preserve_extension
        ),
    )

    if config.probe_timeout <= 0:
        raise ConfigError("probe_timeout must be positive")
    for name in ("generation_timeout", "fetch_timeout"):
        value = getattr(config, name)
        if value is not None and value <= 0:
            raise ConfigError(f"{name} must be positive when set")
    if config.max_rounds < 0:
        raise ConfigError("max_rounds must be zero (unbounded) or positive")
    if config.images_dir.resolve() == config.grayscale_dir.resolve():
        raise ConfigError("images_dir and grayscale_dir must differ")
    return config


def load_config(start: Optional[Path] = None, **overrides: object) -> FetcherConfig:
    """Convenience wrapper combining :func:`load_settings` and overrides."""

    settings = load_settings(start)
    return build_runtime_config(settings=settings, **overrides)  # type: ignore[arg-type]


def read_api_key(path: Path) -> str:
    """Return the API key stored on the first line of *path*."""

    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            first_line = handle.readline()
    except FileNotFoundError as exc:
        raise ConfigError(f"API key file is missing: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read API key file {path}: {exc}") from exc

    api_key = first_line.strip()
    if not api_key:
        raise ConfigError(f"API key file is empty: {path}")
    return api_key
