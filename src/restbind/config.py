"""Loading client options from files and the environment.

Header and timeout defaults can live outside code, in a JSON or YAML file
or in environment variables. Hooks are code and only come from explicit
:class:`~restbind.models.ClientOptions`.

* :func:`load_options` -- parse a ``.json`` / ``.yaml`` / ``.yml`` file into
  :class:`~restbind.models.ClientOptions`.
* :func:`resolve_options` -- merge explicit options, environment variables
  and a config file by precedence.
* :func:`resolve_base_url` -- fall back to ``RESTBIND_BASE_URL``.

Environment variables:
    ``RESTBIND_CONFIG``: path of a config file used when none is passed.
    ``RESTBIND_TIMEOUT``: default timeout in seconds.
    ``RESTBIND_HEADERS``: JSON object of default headers.
    ``RESTBIND_BASE_URL``: base URL used when none is passed.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from restbind.exceptions import ConfigError
from restbind.layers import merge_headers
from restbind.models import ClientOptions

ENV_CONFIG = "RESTBIND_CONFIG"
ENV_TIMEOUT = "RESTBIND_TIMEOUT"
ENV_HEADERS = "RESTBIND_HEADERS"
ENV_BASE_URL = "RESTBIND_BASE_URL"

_FILE_KEYS = ("headers", "timeout")


def _parse_content(content: str, hint: str = "") -> Any:
    """Parse *content* as JSON, then YAML, unless *hint* says YAML."""
    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise ConfigError(f"Invalid JSON: {exc}") from exc

    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Content is neither valid JSON nor YAML: {exc}") from exc


def load_options(path: Union[str, Path]) -> ClientOptions:
    """Load client options from a JSON or YAML file.

    Only ``headers`` and ``timeout`` are read; other keys are rejected.

    Args:
        path: Path to the file. The extension picks the parser; unknown
            extensions try JSON, then YAML.

    Returns:
        The validated options.

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigError(f"Config file not found: {file_path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {file_path}: {exc}") from exc

    suffix = file_path.suffix.lower()
    hint = "json" if suffix == ".json" else "yaml" if suffix in (".yaml", ".yml") else ""
    try:
        data = _parse_content(content, hint=hint)
    except ConfigError as exc:
        raise ConfigError(f"Invalid config file {file_path}: {exc}") from exc

    if data is None:
        return ClientOptions()
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file {file_path} must contain a mapping, got {type(data).__name__}"
        )
    unknown = sorted(set(data) - set(_FILE_KEYS))
    if unknown:
        raise ConfigError(f"Unknown key(s) in config file {file_path}: {', '.join(unknown)}")

    try:
        return ClientOptions.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {file_path}: {exc}") from exc


def _env_timeout() -> Optional[float]:
    raw = os.environ.get(ENV_TIMEOUT, "").strip()
    if not raw:
        return None
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_TIMEOUT} must be a number, got {raw!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"{ENV_TIMEOUT} must be positive, got {raw!r}")
    return timeout


def _env_headers() -> dict[str, str]:
    raw = os.environ.get(ENV_HEADERS, "").strip()
    if not raw:
        return {}
    try:
        headers = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{ENV_HEADERS} must be a JSON object: {exc}") from exc
    if not isinstance(headers, dict):
        raise ConfigError(f"{ENV_HEADERS} must be a JSON object")
    return {str(k): str(v) for k, v in headers.items()}


def resolve_options(
    options: Union[ClientOptions, dict[str, Any], None] = None,
    path: Union[str, Path, None] = None,
) -> ClientOptions:
    """Resolve client options with full precedence chain.

    Precedence (high to low):
        1. Explicit *options*
        2. Environment variables (``RESTBIND_TIMEOUT``, ``RESTBIND_HEADERS``)
        3. Config file (*path*, else ``RESTBIND_CONFIG``)
        4. Defaults

    Headers are merged across all layers; the timeout comes from the
    highest layer that sets one. Hooks only come from *options*.

    Raises:
        ConfigError: If any layer is invalid.
    """
    explicit = coerce_options(options)

    # 4 + 3. File layer
    file_path = path if path is not None else os.environ.get(ENV_CONFIG) or None
    base = load_options(file_path) if file_path is not None else ClientOptions()

    # 2. Environment
    env_headers = _env_headers()
    env_timeout = _env_timeout()

    # 1. Explicit options
    timeout = explicit.timeout
    if timeout is None:
        timeout = env_timeout if env_timeout is not None else base.timeout

    return ClientOptions(
        headers=merge_headers(base.headers, env_headers, explicit.headers),
        hooks=list(explicit.hooks),
        timeout=timeout,
    )


def coerce_options(options: Union[ClientOptions, dict[str, Any], None]) -> ClientOptions:
    """Validate *options* into :class:`~restbind.models.ClientOptions`; ``None`` gives defaults."""
    if options is None:
        return ClientOptions()
    if isinstance(options, ClientOptions):
        return options
    try:
        return ClientOptions.model_validate(options)
    except ValidationError as exc:
        raise ConfigError(f"Invalid client options: {exc}") from exc


def resolve_base_url(base_url: Optional[str] = None) -> str:
    """Return *base_url*, or ``RESTBIND_BASE_URL`` when it is empty.

    Raises:
        ConfigError: If neither is set.
    """
    if base_url:
        return base_url
    env_base_url = os.environ.get(ENV_BASE_URL, "").strip()
    if env_base_url:
        return env_base_url
    raise ConfigError(f"No base URL given and {ENV_BASE_URL} is not set")
