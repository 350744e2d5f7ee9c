"""Transform configuration loaded from ``isowave.toml``.

Example file:

    [transform]
    levels = 3
    high_pass_sub_bands = 1
    scale_factor = 2.0
    workers = 1

    [wavelet]
    name = "held"
    order = 5
"""

from __future__ import annotations

import logging
import os
from typing import Any, cast

from pydantic import BaseModel, Field, ValidationError

# TOML loading for Python 3.11+ and older
try:
    import tomllib  # type: ignore[import-not-found, unused-ignore]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found, no-redef, unused-ignore]

from isowave.errors import ConfigurationError
from isowave.wavelets import IsotropicWaveletFunction, make_wavelet

logger = logging.getLogger(__name__)

CONFIG_ENV = "ISOWAVE_CONFIG"
CONFIG_FILE = "isowave.toml"


class WaveletConfig(BaseModel):
    """``[wavelet]`` table: variant name and its own parameters."""

    model_config = {"extra": "allow"}

    name: str = Field(default="held")

    @property
    def params(self) -> dict[str, Any]:
        """Variant parameters (``order``, ``kappa``, ...)."""
        return dict(self.model_extra or {})


class TransformConfig(BaseModel):
    """Defaults for the forward/inverse transform."""

    levels: int = Field(default=3, ge=0)
    high_pass_sub_bands: int = Field(default=1, ge=1)
    scale_factor: float = Field(default=2.0, gt=1)
    workers: int = Field(default=1, ge=1)
    wavelet: WaveletConfig = Field(default_factory=WaveletConfig)

    def make_wavelet(self) -> IsotropicWaveletFunction:
        """Build the configured wavelet function."""
        return make_wavelet(
            self.wavelet.name,
            high_pass_sub_bands=self.high_pass_sub_bands,
            scale_factor=self.scale_factor,
            **self.wavelet.params,
        )


def _resolve_config_path(config_path: str | None) -> str | None:
    """Resolve configuration path from env, explicit path, or defaults."""
    env_config = os.environ.get(CONFIG_ENV)
    if env_config:
        return env_config
    if config_path:
        return config_path
    candidates = [
        CONFIG_FILE,
        os.path.expanduser(f"~/{CONFIG_FILE}"),
    ]
    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    return None


def load_config(config_path: str | None = None) -> TransformConfig:
    """Load the transform configuration.

    Without any file, the built-in defaults are returned.

    Raises:
        FileNotFoundError: If an explicit or ``ISOWAVE_CONFIG`` path is missing
        ConfigurationError: If the file holds invalid values
    """
    resolved_path = _resolve_config_path(config_path)
    if resolved_path is None:
        return TransformConfig()
    if not os.path.exists(resolved_path):
        raise FileNotFoundError(
            f"Config file not found at {resolved_path}. Set {CONFIG_ENV} or create {CONFIG_FILE}"
        )
    with open(resolved_path, "rb") as f:
        raw = cast(dict[str, Any], tomllib.load(f))
    logger.debug("Loaded configuration from %s", resolved_path)

    data = dict(raw.get("transform", {}))
    if "wavelet" in raw:
        data["wavelet"] = raw["wavelet"]
    try:
        config = TransformConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {resolved_path}: {e}") from e
    # Catch unknown wavelets and bad variant parameters at load time.
    config.make_wavelet()
    return config
