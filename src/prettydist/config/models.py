"""
Pydantic model for validating post-build configuration files.
"""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import ConfigError

DEFAULT_ROOT = Path("dist")
_EXTENSION_PATTERN = re.compile(r"^[a-z0-9]+$")


class PostbuildConfig(BaseModel):
    """
    Settings for one post-build run.

    Attributes:
        root: Output directory that holds the fully built site.
        html_extension: Suffix of pages to prettify and rewrite (matched case-sensitively).
        index_filename: Page name that is never moved.
        image_extensions: Raster extensions collapsed into and rewritten to webp.
        webp_extension: Extension of the optimized images.
        asset_prefix: Path segment that anchors image references in HTML.
        skip_unchanged_writes: Leave pages with no matching reference untouched on disk.
    """
    root: Path = DEFAULT_ROOT
    html_extension: str = ".html"
    index_filename: str = "index.html"
    image_extensions: List[str] = Field(default_factory=lambda: ["png", "jpg", "jpeg"])
    webp_extension: str = "webp"
    asset_prefix: str = "assets/img/"
    skip_unchanged_writes: bool = False

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }

    @field_validator("html_extension")
    @classmethod
    def _check_html_extension(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError("html_extension must start with '.' and name a suffix, e.g. '.html'")
        return value

    @field_validator("index_filename")
    @classmethod
    def _check_index_filename(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value:
            raise ValueError("index_filename must be a bare file name")
        return value

    @field_validator("image_extensions")
    @classmethod
    def _normalize_image_extensions(cls, value: List[str]) -> List[str]:
        normalized: List[str] = []
        for item in value:
            ext = item.strip().lstrip(".").lower()
            if not _EXTENSION_PATTERN.match(ext):
                raise ValueError(f"invalid image extension: {item!r}")
            if ext not in normalized:
                normalized.append(ext)
        if not normalized:
            raise ValueError("image_extensions must list at least one extension")
        return normalized

    @field_validator("webp_extension")
    @classmethod
    def _normalize_webp_extension(cls, value: str) -> str:
        ext = value.strip().lstrip(".").lower()
        if not _EXTENSION_PATTERN.match(ext):
            raise ValueError(f"invalid webp extension: {value!r}")
        return ext

    @field_validator("asset_prefix")
    @classmethod
    def _normalize_asset_prefix(cls, value: str) -> str:
        prefix = value.strip().strip("/")
        if not prefix:
            raise ValueError("asset_prefix must name at least one path segment")
        return f"{prefix}/"

    @property
    def resolved_root(self) -> Path:
        return Path(self.root).expanduser().resolve()


def load_config(path: Path | str) -> PostbuildConfig:
    """
    Load and validate a TOML config file into a PostbuildConfig instance.

    A relative ``root`` is resolved against the directory holding the file.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("rb") as handle:
            raw_data: Dict[str, Any] = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in configuration file: {exc}") from exc

    raw_data = _normalize_toml_schema(raw_data)
    if "root" in raw_data:
        root = Path(str(raw_data["root"])).expanduser()
        if not root.is_absolute():
            root = config_path.parent / root
        raw_data["root"] = root

    return build_config(raw_data)


def build_config(data: Dict[str, Any]) -> PostbuildConfig:
    """Validate a mapping of settings, wrapping pydantic failures in ConfigError."""
    try:
        return PostbuildConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _normalize_toml_schema(data: Any) -> Dict[str, Any]:
    """
    Accept settings either at the top level or inside a [postbuild] table.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a TOML table/object.")
    section = data.get("postbuild")
    if section is None:
        return dict(data)
    if not isinstance(section, dict):
        raise ConfigError("Invalid [postbuild] block; expected a table.")
    others = sorted(key for key in data if key != "postbuild")
    if others:
        raise ConfigError(f"Keys outside [postbuild] are not supported: {', '.join(others)}")
    return dict(section)
