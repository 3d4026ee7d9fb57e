from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol, Sequence

ENV_FILE = Path(".env")

S3_ACCESS_KEY_ID = "S3_ACCESS_KEY_ID"
S3_SECRET_ACCESS_KEY = "S3_SECRET_ACCESS_KEY"
S3_BUCKET = "S3_BUCKET"
S3_REGION = "S3_REGION"
AWS_ENDPOINT = "AWS_ENDPOINT"

logger = logging.getLogger("s3context.config")

_properties: dict[str, str] = {}


class ConfigurationError(LookupError):
    """Base class for configuration resolution failures."""


class ConfigurationMissing(ConfigurationError):
    """Raised when a required key is not defined by any configuration source."""

    def __init__(self, key: str):
        super().__init__(f"Configuration key {key!r} is not defined in any source")
        self.key = key


def set_property(key: str, value: str) -> None:
    """Set a process-level property; properties override environment variables."""
    _properties[key] = value


def clear_property(key: str) -> None:
    _properties.pop(key, None)


def clear_properties() -> None:
    _properties.clear()


class ConfigurationSource(Protocol):
    name: str

    def lookup(self, key: str) -> str | None:
        ...


class MappingSource:
    def __init__(self, mapping: Mapping[str, str], name: str = "mapping"):
        self._mapping = mapping
        self.name = name

    def lookup(self, key: str) -> str | None:
        return self._mapping.get(key)

    def __repr__(self) -> str:
        return f"MappingSource(name={self.name!r})"


class PropertiesSource(MappingSource):
    """Process-level properties registered through :func:`set_property`."""

    def __init__(self) -> None:
        super().__init__(_properties, name="properties")


class EnvironmentSource(MappingSource):
    def __init__(self, environ: Mapping[str, str] | None = None):
        super().__init__(os.environ if environ is None else environ, name="environment")


class EnvFileSource:
    """Reads ``KEY=VALUE`` pairs from a dotenv file on first lookup.

    Not part of :func:`default_sources`; pass it to :class:`ConfigResolver`
    explicitly to use a dotenv file.

    Blank lines and ``#`` comments are ignored and surrounding quotes are
    stripped from values. A missing file defines nothing.
    """

    def __init__(self, path: Path = ENV_FILE):
        self.path = Path(path)
        self.name = f"env_file:{self.path}"
        self._values: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        values: dict[str, str] = {}
        if not self.path.exists():
            return values
        for raw_line in self.path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in values:
                values[key] = value
        return values

    def lookup(self, key: str) -> str | None:
        if self._values is None:
            self._values = self._load()
        return self._values.get(key)

    def __repr__(self) -> str:
        return f"EnvFileSource(path={str(self.path)!r})"


def default_sources() -> list[ConfigurationSource]:
    return [PropertiesSource(), EnvironmentSource()]


class ConfigResolver:
    """Looks keys up in an ordered list of sources; the first hit wins."""

    def __init__(self, sources: Sequence[ConfigurationSource] | None = None):
        self._sources: tuple[ConfigurationSource, ...] = tuple(
            default_sources() if sources is None else sources
        )

    @property
    def sources(self) -> tuple[ConfigurationSource, ...]:
        return self._sources

    def get(self, key: str, default: str | None = None) -> str | None:
        for source in self._sources:
            value = source.lookup(key)
            if value is not None:
                logger.debug("config_resolved", extra={"extra": {"key": key, "source": source.name}})
                return value
        return default

    def resolve(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise ConfigurationMissing(key)
        return value


@dataclass(frozen=True)
class S3Settings:
    access_key_id: str
    secret_access_key: str
    region: str
    endpoint_url: str = ""

    @property
    def uses_endpoint_override(self) -> bool:
        return bool(self.endpoint_url)

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> "S3Settings":
        return cls(
            access_key_id=resolver.resolve(S3_ACCESS_KEY_ID),
            secret_access_key=resolver.resolve(S3_SECRET_ACCESS_KEY),
            region=resolver.resolve(S3_REGION),
            endpoint_url=resolver.get(AWS_ENDPOINT, "") or "",
        )

    def __repr__(self) -> str:
        return (
            f"S3Settings(access_key_id={self.access_key_id!r}, secret_access_key='***', "
            f"region={self.region!r}, endpoint_url={self.endpoint_url!r})"
        )
