from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .constants import (
    ENV_ACCESS_KEY_ID,
    ENV_BUCKET,
    ENV_ENDPOINT,
    ENV_PATH_STYLE,
    ENV_PROFILE,
    ENV_REGION,
    ENV_SECRET_ACCESS_KEY,
    REQUIRED_ENV,
)
from .errors import ConfigurationError

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(value: str | None) -> bool | None:
    """Strict boolean parsing; returns None for anything unrecognised."""
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Everything needed to reach the bucket, resolved once at startup."""

    endpoint: str = ""
    bucket: str = ""
    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    profile: str | None = None
    use_path_style: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "StorageConfig":
        env = os.environ if environ is None else environ
        return cls(
            endpoint=env.get(ENV_ENDPOINT, ""),
            bucket=env.get(ENV_BUCKET, ""),
            region=env.get(ENV_REGION) or None,
            access_key_id=env.get(ENV_ACCESS_KEY_ID) or None,
            secret_access_key=env.get(ENV_SECRET_ACCESS_KEY) or None,
            profile=env.get(ENV_PROFILE) or None,
            use_path_style=bool(parse_bool(env.get(ENV_PATH_STYLE))),
        )

    def validate(self) -> None:
        present = {ENV_ENDPOINT: self.endpoint, ENV_BUCKET: self.bucket}
        for name in REQUIRED_ENV:
            if not present[name]:
                raise ConfigurationError(f"environment variable {name} not defined")

    @property
    def uses_profile(self) -> bool:
        # a named profile wins over static keys
        return self.profile is not None
