"""
Configuration loading.

Configuration lives in a YAML file with a top-level ``lispwire`` mapping:

    lispwire:
      host: 127.0.0.1
      port: 4005
      timeout: 30
      compaction_threshold: 100000
      encoding: utf-8
      print_traffic: false

Only ``host`` is required.
"""

import codecs
from dataclasses import dataclass, fields
from typing import Any, Optional

import yaml

from .exceptions import WireConfigurationError
from .io.types import WireConst


@dataclass
class WireConfig:
    """Connection settings for a Wire"""
    host: str
    port: int = WireConst.DEFAULT_PORT
    timeout: Optional[float] = None
    connect_timeout: Optional[float] = None
    compaction_threshold: int = WireConst.COMPACTION_THRESHOLD
    encoding: str = WireConst.DEFAULT_ENCODING
    print_traffic: bool = False

    def __post_init__(self):
        if not isinstance(self.host, str) or not self.host:
            raise WireConfigurationError("host must be a non-empty string")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not (0 < self.port < 65536):
            raise WireConfigurationError(f"port must be 1-65535, got {self.port!r}")
        for name in ("timeout", "connect_timeout"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0):
                raise WireConfigurationError(f"{name} must be a positive number, got {value!r}")
        if isinstance(self.compaction_threshold, bool) or not isinstance(self.compaction_threshold, int) or self.compaction_threshold < 0:
            raise WireConfigurationError(f"compaction_threshold must be a non-negative integer, got {self.compaction_threshold!r}")
        try:
            codecs.lookup(self.encoding)
        except (LookupError, TypeError) as e:
            raise WireConfigurationError(f"Unknown encoding {self.encoding!r}") from e

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WireConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise WireConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        if "host" not in data:
            raise WireConfigurationError("Missing required configuration key: host")
        return cls(**data)


def load_config(path: str) -> WireConfig:
    """Read a WireConfig from the ``lispwire`` section of a YAML file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise WireConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise WireConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(document, dict) or not isinstance(document.get("lispwire"), dict):
        raise WireConfigurationError(f"{path} has no 'lispwire' section")
    return WireConfig.from_dict(document["lispwire"])
