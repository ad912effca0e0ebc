"""
SCNG LLDP - Session Configuration.

SNMP session parameters and agent lists, loaded from YAML files,
environment variables and command-line overrides.

YAML layout:
    snmp:
      community: public
      version: 2c
      timeout: 5
      retries: 0
      nonblocking: true
    agents:
      - 192.168.1.1
      - switch02.example.com
"""

import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .errors import ConfigError


COMMUNITY_ENV_VAR = 'SCNG_SNMP_COMMUNITY'

_VERSION_ALIASES = {
    '1': '1',
    'v1': '1',
    '2': '2c',
    '2c': '2c',
    'v2': '2c',
    'v2c': '2c',
    '3': '3',
    'v3': '3',
}


def normalize_version(version: Any) -> str:
    """Map the usual SNMP version spellings to "1", "2c" or "3"."""
    key = str(version).strip().lower()
    if key not in _VERSION_ALIASES:
        raise ConfigError(f"Unsupported SNMP version: {version!r}")
    return _VERSION_ALIASES[key]


@dataclass
class SessionConfig:
    """SNMP session parameters shared by all agents of a run."""
    community: str = 'public'
    version: str = '2c'
    port: int = 161
    timeout: float = 5.0
    retries: int = 0
    nonblocking: bool = False
    max_repetitions: int = 1

    # SNMPv3 (only used when version == "3")
    v3_user: Optional[str] = None
    v3_auth_protocol: str = 'SHA'
    v3_auth_password: Optional[str] = None
    v3_priv_protocol: str = 'AES'
    v3_priv_password: Optional[str] = None

    def validate(self) -> 'SessionConfig':
        """Normalize the version and check ranges. Returns self."""
        self.version = normalize_version(self.version)
        if not 0 < self.port < 65536:
            raise ConfigError(f"Invalid SNMP port: {self.port}")
        if self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")
        if self.retries < 0:
            raise ConfigError(f"Retries must not be negative, got {self.retries}")
        if self.max_repetitions < 1:
            raise ConfigError(f"max_repetitions must be at least 1, got {self.max_repetitions}")
        if self.version == '3' and not self.v3_user:
            raise ConfigError("SNMPv3 requires v3_user")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, secrets masked."""
        data = asdict(self)
        for key in ('community', 'v3_auth_password', 'v3_priv_password'):
            if data[key]:
                data[key] = '******'
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionConfig':
        """Create from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown snmp settings: {', '.join(sorted(unknown))}")
        try:
            return cls(**data).validate()
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid snmp settings: {e}") from e


def get_community_from_env() -> Optional[str]:
    """Retrieve the SNMP community from the environment, if set."""
    return os.environ.get(COMMUNITY_ENV_VAR) or None


def load_yaml_config(yaml_path: Path) -> Tuple[SessionConfig, List[str]]:
    """
    Load session settings and agents from a YAML file.

    Returns:
        (SessionConfig, agents)
    """
    try:
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config {yaml_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {yaml_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{yaml_path}: top level must be a mapping")

    snmp = data.get('snmp') or {}
    if not isinstance(snmp, dict):
        raise ConfigError(f"{yaml_path}: 'snmp' must be a mapping")

    agents = data.get('agents') or []
    if not isinstance(agents, list):
        raise ConfigError(f"{yaml_path}: 'agents' must be a list")

    return SessionConfig.from_dict(snmp), [str(a).strip() for a in agents if str(a).strip()]
