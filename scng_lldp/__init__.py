"""
SCNG LLDP - LLDP Neighbor Discovery over SNMP.

Reads the LLDP-MIB local system data and remote table of network agents
and rebuilds the neighbor table keyed by local port.

Architecture:
    scng_lldp/
    ├── models.py      # LocalSystemData, RemoteNeighbor, InitState
    ├── oids.py        # LLDP-MIB OID constants, index helpers
    ├── client.py      # LldpClient: initialization and read API
    ├── config.py      # SessionConfig, YAML loading
    ├── errors.py      # Exception hierarchy
    ├── cli.py         # CLI interface
    └── snmp/
        ├── session.py # Session interface, PysnmpSession, SnmpDispatcher
        ├── walker.py  # Async SNMP GET / table walk
        ├── parsers.py # Value decoding
        └── collectors/
            ├── local_system.py  # lldpLocalSystemData
            └── remote_table.py  # lldpRemTable

Quick Start:
    from scng_lldp import LldpClient, PysnmpSession, SessionConfig

    session = PysnmpSession("192.168.1.1", SessionConfig(community="public"))
    client = LldpClient.attach(session)
    if client.initialize():
        for row in client.iter_remote_neighbors():
            print(f"{row.local_port} -> {row.sys_name} ({row.port_id})")
"""

from .models import (
    InitState,
    LocalSystemData,
    RemoteNeighbor,
)

from .oids import LLDP

from .errors import (
    LldpError,
    AlreadyInitializedError,
    UninitializedAccessError,
    ConfigError,
)

from .config import SessionConfig, load_yaml_config

from .client import (
    LldpClient,
    get_lldp_local_system_data,
    get_lldp_rem_table,
)

from .snmp.session import (
    Session,
    PysnmpSession,
    SnmpDispatcher,
    snmp_dispatcher,
)


__version__ = "0.1.0"

__all__ = [
    # Client
    'LldpClient',
    'get_lldp_local_system_data',
    'get_lldp_rem_table',
    # Models
    'InitState',
    'LocalSystemData',
    'RemoteNeighbor',
    # OIDs
    'LLDP',
    # Errors
    'LldpError',
    'AlreadyInitializedError',
    'UninitializedAccessError',
    'ConfigError',
    # Config
    'SessionConfig',
    'load_yaml_config',
    # Sessions
    'Session',
    'PysnmpSession',
    'SnmpDispatcher',
    'snmp_dispatcher',
]
