"""
SCNG LLDP - Data Models.

Dataclasses for LLDP discovery results.

Design Principles:
- Records are immutable once fetched, a re-fetch replaces them wholesale
- Every value field is optional (agents return partial rows)
- Field names are snake_case, to_dict() uses the LLDP-MIB object names
- Serializable to JSON for caching/export
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Dict, Any, List, Tuple
import json


class InitState(str, Enum):
    """Initialization state of an LLDP client."""
    UNINITIALIZED = "uninitialized"
    LOCAL_FETCH_PENDING = "local_fetch_pending"
    REMOTE_FETCH_PENDING = "remote_fetch_pending"
    READY = "ready"
    FAILED = "failed"

    @property
    def is_pending(self) -> bool:
        return self in (InitState.LOCAL_FETCH_PENDING, InitState.REMOTE_FETCH_PENDING)


# Row key inside the remote table: (lldpRemLocalPortNum, lldpRemIndex)
RowKey = Tuple[int, int]


@dataclass(frozen=True)
class LocalSystemData:
    """
    LLDP lldpLocalSystemData group of the queried agent.

    chassis_id is already rendered as "aa:bb:cc:dd:ee:ff" when
    chassis_id_subtype is macAddress(4).
    """
    chassis_id_subtype: Optional[int] = None     # lldpLocChassisIdSubtype
    chassis_id: Optional[str] = None             # lldpLocChassisId
    sys_name: Optional[str] = None               # lldpLocSysName
    sys_desc: Optional[str] = None               # lldpLocSysDesc
    sys_cap_supported: Optional[int] = None      # lldpLocSysCapSupported (bitmask)
    sys_cap_enabled: Optional[int] = None        # lldpLocSysCapEnabled (bitmask)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary keyed by LLDP-MIB object names."""
        return {
            'lldpLocChassisIdSubtype': self.chassis_id_subtype,
            'lldpLocChassisId': self.chassis_id,
            'lldpLocSysName': self.sys_name,
            'lldpLocSysDesc': self.sys_desc,
            'lldpLocSysCapSupported': self.sys_cap_supported,
            'lldpLocSysCapEnabled': self.sys_cap_enabled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LocalSystemData':
        """Create from a to_dict() dictionary."""
        return cls(
            chassis_id_subtype=data.get('lldpLocChassisIdSubtype'),
            chassis_id=data.get('lldpLocChassisId'),
            sys_name=data.get('lldpLocSysName'),
            sys_desc=data.get('lldpLocSysDesc'),
            sys_cap_supported=data.get('lldpLocSysCapSupported'),
            sys_cap_enabled=data.get('lldpLocSysCapEnabled'),
        )


@dataclass(frozen=True)
class RemoteNeighbor:
    """
    One row of the LLDP lldpRemTable.

    local_port is the LLDP port number, which has no mandatory
    relationship to an ifIndex of the agent. rem_index disambiguates
    multiple neighbors on one local port (shared medium).
    """
    local_port: int                              # lldpRemLocalPortNum
    rem_index: int                               # lldpRemIndex
    chassis_id_subtype: Optional[int] = None     # lldpRemChassisIdSubtype
    chassis_id: Optional[str] = None             # lldpRemChassisId
    port_id_subtype: Optional[int] = None        # lldpRemPortIdSubtype
    port_id: Optional[str] = None                # lldpRemPortId
    port_desc: Optional[str] = None              # lldpRemPortDesc
    sys_name: Optional[str] = None               # lldpRemSysName
    sys_desc: Optional[str] = None               # lldpRemSysDesc
    sys_cap_supported: Optional[int] = None      # lldpRemSysCapSupported (bitmask)
    sys_cap_enabled: Optional[int] = None        # lldpRemSysCapEnabled (bitmask)

    @property
    def key(self) -> RowKey:
        return self.local_port, self.rem_index

    @property
    def is_complete(self) -> bool:
        """True if every column of the row was present in the walk."""
        return all(
            value is not None
            for name, value in asdict(self).items()
            if name not in ('local_port', 'rem_index')
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary keyed by LLDP-MIB object names."""
        return {
            'lldpRemChassisIdSubtype': self.chassis_id_subtype,
            'lldpRemChassisId': self.chassis_id,
            'lldpRemPortIdSubtype': self.port_id_subtype,
            'lldpRemPortId': self.port_id,
            'lldpRemPortDesc': self.port_desc,
            'lldpRemSysName': self.sys_name,
            'lldpRemSysDesc': self.sys_desc,
            'lldpRemSysCapSupported': self.sys_cap_supported,
            'lldpRemSysCapEnabled': self.sys_cap_enabled,
        }


def rem_table_to_dict(table: Dict[int, Dict[int, RemoteNeighbor]]) -> Dict[str, Dict[str, Any]]:
    """
    Convert a nested remote table to plain JSON-friendly dicts.

    JSON object keys must be strings, so port and remIndex become str.
    """
    return {
        str(local_port): {
            str(rem_index): row.to_dict()
            for rem_index, row in sorted(rows.items())
        }
        for local_port, rows in sorted(table.items())
    }


def agent_to_dict(
    hostname: str,
    local: LocalSystemData,
    table: Dict[int, Dict[int, RemoteNeighbor]],
) -> Dict[str, Any]:
    """Bundle one agent's LLDP data for JSON export."""
    return {
        'hostname': hostname,
        'local_system_data': local.to_dict(),
        'rem_table': rem_table_to_dict(table),
    }


def agents_to_json(agents: List[Dict[str, Any]], indent: int = 2) -> str:
    """Serialize agent bundles to a JSON string."""
    return json.dumps(agents, indent=indent)
