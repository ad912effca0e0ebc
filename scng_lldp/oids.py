"""
SCNG LLDP - SNMP OID Constants.

Centralized LLDP-MIB OID definitions for neighbor discovery.

Organization:
- LLDP-MIB lldpLocalSystemData: scalars describing the queried agent
- LLDP-MIB lldpRemTable: one row per neighbor seen on a local port

Usage:
    from scng_lldp.oids import LLDP, LOCAL_SYSTEM_DATA_COLUMNS, split_rem_index

    result = session.get_request(list(LOCAL_SYSTEM_DATA_COLUMNS))
    result = session.get_table(LLDP.REMOTE_TABLE)

Notes:
- Numeric OIDs only, MIB resolution is never required
- Remote table index is timeMark.localPortNum.remIndex
"""

from typing import Dict, Optional, Tuple


class LLDP:
    """
    LLDP-MIB OIDs for LLDP neighbor discovery.

    Base: 1.0.8802.1.1.2 (iso.std.iso8802.ieee802dot1.ieee802dot1mibs.lldpMIB)

    Remote Table Index: lldpRemTimeMark.lldpRemLocalPortNum.lldpRemIndex
    - lldpRemTimeMark: TimeFilter (usually 0)
    - lldpRemLocalPortNum: Local port number
    - lldpRemIndex: Arbitrary index for multiple neighbors per port
    """

    # LLDP Local System Data
    LOCAL_CHASSIS_ID_SUBTYPE = "1.0.8802.1.1.2.1.3.1.0"
    LOCAL_CHASSIS_ID = "1.0.8802.1.1.2.1.3.2.0"
    LOCAL_SYS_NAME = "1.0.8802.1.1.2.1.3.3.0"
    LOCAL_SYS_DESC = "1.0.8802.1.1.2.1.3.4.0"
    LOCAL_SYS_CAP_SUPPORTED = "1.0.8802.1.1.2.1.3.5.0"
    LOCAL_SYS_CAP_ENABLED = "1.0.8802.1.1.2.1.3.6.0"

    # LLDP Remote Systems Data (Neighbor Table)
    REMOTE_TABLE = "1.0.8802.1.1.2.1.4.1"

    # lldpRemTable columns
    # Index: timeMark.localPortNum.remIndex (3-part index)
    REM_LOCAL_PORT_NUM = "1.0.8802.1.1.2.1.4.1.1.2"       # not-accessible on most agents
    REM_CHASSIS_ID_SUBTYPE = "1.0.8802.1.1.2.1.4.1.1.4"   # LldpChassisIdSubtype
    REM_CHASSIS_ID = "1.0.8802.1.1.2.1.4.1.1.5"           # Chassis ID (binary, decode by subtype)
    REM_PORT_ID_SUBTYPE = "1.0.8802.1.1.2.1.4.1.1.6"      # LldpPortIdSubtype
    REM_PORT_ID = "1.0.8802.1.1.2.1.4.1.1.7"              # Port ID (binary, decode by subtype)
    REM_PORT_DESC = "1.0.8802.1.1.2.1.4.1.1.8"            # Port description
    REM_SYS_NAME = "1.0.8802.1.1.2.1.4.1.1.9"             # System name
    REM_SYS_DESC = "1.0.8802.1.1.2.1.4.1.1.10"            # System description
    REM_SYS_CAP_SUPPORTED = "1.0.8802.1.1.2.1.4.1.1.11"   # Supported capabilities (BITS)
    REM_SYS_CAP_ENABLED = "1.0.8802.1.1.2.1.4.1.1.12"     # Enabled capabilities (BITS)

    # Chassis ID Subtypes (LldpChassisIdSubtype)
    CHASSIS_SUBTYPE_COMPONENT = 1     # entPhysicalAlias
    CHASSIS_SUBTYPE_IF_ALIAS = 2      # ifAlias
    CHASSIS_SUBTYPE_PORT = 3          # entPhysicalAlias of port
    CHASSIS_SUBTYPE_MAC = 4           # MAC address (most common)
    CHASSIS_SUBTYPE_NETWORK = 5       # Network address
    CHASSIS_SUBTYPE_IF_NAME = 6       # ifName
    CHASSIS_SUBTYPE_LOCAL = 7         # Locally assigned

    # Port ID Subtypes (LldpPortIdSubtype)
    PORT_SUBTYPE_IF_ALIAS = 1         # ifAlias
    PORT_SUBTYPE_PORT = 2             # entPhysicalAlias
    PORT_SUBTYPE_MAC = 3              # MAC address
    PORT_SUBTYPE_NETWORK = 4          # Network address
    PORT_SUBTYPE_IF_NAME = 5          # ifName (most common)
    PORT_SUBTYPE_AGENT = 6            # Agent circuit ID
    PORT_SUBTYPE_LOCAL = 7            # Locally assigned

    # Capabilities, after BITS decoding (MIB bit n -> 1 << n)
    CAP_OTHER = 0x01
    CAP_REPEATER = 0x02
    CAP_BRIDGE = 0x04
    CAP_WLAN_AP = 0x08
    CAP_ROUTER = 0x10
    CAP_TELEPHONE = 0x20
    CAP_DOCSIS = 0x40
    CAP_STATION = 0x80

# lldpLocalSystemData: OID -> field name, request order
LOCAL_SYSTEM_DATA_COLUMNS: Dict[str, str] = {
    LLDP.LOCAL_CHASSIS_ID_SUBTYPE: 'chassis_id_subtype',
    LLDP.LOCAL_CHASSIS_ID: 'chassis_id',
    LLDP.LOCAL_SYS_NAME: 'sys_name',
    LLDP.LOCAL_SYS_DESC: 'sys_desc',
    LLDP.LOCAL_SYS_CAP_SUPPORTED: 'sys_cap_supported',
    LLDP.LOCAL_SYS_CAP_ENABLED: 'sys_cap_enabled',
}

# lldpRemTable: column OID -> field name
REMOTE_TABLE_COLUMNS: Dict[str, str] = {
    LLDP.REM_CHASSIS_ID_SUBTYPE: 'chassis_id_subtype',
    LLDP.REM_CHASSIS_ID: 'chassis_id',
    LLDP.REM_PORT_ID_SUBTYPE: 'port_id_subtype',
    LLDP.REM_PORT_ID: 'port_id',
    LLDP.REM_PORT_DESC: 'port_desc',
    LLDP.REM_SYS_NAME: 'sys_name',
    LLDP.REM_SYS_DESC: 'sys_desc',
    LLDP.REM_SYS_CAP_SUPPORTED: 'sys_cap_supported',
    LLDP.REM_SYS_CAP_ENABLED: 'sys_cap_enabled',
}

# Rows are enumerated from this column first
AUTHORITATIVE_COLUMN = 'port_id'


# =============================================================================
# Helper Functions
# =============================================================================

def extract_index_from_oid(oid: str, base_oid: str) -> Optional[str]:
    """
    Extract index portion from an OID.

    Returns None if the OID is not below base_oid.

    Example:
        oid = "1.0.8802.1.1.2.1.4.1.1.9.0.5.1"
        base = "1.0.8802.1.1.2.1.4.1.1.9"
        returns "0.5.1"
    """
    oid = oid.lstrip('.')
    prefix = base_oid + "."
    if oid.startswith(prefix) and len(oid) > len(prefix):
        return oid[len(prefix):]
    return None


def split_rem_index(index: str) -> Optional[Tuple[int, int]]:
    """
    Parse an lldpRemTable index into its row key.

    LLDP index format: timeMark.localPortNum.remIndex. The time mark is
    dropped, (local_port, rem_index) is the row identity.

    Some agents omit the time mark and send localPortNum.remIndex only.
    Longer suffixes keep the first component as time mark, the second as
    local port and the last as remIndex.

    Returns (local_port, rem_index) or None if the index is unusable.
    """
    parts = index.split(".")
    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        return None

    if len(numbers) == 2:
        return numbers[0], numbers[1]
    if len(numbers) >= 3:
        return numbers[1], numbers[-1]
    return None


def match_column(oid: str, columns: Dict[str, str]) -> Optional[Tuple[str, str]]:
    """
    Find the column an OID belongs to.

    Returns (field_name, index_suffix) or None for OIDs outside the columns.
    """
    for column_oid, field_name in columns.items():
        index = extract_index_from_oid(oid, column_oid)
        if index is not None:
            return field_name, index
    return None
