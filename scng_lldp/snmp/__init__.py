"""
SCNG LLDP - SNMP Module.

Components:
- session: Session interface, pysnmp-backed session, dispatcher
- walker: Async SNMP GET and table walk
- parsers: Value decoding (MAC, IP, LLDP subtypes, BITS)
- collectors: MIB-specific data collection
  - local_system: lldpLocalSystemData
  - remote_table: lldpRemTable
"""

from .walker import SNMPWalker, SnmpResponse, AuthData
from .parsers import (
    decode_mac,
    decode_ip,
    decode_string,
    decode_int,
    decode_bits,
    decode_chassis_id,
    decode_port_id,
    normalize_mac,
    parse_lldp_capabilities,
)
from .session import (
    Session,
    PysnmpSession,
    SnmpDispatcher,
    build_auth,
    default_dispatcher,
    snmp_dispatcher,
)


__all__ = [
    # Walker
    'SNMPWalker',
    'SnmpResponse',
    'AuthData',
    # Parsers
    'decode_mac',
    'decode_ip',
    'decode_string',
    'decode_int',
    'decode_bits',
    'decode_chassis_id',
    'decode_port_id',
    'normalize_mac',
    'parse_lldp_capabilities',
    # Sessions
    'Session',
    'PysnmpSession',
    'SnmpDispatcher',
    'build_auth',
    'default_dispatcher',
    'snmp_dispatcher',
]
