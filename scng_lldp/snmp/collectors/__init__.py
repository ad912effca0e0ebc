"""
SCNG LLDP - SNMP Collectors.

- local_system: LLDP-MIB lldpLocalSystemData scalars
- remote_table: LLDP-MIB lldpRemTable neighbors
"""

from .local_system import (
    LOCAL_SYSTEM_DATA_OIDS,
    decode_local_system_data,
    fetch_local_system_data,
)

from .remote_table import (
    decode_rem_table,
    build_rem_table,
    nest_rem_table,
    iter_rows,
    fetch_rem_table,
)


__all__ = [
    # Local system data
    'LOCAL_SYSTEM_DATA_OIDS',
    'decode_local_system_data',
    'fetch_local_system_data',
    # Remote table
    'decode_rem_table',
    'build_rem_table',
    'nest_rem_table',
    'iter_rows',
    'fetch_rem_table',
]
