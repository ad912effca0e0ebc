"""
SCNG LLDP - Remote Table Collector.

Collects the LLDP-MIB lldpRemTable (neighbors seen on each local port).

The table arrives from the walk as flat per-column values:

    1.0.8802.1.1.2.1.4.1.1.<column>.<timeMark>.<localPortNum>.<remIndex> = value

Decoding runs in two passes:
1. decode_rem_table(): strip the column prefix, drop the time mark and
   group values per column by (local_port, rem_index)
2. build_rem_table(): transpose the columns into RemoteNeighbor rows

Rows that differ only in remIndex are distinct neighbors on a shared
medium and are never merged.
"""

import logging
from typing import Any, Dict, Iterator, Optional

from ...oids import LLDP, REMOTE_TABLE_COLUMNS, AUTHORITATIVE_COLUMN, match_column, split_rem_index
from ...models import RemoteNeighbor, RowKey
from ..parsers import decode_string, decode_int, decode_bits, decode_chassis_id, decode_port_id
from ..session import Session, SessionCallback, RequestResult


logger = logging.getLogger(__name__)

# column name -> {(local_port, rem_index): raw value}
RawColumnTable = Dict[str, Dict[RowKey, Any]]
NestedRemTable = Dict[int, Dict[int, RemoteNeighbor]]


def decode_rem_table(var_bind_list: Dict[str, Any]) -> RawColumnTable:
    """
    Group walk results per column and row key.

    OIDs outside the known columns (lldpRemLocalPortNum and friends) and
    unusable index suffixes are skipped.
    """
    raw: RawColumnTable = {name: {} for name in REMOTE_TABLE_COLUMNS.values()}

    for oid, value in var_bind_list.items():
        matched = match_column(oid.lstrip('.'), REMOTE_TABLE_COLUMNS)
        if matched is None:
            continue

        field_name, index = matched
        key = split_rem_index(index)
        if key is None:
            logger.debug("Skipping %s: unusable lldpRemTable index %r", oid, index)
            continue

        raw[field_name][key] = value

    return raw


def build_rem_table(raw: RawColumnTable) -> Dict[RowKey, RemoteNeighbor]:
    """
    Transpose per-column values into RemoteNeighbor rows.

    Rows are enumerated from the port ID column plus every key seen in
    another column. Missing values become None and the row is logged as
    partial.
    """
    keys = set(raw.get(AUTHORITATIVE_COLUMN, {}))
    for column in raw.values():
        keys.update(column)

    rows: Dict[RowKey, RemoteNeighbor] = {}
    for key in sorted(keys):
        local_port, rem_index = key

        def col(name: str) -> Any:
            return raw.get(name, {}).get(key)

        chassis_subtype = decode_int(col('chassis_id_subtype'))
        port_subtype = decode_int(col('port_id_subtype'))

        row = RemoteNeighbor(
            local_port=local_port,
            rem_index=rem_index,
            chassis_id_subtype=chassis_subtype,
            chassis_id=decode_chassis_id(chassis_subtype, col('chassis_id')),
            port_id_subtype=port_subtype,
            port_id=decode_port_id(port_subtype, col('port_id')),
            port_desc=decode_string(col('port_desc')),
            sys_name=decode_string(col('sys_name')),
            sys_desc=decode_string(col('sys_desc')),
            sys_cap_supported=decode_bits(col('sys_cap_supported')),
            sys_cap_enabled=decode_bits(col('sys_cap_enabled')),
        )

        if not row.is_complete:
            missing = sorted(name for name, column in raw.items() if key not in column)
            logger.warning(
                "Partial lldpRemTable row port=%d remIndex=%d, missing: %s",
                local_port, rem_index, ', '.join(missing),
            )

        rows[key] = row

    return rows


def nest_rem_table(rows: Dict[RowKey, RemoteNeighbor]) -> NestedRemTable:
    """Group rows by local port, then remIndex."""
    nested: NestedRemTable = {}
    for (local_port, rem_index), row in sorted(rows.items()):
        nested.setdefault(local_port, {})[rem_index] = row
    return nested


def iter_rows(table: NestedRemTable) -> Iterator[RemoteNeighbor]:
    """Yield rows of a nested table sorted by (local_port, rem_index)."""
    for local_port in sorted(table):
        for rem_index in sorted(table[local_port]):
            yield table[local_port][rem_index]


def fetch_rem_table(
    session: Session,
    callback: Optional[SessionCallback] = None,
    max_repetitions: int = 1,
) -> RequestResult:
    """
    Issue the lldpRemTable walk on session.

    max_repetitions stays at 1 unless the agent is known to handle
    larger GETBULK responses.
    """
    logger.debug("%s: walking lldpRemTable", session.hostname)
    return session.get_table(
        LLDP.REMOTE_TABLE,
        max_repetitions=max_repetitions,
        callback=callback,
    )
