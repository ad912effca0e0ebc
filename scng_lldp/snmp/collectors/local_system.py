"""
SCNG LLDP - Local System Data Collector.

Collects the LLDP-MIB lldpLocalSystemData group: the chassis ID, system
name/description and capabilities the queried agent advertises about
itself.

All six scalars are fetched with a single GET and matched by OID, never
by position in the response.
"""

import logging
from typing import Any, Dict, Optional

from ...oids import LOCAL_SYSTEM_DATA_COLUMNS
from ...models import LocalSystemData
from ..parsers import decode_string, decode_int, decode_bits, decode_chassis_id
from ..session import Session, SessionCallback, RequestResult


logger = logging.getLogger(__name__)

LOCAL_SYSTEM_DATA_OIDS = list(LOCAL_SYSTEM_DATA_COLUMNS)


def decode_local_system_data(var_bind_list: Dict[str, Any]) -> LocalSystemData:
    """
    Build LocalSystemData from a completed GET response.

    Missing OIDs leave the matching field None. The chassis ID is
    rendered as a MAC address when its subtype is macAddress(4).
    """
    raw: Dict[str, Any] = {}
    for oid, value in var_bind_list.items():
        field_name = LOCAL_SYSTEM_DATA_COLUMNS.get(oid.lstrip('.'))
        if field_name is None:
            logger.debug("Ignoring unexpected OID %s", oid)
            continue
        raw[field_name] = value

    subtype = decode_int(raw.get('chassis_id_subtype'))

    return LocalSystemData(
        chassis_id_subtype=subtype,
        chassis_id=decode_chassis_id(subtype, raw.get('chassis_id')),
        sys_name=decode_string(raw.get('sys_name')),
        sys_desc=decode_string(raw.get('sys_desc')),
        sys_cap_supported=decode_bits(raw.get('sys_cap_supported')),
        sys_cap_enabled=decode_bits(raw.get('sys_cap_enabled')),
    )


def fetch_local_system_data(
    session: Session,
    callback: Optional[SessionCallback] = None,
) -> RequestResult:
    """
    Issue the lldpLocalSystemData GET on session.

    Returns the session's request result: the var_bind_list (blocking),
    True (deferred, queued) or None on failure.
    """
    logger.debug("%s: fetching lldpLocalSystemData", session.hostname)
    return session.get_request(LOCAL_SYSTEM_DATA_OIDS, callback=callback)
