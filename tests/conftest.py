"""
Shared fixtures: a network-free Session and canned LLDP-MIB responses.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from scng_lldp.oids import LLDP, REMOTE_TABLE_COLUMNS
from scng_lldp.snmp.session import Session, SnmpDispatcher
from scng_lldp.snmp.walker import SnmpResponse


MAC_BYTES = b'\x00\x1a\x2b\x3c\x4d\x5e'
MAC_TEXT = '00:1a:2b:3c:4d:5e'

NEIGHBOR_MAC_BYTES = b'\xaa\xbb\xcc\x00\x00\x01'
NEIGHBOR_MAC_TEXT = 'aa:bb:cc:00:00:01'

_COLUMN_OIDS = {name: oid for oid, name in REMOTE_TABLE_COLUMNS.items()}


# ---------------------------------------------------------------------------
# Helper factories
# ---------------------------------------------------------------------------

def local_var_binds(**overrides: Any) -> List[Tuple[str, Any]]:
    """lldpLocalSystemData GET response, fields overridable by name."""
    values = {
        'chassis_id_subtype': 4,
        'chassis_id': MAC_BYTES,
        'sys_name': b'switch01',
        'sys_desc': b'Test switch, version 1.0',
        'sys_cap_supported': b'\x28\x00',   # bridge, router
        'sys_cap_enabled': b'\x20\x00',     # bridge
    }
    values.update(overrides)
    oids = {
        'chassis_id_subtype': LLDP.LOCAL_CHASSIS_ID_SUBTYPE,
        'chassis_id': LLDP.LOCAL_CHASSIS_ID,
        'sys_name': LLDP.LOCAL_SYS_NAME,
        'sys_desc': LLDP.LOCAL_SYS_DESC,
        'sys_cap_supported': LLDP.LOCAL_SYS_CAP_SUPPORTED,
        'sys_cap_enabled': LLDP.LOCAL_SYS_CAP_ENABLED,
    }
    return [(oids[name], value) for name, value in values.items()]


def rem_row(local_port: int, rem_index: int, time_mark: int = 0, **overrides: Any) -> List[Tuple[str, Any]]:
    """
    Var binds of one lldpRemTable row.

    Pass a column name with value None to leave that column out.
    """
    values = {
        'chassis_id_subtype': 4,
        'chassis_id': NEIGHBOR_MAC_BYTES,
        'port_id_subtype': 5,
        'port_id': b'Gi0/1',
        'port_desc': b'uplink',
        'sys_name': b'neighbor01',
        'sys_desc': b'Neighbor switch',
        'sys_cap_supported': b'\x28\x00',
        'sys_cap_enabled': b'\x20\x00',
    }
    values.update(overrides)
    index = f"{time_mark}.{local_port}.{rem_index}"
    return [
        (f"{_COLUMN_OIDS[name]}.{index}", value)
        for name, value in values.items()
        if value is not None
    ]


def rem_var_binds(*rows: List[Tuple[str, Any]]) -> List[Tuple[str, Any]]:
    """Combine rows into walk order (column-major, as agents return it)."""
    combined = [vb for row in rows for vb in row]

    def oid_key(vb):
        return tuple(int(p) for p in vb[0].split('.'))

    return sorted(combined, key=oid_key)


def as_dict(var_binds: List[Tuple[str, Any]]) -> Dict[str, Any]:
    return dict(var_binds)


# ---------------------------------------------------------------------------
# Fake session
# ---------------------------------------------------------------------------

class FakeSession(Session):
    """
    Session answering from canned SnmpResponses.

    Requests are recorded in self.requests as ('get', oids) or
    ('walk', base_oid, max_repetitions).
    """

    def __init__(
        self,
        hostname: str = 'switch01',
        nonblocking: bool = False,
        dispatcher: Optional[SnmpDispatcher] = None,
        get_response: Optional[SnmpResponse] = None,
        walk_response: Optional[SnmpResponse] = None,
        version: str = '2c',
    ):
        super().__init__(hostname, nonblocking, dispatcher)
        self.get_response = get_response or SnmpResponse(var_binds=local_var_binds())
        self.walk_response = walk_response or SnmpResponse()
        self._version = version
        self.requests: List[tuple] = []
        self.closed = False

    @property
    def version(self) -> str:
        return self._version

    def _get(self, oids):
        self.requests.append(('get', list(oids)))
        return self._respond(self.get_response)

    def _walk(self, base_oid, max_repetitions):
        self.requests.append(('walk', base_oid, max_repetitions))
        return self._respond(self.walk_response)

    async def _respond(self, response: SnmpResponse) -> SnmpResponse:
        return response

    def close(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def dispatcher():
    d = SnmpDispatcher()
    yield d
    if not d.loop.is_closed():
        d.close()


@pytest.fixture
def make_session(dispatcher):
    """Factory for FakeSessions sharing the test's dispatcher."""
    def _make(**kwargs) -> FakeSession:
        kwargs.setdefault('dispatcher', dispatcher)
        return FakeSession(**kwargs)
    return _make
