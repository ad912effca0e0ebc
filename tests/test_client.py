"""
Tests for LldpClient - initialization state machine, blocking and
deferred dispatch, read API.
"""

import pytest

from conftest import (
    MAC_TEXT,
    local_var_binds,
    rem_row,
    rem_var_binds,
)

from scng_lldp.client import (
    NAMESPACE,
    LldpClient,
    get_lldp_local_system_data,
    get_lldp_rem_table,
)
from scng_lldp.errors import AlreadyInitializedError, LldpError, UninitializedAccessError
from scng_lldp.models import InitState
from scng_lldp.oids import LLDP
from scng_lldp.snmp.walker import SnmpResponse


def table_response(*rows):
    return SnmpResponse(var_binds=rem_var_binds(*rows))


# ===========================================================================
# Blocking
# ===========================================================================

class TestBlockingInitialize:

    def test_success(self, make_session):
        session = make_session(walk_response=table_response(rem_row(5, 1)))
        client = LldpClient(session)

        assert client.initialize() is True
        assert client.state is InitState.READY
        assert session.requests[0][0] == 'get'
        assert session.requests[1] == ('walk', LLDP.REMOTE_TABLE, 1)

    def test_local_mac_chassis_id_normalized(self, make_session):
        client = LldpClient(make_session())
        client.initialize()

        assert client.get_local_system_data().chassis_id == MAC_TEXT

    def test_two_neighbors_on_one_port(self, make_session):
        session = make_session(walk_response=table_response(
            rem_row(5, 1, sys_name=b'phone-a'),
            rem_row(5, 2, sys_name=b'phone-b'),
        ))
        client = LldpClient(session)
        client.initialize()

        table = client.get_remote_table()

        assert list(table) == [5]
        assert table[5][1].sys_name == 'phone-a'
        assert table[5][2].sys_name == 'phone-b'

    def test_empty_remote_table_is_ready(self, make_session):
        client = LldpClient(make_session(walk_response=SnmpResponse()))

        assert client.initialize() is True
        assert client.get_remote_table() == {}
        assert list(client.iter_remote_neighbors()) == []

    def test_local_failure_skips_walk(self, make_session):
        session = make_session(get_response=SnmpResponse(error='switch01: timeout after 5.0s'))
        client = LldpClient(session)

        assert client.initialize() is False
        assert client.state is InitState.FAILED
        assert [r[0] for r in session.requests] == ['get']
        assert session.error == 'switch01: timeout after 5.0s'

    def test_remote_failure(self, make_session):
        session = make_session(walk_response=SnmpResponse(error='boom'))
        client = LldpClient(session)

        assert client.initialize() is False
        assert client.state is InitState.FAILED
        with pytest.raises(UninitializedAccessError):
            client.get_local_system_data()

    def test_retry_after_failure(self, make_session):
        session = make_session(get_response=SnmpResponse(error='boom'))
        client = LldpClient(session)
        client.initialize()

        session.get_response = SnmpResponse(var_binds=local_var_binds())
        assert client.initialize() is True
        assert client.state is InitState.READY

    def test_max_repetitions_passed_to_walk(self, make_session):
        session = make_session()
        LldpClient(session, max_repetitions=10).initialize()
        assert session.requests[1] == ('walk', LLDP.REMOTE_TABLE, 10)


class TestReinitialize:

    def test_ready_without_reload_raises(self, make_session):
        session = make_session()
        client = LldpClient(session)
        client.initialize()

        with pytest.raises(AlreadyInitializedError):
            client.initialize()
        assert len(session.requests) == 2

    def test_reload_replaces_data(self, make_session):
        session = make_session(walk_response=table_response(rem_row(1, 1)))
        client = LldpClient(session)
        client.initialize()

        session.walk_response = table_response(rem_row(2, 1), rem_row(3, 1))
        assert client.initialize(reload=True) is True

        assert sorted(client.get_remote_table()) == [2, 3]

    def test_reload_failure_makes_data_unreadable(self, make_session):
        session = make_session(walk_response=table_response(rem_row(1, 1)))
        client = LldpClient(session)
        client.initialize()

        session.walk_response = SnmpResponse(error='boom')
        assert client.initialize(reload=True) is False

        with pytest.raises(UninitializedAccessError):
            client.get_remote_table()

    def test_errors_share_base_class(self):
        assert issubclass(AlreadyInitializedError, LldpError)
        assert issubclass(UninitializedAccessError, LldpError)


# ===========================================================================
# Deferred
# ===========================================================================

class TestDeferredInitialize:

    def test_queued_then_ready_after_dispatch(self, make_session, dispatcher):
        session = make_session(nonblocking=True, walk_response=table_response(rem_row(5, 1)))
        client = LldpClient(session)

        assert client.initialize() is True
        assert client.state is InitState.LOCAL_FETCH_PENDING

        dispatcher.run()

        assert client.state is InitState.READY
        assert client.get_remote_table()[5][1].chassis_id == 'aa:bb:cc:00:00:01'

    def test_initialize_while_pending_raises(self, make_session, dispatcher):
        client = LldpClient(make_session(nonblocking=True))
        client.initialize()

        with pytest.raises(AlreadyInitializedError):
            client.initialize()
        with pytest.raises(AlreadyInitializedError):
            client.initialize(reload=True)

        dispatcher.run()
        assert client.state is InitState.READY

    def test_local_failure_skips_walk(self, make_session, dispatcher):
        session = make_session(nonblocking=True, get_response=SnmpResponse(error='boom'))
        client = LldpClient(session)
        client.initialize()
        dispatcher.run()

        assert client.state is InitState.FAILED
        assert [r[0] for r in session.requests] == ['get']

    def test_remote_failure(self, make_session, dispatcher):
        session = make_session(nonblocking=True, walk_response=SnmpResponse(error='boom'))
        client = LldpClient(session)
        client.initialize()
        dispatcher.run()

        assert client.state is InitState.FAILED

    def test_many_agents_share_dispatcher(self, make_session, dispatcher):
        clients = [
            LldpClient(make_session(
                hostname=f'switch{n:02d}',
                nonblocking=True,
                walk_response=table_response(rem_row(n, 1)),
            ))
            for n in range(1, 4)
        ]
        for client in clients:
            client.initialize()

        dispatcher.run()

        for n, client in enumerate(clients, start=1):
            assert client.state is InitState.READY
            assert list(client.get_remote_table()) == [n]

    def test_same_result_as_blocking(self, make_session, dispatcher):
        walk = table_response(rem_row(5, 1), rem_row(5, 2), rem_row(7, 1, sys_desc=None))

        blocking = LldpClient(make_session(walk_response=walk))
        blocking.initialize()

        deferred = LldpClient(make_session(nonblocking=True, walk_response=walk))
        deferred.initialize()
        dispatcher.run()

        assert deferred.get_remote_table() == blocking.get_remote_table()
        assert deferred.get_local_system_data() == blocking.get_local_system_data()


# ===========================================================================
# Read API
# ===========================================================================

class TestReadApi:

    def test_access_before_initialize_raises(self, make_session):
        client = LldpClient(make_session())

        with pytest.raises(UninitializedAccessError):
            client.get_local_system_data()
        with pytest.raises(UninitializedAccessError):
            client.get_remote_table()
        with pytest.raises(UninitializedAccessError):
            client.iter_remote_neighbors()

    def test_reads_are_repeatable(self, make_session):
        client = LldpClient(make_session(walk_response=table_response(rem_row(5, 1))))
        client.initialize()

        assert client.get_remote_table() == client.get_remote_table()
        assert client.get_local_system_data() == client.get_local_system_data()

    def test_returned_table_is_a_copy(self, make_session):
        client = LldpClient(make_session(walk_response=table_response(rem_row(5, 1))))
        client.initialize()

        table = client.get_remote_table()
        table[5].clear()
        table[99] = {}

        assert list(client.get_remote_table()) == [5]
        assert 1 in client.get_remote_table()[5]

    def test_iter_remote_neighbors_sorted(self, make_session):
        client = LldpClient(make_session(walk_response=table_response(
            rem_row(12, 1), rem_row(3, 2), rem_row(3, 1),
        )))
        client.initialize()

        assert [row.key for row in client.iter_remote_neighbors()] == [(3, 1), (3, 2), (12, 1)]

    def test_module_helpers(self, make_session):
        client = LldpClient(make_session(walk_response=table_response(rem_row(5, 1))))
        client.initialize()

        assert get_lldp_local_system_data(client).sys_name == 'switch01'
        assert get_lldp_rem_table(client)[5][1].port_id == 'Gi0/1'


def test_attach_stores_one_client_per_session(make_session) -> None:
    session = make_session()

    client = LldpClient.attach(session)

    assert LldpClient.attach(session) is client
    assert session.stash(NAMESPACE)['client'] is client
    assert LldpClient.attach(make_session()) is not client
