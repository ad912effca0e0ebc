"""
Tests for the session layer - dispatcher, blocking/deferred request
contract, stash, credentials and the pysnmp session wiring.
"""

import asyncio

import pytest
from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    UsmUserData,
    usmHMACSHAAuthProtocol,
    usmAesCfb128Protocol,
    usmNoAuthProtocol,
    usmNoPrivProtocol,
)

from scng_lldp.config import SessionConfig
from scng_lldp.snmp.session import (
    PysnmpSession,
    SnmpDispatcher,
    build_auth,
    default_dispatcher,
)
from scng_lldp.snmp.walker import SnmpResponse, _oid_key, _unwrap


async def answer(value, delay=0.0):
    await asyncio.sleep(delay)
    return value


# ===========================================================================
# Dispatcher
# ===========================================================================

class TestDispatcher:

    def test_run_blocking_returns_result(self, dispatcher):
        assert dispatcher.run_blocking(answer(42)) == 42

    def test_submit_runs_on_complete(self, dispatcher):
        seen = []
        dispatcher.submit(answer('a'), seen.append)
        dispatcher.submit(answer('b'), seen.append)
        assert dispatcher.pending == 2

        dispatcher.run()

        assert sorted(seen) == ['a', 'b']
        assert dispatcher.pending == 0

    def test_requests_queued_by_callbacks_run_in_same_pass(self, dispatcher):
        seen = []

        def first_done(value):
            seen.append(value)
            dispatcher.submit(answer('second'), seen.append)

        dispatcher.submit(answer('first'), first_done)
        dispatcher.run()

        assert seen == ['first', 'second']

    def test_callback_exception_propagates(self, dispatcher):
        def boom(_value):
            raise ValueError("callback failed")

        dispatcher.submit(answer(1), boom)
        with pytest.raises(ValueError, match="callback failed"):
            dispatcher.run()
        assert dispatcher.pending == 0

    def test_run_with_nothing_queued(self, dispatcher):
        dispatcher.run()

    def test_blocking_request_inside_loop_rejected(self, dispatcher):
        inner = answer(1)

        async def nested():
            try:
                return dispatcher.run_blocking(inner)
            finally:
                inner.close()

        dispatcher.submit(nested(), lambda _: None)
        with pytest.raises(RuntimeError):
            dispatcher.run()

    def test_close_cancels_pending(self):
        d = SnmpDispatcher()
        d.submit(answer(1, delay=10), lambda _: None)
        d.close()
        assert d.pending == 0
        assert d.loop.is_closed()

    def test_default_dispatcher_is_shared(self):
        assert default_dispatcher() is default_dispatcher()


# ===========================================================================
# Session contract
# ===========================================================================

class TestSessionBlocking:

    def test_get_request_returns_var_bind_list(self, make_session):
        session = make_session(get_response=SnmpResponse(var_binds=[('1.2.3.0', 7)]))

        result = session.get_request(['1.2.3.0'])

        assert result == {'1.2.3.0': 7}
        assert session.var_bind_list == {'1.2.3.0': 7}
        assert session.error is None

    def test_failure_returns_none_and_sets_error(self, make_session):
        session = make_session(walk_response=SnmpResponse(error='switch01: No SNMP response received before timeout'))

        result = session.get_table('1.2.3')

        assert result is None
        assert session.var_bind_list is None
        assert 'timeout' in session.error

    def test_error_cleared_by_next_success(self, make_session):
        session = make_session(walk_response=SnmpResponse(error='boom'))
        session.get_table('1.2.3')
        session.get_request(['1.2.3.0'])
        assert session.error is None

    def test_max_repetitions_default(self, make_session):
        session = make_session()
        session.get_table('1.2.3')
        assert session.requests == [('walk', '1.2.3', 1)]


class TestSessionDeferred:

    def test_returns_true_and_calls_back_with_session(self, make_session, dispatcher):
        session = make_session(
            nonblocking=True,
            get_response=SnmpResponse(var_binds=[('1.2.3.0', 7)]),
        )
        seen = []

        assert session.get_request(['1.2.3.0'], callback=seen.append) is True
        assert seen == []

        dispatcher.run()

        assert seen == [session]
        assert session.var_bind_list == {'1.2.3.0': 7}

    def test_failure_reaches_callback(self, make_session, dispatcher):
        session = make_session(nonblocking=True, walk_response=SnmpResponse(error='boom'))
        errors = []

        session.get_table('1.2.3', callback=lambda s: errors.append(s.error))
        dispatcher.run()

        assert errors == ['boom']

    def test_without_callback(self, make_session, dispatcher):
        session = make_session(nonblocking=True)
        session.get_table('1.2.3')
        dispatcher.run()
        assert session.var_bind_list == {}


def test_stash_namespaces_are_separate(make_session) -> None:
    session = make_session()

    session.stash('a')['key'] = 1
    session.stash('b')['key'] = 2

    assert session.stash('a') == {'key': 1}
    assert session.stash('b') == {'key': 2}
    assert session.stash('a') is session.stash('a')


# ===========================================================================
# Credentials
# ===========================================================================

class TestBuildAuth:

    def test_v2c(self):
        auth = build_auth(SessionConfig(community='secret', version='2c').validate())
        assert isinstance(auth, CommunityData)
        assert auth.message_processing_model == 1

    def test_v1(self):
        auth = build_auth(SessionConfig(version='1').validate())
        assert isinstance(auth, CommunityData)
        assert auth.message_processing_model == 0

    def test_v3_auth_priv(self, monkeypatch):
        captured = {}

        def fake_usm(user, **kwargs):
            captured['user'] = user
            captured.update(kwargs)
            return 'usm'

        monkeypatch.setattr('scng_lldp.snmp.session.UsmUserData', fake_usm)
        auth = build_auth(SessionConfig(
            version='3',
            v3_user='monitor',
            v3_auth_password='authpass123',
            v3_priv_password='privpass123',
        ).validate())

        assert auth == 'usm'
        assert captured['user'] == 'monitor'
        assert captured['authProtocol'] is usmHMACSHAAuthProtocol
        assert captured['privProtocol'] is usmAesCfb128Protocol

    def test_v3_no_auth_no_priv(self, monkeypatch):
        captured = {}
        monkeypatch.setattr(
            'scng_lldp.snmp.session.UsmUserData',
            lambda user, **kwargs: captured.update(kwargs),
        )
        build_auth(SessionConfig(version='3', v3_user='monitor').validate())

        assert captured['authProtocol'] is usmNoAuthProtocol
        assert captured['privProtocol'] is usmNoPrivProtocol

    def test_v3_builds_usm_user_data(self):
        auth = build_auth(SessionConfig(version='3', v3_user='monitor').validate())
        assert isinstance(auth, UsmUserData)


# ===========================================================================
# pysnmp session wiring
# ===========================================================================

class RecordingWalker:
    """Stands in for SNMPWalker; records calls and returns canned responses."""

    def __init__(self):
        self.calls = []

    async def get(self, target, oids):
        self.calls.append(('get', target, list(oids)))
        return SnmpResponse(var_binds=[(oid, 1) for oid in oids])

    async def walk(self, target, oid, max_repetitions=1):
        self.calls.append(('walk', target, oid, max_repetitions))
        return SnmpResponse(var_binds=[(oid + '.1', 'x')])


class TestPysnmpSession:

    def test_requests_go_through_walker(self, dispatcher):
        walker = RecordingWalker()
        session = PysnmpSession('10.0.0.1', SessionConfig(version='v2c'), dispatcher=dispatcher, walker=walker)

        assert session.get_request(['1.2.3.0']) == {'1.2.3.0': 1}
        assert session.get_table('1.2.3', max_repetitions=5) == {'1.2.3.1': 'x'}
        assert walker.calls == [
            ('get', '10.0.0.1', ['1.2.3.0']),
            ('walk', '10.0.0.1', '1.2.3', 5),
        ]

    def test_version_and_mode_from_config(self, dispatcher):
        session = PysnmpSession(
            '10.0.0.1',
            SessionConfig(version='2', nonblocking=True),
            dispatcher=dispatcher,
            walker=RecordingWalker(),
        )
        assert session.version == '2c'
        assert session.nonblocking is True


# ===========================================================================
# Walker helpers
# ===========================================================================

class TestWalkerHelpers:

    def test_oid_key_orders_numerically(self):
        assert _oid_key('1.3.6.1.10') > _oid_key('1.3.6.1.9')

    def test_unwrap_passes_values(self):
        assert _unwrap(5) == 5

    def test_response_ok(self):
        assert SnmpResponse().ok
        assert not SnmpResponse(error='x').ok
