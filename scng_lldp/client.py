"""
SCNG LLDP - LLDP Client.

Fetches and holds the LLDP data of one agent.

Initialization is two-step: the lldpLocalSystemData GET, then the
lldpRemTable walk. A failed local fetch short-circuits the walk.

Blocking sessions run both steps inside initialize(). Deferred sessions
queue the GET; the walk is queued from its completion callback and both
complete while the dispatcher runs:

    client = LldpClient(session)
    client.initialize()
    snmp_dispatcher()
    if client.state is InitState.READY:
        table = client.get_remote_table()

Both modes go through the same response handlers, so decoding never
depends on the mode.
"""

import logging
from typing import Any, Dict, Iterator, Optional

from .errors import AlreadyInitializedError, UninitializedAccessError
from .models import InitState, LocalSystemData, RemoteNeighbor
from .snmp.session import Session
from .snmp.collectors.local_system import decode_local_system_data, fetch_local_system_data
from .snmp.collectors.remote_table import (
    NestedRemTable,
    build_rem_table,
    decode_rem_table,
    fetch_rem_table,
    iter_rows,
    nest_rem_table,
)


logger = logging.getLogger(__name__)

# Key of this package's data in Session.stash()
NAMESPACE = 'scng_lldp'


class LldpClient:
    """
    LLDP data of one agent, read through a Session.

    Attributes:
        session: Session used for every request
        max_repetitions: GETBULK max-repetitions for the table walk
        state: Current InitState
    """

    def __init__(self, session: Session, max_repetitions: int = 1):
        self.session = session
        self.max_repetitions = max_repetitions
        self._state = InitState.UNINITIALIZED
        self._local: Optional[LocalSystemData] = None
        self._rem_table: NestedRemTable = {}

    @classmethod
    def attach(cls, session: Session, **kwargs: Any) -> 'LldpClient':
        """Return the client stored on session, creating it on first use."""
        store = session.stash(NAMESPACE)
        client = store.get('client')
        if client is None:
            client = cls(session, **kwargs)
            store['client'] = client
        return client

    @property
    def state(self) -> InitState:
        return self._state

    @property
    def hostname(self) -> str:
        return self.session.hostname

    def __repr__(self) -> str:
        return f"LldpClient({self.hostname!r}, state={self._state.value})"

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    def initialize(self, reload: bool = False) -> bool:
        """
        Fetch local system data and the remote table.

        Args:
            reload: Replace data of an already READY client

        Returns:
            Blocking session: True if the client is READY.
            Deferred session: True if the first request was queued.

        Raises:
            AlreadyInitializedError: READY without reload, or a fetch is
                still pending
        """
        if self._state.is_pending:
            raise AlreadyInitializedError(f"{self.hostname}: initialization in progress")
        if self._state is InitState.READY and not reload:
            raise AlreadyInitializedError(f"{self.hostname}: already initialized")

        logger.debug("%s: initializing LLDP data (reload=%s)", self.hostname, reload)
        self._state = InitState.LOCAL_FETCH_PENDING

        if self.session.nonblocking:
            queued = fetch_local_system_data(self.session, callback=self._on_local_response)
            if queued is None:
                self._fail("lldpLocalSystemData request not queued")
                return False
            return True

        fetch_local_system_data(self.session)
        self._on_local_response(self.session)
        return self._state is InitState.READY

    def _on_local_response(self, session: Session) -> None:
        if session.error or session.var_bind_list is None:
            self._fail(f"lldpLocalSystemData: {session.error}")
            return

        self._local = decode_local_system_data(session.var_bind_list)
        logger.debug("%s: local chassis id %s", self.hostname, self._local.chassis_id)
        self._state = InitState.REMOTE_FETCH_PENDING

        if session.nonblocking:
            queued = fetch_rem_table(
                session,
                callback=self._on_remote_response,
                max_repetitions=self.max_repetitions,
            )
            if queued is None:
                self._fail("lldpRemTable walk not queued")
            return

        fetch_rem_table(session, max_repetitions=self.max_repetitions)
        self._on_remote_response(session)

    def _on_remote_response(self, session: Session) -> None:
        if session.error or session.var_bind_list is None:
            self._fail(f"lldpRemTable: {session.error}")
            return

        rows = build_rem_table(decode_rem_table(session.var_bind_list))
        self._rem_table = nest_rem_table(rows)
        self._state = InitState.READY
        logger.debug("%s: %d LLDP neighbors", self.hostname, len(rows))

    def _fail(self, reason: str) -> None:
        logger.warning("%s: LLDP initialization failed: %s", self.hostname, reason)
        self._state = InitState.FAILED

    # -------------------------------------------------------------------------
    # Read API
    # -------------------------------------------------------------------------

    def _require_ready(self) -> None:
        if self._state is not InitState.READY:
            raise UninitializedAccessError(
                f"{self.hostname}: LLDP data not available (state: {self._state.value})"
            )

    def get_local_system_data(self) -> LocalSystemData:
        """
        Return the agent's lldpLocalSystemData.

        Raises:
            UninitializedAccessError: Client is not READY
        """
        self._require_ready()
        return self._local

    def get_remote_table(self) -> Dict[int, Dict[int, RemoteNeighbor]]:
        """
        Return the remote table as {local_port: {rem_index: RemoteNeighbor}}.

        The returned dicts are fresh copies; rows are immutable.

        Raises:
            UninitializedAccessError: Client is not READY
        """
        self._require_ready()
        return {port: dict(rows) for port, rows in self._rem_table.items()}

    def iter_remote_neighbors(self) -> Iterator[RemoteNeighbor]:
        """Yield remote table rows sorted by (local_port, rem_index)."""
        self._require_ready()
        return iter_rows(self._rem_table)


def get_lldp_local_system_data(client: LldpClient) -> LocalSystemData:
    return client.get_local_system_data()


def get_lldp_rem_table(client: LldpClient) -> Dict[int, Dict[int, RemoteNeighbor]]:
    return client.get_remote_table()
