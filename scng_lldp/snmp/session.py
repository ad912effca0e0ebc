"""
SCNG LLDP - SNMP Sessions and Dispatcher.

A Session sends GET and table-walk requests to one agent, either blocking
(the call returns the response) or deferred (the call queues the request
on an SnmpDispatcher and a callback runs when the response arrives).

Both modes share the same contract:
- get_request() / get_table() return the var_bind_list (blocking),
  True (deferred, queued) or None (failure, error is set)
- after completion session.var_bind_list holds {oid: value} and
  session.error holds the failure reason or None
- callbacks receive the session

Usage:
    dispatcher = SnmpDispatcher()
    session = PysnmpSession("192.168.1.1", SessionConfig(nonblocking=True),
                            dispatcher=dispatcher)
    session.get_request([LLDP.LOCAL_SYS_NAME], callback=handle)
    dispatcher.run()
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Set, Union

from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    UsmUserData,
    usmHMACMD5AuthProtocol,
    usmHMACSHAAuthProtocol,
    usmHMAC128SHA224AuthProtocol,
    usmHMAC192SHA256AuthProtocol,
    usmHMAC256SHA384AuthProtocol,
    usmHMAC384SHA512AuthProtocol,
    usmNoAuthProtocol,
    usmDESPrivProtocol,
    usm3DESEDEPrivProtocol,
    usmAesCfb128Protocol,
    usmAesCfb192Protocol,
    usmAesCfb256Protocol,
    usmNoPrivProtocol,
)

from ..config import SessionConfig
from .walker import SNMPWalker, SnmpResponse, AuthData


logger = logging.getLogger(__name__)

SessionCallback = Callable[['Session'], Any]
RequestResult = Union[Dict[str, Any], bool, None]


# =============================================================================
# Dispatcher
# =============================================================================

class SnmpDispatcher:
    """
    Event pump for deferred SNMP requests.

    Owns an asyncio loop. Blocking requests run to completion on it,
    deferred requests are queued as tasks and run by run(). Requests
    queued by completion callbacks are driven by the same run() call.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.new_event_loop()
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of queued or in-flight deferred requests."""
        return len(self._pending)

    def run_blocking(self, request: Awaitable[SnmpResponse]) -> SnmpResponse:
        """Run one request to completion and return its response."""
        if self.loop.is_running():
            raise RuntimeError("blocking SNMP request issued from inside the dispatch loop")
        return self.loop.run_until_complete(request)

    def submit(
        self,
        request: Awaitable[SnmpResponse],
        on_complete: Callable[[SnmpResponse], Any],
    ) -> asyncio.Task:
        """Queue a request; on_complete(response) runs when it finishes."""
        task = self.loop.create_task(self._run_request(request, on_complete))
        self._pending.add(task)
        return task

    async def _run_request(
        self,
        request: Awaitable[SnmpResponse],
        on_complete: Callable[[SnmpResponse], Any],
    ) -> None:
        response = await request
        on_complete(response)

    def run(self) -> None:
        """
        Drive all deferred requests until none are left.

        The first exception raised by a completion callback propagates.
        """
        while self._pending:
            tasks = list(self._pending)
            try:
                self.loop.run_until_complete(asyncio.gather(*tasks))
            finally:
                self._pending.difference_update(t for t in tasks if t.done())

    def close(self) -> None:
        """Cancel anything still queued and close the loop."""
        for task in self._pending:
            task.cancel()
        if self._pending:
            self.loop.run_until_complete(
                asyncio.gather(*self._pending, return_exceptions=True)
            )
        self._pending.clear()
        self.loop.close()


_default_dispatcher: Optional[SnmpDispatcher] = None


def default_dispatcher() -> SnmpDispatcher:
    """Return the shared dispatcher, creating it on first call."""
    global _default_dispatcher
    if _default_dispatcher is None or _default_dispatcher.loop.is_closed():
        _default_dispatcher = SnmpDispatcher()
    return _default_dispatcher


def snmp_dispatcher() -> None:
    """Run all deferred requests queued on the shared dispatcher."""
    default_dispatcher().run()


# =============================================================================
# Session Interface
# =============================================================================

class Session(ABC):
    """
    SNMP session to a single agent.

    Subclasses provide the request coroutines; dispatch, result
    bookkeeping and the per-namespace stash live here.
    """

    def __init__(
        self,
        hostname: str,
        nonblocking: bool = False,
        dispatcher: Optional[SnmpDispatcher] = None,
    ):
        self.hostname = hostname
        self._nonblocking = nonblocking
        self.dispatcher = dispatcher or default_dispatcher()
        self.var_bind_list: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None
        self._stash: Dict[str, Dict[str, Any]] = {}

    @property
    def nonblocking(self) -> bool:
        return self._nonblocking

    @property
    @abstractmethod
    def version(self) -> str:
        """SNMP version: "1", "2c" or "3"."""

    @abstractmethod
    def _get(self, oids: list) -> Awaitable[SnmpResponse]:
        """Return the coroutine performing a GET of oids."""

    @abstractmethod
    def _walk(self, base_oid: str, max_repetitions: int) -> Awaitable[SnmpResponse]:
        """Return the coroutine performing a walk below base_oid."""

    def get_request(
        self,
        oids: Iterable[str],
        callback: Optional[SessionCallback] = None,
    ) -> RequestResult:
        """Send one GET request for oids."""
        oids = list(oids)
        logger.debug("%s: GET %d oids", self.hostname, len(oids))
        return self._dispatch(self._get(oids), callback)

    def get_table(
        self,
        base_oid: str,
        max_repetitions: int = 1,
        callback: Optional[SessionCallback] = None,
    ) -> RequestResult:
        """
        Walk the subtree below base_oid.

        max_repetitions is the GETBULK entries-per-request limit. It
        defaults to 1, larger values break some agents.
        """
        logger.debug("%s: walk %s", self.hostname, base_oid)
        return self._dispatch(self._walk(base_oid, max_repetitions), callback)

    def stash(self, namespace: str) -> Dict[str, Any]:
        """Per-session key/value store private to namespace."""
        return self._stash.setdefault(namespace, {})

    def _dispatch(
        self,
        request: Awaitable[SnmpResponse],
        callback: Optional[SessionCallback],
    ) -> RequestResult:
        self.error = None
        self.var_bind_list = None

        if self._nonblocking:
            def on_complete(response: SnmpResponse) -> None:
                self._complete(response)
                if callback is not None:
                    callback(self)

            self.dispatcher.submit(request, on_complete)
            return True

        self._complete(self.dispatcher.run_blocking(request))
        return self.var_bind_list

    def _complete(self, response: SnmpResponse) -> None:
        if response.ok:
            self.error = None
            self.var_bind_list = dict(response.var_binds)
        else:
            logger.warning("%s: SNMP request failed: %s", self.hostname, response.error)
            self.error = response.error
            self.var_bind_list = None

    def close(self) -> None:
        """Release transport resources."""


# =============================================================================
# Credential Builders
# =============================================================================

AUTH_PROTOCOLS = {
    "MD5": usmHMACMD5AuthProtocol,
    "SHA": usmHMACSHAAuthProtocol,
    "SHA224": usmHMAC128SHA224AuthProtocol,
    "SHA256": usmHMAC192SHA256AuthProtocol,
    "SHA384": usmHMAC256SHA384AuthProtocol,
    "SHA512": usmHMAC384SHA512AuthProtocol,
    "NONE": usmNoAuthProtocol,
}

PRIV_PROTOCOLS = {
    "DES": usmDESPrivProtocol,
    "3DES": usm3DESEDEPrivProtocol,
    "AES": usmAesCfb128Protocol,
    "AES128": usmAesCfb128Protocol,
    "AES192": usmAesCfb192Protocol,
    "AES256": usmAesCfb256Protocol,
    "NONE": usmNoPrivProtocol,
}


def build_auth(config: SessionConfig) -> AuthData:
    """Build pysnmp credentials based on SNMP version."""
    if config.version == "3":
        auth_proto = AUTH_PROTOCOLS.get(config.v3_auth_protocol.upper(), usmHMACSHAAuthProtocol)
        priv_proto = PRIV_PROTOCOLS.get(config.v3_priv_protocol.upper(), usmAesCfb128Protocol)
        if not config.v3_auth_password:
            auth_proto = usmNoAuthProtocol
        if not config.v3_priv_password:
            priv_proto = usmNoPrivProtocol

        return UsmUserData(
            config.v3_user,
            authKey=config.v3_auth_password,
            privKey=config.v3_priv_password,
            authProtocol=auth_proto,
            privProtocol=priv_proto,
        )

    # v1 or v2c
    mp_model = 1 if config.version == "2c" else 0
    return CommunityData(config.community, mpModel=mp_model)


# =============================================================================
# pysnmp Session
# =============================================================================

class PysnmpSession(Session):
    """
    Session backed by pysnmp's asyncio API.

    One SnmpEngine per session; all requests of the session run on the
    dispatcher's loop.
    """

    def __init__(
        self,
        hostname: str,
        config: Optional[SessionConfig] = None,
        dispatcher: Optional[SnmpDispatcher] = None,
        walker: Optional[SNMPWalker] = None,
    ):
        self.config = (config or SessionConfig()).validate()
        super().__init__(hostname, self.config.nonblocking, dispatcher)
        self.walker = walker or SNMPWalker(
            auth=build_auth(self.config),
            port=self.config.port,
            default_timeout=self.config.timeout,
            default_retries=self.config.retries,
        )

    @property
    def version(self) -> str:
        return self.config.version

    def _get(self, oids: list) -> Awaitable[SnmpResponse]:
        return self.walker.get(self.hostname, oids)

    def _walk(self, base_oid: str, max_repetitions: int) -> Awaitable[SnmpResponse]:
        return self.walker.walk(self.hostname, base_oid, max_repetitions=max_repetitions)

    def close(self) -> None:
        self.walker.engine.close_dispatcher()
