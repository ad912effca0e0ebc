"""
SCNG LLDP - SNMP Table Walker.

Async SNMP GET and table walk implementation on top of pysnmp.

Features:
- Async/await with pysnmp.hlapi.v3arch.asyncio
- Automatic prefix-based table boundary detection
- GETBULK with a configurable max-repetitions (default 1, some agents
  misbehave with anything larger), GETNEXT for SNMPv1
- Errors are reported in the response, never raised

Usage:
    from scng_lldp.snmp.walker import SNMPWalker

    walker = SNMPWalker(engine, auth)

    # Walk a table
    response = await walker.walk("192.168.1.1", "1.0.8802.1.1.2.1.4.1")

    # Get scalars
    response = await walker.get("192.168.1.1", ["1.0.8802.1.1.2.1.3.3.0"])
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Tuple, Optional, Any, Union, Sequence

from pysnmp.hlapi.v3arch.asyncio import (
    bulk_cmd, get_cmd, next_cmd,
    SnmpEngine, CommunityData, UsmUserData,
    UdpTransportTarget, ContextData,
    ObjectType, ObjectIdentity,
)
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

# Type aliases
AuthData = Union[CommunityData, UsmUserData]
VarBinds = List[Tuple[str, Any]]

logger = logging.getLogger(__name__)

# pysnmp error-status for "noSuchName", the SNMPv1 end-of-walk signal
_NO_SUCH_NAME = 2


@dataclass
class SnmpResponse:
    """
    Completed SNMP request.

    var_binds holds (numeric_oid, value) pairs in response order. Missing
    objects (noSuchObject / noSuchInstance) are reported as None values.
    error is set on transport or protocol failure.
    """
    var_binds: VarBinds = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _unwrap(value: Any) -> Any:
    """Map SNMPv2 exception values to None."""
    if isinstance(value, (NoSuchObject, NoSuchInstance, EndOfMibView)):
        return None
    return value


class SNMPWalker:
    """
    Async SNMP table walker.

    Wraps pysnmp's get_cmd / bulk_cmd / next_cmd with boundary detection
    and error reporting.

    Attributes:
        engine: pysnmp SnmpEngine instance
        auth: CommunityData (v1/v2c) or UsmUserData (v3)
        port: SNMP port of the agents
        default_timeout: Default timeout in seconds
        default_retries: Default retry count
        max_iterations: Safety limit for walk iterations
    """

    def __init__(
        self,
        engine: Optional[SnmpEngine] = None,
        auth: Optional[AuthData] = None,
        port: int = 161,
        default_timeout: float = 5.0,
        default_retries: int = 0,
        max_iterations: int = 100000,
    ):
        self.engine = engine or SnmpEngine()
        self.auth = auth
        self.port = port
        self.default_timeout = default_timeout
        self.default_retries = default_retries
        self.max_iterations = max_iterations

    @property
    def is_v1(self) -> bool:
        return isinstance(self.auth, CommunityData) and self.auth.message_processing_model == 0

    async def _transport(self, target: str) -> UdpTransportTarget:
        # Newer pysnmp requires async .create() for transport
        return await UdpTransportTarget.create(
            (target, self.port),
            timeout=self.default_timeout,
            retries=self.default_retries,
        )

    def _deadline(self) -> float:
        # pysnmp handles timeout/retries itself, this only guards a hung engine
        return self.default_timeout * (self.default_retries + 1) + 2

    async def get(self, target: str, oids: Sequence[str]) -> SnmpResponse:
        """
        Get multiple SNMP scalars in one request.

        Args:
            target: Target IP address or hostname
            oids: Numeric OIDs to get (ending in .0 for scalars)

        Returns:
            SnmpResponse with one var_bind per requested OID
        """
        if not self.auth:
            raise ValueError("No auth data provided")

        object_types = [ObjectType(ObjectIdentity(oid)) for oid in oids]
        start_time = datetime.now()

        try:
            transport = await self._transport(target)
            error_indication, error_status, error_index, var_binds = await asyncio.wait_for(
                get_cmd(
                    self.engine,
                    self.auth,
                    transport,
                    ContextData(),
                    *object_types,
                    lookupMib=False,
                ),
                timeout=self._deadline(),
            )
        except asyncio.TimeoutError:
            return SnmpResponse(error=f"{target}: timeout after {self.default_timeout}s")
        except Exception as e:
            logger.debug("GET %s failed", target, exc_info=True)
            return SnmpResponse(error=f"{target}: {type(e).__name__}: {e}")

        if error_indication:
            return SnmpResponse(error=f"{target}: {error_indication}")

        if error_status:
            return SnmpResponse(
                error=f"{target}: {error_status.prettyPrint()} at index {error_index}"
            )

        results = [(str(name), _unwrap(value)) for name, value in var_binds]
        elapsed = (datetime.now() - start_time).total_seconds()
        logger.debug("GET %s: %d var_binds in %.2fs", target, len(results), elapsed)
        return SnmpResponse(var_binds=results)

    async def walk(
        self,
        target: str,
        oid: str,
        max_repetitions: int = 1,
    ) -> SnmpResponse:
        """
        Walk an SNMP subtree.

        Walks all OIDs under the given base OID until leaving the subtree
        (OID no longer starts with base). Uses GETBULK with
        max_repetitions, or GETNEXT for SNMPv1 auth.

        Args:
            target: Target IP address or hostname
            oid: Base OID (numeric string)
            max_repetitions: Entries per GETBULK round trip

        Returns:
            SnmpResponse with all (oid, value) pairs inside the subtree

        Example:
            response = await walker.walk("192.168.1.1", "1.0.8802.1.1.2.1.4.1")
            for oid, value in response.var_binds:
                ...
        """
        if not self.auth:
            raise ValueError("No auth data provided")

        base_prefix = oid + "."
        results: VarBinds = []
        last_oid = oid
        start_time = datetime.now()
        max_repetitions = max(1, max_repetitions)

        logger.debug("Walking OID: %s on %s (max-repetitions=%d)", oid, target, max_repetitions)

        try:
            transport = await self._transport(target)

            for iteration in range(self.max_iterations):
                if self.is_v1:
                    request = next_cmd(
                        self.engine,
                        self.auth,
                        transport,
                        ContextData(),
                        ObjectType(ObjectIdentity(last_oid)),
                        lexicographicMode=False,
                        lookupMib=False,
                    )
                else:
                    request = bulk_cmd(
                        self.engine,
                        self.auth,
                        transport,
                        ContextData(),
                        0,  # non-repeaters
                        max_repetitions,
                        ObjectType(ObjectIdentity(last_oid)),
                        lexicographicMode=False,
                        lookupMib=False,
                    )

                error_indication, error_status, error_index, var_binds = await asyncio.wait_for(
                    request, timeout=self._deadline()
                )

                if error_indication:
                    return SnmpResponse(error=f"{target}: {error_indication}")

                if error_status:
                    if self.is_v1 and int(error_status) == _NO_SUCH_NAME:
                        break
                    return SnmpResponse(
                        error=f"{target}: {error_status.prettyPrint()} at index {error_index}"
                    )

                if not var_binds:
                    break

                in_table = False
                for name, value in var_binds:
                    oid_str = str(name)

                    if isinstance(value, EndOfMibView) or not oid_str.startswith(base_prefix):
                        in_table = False
                        break

                    if _oid_key(oid_str) <= _oid_key(last_oid):
                        return SnmpResponse(error=f"{target}: OID not increasing: {oid_str}")

                    results.append((oid_str, _unwrap(value)))
                    last_oid = oid_str
                    in_table = True

                if not in_table:
                    break
            else:
                return SnmpResponse(
                    error=f"{target}: walk of {oid} exceeded {self.max_iterations} iterations"
                )

        except asyncio.TimeoutError:
            return SnmpResponse(error=f"{target}: timeout after {self.default_timeout}s")
        except Exception as e:
            logger.debug("WALK %s %s failed", target, oid, exc_info=True)
            return SnmpResponse(error=f"{target}: {type(e).__name__}: {e}")

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.debug(
            "Walk complete: %d results in %.2fs (%d iterations)",
            len(results), elapsed, iteration + 1,
        )
        return SnmpResponse(var_binds=results)


def _oid_key(oid: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in oid.split('.') if part)
