"""Execution environment shared by tokens, pools, registries and routers.

The runtime plays the part a ledger platform plays for on-chain contracts:

- a directory of deployed contracts keyed by address
- a clock for reserve update markers and router deadlines
- a re-entrant lock serializing every state-mutating operation
- atomic() blocks that snapshot touched contracts and roll them back on failure
- an append-only event log that is truncated when a block reverts
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar, runtime_checkable

import structlog
from eth_abi.packed import encode_packed
from eth_utils import keccak

from pairdex.models.events import Event
from pairdex.models.types import normalize_address

logger = structlog.get_logger()

# Address used as the deployer for plain (non-CREATE2) deployments
GENESIS_DEPLOYER = "0x00000000000000000000000000000000000000d1"


@runtime_checkable
class Contract(Protocol):
    """Anything that can be deployed into a runtime.

    snapshot() must return a value that restore() can later reapply; it must
    not share mutable containers with the live contract.
    Stateful contracts call Runtime.touch(self) before every mutation.
    """

    address: str

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...


C = TypeVar("C", bound=Contract)


@dataclass
class _Savepoint:
    """Pre-change states and deployments recorded by one atomic level."""

    event_mark: int
    states: dict[str, tuple[Contract, Any]] = field(default_factory=dict)
    deployed: list[str] = field(default_factory=list)

    def absorb(self, child: _Savepoint) -> None:
        for address, record in child.states.items():
            self.states.setdefault(address, record)
        self.deployed.extend(child.deployed)


class Runtime:
    """Contract directory with serialized, all-or-nothing execution.

    Args:
        clock: Callable returning the current timestamp in whole seconds.
               Defaults to wall-clock time.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock if clock is not None else (lambda: int(time.time()))
        self._contracts: dict[str, Contract] = {}
        self._events: list[Event] = []
        self._lock = threading.RLock()
        self._savepoints: list[_Savepoint] = []
        self._nonce = 0

    # --- Clock ---

    @property
    def timestamp(self) -> int:
        """Current timestamp from the runtime clock."""
        return self._clock()

    # --- Contract directory ---

    def next_address(self, deployer: str = GENESIS_DEPLOYER) -> str:
        """Derive a fresh address from the deployer and a runtime nonce."""
        self._nonce += 1
        digest = keccak(
            encode_packed(["address", "uint256"], [normalize_address(deployer), self._nonce])
        )
        return "0x" + digest[12:].hex()

    def deploy(self, contract: C) -> C:
        """Register a contract at its address.

        Raises:
            ValueError: If the address is already occupied
        """
        address = normalize_address(contract.address)
        if address in self._contracts:
            raise ValueError(f"Address already in use: {address}")
        self._contracts[address] = contract
        if self._savepoints:
            self._savepoints[-1].deployed.append(address)
        logger.debug("contract_deployed", address=address[-8:], kind=type(contract).__name__)
        return contract

    def contract(self, address: str) -> Contract:
        """Look up a deployed contract.

        Raises:
            LookupError: If nothing is deployed at the address
        """
        found = self._contracts.get(normalize_address(address))
        if found is None:
            raise LookupError(f"No contract at {address}")
        return found

    def is_deployed(self, address: str) -> bool:
        return normalize_address(address) in self._contracts

    # --- Atomic execution ---

    @property
    def depth(self) -> int:
        """Nesting level of the atomic block currently executing (0 at rest)."""
        return len(self._savepoints)

    def touch(self, contract: Contract) -> None:
        """Record a contract's state before its first change in the current block.

        Contracts call this before mutating themselves. Outside an atomic
        block it does nothing.
        """
        if not self._savepoints:
            return
        savepoint = self._savepoints[-1]
        if contract.address not in savepoint.states:
            savepoint.states[contract.address] = (contract, contract.snapshot())

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run a block all-or-nothing.

        Acquires the runtime lock and opens a savepoint. Only contracts that
        touch() the savepoint are snapshotted. If the block raises, those
        contracts are restored, contracts deployed inside it are removed and
        the event log is truncated. Blocks may nest; each level is an
        independent savepoint and a committed level hands its records to the
        enclosing one.
        """
        with self._lock:
            savepoint = _Savepoint(event_mark=len(self._events))
            self._savepoints.append(savepoint)
            try:
                yield
            except Exception as exc:
                for contract, state in savepoint.states.values():
                    contract.restore(state)
                for address in savepoint.deployed:
                    del self._contracts[address]
                del self._events[savepoint.event_mark :]
                if len(self._savepoints) == 1:
                    logger.warning(
                        "operation_reverted",
                        error=type(exc).__name__,
                        code=getattr(exc, "code", None),
                    )
                raise
            else:
                if len(self._savepoints) > 1:
                    self._savepoints[-2].absorb(savepoint)
            finally:
                self._savepoints.pop()

    # --- Events ---

    def emit(self, event: Event) -> None:
        """Append an event to the log."""
        self._events.append(event)

    @property
    def events(self) -> tuple[Event, ...]:
        """All committed (and in-flight) events, oldest first."""
        return tuple(self._events)

    def events_of(self, kind: type[Event], emitter: str | None = None) -> list[Event]:
        """Filter the log by event type and, optionally, emitter address."""
        emitter_norm = normalize_address(emitter) if emitter is not None else None
        return [
            e
            for e in self._events
            if isinstance(e, kind) and (emitter_norm is None or e.emitter == emitter_norm)
        ]


__all__ = ["Contract", "Runtime", "GENESIS_DEPLOYER"]
