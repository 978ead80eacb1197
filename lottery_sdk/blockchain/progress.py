"""Phase events emitted while submitting purchase and claim transactions."""

from __future__ import annotations

from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from lottery_sdk.utils.logger import get_logger

logger = get_logger(__name__)


class TransactionPhase(str, Enum):
    IDLE = "idle"
    APPROVE_STARTED = "approve_started"
    APPROVE_SUCCEEDED = "approve_succeeded"
    TRANSACTION_STARTED = "transaction_started"
    TRANSACTION_SUCCEEDED = "transaction_succeeded"
    FAILED = "failed"


PhaseListener = Callable[[TransactionPhase, Dict[str, Any]], None]


class TransactionProgress:
    """Pollable phase of one submission, with subscribers notified on each change."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._listeners: List[PhaseListener] = []
        self._phase = TransactionPhase.IDLE
        self._history: List[TransactionPhase] = []

    @property
    def phase(self) -> TransactionPhase:
        return self._phase

    @property
    def history(self) -> List[TransactionPhase]:
        with self._lock:
            return list(self._history)

    # ------------------------------------------------------------------
    # Listener management
    # ------------------------------------------------------------------
    def add_listener(self, callback: PhaseListener) -> None:
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: PhaseListener) -> None:
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def advance(self, phase: TransactionPhase, details: Optional[Dict[str, Any]] = None) -> None:
        with self._lock:
            self._phase = phase
            self._history.append(phase)
            listeners = list(self._listeners)

        payload = dict(details or {})
        logger.debug("Transaction phase -> %s %s", phase.value, payload)
        for callback in listeners:
            try:
                callback(phase, payload)
            except Exception as exc:  # pragma: no cover
                logger.error("Listener for %s failed: %s", phase.value, exc)
