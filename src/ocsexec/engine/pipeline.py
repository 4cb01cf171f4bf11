"""
Execution Pipeline - run every declared method once, in order.

A method that fails (bad parameter type, transport error, revert) is
recorded as failed and the run moves on; the outcome list always has one
entry per declared method.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from ..errors import InvocationError, SynthesisError
from ..pneuma.client import ChainClient, ChainError
from ..spec.models import MethodSpec, Mutability, Schema
from .dispatch import InvocationDispatcher
from .synth import ParameterSynthesizer

logger = logging.getLogger(__name__)


class Status(str, Enum):
    OK = "ok"
    FAILED = "failed"


class PipelineState(str, Enum):
    PENDING = "pending"
    INVOKING = "invoking"
    RECORDED = "recorded"
    COMPLETE = "complete"


@dataclass(frozen=True)
class OutcomeRecord:
    method: str
    mutability: Mutability
    status: Status
    payload: Any = None
    error: Optional[str] = None
    label: Optional[str] = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    @property
    def display_name(self) -> str:
        return self.label or self.method

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "label": self.display_name,
            "mutability": self.mutability.value,
            "status": self.status.value,
            "payload": self.payload,
            "error": self.error,
            "attempts": self.attempts,
        }


class PipelineListener:
    """Progress hooks. Override what you need; all default to no-ops."""

    def method_started(self, index: int, method: MethodSpec, args: Optional[dict[str, Any]]) -> None:
        pass

    def attempt_failed(self, index: int, method: MethodSpec, attempt: int, error: InvocationError) -> None:
        pass

    def method_recorded(self, index: int, method: MethodSpec, record: OutcomeRecord) -> None:
        pass


class ExecutionPipeline:
    def __init__(
        self,
        schema: Schema,
        chain_client: ChainClient,
        address: str,
        synthesizer: Optional[ParameterSynthesizer] = None,
        write_attempts: int = 1,
        retry_delay: float = 0.0,
        call_delay: float = 0.0,
        listener: Optional[PipelineListener] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if write_attempts < 1:
            raise ValueError("write_attempts must be at least 1")
        self.schema = schema
        self.dispatcher = InvocationDispatcher(chain_client)
        self.address = address
        self.synthesizer = synthesizer or ParameterSynthesizer()
        self.write_attempts = write_attempts
        self.retry_delay = retry_delay
        self.call_delay = call_delay
        self.listener = listener or PipelineListener()
        self._sleep = sleep
        self.state = PipelineState.PENDING
        self.outcomes: list[OutcomeRecord] = []

    def run(self) -> list[OutcomeRecord]:
        """Invoke every method in declaration order and return the outcomes."""
        self.outcomes = []
        total = len(self.schema)
        for index, method in enumerate(self.schema):
            if index > 0 and self.call_delay > 0:
                self._sleep(self.call_delay)
            self.state = PipelineState.PENDING
            record = self._execute(index, method)
            self.outcomes.append(record)
            self.state = PipelineState.RECORDED
            self.listener.method_recorded(index, method, record)
            logger.info(
                "[%d/%d] %s: %s", index + 1, total, method.name, record.status.value
            )
        self.state = PipelineState.COMPLETE
        return list(self.outcomes)

    def _execute(self, index: int, method: MethodSpec) -> OutcomeRecord:
        try:
            args = self.synthesizer.synthesize(method, self.address)
        except SynthesisError as exc:
            self.listener.method_started(index, method, None)
            return self._failed(method, exc, attempts=0)

        self.listener.method_started(index, method, args)
        self.state = PipelineState.INVOKING

        attempts = self.write_attempts if method.is_write else 1
        attempt = 0
        while True:
            attempt += 1
            try:
                result = self.dispatcher.invoke(method, args)
            except InvocationError as exc:
                logger.warning("%s attempt %d/%d failed: %s", method.name, attempt, attempts, exc)
                self.listener.attempt_failed(index, method, attempt, exc)
                tx_id = _broadcast_tx_id(exc)
                if tx_id is not None or attempt >= attempts:
                    return self._failed(method, exc, attempts=attempt, tx_id=tx_id)
                if self.retry_delay > 0:
                    self._sleep(self.retry_delay)
                continue
            return OutcomeRecord(
                method=method.name,
                mutability=method.mutability,
                status=Status.OK,
                payload=result.payload,
                label=method.label,
                attempts=attempt,
            )

    @staticmethod
    def _failed(
        method: MethodSpec,
        error: Exception,
        attempts: int,
        tx_id: Optional[str] = None,
    ) -> OutcomeRecord:
        return OutcomeRecord(
            method=method.name,
            mutability=method.mutability,
            status=Status.FAILED,
            payload=tx_id,
            error=str(error),
            label=method.label,
            attempts=attempts,
        )


def _broadcast_tx_id(error: InvocationError) -> Optional[str]:
    """Hash of an already broadcast transaction, if the failure carries one."""
    cause = error.cause
    if isinstance(cause, ChainError) and cause.tx_id:
        return cause.tx_id
    return None


def run_pipeline(
    schema: Schema,
    chain_client: ChainClient,
    address: str,
    **kwargs: Any,
) -> list[OutcomeRecord]:
    return ExecutionPipeline(schema, chain_client, address, **kwargs).run()
