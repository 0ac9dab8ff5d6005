"""Run orchestration: submit a document and collect per-target outcomes."""

from __future__ import annotations

import logging
import queue
import threading
import time
from contextlib import AbstractContextManager
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple

from fc_common.errors import (
    AbortError,
    ConfigurationError,
    NoTargetsError,
    PollError,
    RunTimeoutError,
    SinkError,
    SubmissionError,
    UserAbortError,
    wrap_error,
)
from fc_common.logging import bound_run_context
from fc_controller.control_plane import RemoteControlPlane
from fc_controller.interrupts import InterruptSource
from fc_controller.models.types import Invocation, Outcome
from fc_controller.run_state import RunState, RunStateMachine
from fc_controller.sinks import ResultSink

logger = logging.getLogger(__name__)

InterruptFactory = Callable[[Callable[[], None]], AbstractContextManager[Any]]


class _EventKind(str, Enum):
    OUTCOME = "outcome"
    CLOSED = "closed"
    POLL_ERROR = "poll_error"
    ABORT = "abort"


_Event = Tuple[_EventKind, Any]

# Upper bound on a single queue wait; long deadlines are reached in several waits.
_MAX_WAIT_SECONDS = 60.0


class _OutcomeStream:
    """Runs the control-plane poll in a producer thread.

    The producer only puts events on the run queue; cancellation is a
    separate event so the deadline never reaches into the poll loop.
    """

    def __init__(
        self,
        control_plane: RemoteControlPlane,
        invocation: Invocation,
        events: "queue.SimpleQueue[_Event]",
    ) -> None:
        self._control_plane = control_plane
        self._invocation = invocation
        self._events = events
        self._cancel = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="fc-outcome-stream", daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout: float) -> None:
        """Cancel the producer and wait up to ``timeout`` for it to exit."""
        self._cancel.set()
        if timeout <= 0 or not self._thread.is_alive():
            return
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("Outcome stream did not stop within %.1fs", timeout)

    def _run(self) -> None:
        invocation = self._invocation
        try:
            for outcome in self._control_plane.poll(
                invocation.invocation_id, invocation.targets, self._cancel
            ):
                if self._cancel.is_set():
                    return
                self._events.put((_EventKind.OUTCOME, outcome))
        except Exception as exc:
            if not self._cancel.is_set():
                self._events.put((_EventKind.POLL_ERROR, exc))
            return
        if not self._cancel.is_set():
            self._events.put((_EventKind.CLOSED, None))


class Orchestrator:
    """Owns the lifecycle of one run against the control plane.

    ``collect`` multiplexes three sources on a single queue: outcomes from
    the poll producer, debounced interrupts, and the run deadline (the
    bound on each wait). The deadline is checked after every wake-up so it
    wins over anything already queued.
    """

    def __init__(
        self,
        control_plane: RemoteControlPlane,
        sink: ResultSink,
        *,
        interrupt_source: InterruptFactory = InterruptSource,
        clock: Callable[[], float] = time.monotonic,
        stream_join_timeout: float = 1.0,
    ) -> None:
        self._control_plane = control_plane
        self._sink = sink
        self._interrupt_source = interrupt_source
        self._clock = clock
        self._stream_join_timeout = stream_join_timeout
        self._machine = RunStateMachine()
        self._interrupts = 0

    @property
    def state(self) -> RunState:
        return self._machine.state

    def submit(
        self,
        targets: Iterable[str],
        document_name: str,
        parameters: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        """Submit the document once; never retried."""
        target_list = list(targets)
        if not target_list:
            raise NoTargetsError("no targets set")
        if not document_name or not document_name.strip():
            raise ConfigurationError("no document name set to trigger")
        params = dict(parameters or {})

        self._machine.transition(RunState.SUBMITTING)
        try:
            invocation_id = self._control_plane.submit(target_list, document_name, params)
        except Exception as exc:
            self._machine.transition(RunState.FAILED, reason="submission failed")
            raise wrap_error(
                SubmissionError,
                "failed to run command",
                context={"document": document_name, "targets": target_list},
                cause=exc,
            ) from exc

        invocation = Invocation(
            invocation_id=invocation_id,
            document_name=document_name,
            targets=tuple(target_list),
            parameters=params,
        )
        self._machine.transition(RunState.COLLECTING, reason=invocation_id)
        logger.info(
            "Submitted %s to %d target(s) as %s",
            document_name,
            len(target_list),
            invocation_id,
        )
        return invocation

    def collect(self, invocation: Invocation, timeout: float) -> RunState:
        """
        Forward outcomes to the sink until the stream closes.

        Returns:
            RunState.COMPLETED when every outcome has been forwarded.

        Raises:
            RunTimeoutError: the deadline passed first.
            UserAbortError: a second interrupt arrived.
            AbortError: the abort request itself failed.
            SinkError: writing a record failed.
            PollError: the poll producer failed.
        """
        if self._machine.state != RunState.COLLECTING:
            raise RuntimeError(f"cannot collect in state {self._machine.state.value}")

        events: "queue.SimpleQueue[_Event]" = queue.SimpleQueue()
        deadline = self._clock() + timeout
        stream = _OutcomeStream(self._control_plane, invocation, events)
        join_timeout = self._stream_join_timeout
        try:
            with (
                bound_run_context(invocation_id=invocation.invocation_id),
                self._interrupt_source(lambda: events.put((_EventKind.ABORT, None))),
            ):
                stream.start()
                self._drain(invocation, events, deadline, timeout)
        except RunTimeoutError:
            # The deadline is final; a producer stuck in a remote call is left to exit on its own.
            join_timeout = 0.0
            raise
        except BaseException:
            if not self._machine.is_terminal():
                self._machine.transition(RunState.FAILED, reason="unexpected error")
            raise
        finally:
            stream.stop(join_timeout)
        return self._machine.state

    def run(
        self,
        targets: Iterable[str],
        document_name: str,
        parameters: Optional[Mapping[str, str]],
        timeout: float,
    ) -> RunState:
        """Submit and collect in one call."""
        invocation = self.submit(targets, document_name, parameters)
        return self.collect(invocation, timeout)

    def _drain(
        self,
        invocation: Invocation,
        events: "queue.SimpleQueue[_Event]",
        deadline: float,
        timeout: float,
    ) -> None:
        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                self._timed_out(invocation, timeout)
            try:
                kind, payload = events.get(timeout=min(remaining, _MAX_WAIT_SECONDS))
            except queue.Empty:
                continue
            if self._clock() >= deadline:
                self._timed_out(invocation, timeout)

            if kind is _EventKind.OUTCOME:
                self._forward(payload)
            elif kind is _EventKind.ABORT:
                self._on_interrupt(invocation)
            elif kind is _EventKind.POLL_ERROR:
                self._machine.transition(RunState.FAILED, reason="poll failed")
                raise wrap_error(
                    PollError,
                    "failed to collect command output",
                    context={"invocation_id": invocation.invocation_id},
                    cause=payload,
                ) from payload
            else:
                self._machine.transition(RunState.COMPLETED)
                logger.info("Invocation %s completed", invocation.invocation_id)
                return

    def _timed_out(self, invocation: Invocation, timeout: float) -> None:
        self._machine.transition(RunState.TIMED_OUT, reason="timeout reached")
        raise RunTimeoutError(
            "timeout reached",
            context={"invocation_id": invocation.invocation_id, "timeout": timeout},
        )

    def _forward(self, outcome: Outcome) -> None:
        try:
            self._sink.write_outcome(outcome)
        except Exception as exc:
            self._machine.transition(RunState.FAILED, reason="sink write failed")
            raise wrap_error(
                SinkError,
                "failed to print output",
                context={"target": outcome.target},
                cause=exc,
            ) from exc

    def _on_interrupt(self, invocation: Invocation) -> None:
        self._interrupts += 1
        if self._interrupts > 1:
            self._machine.transition(RunState.ABORTED, reason="interrupted by user")
            raise UserAbortError(
                "interrupted by user",
                context={"invocation_id": invocation.invocation_id},
            )

        logger.warning("Interrupt received; aborting %s", invocation.invocation_id)
        try:
            self._control_plane.abort(invocation.invocation_id, invocation.targets)
        except Exception as exc:
            self._machine.transition(RunState.FAILED, reason="abort failed")
            raise wrap_error(
                AbortError,
                "failed to abort command on interrupt",
                context={"invocation_id": invocation.invocation_id},
                cause=exc,
            ) from exc
        try:
            self._sink.notice("Abort requested; press Ctrl+C again to quit without waiting.")
        except Exception as exc:
            self._machine.transition(RunState.FAILED, reason="sink write failed")
            raise wrap_error(SinkError, "failed to print abort notice", cause=exc) from exc
