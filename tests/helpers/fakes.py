"""In-memory collaborators for orchestration tests."""

from __future__ import annotations

import queue
import threading
import time
from contextlib import nullcontext
from typing import Iterator, Mapping, Optional, Sequence

from fc_controller.interrupts import InterruptSource
from fc_controller.models.instances import InstanceRecord
from fc_controller.models.types import Outcome, OutcomeStatus


def outcome(target: str, status: OutcomeStatus = OutcomeStatus.SUCCESS, **kwargs) -> Outcome:
    return Outcome(target=target, status=status, **kwargs)


class FakeControlPlane:
    """Scripted control plane.

    ``outcomes`` are emitted first. With ``close=False`` the stream then
    stays open, yielding whatever is put on ``feed`` until a ``None``
    sentinel arrives or the poll is cancelled.
    """

    def __init__(
        self,
        outcomes: Sequence[Outcome] = (),
        *,
        close: bool = True,
        invocation_id: str = "cmd-1",
        submit_error: Optional[Exception] = None,
        abort_error: Optional[Exception] = None,
        poll_error: Optional[Exception] = None,
        instances: Sequence[InstanceRecord] = (),
    ) -> None:
        self.outcomes = list(outcomes)
        self.close = close
        self.invocation_id = invocation_id
        self.submit_error = submit_error
        self.abort_error = abort_error
        self.poll_error = poll_error
        self.instances = list(instances)
        self.feed: "queue.Queue[Optional[Outcome]]" = queue.Queue()
        self.submitted: list[tuple[list[str], str, dict[str, str]]] = []
        self.aborted: list[tuple[str, list[str]]] = []
        self.abort_called = threading.Event()
        self.cancel_seen = threading.Event()

    def submit(
        self, targets: Sequence[str], document_name: str, parameters: Mapping[str, str]
    ) -> str:
        self.submitted.append((list(targets), document_name, dict(parameters)))
        if self.submit_error is not None:
            raise self.submit_error
        return self.invocation_id

    def poll(
        self, invocation_id: str, targets: Sequence[str], cancel: threading.Event
    ) -> Iterator[Outcome]:
        try:
            for item in self.outcomes:
                yield item
            if self.poll_error is not None:
                raise self.poll_error
            while not self.close and not cancel.is_set():
                try:
                    item = self.feed.get(timeout=0.01)
                except queue.Empty:
                    continue
                if item is None:
                    return
                yield item
        finally:
            if cancel.is_set():
                self.cancel_seen.set()

    def abort(self, invocation_id: str, targets: Sequence[str]) -> None:
        self.aborted.append((invocation_id, list(targets)))
        self.abort_called.set()
        if self.abort_error is not None:
            raise self.abort_error

    def list_instances(self) -> list[InstanceRecord]:
        return list(self.instances)


class StuckControlPlane(FakeControlPlane):
    """Control plane whose poll sits in one long remote call, ignoring cancel."""

    def __init__(self, hold: float, **kwargs) -> None:
        super().__init__(**kwargs)
        self.hold = hold

    def poll(
        self, invocation_id: str, targets: Sequence[str], cancel: threading.Event
    ) -> Iterator[Outcome]:
        time.sleep(self.hold)
        yield from ()


class RecordingSink:
    """Sink that keeps everything it is given; can fail on the Nth outcome."""

    def __init__(self, fail_on: Optional[int] = None, *, fail_notice: bool = False) -> None:
        self.fail_on = fail_on
        self.fail_notice = fail_notice
        self.targets: list[list[str]] = []
        self.notices: list[str] = []
        self.records: list[Outcome] = []
        self.attempts = 0

    def show_targets(self, targets: Sequence[str]) -> None:
        self.targets.append(list(targets))

    def notice(self, message: str) -> None:
        if self.fail_notice:
            raise IOError("broken pipe")
        self.notices.append(message)

    def write_outcome(self, outcome: Outcome) -> None:
        self.attempts += 1
        if self.fail_on is not None and self.attempts == self.fail_on:
            raise IOError("broken pipe")
        self.records.append(outcome)


class TimedInterruptSource(InterruptSource):
    """Interrupt source that delivers raw interrupts after fixed delays."""

    def __init__(self, on_abort, delays: Sequence[float], **kwargs) -> None:
        super().__init__(on_abort, **kwargs)
        self._delays = list(delays)
        self._thread = threading.Thread(target=self._fire, daemon=True)

    def __enter__(self) -> "TimedInterruptSource":
        super().__enter__()
        self._thread.start()
        return self

    def _fire(self) -> None:
        for delay in self._delays:
            time.sleep(delay)
            self.deliver()


def timed_interrupts(*delays: float):
    """Interrupt factory firing after each delay (seconds, cumulative)."""
    return lambda on_abort: TimedInterruptSource(on_abort, delays)


def no_interrupts(on_abort):
    """Interrupt factory that never installs a handler."""
    return nullcontext()
