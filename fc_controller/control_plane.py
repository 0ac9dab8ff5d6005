"""Protocol for the fleet control plane consumed by the orchestrator."""

from __future__ import annotations

import threading
from typing import Iterator, Mapping, Protocol, Sequence

from fc_controller.models.instances import InstanceRecord
from fc_controller.models.types import Outcome


class RemoteControlPlane(Protocol):
    """Opaque remote service that executes documents on managed hosts."""

    def submit(
        self,
        targets: Sequence[str],
        document_name: str,
        parameters: Mapping[str, str],
    ) -> str:
        """Submit a document run and return the invocation id."""
        raise NotImplementedError

    def poll(
        self,
        invocation_id: str,
        targets: Sequence[str],
        cancel: threading.Event,
    ) -> Iterator[Outcome]:
        """Yield outcomes until every target is terminal.

        Implementations must stop producing once ``cancel`` is set.
        """
        raise NotImplementedError

    def abort(self, invocation_id: str, targets: Sequence[str]) -> None:
        """Request best-effort cancellation of an invocation."""
        raise NotImplementedError

    def list_instances(self) -> list[InstanceRecord]:
        """Return the managed instances visible to the caller."""
        raise NotImplementedError
