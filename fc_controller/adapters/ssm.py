"""AWS Systems Manager implementation of the remote control plane."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterator, Mapping, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from fc_controller.models.config import ControlPlaneConfig
from fc_controller.models.instances import InstanceRecord
from fc_controller.models.types import Outcome, OutcomeStatus

logger = logging.getLogger(__name__)

# Invocation statuses reported by get_command_invocation. Anything not in
# this map (Pending, InProgress, Delayed, Cancelling) is still running.
SSM_STATUS_MAP = {
    "Success": OutcomeStatus.SUCCESS,
    "Failed": OutcomeStatus.FAILED,
    "Cancelled": OutcomeStatus.CANCELLED,
    "TimedOut": OutcomeStatus.TIMED_OUT,
}

# Lookup errors that mean "ask again on the next tick", not "this instance failed".
_RETRY_CODES = frozenset(
    {
        "InvocationDoesNotExist",
        "ThrottlingException",
        "Throttling",
        "TooManyRequestsException",
        "RequestLimitExceeded",
    }
)

_EC2_FILTER_LIMIT = 200


def map_status(raw: Optional[str]) -> OutcomeStatus:
    """Translate an SSM invocation status into an OutcomeStatus."""
    return SSM_STATUS_MAP.get(raw or "", OutcomeStatus.PENDING)


class SSMControlPlane:
    """Send documents through SSM and poll invocations per instance.

    The boto3 clients are injected; the optional EC2 client adds instance
    state and image id to listings. Use ``from_config`` to build one from a
    shared-config profile and region.
    """

    def __init__(
        self,
        client: Any,
        *,
        ec2_client: Any = None,
        poll_interval: float = 1.0,
    ) -> None:
        self._client = client
        self._ec2_client = ec2_client
        self._poll_interval = poll_interval

    @classmethod
    def from_config(cls, config: ControlPlaneConfig) -> "SSMControlPlane":
        session = boto3.Session(profile_name=config.profile, region_name=config.region)
        return cls(
            session.client("ssm"),
            ec2_client=session.client("ec2"),
            poll_interval=config.poll_interval,
        )

    def submit(
        self,
        targets: Sequence[str],
        document_name: str,
        parameters: Mapping[str, str],
    ) -> str:
        response = self._client.send_command(
            InstanceIds=list(targets),
            DocumentName=document_name,
            Parameters={name: [value] for name, value in parameters.items()},
        )
        return response["Command"]["CommandId"]

    def poll(
        self,
        invocation_id: str,
        targets: Sequence[str],
        cancel: threading.Event,
    ) -> Iterator[Outcome]:
        # One terminal outcome per distinct instance.
        pending = list(dict.fromkeys(targets))
        while pending and not cancel.is_set():
            for target in list(pending):
                if cancel.is_set():
                    return
                outcome = self._fetch(invocation_id, target)
                if outcome is None:
                    continue
                pending.remove(target)
                yield outcome
            if pending:
                cancel.wait(self._poll_interval)

    def _fetch(self, invocation_id: str, target: str) -> Optional[Outcome]:
        try:
            response = self._client.get_command_invocation(
                CommandId=invocation_id, InstanceId=target
            )
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in _RETRY_CODES:
                logger.debug("Invocation lookup for %s deferred: %s", target, code)
                return None
            logger.debug("Invocation lookup failed for %s: %s", target, exc)
            return Outcome(target=target, status=OutcomeStatus.FAILED, error=str(exc))
        except BotoCoreError as exc:
            return Outcome(target=target, status=OutcomeStatus.FAILED, error=str(exc))

        status = map_status(response.get("Status"))
        if not status.is_terminal:
            return None
        return Outcome(
            target=target,
            status=status,
            error=response.get("StandardErrorContent") or None,
            output=response.get("StandardOutputContent") or "",
        )

    def abort(self, invocation_id: str, targets: Sequence[str]) -> None:
        self._client.cancel_command(CommandId=invocation_id, InstanceIds=list(targets))

    def list_instances(self) -> list[InstanceRecord]:
        paginator = self._client.get_paginator("describe_instance_information")
        instances: list[InstanceRecord] = []
        for page in paginator.paginate():
            for entry in page.get("InstanceInformationList", []):
                instances.append(InstanceRecord.from_ssm(entry))
        if self._ec2_client is None:
            return instances
        details = self._ec2_details(
            [item.instance_id for item in instances if item.instance_id.startswith("i-")]
        )
        return [
            item.model_copy(update=details[item.instance_id])
            if item.instance_id in details
            else item
            for item in instances
        ]

    def _ec2_details(self, instance_ids: list[str]) -> dict[str, dict[str, Optional[str]]]:
        details: dict[str, dict[str, Optional[str]]] = {}
        paginator = self._ec2_client.get_paginator("describe_instances")
        # Filter values are capped per request; ids gone from EC2 are simply absent.
        for start in range(0, len(instance_ids), _EC2_FILTER_LIMIT):
            chunk = instance_ids[start : start + _EC2_FILTER_LIMIT]
            pages = paginator.paginate(Filters=[{"Name": "instance-id", "Values": chunk}])
            for page in pages:
                for reservation in page.get("Reservations", []):
                    for entry in reservation.get("Instances", []):
                        details[entry["InstanceId"]] = {
                            "state": entry.get("State", {}).get("Name"),
                            "image_id": entry.get("ImageId"),
                        }
        return details
