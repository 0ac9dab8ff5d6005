"""Target resolution from explicit ids and persisted instance snapshots."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from fc_common.errors import (
    ConfigurationError,
    NoTargetsError,
    TargetFileError,
    wrap_error,
)
from fc_controller.models.instances import InstanceRecord

logger = logging.getLogger(__name__)


def load_target_file(path: Path) -> list[str]:
    """Read instance ids from a JSON array of instance records, in file order."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise wrap_error(
            TargetFileError,
            f"failed to read target file {path}", context={"path": path}, cause=exc
        ) from exc
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise wrap_error(
            TargetFileError,
            f"target file {path} is not valid JSON", context={"path": path}, cause=exc
        ) from exc
    if not isinstance(payload, list):
        raise TargetFileError(
            f"target file {path} must contain a JSON array of instances",
            context={"path": path, "found": type(payload).__name__},
        )

    targets: list[str] = []
    for index, entry in enumerate(payload):
        try:
            record = InstanceRecord.model_validate(entry)
        except ValidationError as exc:
            raise wrap_error(
                TargetFileError,
                f"invalid instance record at index {index} in {path}",
                context={"path": path, "index": index},
                cause=exc,
            ) from exc
        targets.append(record.instance_id)
    return targets


def resolve_targets(
    targets: Iterable[str] = (),
    target_file: Optional[Path] = None,
) -> list[str]:
    """
    Produce the ordered target list for a run.

    File entries come first (in file order), followed by explicit ids (in
    the given order). Duplicates are kept.

    Raises:
        TargetFileError: the file cannot be read or parsed.
        NoTargetsError: the combined list is empty.
    """
    resolved: list[str] = []
    if target_file is not None:
        resolved.extend(load_target_file(target_file))
    resolved.extend(targets)

    if not resolved:
        raise NoTargetsError("no targets set")
    logger.debug("Resolved %d target(s)", len(resolved))
    return resolved


def parse_parameters(pairs: Iterable[str]) -> dict[str, str]:
    """Parse ``name:value`` pairs into a parameter mapping.

    The value may itself contain colons; only the first one separates.
    """
    parameters: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition(":")
        name = name.strip()
        if not sep or not name:
            raise ConfigurationError(
                f"invalid parameter {pair!r}; expected name:value",
                context={"parameter": pair},
            )
        if name in parameters:
            raise ConfigurationError(
                f"parameter {name!r} given more than once",
                context={"parameter": name},
            )
        parameters[name] = value
    return parameters

