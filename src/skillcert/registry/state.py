"""
Registry state snapshot.

The whole registry is a single store: a counter, two record maps and two
append-only indexes. ``RegistryState`` holds them and can be written to
and read back from a JSON file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from pydantic import BaseModel, Field, ValidationError

from skillcert.exceptions import StorageError
from skillcert.registry.models import Certificate, Issuer

logger = logging.getLogger(__name__)


class RegistryState(BaseModel):
    """Everything the registry owns."""

    owner: str
    certificate_counter: int = Field(default=0, ge=0)
    certificates: dict[int, Certificate] = Field(default_factory=dict)
    issuers: dict[str, Issuer] = Field(default_factory=dict)
    recipient_certificates: dict[str, list[int]] = Field(default_factory=dict)
    issuer_certificates: dict[str, list[int]] = Field(default_factory=dict)


def save_state(state: RegistryState, path: Union[str, Path]) -> None:
    """Persist ``state`` to ``path`` as JSON.

    The file is written to a temporary sibling and renamed into place, so
    a crash never leaves a half-written snapshot.

    Raises:
        StorageError: If the file cannot be written.
    """
    target = Path(path)
    data = state.model_dump_json(indent=2)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w") as fh:
            fh.write(data)
        os.replace(tmp_name, target)
    except OSError as exc:
        raise StorageError(f"Failed to write registry snapshot {target}: {exc}") from exc
    logger.debug("Saved registry snapshot to %s", target)


def load_state(path: Union[str, Path]) -> RegistryState:
    """Read a snapshot previously written by :func:`save_state`.

    Raises:
        StorageError: If the file is missing, unreadable or malformed.
    """
    source = Path(path)
    try:
        raw = source.read_text()
    except OSError as exc:
        raise StorageError(f"Failed to read registry snapshot {source}: {exc}") from exc
    try:
        state = RegistryState.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise StorageError(f"Corrupt registry snapshot {source}: {exc}") from exc
    if sorted(state.certificates) != list(range(1, state.certificate_counter + 1)):
        raise StorageError(
            f"Corrupt registry snapshot {source}: certificate ids do not match "
            f"counter {state.certificate_counter}"
        )
    logger.debug(
        "Loaded registry snapshot from %s (%d certificates)",
        source,
        state.certificate_counter,
    )
    return state
