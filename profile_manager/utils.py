# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Utility functions for resource naming, versions and durable records."""

from __future__ import annotations

import secrets
import string
from pathlib import Path

import sh
from pydantic import BaseModel

from profile_manager import logger
from profile_manager.constants import MAX_CLUSTER_NAME_LENGTH, RANDOM_SUFFIX_LENGTH
from profile_manager.errors import ConfigurationError, PersistenceError


def trim_name_by_length(name: str, length: int) -> str:
    """Cut a name to at most *length* characters.

    The name is truncated from the end and a dangling ``-`` is dropped so
    the result stays a valid AWS/OCM name component.

    Args:
        name: Name to trim.
        length: Maximum length of the result.

    Returns:
        The trimmed name.
    """
    if len(name) <= length:
        return name
    return name[:length].rstrip("-")


def generate_random_name(prefix: str, n: int) -> str:
    """Append ``-`` and *n* random lowercase alphanumerics to *prefix*."""
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(n))
    return f"{prefix}-{suffix}"


def prepare_prefix(name_prefix: str, name_length: int) -> str:
    """Build a cluster name of at most *name_length* characters.

    The random suffix is always kept whole; the prefix is shortened instead.

    Args:
        name_prefix: Profile name prefix.
        name_length: Maximum length of the cluster name.

    Returns:
        Generated cluster name.

    Raises:
        ConfigurationError: If the length exceeds the cluster name limit or
            leaves no room for the prefix.
    """
    if name_length > MAX_CLUSTER_NAME_LENGTH:
        raise ConfigurationError(
            f"Cluster name length {name_length} exceeds the maximum of {MAX_CLUSTER_NAME_LENGTH}"
        )
    prefix_length = name_length - RANDOM_SUFFIX_LENGTH - 1
    if prefix_length < 1:
        raise ConfigurationError(f"Cluster name length {name_length} is too short")
    prefix = trim_name_by_length(name_prefix, prefix_length)
    return generate_random_name(prefix, RANDOM_SUFFIX_LENGTH)


def split_major_version(version: str) -> str:
    """Return the ``major.minor`` part of an OpenShift version.

    Args:
        version: Version such as ``4.15.3`` or ``4.16.0-rc.1``.

    Returns:
        ``major.minor`` (e.g. ``4.15``), or the input when it has no minor part.
    """
    parts = version.split(".")
    if len(parts) < 2:
        return version
    return ".".join(parts[:2])


def version_key(raw_id: str) -> tuple[int, ...]:
    """Numeric sort key for ``x.y.z[-suffix]`` version strings."""
    core = raw_id.split("-", 1)[0]
    return tuple(int(part) for part in core.split(".") if part.isdigit())


def split_non_empty(value: str, sep: str = ",") -> list[str]:
    """Split *value* on *sep*, dropping empty and whitespace-only items."""
    return [item.strip() for item in value.split(sep) if item.strip()]


def create_file_with_content(path: Path, content: str | BaseModel) -> Path:
    """Write a durable record, serializing models to JSON.

    Args:
        path: Destination file; parent directories are created.
        content: Text, or a pydantic model written as indented JSON.

    Returns:
        The written path.

    Raises:
        PersistenceError: If the file cannot be written.
    """
    if isinstance(content, BaseModel):
        text = content.model_dump_json(exclude_none=True, indent=2)
    else:
        text = content
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as err:
        logger.error("Cannot record %s: %s", path, err)
        raise PersistenceError(f"cannot record {path}: {err}") from err
    logger.debug("Recorded %s", path)
    return path


def require_command(cmd: str) -> None:
    """Check if a command exists on the system PATH.

    Args:
        cmd: Name of the CLI command to check.

    Raises:
        ConfigurationError: If the command is not found.
    """
    try:
        sh.which(cmd)
    except sh.ErrorReturnCode as err:
        raise ConfigurationError(f"Required command '{cmd}' not found. Please install it first.") from err
