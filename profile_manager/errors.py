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

"""Exception hierarchy for profile-driven cluster provisioning.

Callers can catch ``ProfileManagerError`` to handle every failure raised by
this package. Errors raised after a cluster exists carry the last known
``cluster`` description; compiler errors carry the partial ``result``.
"""

from __future__ import annotations

from typing import Any


class ProfileManagerError(Exception):
    """Base error for profile compilation and cluster lifecycle helpers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.cluster: Any = None
        self.result: Any = None


class ConfigurationError(ProfileManagerError):
    """Raised when a required environment input or profile is missing."""


class ProvisioningError(ProfileManagerError):
    """Raised when preparing a cloud or account resource fails."""


class InvocationError(ProfileManagerError):
    """Raised when a ``rosa`` command exits with a non-zero status."""

    def __init__(self, command: str, stderr: str = "") -> None:
        message = f"'{command}' failed"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class ClusterStateError(ProfileManagerError):
    """Raised when a cluster reaches a state it cannot recover from."""


class ClusterTimeoutError(ProfileManagerError):
    """Raised when a cluster does not become ready before the deadline."""


class PersistenceError(ProfileManagerError):
    """Raised when a durable record cannot be written.

    Never handled inside the package: without these records the cloud
    resources already created cannot be cleaned up.
    """
