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

"""OpenShift version resolution for profile version selectors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from profile_manager import logger
from profile_manager.constants import VERSION_LATEST, VERSION_Y_MINUS_ONE, VERSION_Z_MINUS_ONE
from profile_manager.errors import ProvisioningError
from profile_manager.models import OpenShiftVersion
from profile_manager.utils import split_major_version, version_key

if TYPE_CHECKING:
    from profile_manager.client import RosaClient


def _stream(version: OpenShiftVersion) -> tuple[int, ...]:
    return version_key(version.raw_id)[:2]


def select_version(versions: list[OpenShiftVersion], requested: str) -> OpenShiftVersion | None:
    """Pick the version matching *requested* from a list of candidates.

    Args:
        versions: Enabled versions of one channel group, in any order.
        requested: ``latest``, ``y-1``, ``z-1``, ``x.y`` or ``x.y.z``.
            An empty selector means ``latest``.

    Returns:
        The selected version, or None when nothing matches.
    """
    if not versions:
        return None
    ordered = sorted(versions, key=lambda v: version_key(v.raw_id), reverse=True)
    newest = ordered[0]
    selector = requested.strip().lower() or VERSION_LATEST

    if selector == VERSION_LATEST:
        return newest

    if selector == VERSION_Y_MINUS_ONE:
        stream = _stream(newest)
        if len(stream) < 2:
            return None
        previous = (stream[0], stream[1] - 1)
        return next((v for v in ordered if _stream(v) == previous), None)

    if selector == VERSION_Z_MINUS_ONE:
        same_stream = [v for v in ordered if _stream(v) == _stream(newest)]
        return same_stream[1] if len(same_stream) > 1 else None

    if requested.count(".") == 1:
        return next((v for v in ordered if split_major_version(v.raw_id) == requested), None)

    return next((v for v in ordered if v.raw_id == requested), None)


def resolve_version(client: RosaClient, requested: str, channel_group: str, hcp: bool) -> OpenShiftVersion:
    """Resolve a version selector against the versions the service offers.

    Raises:
        ProvisioningError: If no enabled version matches the selector.
    """
    versions = [
        v for v in client.list_versions(channel_group, hcp)
        if v.enabled and (v.hosted_control_plane_enabled or not hcp)
    ]
    selected = select_version(versions, requested)
    if selected is None:
        raise ProvisioningError(
            f"no enabled version matches '{requested}' in channel group '{channel_group}'"
            f"{' for hosted control planes' if hcp else ''}"
        )
    if not selected.channel_group:
        selected = selected.model_copy(update={"channel_group": channel_group})
    logger.info("Resolved version '%s' to %s (%s)", requested, selected.raw_id, selected.channel_group)
    return selected
