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

"""Cluster readiness polling and install-log capture."""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from tenacity import RetryError, Retrying, retry_if_exception_type, stop_before_delay, wait_fixed
from tenacity.stop import stop_base

from profile_manager import logger
from profile_manager.client import RosaClient
from profile_manager.config import TestConfig
from profile_manager.constants import (
    POLL_INTERVAL_SECONDS,
    STATE_ERROR,
    STATE_INSTALLING,
    STATE_PENDING,
    STATE_READY,
    STATE_UNINSTALLING,
    STATE_VALIDATING,
    STATE_WAITING,
    WAITING_STATE_LIMIT_MINUTES,
)
from profile_manager.errors import ClusterStateError, ClusterTimeoutError, InvocationError
from profile_manager.utils import create_file_with_content

TRANSIENT_STATES = tuple(s.lower() for s in (STATE_PENDING, STATE_INSTALLING, STATE_VALIDATING))


class _NotReady(Exception):
    """Raised by a poll tick for states worth waiting on."""

    def __init__(self, state: str) -> None:
        super().__init__(state)
        self.state = state


def record_cluster_install_log(client: RosaClient, cluster: str, settings: TestConfig) -> Path:
    """Write the cluster install log to the install-log artifact."""
    output = client.install_log(cluster)
    return create_file_with_content(settings.install_log_file, output)


def wait_for_cluster_ready(
    client: RosaClient,
    cluster: str,
    timeout_minutes: int,
    settings: TestConfig,
    sleep: Callable[[float], None] = time.sleep,
    stop: stop_base | None = None,
) -> None:
    """Poll a cluster until it is ready.

    States are matched case-insensitively. ``Error`` states capture the
    install log before failing. Time spent in ``Waiting`` accumulates over
    the whole call, even across ticks in other states.

    Args:
        client: Client used to describe the cluster on every tick.
        cluster: Cluster name or ID.
        timeout_minutes: Overall deadline. No tick starts after it passes.
        settings: Artifact locations for the install log.
        sleep: Sleep function between ticks.
        stop: Stop condition replacing the deadline.

    Raises:
        ClusterStateError: If the cluster errors, uninstalls, stays in
            ``Waiting`` too long or reports an unknown state.
        ClusterTimeoutError: If the deadline passes first.
        InvocationError: If describing the cluster fails.
    """
    waiting_minutes = 0

    def _tick() -> None:
        nonlocal waiting_minutes
        state = client.describe_cluster(cluster).state
        normalized = state.lower()
        logger.info("Cluster %s is in state %s", cluster, state)

        if normalized == STATE_READY.lower():
            logger.info("Cluster %s is ready now.", cluster)
            return
        if normalized == STATE_UNINSTALLING.lower():
            raise ClusterStateError(f"cluster {cluster} is {STATE_UNINSTALLING} now. Cannot wait for it ready")
        if STATE_ERROR.lower() in normalized:
            logger.error("Cluster is in %s status now. Recording the installation log", STATE_ERROR)
            try:
                record_cluster_install_log(client, cluster, settings)
            except InvocationError as err:
                logger.warning("Cannot capture the install log of %s: %s", cluster, err)
            raise ClusterStateError(f"cluster {cluster} is in {STATE_ERROR} state with reason: {state}")
        if any(transient in normalized for transient in TRANSIENT_STATES):
            raise _NotReady(state)
        if STATE_WAITING.lower() in normalized:
            if waiting_minutes >= WAITING_STATE_LIMIT_MINUTES:
                raise ClusterStateError(
                    f"cluster stuck to {state} status for more than {WAITING_STATE_LIMIT_MINUTES} mins. "
                    "Check the user data preparation for roles"
                )
            waiting_minutes += POLL_INTERVAL_SECONDS // 60
            raise _NotReady(state)
        raise ClusterStateError(f"unknown cluster state {state}")

    retrying = Retrying(
        stop=stop or stop_before_delay(timeout_minutes * 60),
        wait=wait_fixed(POLL_INTERVAL_SECONDS),
        retry=retry_if_exception_type(_NotReady),
        sleep=sleep,
    )
    try:
        retrying(_tick)
    except RetryError as err:
        raise ClusterTimeoutError(
            f"timeout for cluster ready waiting after {timeout_minutes} mins"
        ) from err
