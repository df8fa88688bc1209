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

"""Cluster subcommands (wait-ready, verify-network, install-log)."""

from __future__ import annotations

import typer

from profile_manager import console
from profile_manager.client import RosaClient
from profile_manager.config import GlobalEnvConfig, TestConfig
from profile_manager.constants import ROSA_BINARY
from profile_manager.lifecycle import reverify_cluster_network
from profile_manager.poller import record_cluster_install_log, wait_for_cluster_ready
from profile_manager.utils import require_command

app = typer.Typer(help="Operate on existing clusters.")


def _client() -> RosaClient:
    require_command(ROSA_BINARY)
    return RosaClient()


@app.command("wait-ready")
def wait_ready(
    cluster: str = typer.Argument(..., help="Cluster name or ID"),
    timeout: int | None = typer.Option(None, "--timeout", min=1, help="Minutes to wait (overrides CLUSTER_TIMEOUT)"),
) -> None:
    """Poll a cluster until it is ready."""
    minutes = timeout if timeout is not None else GlobalEnvConfig().cluster_timeout
    wait_for_cluster_ready(_client(), cluster, minutes, TestConfig())
    console.print(f"[green]✅ Cluster {cluster} is ready[/green]")


@app.command("verify-network")
def verify_network(
    cluster_id: str = typer.Argument(..., help="Cluster ID"),
) -> None:
    """Re-run the network verifier for a cluster."""
    output = reverify_cluster_network(_client(), cluster_id)
    console.print(output)


@app.command("install-log")
def install_log(
    cluster: str = typer.Argument(..., help="Cluster name or ID"),
) -> None:
    """Record the install log of a cluster."""
    path = record_cluster_install_log(_client(), cluster, TestConfig())
    console.print(f"[green]✅ Install log written to {path}[/green]")
