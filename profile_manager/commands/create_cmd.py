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

"""Create subcommands (cluster)."""

from __future__ import annotations

import typer
from rich.panel import Panel

from profile_manager import console
from profile_manager.config import GlobalEnvConfig, TestConfig
from profile_manager.lifecycle import build_context, create_cluster_by_profile
from profile_manager.profiles import load_profile_by_env

app = typer.Typer(help="Create clusters from profiles.")


@app.command("cluster")
def cluster(
    profile: str | None = typer.Option(None, "--profile", help="Profile name (overrides TEST_PROFILE)"),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Wait for the cluster to become ready"),
) -> None:
    """Prepare resources, create a cluster and record its details."""
    test_config = TestConfig()
    if profile is not None:
        test_config = test_config.model_copy(update={"test_profile": profile})
    global_env = GlobalEnvConfig()

    loaded = load_profile_by_env(test_config, global_env)
    console.print(Panel.fit(f"Creating cluster from profile {test_config.test_profile}", style="bold blue"))
    description = create_cluster_by_profile(loaded, build_context(test_config), wait, global_env)

    console.print(f"[green]✅ Cluster {description.name} ({description.id}) is {description.state}[/green]")
    console.print(f"ℹ️  Records written to {test_config.shared_dir}")
