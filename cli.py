#!/usr/bin/env python3
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

"""
cli.py - Profile-driven ROSA cluster provisioning for e2e tests.

Subcommands:
    create     Create clusters from profiles (cluster)
    cluster    Operate on existing clusters (wait-ready, verify-network, install-log)
    profile    Inspect cluster profiles (show)

Examples:
    # Create the cluster described by TEST_PROFILE and wait for it
    TEST_PROFILE=rosa-hcp-advanced ./cli.py create cluster

    # Create without waiting for readiness
    ./cli.py create cluster --profile rosa-classic-sts --no-wait

    # Wait up to 90 minutes for an existing cluster
    ./cli.py cluster wait-ready my-cluster --timeout 90

    # Show a resolved profile
    ./cli.py profile show rosa-hcp-advanced

For detailed usage information, run: ./cli.py --help
"""

from __future__ import annotations

import logging
import sys

import typer

from profile_manager import console
from profile_manager.commands import cluster_cmd, create_cmd, profile_cmd
from profile_manager.errors import ProfileManagerError

app = typer.Typer(
    help="Profile-driven ROSA cluster provisioning for e2e tests.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.add_typer(create_cmd.app, name="create")
app.add_typer(cluster_cmd.app, name="cluster")
app.add_typer(profile_cmd.app, name="profile")


def main() -> None:
    try:
        app()
    except ProfileManagerError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
