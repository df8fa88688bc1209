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

"""Profile subcommands (show)."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.panel import Panel

from profile_manager import console
from profile_manager.config import TestConfig
from profile_manager.profiles import load_profile

app = typer.Typer(help="Inspect cluster profiles.")


@app.command("show")
def show(
    name: str = typer.Argument(..., help="Profile name"),
    profiles_dir: str | None = typer.Option(None, "--profiles-dir", help="Directory holding profile files"),
) -> None:
    """Render a profile as it will be compiled."""
    directory = TestConfig().yaml_profiles_dir
    if profiles_dir is not None:
        directory = Path(profiles_dir)
    profile = load_profile(name, directory)
    console.print(Panel.fit(f"Profile {name}", style="bold blue"))
    console.print_json(profile.model_dump_json(by_alias=True))
