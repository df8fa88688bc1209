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

"""Thin wrapper around the ``rosa`` command-line client."""

from __future__ import annotations

import json
import shlex
from collections.abc import Callable
from typing import Any

import sh

from profile_manager import logger
from profile_manager.constants import ROSA_BINARY
from profile_manager.errors import InvocationError
from profile_manager.models import ClusterDescription, OIDCConfig, OpenShiftVersion

SECRET_FLAGS = frozenset({"--cluster-admin-password"})
REDACTED = "********"


def redact_args(args: list[str] | tuple[str, ...]) -> list[str]:
    """Replace the values of secret flags so a command line is safe to log."""
    redacted: list[str] = []
    hide_next = False
    for arg in args:
        redacted.append(REDACTED if hide_next else arg)
        hide_next = arg in SECRET_FLAGS
    return redacted


class RosaClient:
    """Runs ``rosa`` sub-commands and parses their output.

    Args:
        command: Callable used in place of the ``rosa`` binary, e.g. a
            baked ``sh`` command. Resolved from PATH on first use when None.
    """

    def __init__(self, command: Callable[..., Any] | None = None) -> None:
        self._command = command

    @property
    def rosa(self) -> Callable[..., Any]:
        if self._command is None:
            self._command = sh.Command(ROSA_BINARY)
        return self._command

    def run(self, *args: str) -> str:
        """Run ``rosa`` with *args* and return its stdout.

        Raises:
            InvocationError: If the command exits with a non-zero status.
        """
        cmd_line = shlex.join([ROSA_BINARY, *redact_args(args)])
        logger.info("Running command: %s", cmd_line)
        try:
            return str(self.rosa(*args))
        except sh.ErrorReturnCode as err:
            stderr = err.stderr.decode(errors="replace") if err.stderr else ""
            raise InvocationError(cmd_line, stderr) from err

    def run_json(self, *args: str) -> Any:
        output = self.run(*args, "-o", "json")
        try:
            return json.loads(output)
        except json.JSONDecodeError as err:
            raise InvocationError(shlex.join([ROSA_BINARY, *args]), f"unparseable JSON output: {err}") from err

    # ------------------------------------------------------------------
    # Clusters
    # ------------------------------------------------------------------

    def create_cluster(self, name: str, *flags: str) -> tuple[str, str]:
        """Create a cluster.

        Returns:
            Tuple of (raw output, command line with secrets redacted).
        """
        args = ["create", "cluster", "--cluster-name", name, "-y", *flags]
        output = self.run(*args)
        return output, shlex.join([ROSA_BINARY, *redact_args(args)])

    def describe_cluster(self, cluster: str) -> ClusterDescription:
        """Describe a cluster by name or ID."""
        data = self.run_json("describe", "cluster", "-c", cluster)
        aws = data.get("aws") or {}
        sts = aws.get("sts") or {}
        return ClusterDescription(
            id=data.get("id", ""),
            name=data.get("name", ""),
            state=data.get("state", ""),
            api_url=(data.get("api") or {}).get("url", ""),
            console_url=(data.get("console") or {}).get("url", ""),
            infra_id=data.get("infra_id", ""),
            hcp=(data.get("hypershift") or {}).get("enabled", False),
            kms_key_arn=aws.get("kms_key_arn", ""),
            etcd_kms_key_arn=(aws.get("etcd_encryption") or {}).get("kms_key_arn", ""),
            installer_role_arn=sts.get("role_arn", ""),
            operator_role_arns=[role["role_arn"] for role in sts.get("operator_iam_roles") or [] if "role_arn" in role],
        )

    def install_log(self, cluster: str) -> str:
        return self.run("logs", "install", "-c", cluster)

    def verify_network(self, cluster_id: str) -> str:
        return self.run("verify", "network", "-c", cluster_id)

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def list_versions(self, channel_group: str, hcp: bool = False) -> list[OpenShiftVersion]:
        args = ["list", "versions"]
        if channel_group:
            args += ["--channel-group", channel_group]
        if hcp:
            args.append("--hosted-cp")
        return [OpenShiftVersion.model_validate(item) for item in self.run_json(*args) or []]

    # ------------------------------------------------------------------
    # Account roles, OIDC and operator roles
    # ------------------------------------------------------------------

    def create_account_roles(self, *flags: str) -> str:
        return self.run("create", "account-roles", *flags)

    def list_account_roles(self) -> list[dict[str, Any]]:
        return self.run_json("list", "account-roles") or []

    def create_oidc_config(self, *flags: str) -> str:
        return self.run("create", "oidc-config", *flags)

    def list_oidc_configs(self) -> list[OIDCConfig]:
        return [OIDCConfig.model_validate(item) for item in self.run_json("list", "oidc-config") or []]

    def create_oidc_provider(self, *flags: str) -> str:
        return self.run("create", "oidc-provider", *flags)

    def create_operator_roles(self, *flags: str) -> str:
        return self.run("create", "operator-roles", *flags)
