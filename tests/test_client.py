"""Unit tests for the rosa CLI wrapper."""

from __future__ import annotations

import json

import pytest
import sh

from profile_manager.client import RosaClient, redact_args
from profile_manager.errors import InvocationError


class FakeCommand:
    def __init__(self, output: str = "", error: Exception | None = None) -> None:
        self.output = output
        self.error = error
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, *args: str) -> str:
        self.calls.append(args)
        if self.error:
            raise self.error
        return self.output


DESCRIBE_OUTPUT = {
    "id": "2a3b4c",
    "name": "rosacli-ci-abc",
    "state": "installing",
    "api": {"url": "https://api.rosacli-ci-abc.example.com:6443"},
    "console": {"url": "https://console.example.com"},
    "infra_id": "rosacli-ci-abc-x7k2p",
    "hypershift": {"enabled": True},
    "aws": {
        "kms_key_arn": "arn:aws:kms:us-east-1:123456789012:key/key-1",
        "etcd_encryption": {"kms_key_arn": "arn:aws:kms:us-east-1:123456789012:key/key-2"},
        "sts": {
            "role_arn": "arn:aws:iam::123456789012:role/rosacli-HCP-ROSA-Installer-Role",
            "operator_iam_roles": [
                {"name": "ebs-cloud-credentials", "role_arn": "arn:aws:iam::123456789012:role/op-ebs"},
                {"name": "kms-provider"},
            ],
        },
    },
}


def test_redact_args_hides_admin_password() -> None:
    args = ["--create-admin-user", "--cluster-admin-password", "Secr3t", "--region", "us-east-1"]

    assert redact_args(args) == ["--create-admin-user", "--cluster-admin-password", "********",
                                 "--region", "us-east-1"]


def test_create_cluster_returns_redacted_command() -> None:
    command = FakeCommand("cluster created")
    client = RosaClient(command)

    output, cmd_line = client.create_cluster("my-cluster", "--cluster-admin-password", "Secr3t", "--sts")

    assert output == "cluster created"
    assert command.calls == [("create", "cluster", "--cluster-name", "my-cluster", "-y",
                              "--cluster-admin-password", "Secr3t", "--sts")]
    assert "Secr3t" not in cmd_line
    assert cmd_line.startswith("rosa create cluster --cluster-name my-cluster -y")


def test_describe_cluster_parses_output() -> None:
    command = FakeCommand(json.dumps(DESCRIBE_OUTPUT))
    description = RosaClient(command).describe_cluster("rosacli-ci-abc")

    assert command.calls == [("describe", "cluster", "-c", "rosacli-ci-abc", "-o", "json")]
    assert description.id == "2a3b4c"
    assert description.state == "installing"
    assert description.api_url.endswith(":6443")
    assert description.hcp is True
    assert description.etcd_kms_key_arn.endswith("key-2")
    assert description.operator_role_arns == ["arn:aws:iam::123456789012:role/op-ebs"]


def test_failed_command_raises_invocation_error() -> None:
    error = sh.ErrorReturnCode_1("rosa describe cluster", b"", b"ERR: cluster not found")
    client = RosaClient(FakeCommand(error=error))

    with pytest.raises(InvocationError, match="cluster not found") as excinfo:
        client.describe_cluster("missing")
    assert excinfo.value.command.startswith("rosa describe cluster -c missing")


def test_unparseable_json_raises_invocation_error() -> None:
    client = RosaClient(FakeCommand("not json"))

    with pytest.raises(InvocationError, match="unparseable JSON"):
        client.list_account_roles()


def test_list_versions_passes_filters() -> None:
    command = FakeCommand(json.dumps([
        {"raw_id": "4.16.3", "channel_group": "stable", "enabled": True, "hosted_control_plane_enabled": True},
        {"raw_id": "4.15.20", "channel_group": "stable", "enabled": False},
    ]))
    versions = RosaClient(command).list_versions("stable", hcp=True)

    assert command.calls == [("list", "versions", "--channel-group", "stable", "--hosted-cp", "-o", "json")]
    assert [v.raw_id for v in versions] == ["4.16.3", "4.15.20"]
    assert versions[1].enabled is False
