"""Unit tests for the cluster lifecycle driver."""

from __future__ import annotations

import json
from typing import Any

import pytest
from conftest import FakePreparer, FakeRosaClient, make_profile

from profile_manager.compiler import CompileContext
from profile_manager.config import GlobalEnvConfig
from profile_manager.errors import ClusterStateError, InvocationError, ProvisioningError
from profile_manager.lifecycle import create_cluster_by_profile, reverify_cluster_network


class RecordingWaiter:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.error = error

    def __call__(self, client, cluster, timeout, settings) -> None:
        self.calls.append((cluster, timeout))
        if self.error:
            raise self.error


def test_sts_without_oidc_config_prepares_roles_after_create(ctx: CompileContext, client: FakeRosaClient,
                                                             preparer: FakePreparer) -> None:
    profile = make_profile(sts=True)
    description = create_cluster_by_profile(profile, ctx, wait_for_ready=False)

    assert description.id == "2a3b4c"
    assert preparer.names() == [
        "prepare_account_roles",
        "prepare_oidc_provider_by_cluster",
        "prepare_operator_roles_by_cluster",
    ]
    assert preparer.args_of("prepare_oidc_provider_by_cluster") == ("2a3b4c",)
    assert client.names() == ["create_cluster", "describe_cluster"]
    assert client.calls[0][1][0] == profile.cluster_config.name


def test_sts_with_oidc_config_skips_post_create_roles(ctx: CompileContext, preparer: FakePreparer) -> None:
    create_cluster_by_profile(make_profile(sts=True, oidc_config="managed"), ctx, wait_for_ready=False)

    assert "prepare_oidc_provider_by_cluster" not in preparer.names()
    assert "prepare_operator_roles_by_cluster" not in preparer.names()


def test_non_sts_cluster_has_no_post_create_roles(ctx: CompileContext, preparer: FakePreparer) -> None:
    create_cluster_by_profile(make_profile(), ctx, wait_for_ready=False)

    assert preparer.calls == []


def test_both_kms_keys_are_elaborated(ctx: CompileContext, preparer: FakePreparer) -> None:
    create_cluster_by_profile(make_profile(kms_key=True, etcd_kms=True), ctx, wait_for_ready=False)

    elaborations = [args for name, args in preparer.calls if name == "elaborate_kms_key"]
    assert elaborations == [("2a3b4c", False), ("2a3b4c", True)]


def test_identity_files_are_recorded(ctx: CompileContext) -> None:
    profile = make_profile()
    create_cluster_by_profile(profile, ctx, wait_for_ready=False)
    settings = ctx.settings

    detail = json.loads(settings.cluster_detail_file.read_text())
    assert detail == {"cluster_id": "2a3b4c", "cluster_name": profile.cluster_config.name, "cluster_type": "rosa"}
    assert settings.cluster_id_file.read_text() == "2a3b4c"
    assert settings.api_url_file.read_text() == "https://api.example.com:6443"
    assert settings.console_url_file.read_text() == "https://console.example.com"
    assert settings.infra_id_file.read_text() == "infra-123"
    assert settings.cluster_type_file.read_text() == "rosa"
    assert settings.create_command_file.read_text().startswith("rosa create cluster --cluster-name")


def test_wait_uses_configured_timeout_and_refreshes(ctx: CompileContext, client: FakeRosaClient) -> None:
    client.states = ["Installing", "Ready"]
    waiter = RecordingWaiter()

    description = create_cluster_by_profile(make_profile(), ctx, wait_for_ready=True,
                                            global_env=GlobalEnvConfig(cluster_timeout=30), waiter=waiter)

    assert waiter.calls == [("2a3b4c", 30)]
    assert client.describe_count == 2
    assert description.state == "Ready"


def test_post_create_failure_carries_the_cluster(ctx: CompileContext, preparer: FakePreparer) -> None:
    preparer.fail_on = {"elaborate_kms_key"}

    with pytest.raises(ProvisioningError, match="preparing KMS key policy for cluster 2a3b4c") as excinfo:
        create_cluster_by_profile(make_profile(kms_key=True), ctx, wait_for_ready=True, waiter=RecordingWaiter())

    assert excinfo.value.cluster.id == "2a3b4c"
    assert ctx.settings.cluster_id_file.read_text() == "2a3b4c"


def test_post_create_role_failure_names_the_cluster(ctx: CompileContext, preparer: FakePreparer) -> None:
    preparer.fail_on = {"prepare_operator_roles_by_cluster"}

    with pytest.raises(ProvisioningError, match="preparing operator roles for cluster 2a3b4c") as excinfo:
        create_cluster_by_profile(make_profile(sts=True), ctx, wait_for_ready=False)

    assert isinstance(excinfo.value.__cause__, ProvisioningError)
    assert excinfo.value.cluster.id == "2a3b4c"


def test_wait_failure_carries_the_cluster(ctx: CompileContext) -> None:
    waiter = RecordingWaiter(ClusterStateError("cluster is in Error state"))

    with pytest.raises(ClusterStateError) as excinfo:
        create_cluster_by_profile(make_profile(), ctx, wait_for_ready=True,
                                  global_env=GlobalEnvConfig(), waiter=waiter)

    assert excinfo.value.cluster.id == "2a3b4c"
    assert ctx.settings.cluster_detail_file.exists()


def test_create_failure_skips_describe(ctx: CompileContext, client: FakeRosaClient,
                                       monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_create(name: str, *flags: str):
        raise InvocationError("rosa create cluster", "quota exceeded")

    monkeypatch.setattr(client, "create_cluster", failing_create)

    with pytest.raises(InvocationError, match="quota exceeded"):
        create_cluster_by_profile(make_profile(), ctx, wait_for_ready=False)

    assert "describe_cluster" not in client.names()
    assert ctx.settings.cluster_config_file.exists()
    assert not ctx.settings.cluster_detail_file.exists()


def test_reverify_cluster_network(client: FakeRosaClient) -> None:
    assert reverify_cluster_network(client, "2a3b4c") == "network verified"
    assert client.calls == [("verify_network", ("2a3b4c",))]
