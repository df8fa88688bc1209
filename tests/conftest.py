"""Shared fakes and fixtures for the profile_manager tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from profile_manager.compiler import CompileContext
from profile_manager.config import TestConfig
from profile_manager.errors import ProvisioningError
from profile_manager.models import (
    VPC,
    AccountRoles,
    ClusterConfig,
    ClusterDescription,
    OpenShiftVersion,
    Profile,
    ProxyDetail,
)


class FakeRosaClient:
    """Scripted stand-in for ``RosaClient``.

    ``states`` are returned by successive ``describe_cluster`` calls; the
    last one repeats once the script runs out.
    """

    def __init__(self, states: list[str] | None = None,
                 versions: list[OpenShiftVersion] | None = None) -> None:
        self.states = list(states or ["Ready"])
        self.versions = versions or []
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.describe_count = 0

    def create_cluster(self, name: str, *flags: str) -> tuple[str, str]:
        self.calls.append(("create_cluster", (name, *flags)))
        return "created", " ".join(["rosa", "create", "cluster", "--cluster-name", name, "-y", *flags])

    def describe_cluster(self, cluster: str) -> ClusterDescription:
        self.calls.append(("describe_cluster", (cluster,)))
        self.describe_count += 1
        state = self.states.pop(0) if len(self.states) > 1 else self.states[0]
        return ClusterDescription(
            id="2a3b4c",
            name=cluster,
            state=state,
            api_url="https://api.example.com:6443",
            console_url="https://console.example.com",
            infra_id="infra-123",
        )

    def install_log(self, cluster: str) -> str:
        self.calls.append(("install_log", (cluster,)))
        return "level=error msg=quota exceeded"

    def verify_network(self, cluster_id: str) -> str:
        self.calls.append(("verify_network", (cluster_id,)))
        return "network verified"

    def list_versions(self, channel_group: str, hcp: bool = False) -> list[OpenShiftVersion]:
        self.calls.append(("list_versions", (channel_group, hcp)))
        return self.versions

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


class FakePreparer:
    """Records every preparer call; names in ``fail_on`` raise ProvisioningError."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            raise ProvisioningError(f"{name} failed")

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def args_of(self, name: str) -> tuple[Any, ...]:
        return next(args for call, args in self.calls if call == name)

    def prepare_account_roles(self, prefix, hcp, version, channel_group, path, permissions_boundary):
        self._record("prepare_account_roles", prefix, hcp, version, channel_group, path, permissions_boundary)
        return AccountRoles(
            installer_role=f"arn:aws:iam::123456789012:role/{prefix}-Installer-Role",
            support_role=f"arn:aws:iam::123456789012:role/{prefix}-Support-Role",
            worker_role=f"arn:aws:iam::123456789012:role/{prefix}-Worker-Role",
            control_plane_role=f"arn:aws:iam::123456789012:role/{prefix}-ControlPlane-Role",
        )

    def prepare_oidc_config(self, kind, region, installer_role_arn, prefix):
        self._record("prepare_oidc_config", kind, region, installer_role_arn, prefix)
        return "oidc123"

    def prepare_oidc_provider(self, oidc_config_id):
        self._record("prepare_oidc_provider", oidc_config_id)

    def prepare_operator_roles(self, prefix, oidc_config_id, installer_role_arn, hcp, channel_group):
        self._record("prepare_operator_roles", prefix, oidc_config_id, installer_role_arn, hcp, channel_group)

    def prepare_audit_log_role_arn(self, name_prefix, oidc_config_id, region):
        self._record("prepare_audit_log_role_arn", name_prefix, oidc_config_id, region)
        return f"arn:aws:iam::123456789012:role/{name_prefix}-audit-log"

    def prepare_admin_user(self):
        self._record("prepare_admin_user")
        return "cluster-admin", "Secr3t-Passw0rd"

    def prepare_vpc(self, region, prefix, cidr):
        self._record("prepare_vpc", region, prefix, cidr)
        return VPC(vpc_id="vpc-0abc", cidr=cidr, region=region, name=prefix)

    def prepare_subnets(self, vpc, region, zones, multi_az):
        self._record("prepare_subnets", vpc, region, zones, multi_az)
        return {"private": ["subnet-priv-a", "subnet-priv-b"], "public": ["subnet-pub-a", "subnet-pub-b"]}

    def prepare_additional_security_groups(self, vpc, count, prefix):
        self._record("prepare_additional_security_groups", vpc, count, prefix)
        return [f"sg-{index}" for index in range(count)]

    def prepare_proxy(self, vpc, region, ssh_pem_file, ca_bundle_file):
        self._record("prepare_proxy", vpc, region, ssh_pem_file, ca_bundle_file)
        return ProxyDetail(
            http_proxy="http://10.0.0.10:8080",
            https_proxy="https://10.0.0.10:8080",
            no_proxy="quay.io",
            ca_bundle_file_path=ca_bundle_file,
        )

    def prepare_kms_key(self, region, multi_region, key_owner_tag, hcp):
        self._record("prepare_kms_key", region, multi_region, key_owner_tag, hcp)
        count = self.names().count("prepare_kms_key")
        return f"arn:aws:kms:{region}:123456789012:key/key-{count}"

    def prepare_oidc_provider_by_cluster(self, cluster_id):
        self._record("prepare_oidc_provider_by_cluster", cluster_id)

    def prepare_operator_roles_by_cluster(self, cluster_id):
        self._record("prepare_operator_roles_by_cluster", cluster_id)

    def elaborate_kms_key(self, cluster_id, is_etcd):
        self._record("elaborate_kms_key", cluster_id, is_etcd)


def make_profile(version: str = "", channel_group: str = "", **cluster: Any) -> Profile:
    return Profile(
        name="test-profile",
        name_prefix="rosacli-ci",
        version=version,
        channel_group=channel_group,
        region="us-east-1",
        cluster_config=ClusterConfig(**cluster),
    )


@pytest.fixture
def settings(tmp_path: Path) -> TestConfig:
    return TestConfig(
        test_profile="test-profile",
        yaml_profiles_dir=tmp_path / "profiles",
        shared_dir=tmp_path / "output",
        proxy_ssh_pem_file="/keys/proxy.pem",
        proxy_ca_bundle_file="/certs/proxy-ca.pem",
    )


@pytest.fixture
def client() -> FakeRosaClient:
    return FakeRosaClient()


@pytest.fixture
def preparer() -> FakePreparer:
    return FakePreparer()


@pytest.fixture
def ctx(client: FakeRosaClient, preparer: FakePreparer, settings: TestConfig) -> CompileContext:
    return CompileContext(client=client, preparer=preparer, settings=settings)
