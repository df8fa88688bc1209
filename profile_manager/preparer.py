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

"""Preparation of the cloud dependencies a cluster profile asks for.

``ResourcePreparer`` is the contract the compiler and the lifecycle driver
program against. ``RosaResourcePreparer`` fulfils it with the ``rosa`` CLI
for roles and OIDC resources and with boto3 for everything living directly
in the AWS account.
"""

from __future__ import annotations

import re
import secrets
import string
from collections.abc import Callable
from typing import Protocol

from profile_manager import logger
from profile_manager.aws import AWSClient
from profile_manager.client import RosaClient
from profile_manager.constants import (
    ADMIN_PASSWORD_LENGTH,
    ADMIN_PASSWORD_SYMBOLS,
    CLUSTER_ADMIN_USERNAME,
    KMS_ETCD_OPERATOR_ROLE_MARKERS,
    KMS_OPERATOR_ROLE_MARKERS,
)
from profile_manager.errors import ProvisioningError
from profile_manager.models import VPC, AccountRoles, ProxyDetail
from profile_manager.utils import split_major_version, trim_name_by_length

OIDC_CONFIG_ID_PATTERN = re.compile(r"oidc-config-id\s+([0-9a-zA-Z]+)")
MANAGED_OIDC_CONFIG = "managed"
MAX_IAM_ROLE_NAME_LENGTH = 64

ROLE_TYPE_FIELDS = {
    "installer": "installer_role",
    "support": "support_role",
    "worker": "worker_role",
    "control plane": "control_plane_role",
}


# ============================================================================
# Contract
# ============================================================================

class ResourcePreparer(Protocol):
    """Everything the compiler and lifecycle driver need provisioned."""

    def prepare_account_roles(self, prefix: str, hcp: bool, version: str, channel_group: str,
                              path: str, permissions_boundary: str) -> AccountRoles: ...

    def prepare_oidc_config(self, kind: str, region: str, installer_role_arn: str, prefix: str) -> str: ...

    def prepare_oidc_provider(self, oidc_config_id: str) -> None: ...

    def prepare_operator_roles(self, prefix: str, oidc_config_id: str, installer_role_arn: str,
                               hcp: bool, channel_group: str) -> None: ...

    def prepare_audit_log_role_arn(self, name_prefix: str, oidc_config_id: str, region: str) -> str: ...

    def prepare_admin_user(self) -> tuple[str, str]: ...

    def prepare_vpc(self, region: str, prefix: str, cidr: str) -> VPC: ...

    def prepare_subnets(self, vpc: VPC, region: str, zones: list[str], multi_az: bool) -> dict[str, list[str]]: ...

    def prepare_additional_security_groups(self, vpc: VPC, count: int, prefix: str) -> list[str]: ...

    def prepare_proxy(self, vpc: VPC, region: str, ssh_pem_file: str, ca_bundle_file: str) -> ProxyDetail: ...

    def prepare_kms_key(self, region: str, multi_region: bool, key_owner_tag: str, hcp: bool) -> str: ...

    def prepare_oidc_provider_by_cluster(self, cluster_id: str) -> None: ...

    def prepare_operator_roles_by_cluster(self, cluster_id: str) -> None: ...

    def elaborate_kms_key(self, cluster_id: str, is_etcd: bool) -> None: ...


# ============================================================================
# Helpers
# ============================================================================

def account_role_creation_flags(prefix: str, hcp: bool, version: str, channel_group: str,
                                path: str, permissions_boundary: str) -> list[str]:
    """Build the ``rosa create account-roles`` flags.

    Args:
        prefix: Account role name prefix.
        hcp: Create hosted control plane roles instead of classic ones.
        version: OpenShift version; only its ``major.minor`` part is passed.
        channel_group: Channel group the roles are created for, if any.
        path: IAM path, if any.
        permissions_boundary: Permissions boundary policy ARN, if any.

    Returns:
        Flag list in a stable order.
    """
    flags = ["--prefix", prefix, "--mode", "auto", "-y"]
    if version:
        flags += ["--version", split_major_version(version)]
    if channel_group:
        flags += ["--channel-group", channel_group]
    flags.append("--hosted-cp" if hcp else "--classic")
    if path:
        flags += ["--path", path]
    if permissions_boundary:
        flags += ["--permissions-boundary", permissions_boundary]
    return flags


def generate_admin_password(length: int = ADMIN_PASSWORD_LENGTH) -> str:
    """Random password holding at least one upper, lower, digit and symbol."""
    pools = [string.ascii_uppercase, string.ascii_lowercase, string.digits, ADMIN_PASSWORD_SYMBOLS]
    chars = [secrets.choice(pool) for pool in pools]
    everything = "".join(pools)
    chars += [secrets.choice(everything) for _ in range(max(length, len(pools)) - len(pools))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def _region_from_arn(arn: str) -> str:
    parts = arn.split(":")
    if len(parts) < 4 or not parts[3]:
        raise ProvisioningError(f"cannot read the region of '{arn}'")
    return parts[3]


# ============================================================================
# Implementation
# ============================================================================

class RosaResourcePreparer:
    """Prepares resources through the ``rosa`` CLI and boto3.

    Args:
        client: Client used for account roles, OIDC and operator roles.
        proxy_ami_id: Image the proxy host is launched from.
        aws_factory: Builds an ``AWSClient`` for a region.
    """

    def __init__(self, client: RosaClient, proxy_ami_id: str = "",
                 aws_factory: Callable[[str], AWSClient] = AWSClient) -> None:
        self.client = client
        self.proxy_ami_id = proxy_ami_id
        self._aws_factory = aws_factory
        self._aws: dict[str, AWSClient] = {}

    def aws(self, region: str) -> AWSClient:
        if region not in self._aws:
            self._aws[region] = self._aws_factory(region)
        return self._aws[region]

    # -- Roles and OIDC ------------------------------------------------------

    def prepare_account_roles(self, prefix: str, hcp: bool, version: str, channel_group: str,
                              path: str, permissions_boundary: str) -> AccountRoles:
        flags = account_role_creation_flags(prefix, hcp, version, channel_group, path, permissions_boundary)
        self.client.create_account_roles(*flags)

        roles = AccountRoles()
        for role in self.client.list_account_roles():
            if not role.get("RoleName", "").startswith(f"{prefix}-"):
                continue
            field_name = ROLE_TYPE_FIELDS.get(role.get("RoleType", "").lower())
            if field_name:
                setattr(roles, field_name, role.get("RoleARN", ""))
        if not roles.installer_role:
            raise ProvisioningError(f"no installer role found with prefix '{prefix}'")
        logger.info("Prepared account roles with prefix %s", prefix)
        return roles

    def prepare_oidc_config(self, kind: str, region: str, installer_role_arn: str, prefix: str) -> str:
        flags = ["--mode", "auto", "-y"]
        if region:
            flags += ["--region", region]
        if kind != MANAGED_OIDC_CONFIG:
            flags += ["--managed=false", "--prefix", prefix, "--installer-role-arn", installer_role_arn]
        output = self.client.create_oidc_config(*flags)
        match = OIDC_CONFIG_ID_PATTERN.search(output)
        if not match:
            raise ProvisioningError(f"cannot find the OIDC config ID in the output of creating a {kind} OIDC config")
        logger.info("Prepared %s OIDC config %s", kind, match.group(1))
        return match.group(1)

    def prepare_oidc_provider(self, oidc_config_id: str) -> None:
        self.client.create_oidc_provider("--oidc-config-id", oidc_config_id, "--mode", "auto", "-y")

    def prepare_operator_roles(self, prefix: str, oidc_config_id: str, installer_role_arn: str,
                               hcp: bool, channel_group: str) -> None:
        flags = [
            "--prefix", prefix,
            "--oidc-config-id", oidc_config_id,
            "--role-arn", installer_role_arn,
            "--mode", "auto",
            "-y",
        ]
        if hcp:
            flags.append("--hosted-cp")
        if channel_group:
            flags += ["--channel-group", channel_group]
        self.client.create_operator_roles(*flags)

    def prepare_audit_log_role_arn(self, name_prefix: str, oidc_config_id: str, region: str) -> str:
        """Create the audit-log forwarding role trusted by the cluster OIDC provider.

        Raises:
            ProvisioningError: If no OIDC config is given or it cannot be found.
        """
        if not oidc_config_id:
            raise ProvisioningError("audit log forwarding needs an OIDC config, but none was prepared")
        config = next((c for c in self.client.list_oidc_configs() if c.id == oidc_config_id), None)
        if config is None or not config.issuer_url:
            raise ProvisioningError(f"cannot find the issuer of OIDC config {oidc_config_id}")
        role_name = trim_name_by_length(f"{name_prefix}-audit-log", MAX_IAM_ROLE_NAME_LENGTH)
        return self.aws(region).create_audit_log_role(role_name, config.issuer_url)

    def prepare_admin_user(self) -> tuple[str, str]:
        return CLUSTER_ADMIN_USERNAME, generate_admin_password()

    # -- Network -------------------------------------------------------------

    def prepare_vpc(self, region: str, prefix: str, cidr: str) -> VPC:
        return self.aws(region).create_vpc(prefix, cidr)

    def prepare_subnets(self, vpc: VPC, region: str, zones: list[str], multi_az: bool) -> dict[str, list[str]]:
        aws = self.aws(region)
        if not zones:
            zones = aws.default_zones(3 if multi_az else 1)
        if not zones:
            raise ProvisioningError(f"no availability zone is available in {region}")
        return aws.create_subnets(vpc, zones)

    def prepare_additional_security_groups(self, vpc: VPC, count: int, prefix: str) -> list[str]:
        return self.aws(vpc.region).create_security_groups(vpc, count, prefix)

    def prepare_proxy(self, vpc: VPC, region: str, ssh_pem_file: str, ca_bundle_file: str) -> ProxyDetail:
        return self.aws(region).launch_proxy(vpc, self.proxy_ami_id, ssh_pem_file, ca_bundle_file)

    # -- KMS -----------------------------------------------------------------

    def prepare_kms_key(self, region: str, multi_region: bool, key_owner_tag: str, hcp: bool) -> str:
        return self.aws(region).create_kms_key(multi_region, key_owner_tag, hcp)

    def elaborate_kms_key(self, cluster_id: str, is_etcd: bool) -> None:
        """Grant the cluster's operator roles access to its KMS key.

        The installer role is added for the primary key. The etcd key is only
        granted to the operator roles that talk to the KMS provider.
        """
        description = self.client.describe_cluster(cluster_id)
        key_arn = description.etcd_kms_key_arn if is_etcd else description.kms_key_arn
        if not key_arn:
            kind = "etcd encryption" if is_etcd else "customer managed"
            raise ProvisioningError(f"cluster {cluster_id} has no {kind} KMS key to elaborate")

        markers = KMS_ETCD_OPERATOR_ROLE_MARKERS if is_etcd else KMS_OPERATOR_ROLE_MARKERS
        principals = [arn for arn in description.operator_role_arns if any(m in arn for m in markers)]
        if not is_etcd and description.installer_role_arn:
            principals.append(description.installer_role_arn)
        if not principals:
            raise ProvisioningError(f"cluster {cluster_id} has no role that should use KMS key {key_arn}")

        sid = "AllowClusterEtcdKMS" if is_etcd else "AllowClusterKMS"
        self.aws(_region_from_arn(key_arn)).grant_kms_key(key_arn, principals, sid)

    # -- Post-create ---------------------------------------------------------

    def prepare_oidc_provider_by_cluster(self, cluster_id: str) -> None:
        self.client.create_oidc_provider("-c", cluster_id, "--mode", "auto", "-y")

    def prepare_operator_roles_by_cluster(self, cluster_id: str) -> None:
        self.client.create_operator_roles("-c", cluster_id, "--mode", "auto", "-y")
