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

"""Profile input models and the records persisted for later test stages."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Profile (input)
# ============================================================================

class AccountRoleConfig(BaseModel):
    """Account-role options of a profile.

    Attributes:
        path: IAM path the account roles are created under.
        permission_boundary: Permissions boundary policy ARN.
    """

    model_config = ConfigDict(extra="ignore")

    path: str = ""
    permission_boundary: str = ""


class ClusterConfig(BaseModel):
    """Cluster toggles of a profile.

    ``name`` is never read from the profile file; the compiler derives it
    from the profile name prefix and writes it back here.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(default="", exclude=True)
    name_length: int = 0

    sts: bool = False
    hcp: bool = False
    multi_az: bool = False
    private: bool = False
    private_link: bool = False
    byo_vpc: bool = False
    shared_vpc: bool = False
    zones: str = ""
    networking_set: bool = False
    additional_sg_number: int = 0
    proxy_enabled: bool = False
    domain_prefix_enabled: bool = False

    oidc_config: str = ""
    audit_log_forward: bool = False
    admin_enabled: bool = False
    external_auth_config: bool = False

    autoscale: bool = False
    autoscaler_enabled: bool = False
    worker_pool_replicas: int = 0
    instance_type: str = ""
    volume_size: int = 0
    label_enabled: bool = False
    ingress_customized: bool = False

    kms_key: bool = False
    etcd_kms: bool = False
    etcd_encryption: bool = False
    fips: bool = False
    ec2_metadata_http_tokens: str = ""

    tag_enabled: bool = False
    billing_account: str = ""
    provision_shard: str = ""
    disable_scp_checks: bool = False
    disable_user_workload_monitoring: bool = False

    @property
    def oidc_config_requested(self) -> bool:
        return self.oidc_config != ""


class Profile(BaseModel):
    """Declarative cluster intent loaded from a profile file."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(default="", alias="as")
    name_prefix: str = ""
    version: str = ""
    channel_group: str = ""
    region: str = ""
    cluster_config: ClusterConfig = Field(default_factory=ClusterConfig, alias="cluster")
    account_role_config: AccountRoleConfig = Field(default_factory=AccountRoleConfig, alias="account-role")


# ============================================================================
# Cluster configuration record (persisted)
# ============================================================================

class VersionRecord(BaseModel):
    channel_group: str = ""
    raw_id: str = ""


class StsRecord(BaseModel):
    role_arn: str = ""
    support_role_arn: str = ""
    worker_role_arn: str = ""
    control_plane_role_arn: str | None = None
    oidc_config_id: str | None = None
    operator_roles_prefix: str | None = None


class AWSRecord(BaseModel):
    sts: StsRecord = Field(default_factory=StsRecord)


class Autoscaling(BaseModel):
    enabled: bool = False


class Nodes(BaseModel):
    replicas: str | None = None
    min_replicas: str | None = None
    max_replicas: str | None = None


class IngressConfig(BaseModel):
    default_ingress_route_selector: str = ""
    default_ingress_excluded_namespaces: str = ""
    default_ingress_wildcard_policy: str = ""
    default_ingress_namespace_ownership_policy: str = ""


class Autoscaler(BaseModel):
    balance_similar_node_groups: bool = True
    skip_nodes_with_local_storage: bool = True
    log_verbosity: str = ""
    max_pod_grace_period: str = ""
    pod_priority_threshold: str = ""
    ignore_daemonsets_utilization: bool = True
    max_node_provision_time: str = ""
    balancing_ignored_labels: str = ""
    max_nodes_total: str = ""
    min_cores: str = ""
    max_cores: str = ""
    min_memory: str = ""
    max_memory: str = ""
    scale_down_enabled: bool = True
    scale_down_utilization_threshold: str = ""
    scale_down_delay_after_add: str = ""
    scale_down_delay_after_delete: str = ""
    scale_down_delay_after_failure: str = ""


class Networking(BaseModel):
    machine_cidr: str = ""
    service_cidr: str = ""
    pod_cidr: str = ""
    host_prefix: str = ""


class Subnets(BaseModel):
    private_subnet_ids: str = ""
    public_subnet_ids: str | None = None


class AdditionalSecurityGroups(BaseModel):
    control_plane_security_groups: str = ""
    infra_security_groups: str = ""
    worker_security_groups: str = ""


class Proxy(BaseModel):
    enabled: bool = False
    http: str = ""
    https: str = ""
    no_proxy: str = ""
    trust_bundle_file: str = ""


class Encryption(BaseModel):
    kms_key_arn: str | None = None
    etcd_encryption_kms_arn: str | None = None


class Properties(BaseModel):
    provision_shard_id: str = ""


class ClusterConfiguration(BaseModel):
    """Mirror of every durable decision encoded into the create flags."""

    name: str = ""
    version: VersionRecord | None = None
    region: str | None = None
    domain_prefix: str | None = None
    sts: bool = False
    hypershift: bool = False
    aws: AWSRecord | None = None
    audit_log_arn: str | None = None
    admin_enabled: bool = False
    autoscaling: Autoscaling | None = None
    nodes: Nodes | None = None
    ingress_config: IngressConfig | None = None
    autoscaler: Autoscaler | None = None
    networking: Networking | None = None
    subnets: Subnets | None = None
    additional_security_groups: AdditionalSecurityGroups | None = None
    proxy: Proxy | None = None
    billing_account: str | None = None
    disable_scp_checks: bool = False
    disable_workload_monitoring: bool = False
    encryption: Encryption | None = None
    ec2_metadata_http_tokens: str | None = None
    etcd_encryption: bool = False
    fips: bool = False
    instance_type: str | None = None
    default_mp_labels: str | None = None
    multi_az: bool = False
    private: bool = False
    private_link: bool = False
    properties: Properties | None = None
    tags: str | None = None
    worker_disk_size: str | None = None
    availability_zones: str | None = None
    external_auth_config: bool = False


class UserData(BaseModel):
    """Identifiers needed to clean up or debug the resources of a run."""

    account_roles_prefix: str = ""
    oidc_config_id: str = ""
    operator_roles_prefix: str = ""
    kms_key: str = ""
    etcd_kms_key: str = ""
    audit_log_arn: str = ""
    vpc_id: str = ""


class ClusterDetail(BaseModel):
    cluster_id: str = ""
    cluster_name: str = ""
    cluster_type: str = ""


# ============================================================================
# External results
# ============================================================================

class ClusterDescription(BaseModel):
    """Cluster state as reported by ``rosa describe cluster``."""

    id: str = ""
    name: str = ""
    state: str = ""
    api_url: str = ""
    console_url: str = ""
    infra_id: str = ""
    hcp: bool = False
    kms_key_arn: str = ""
    etcd_kms_key_arn: str = ""
    installer_role_arn: str = ""
    operator_role_arns: list[str] = Field(default_factory=list)


class AccountRoles(BaseModel):
    installer_role: str = ""
    support_role: str = ""
    worker_role: str = ""
    control_plane_role: str = ""


class OIDCConfig(BaseModel):
    id: str = ""
    issuer_url: str = ""


class OpenShiftVersion(BaseModel):
    raw_id: str
    channel_group: str = ""
    enabled: bool = True
    hosted_control_plane_enabled: bool = False


class VPC(BaseModel):
    """Handle of a prepared VPC; subnet IDs are filled in once created."""

    vpc_id: str
    cidr: str
    region: str
    name: str = ""
    internet_gateway_id: str = ""
    public_subnet_ids: list[str] = Field(default_factory=list)
    private_subnet_ids: list[str] = Field(default_factory=list)


class ProxyDetail(BaseModel):
    http_proxy: str
    https_proxy: str
    no_proxy: str
    ca_bundle_file_path: str
