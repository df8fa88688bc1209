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

"""Translate a profile into ``rosa create cluster`` flags.

The translation is a fixed sequence of named stages (``STAGES``). Each stage
reads the profile and the decisions of the stages before it, may call the
resource preparer, and contributes flags, cluster configuration fields and
user data to a shared ``CompileResult``. A failing stage stops the pipeline;
the records gathered so far are written to disk on every exit path.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from profile_manager import logger
from profile_manager.client import RosaClient
from profile_manager.config import TestConfig
from profile_manager.constants import (
    AUTOSCALER_BALANCING_IGNORED_LABELS,
    AUTOSCALER_LOG_VERBOSITY,
    AUTOSCALER_MAX_CORES,
    AUTOSCALER_MAX_MEMORY,
    AUTOSCALER_MAX_NODE_PROVISION_TIME,
    AUTOSCALER_MAX_NODES_TOTAL,
    AUTOSCALER_MAX_POD_GRACE_PERIOD,
    AUTOSCALER_MIN_CORES,
    AUTOSCALER_MIN_MEMORY,
    AUTOSCALER_POD_PRIORITY_THRESHOLD,
    AUTOSCALER_SCALE_DOWN_DELAY,
    AUTOSCALER_SCALE_DOWN_UTILIZATION_THRESHOLD,
    CLUSTER_TAGS,
    DEFAULT_HOST_PREFIX,
    DEFAULT_MACHINE_CIDR,
    DEFAULT_MAX_REPLICAS,
    DEFAULT_MIN_REPLICAS,
    DEFAULT_NAME_LENGTH,
    DEFAULT_NAME_PREFIX,
    DEFAULT_POD_CIDR,
    DEFAULT_SERVICE_CIDR,
    DEFAULT_VPC_CIDR,
    INGRESS_EXCLUDED_NAMESPACES,
    INGRESS_NAMESPACE_OWNERSHIP_POLICY,
    INGRESS_ROUTE_SELECTOR,
    INGRESS_WILDCARD_POLICY,
    KMS_KEY_OWNER_TAG,
    MAX_CLUSTER_DOMAIN_PREFIX_LENGTH,
    MAX_OIDC_CONFIG_PREFIX_LENGTH,
    MAX_ROLE_PREFIX_LENGTH,
    MAX_VPC_PREFIX_LENGTH,
    PROVISION_SHARD_PROPERTY,
    WORKER_MP_LABELS,
)
from profile_manager.errors import ProfileManagerError, ProvisioningError
from profile_manager.models import (
    VPC,
    AccountRoles,
    AdditionalSecurityGroups,
    Autoscaler,
    Autoscaling,
    AWSRecord,
    ClusterConfiguration,
    Encryption,
    IngressConfig,
    Networking,
    Nodes,
    Profile,
    Properties,
    Proxy,
    StsRecord,
    Subnets,
    UserData,
    VersionRecord,
)
from profile_manager.preparer import ResourcePreparer
from profile_manager.utils import create_file_with_content, prepare_prefix, split_non_empty, trim_name_by_length
from profile_manager.versions import resolve_version


# ============================================================================
# Context and result
# ============================================================================

@dataclass
class CompileContext:
    """Collaborators injected into the compiler, driver and poller."""

    client: RosaClient
    preparer: ResourcePreparer
    settings: TestConfig


@dataclass
class CompileResult:
    """Decisions accumulated by the stages.

    Attributes:
        flags: Ordered ``rosa create cluster`` flags.
        cluster_config: Persisted mirror of every durable flag.
        user_data: Identifiers needed to clean up the prepared resources.
        account_roles: Account roles prepared by the STS stage.
        oidc_config_id: OIDC config prepared by the STS stage.
        vpc: VPC prepared by the BYOVPC stage.
    """

    flags: list[str] = field(default_factory=list)
    cluster_config: ClusterConfiguration = field(default_factory=ClusterConfiguration)
    user_data: UserData = field(default_factory=UserData)
    account_roles: AccountRoles | None = None
    oidc_config_id: str = ""
    vpc: VPC | None = None

    def add(self, *tokens: str) -> None:
        self.flags.extend(tokens)


Stage = Callable[[Profile, CompileResult, CompileContext], None]


def prepare_resource(what: str, func: Callable[..., Any], *args: Any) -> Any:
    """Call a preparer function, wrapping failures with what was being prepared."""
    try:
        return func(*args)
    except ProfileManagerError as err:
        logger.error("Got error when preparing %s: %s", what, err)
        raise ProvisioningError(f"preparing {what}: {err}") from err


# ============================================================================
# Identity stages
# ============================================================================

def stage_name(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    cc = profile.cluster_config
    if cc.name_length == 0:
        cc.name_length = DEFAULT_NAME_LENGTH
    cc.name = prepare_prefix(profile.name_prefix or DEFAULT_NAME_PREFIX, cc.name_length)
    result.cluster_config.name = cc.name
    logger.info("Generated cluster name %s", cc.name)


def stage_version(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if not profile.version:
        return
    version = prepare_resource("version", resolve_version, ctx.client, profile.version,
                              profile.channel_group, profile.cluster_config.hcp)
    profile.version = version.raw_id
    result.add("--version", version.raw_id)
    result.cluster_config.version = VersionRecord(channel_group=profile.channel_group, raw_id=version.raw_id)


def stage_channel_group(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if not profile.channel_group:
        return
    result.add("--channel-group", profile.channel_group)
    if result.cluster_config.version is None:
        result.cluster_config.version = VersionRecord()
    result.cluster_config.version.channel_group = profile.channel_group


def stage_region(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.region:
        result.add("--region", profile.region)
        result.cluster_config.region = profile.region


def stage_domain_prefix(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.domain_prefix_enabled:
        domain_prefix = trim_name_by_length(profile.cluster_config.name, MAX_CLUSTER_DOMAIN_PREFIX_LENGTH)
        result.add("--domain-prefix", domain_prefix)
        result.cluster_config.domain_prefix = domain_prefix


# ============================================================================
# STS stage
# ============================================================================

def stage_sts(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    """Prepare account roles and, when asked for, OIDC resources and the audit-log role.

    The operator role prefix always equals the account role prefix. When a
    profile requests no OIDC config, the OIDC provider and operator roles are
    prepared after the cluster exists.
    """
    cc = profile.cluster_config
    if not cc.sts:
        return
    preparer = ctx.preparer
    account_role_prefix = trim_name_by_length(cc.name, MAX_ROLE_PREFIX_LENGTH)
    logger.info("Got sts set to true. Going to prepare account roles with prefix %s", account_role_prefix)
    roles = prepare_resource(
        "account roles", preparer.prepare_account_roles, account_role_prefix, cc.hcp, profile.version,
        profile.channel_group, profile.account_role_config.path, profile.account_role_config.permission_boundary,
    )
    result.account_roles = roles
    result.user_data.account_roles_prefix = account_role_prefix
    result.add(
        "--role-arn", roles.installer_role,
        "--support-role-arn", roles.support_role,
        "--worker-iam-role", roles.worker_role,
    )
    sts = StsRecord(role_arn=roles.installer_role, support_role_arn=roles.support_role, worker_role_arn=roles.worker_role)
    result.cluster_config.sts = True
    result.cluster_config.aws = AWSRecord(sts=sts)
    if not cc.hcp:
        result.add("--controlplane-iam-role", roles.control_plane_role)
        sts.control_plane_role_arn = roles.control_plane_role

    operator_roles_prefix = account_role_prefix
    if cc.oidc_config_requested:
        oidc_prefix = trim_name_by_length(cc.name, MAX_OIDC_CONFIG_PREFIX_LENGTH)
        logger.info("Got %s oidc config setting, going to prepare it with prefix %s", cc.oidc_config, oidc_prefix)
        oidc_config_id = prepare_resource("OIDC config", preparer.prepare_oidc_config, cc.oidc_config, profile.region,
                                         roles.installer_role, oidc_prefix)
        result.oidc_config_id = oidc_config_id
        result.user_data.oidc_config_id = oidc_config_id
        prepare_resource("OIDC provider", preparer.prepare_oidc_provider, oidc_config_id)
        prepare_resource("operator roles", preparer.prepare_operator_roles, operator_roles_prefix, oidc_config_id,
                        roles.installer_role, cc.hcp, profile.channel_group)
        result.add("--oidc-config-id", oidc_config_id)
        sts.oidc_config_id = oidc_config_id

    result.add("--operator-roles-prefix", operator_roles_prefix)
    sts.operator_roles_prefix = operator_roles_prefix
    result.user_data.operator_roles_prefix = operator_roles_prefix

    if cc.audit_log_forward:
        audit_log_arn = prepare_resource("audit log role", preparer.prepare_audit_log_role_arn, account_role_prefix,
                                        result.oidc_config_id, profile.region)
        result.cluster_config.audit_log_arn = audit_log_arn
        result.user_data.audit_log_arn = audit_log_arn
        result.add("--audit-log-arn", audit_log_arn)


# ============================================================================
# Day-one settings
# ============================================================================

def stage_admin_user(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if not profile.cluster_config.admin_enabled:
        return
    admin_file = ctx.settings.cluster_admin_file
    logger.info("Day1 admin is enabled. Going to generate the admin user and record it in %s", admin_file)
    username, password = prepare_resource("admin user", ctx.preparer.prepare_admin_user)
    result.add("--create-admin-user", "--cluster-admin-password", password)
    result.cluster_config.admin_enabled = True
    create_file_with_content(admin_file, f"{username}:{password}")


def stage_autoscaling(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if not profile.cluster_config.autoscale:
        return
    result.add(
        "--enable-autoscaling",
        "--min-replicas", DEFAULT_MIN_REPLICAS,
        "--max-replicas", DEFAULT_MAX_REPLICAS,
    )
    result.cluster_config.autoscaling = Autoscaling(enabled=True)
    result.cluster_config.nodes = Nodes(min_replicas=DEFAULT_MIN_REPLICAS, max_replicas=DEFAULT_MAX_REPLICAS)


def stage_replicas(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    replicas = profile.cluster_config.worker_pool_replicas
    if replicas == 0:
        return
    result.add("--replicas", str(replicas))
    if result.cluster_config.nodes is None:
        result.cluster_config.nodes = Nodes()
    result.cluster_config.nodes.replicas = str(replicas)


def stage_ingress(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if not profile.cluster_config.ingress_customized:
        return
    ingress = IngressConfig(
        default_ingress_route_selector=INGRESS_ROUTE_SELECTOR,
        default_ingress_excluded_namespaces=INGRESS_EXCLUDED_NAMESPACES,
        default_ingress_wildcard_policy=INGRESS_WILDCARD_POLICY,
        default_ingress_namespace_ownership_policy=INGRESS_NAMESPACE_OWNERSHIP_POLICY,
    )
    result.add(
        "--default-ingress-route-selector", ingress.default_ingress_route_selector,
        "--default-ingress-excluded-namespaces", ingress.default_ingress_excluded_namespaces,
        "--default-ingress-wildcard-policy", ingress.default_ingress_wildcard_policy,
        "--default-ingress-namespace-ownership-policy", ingress.default_ingress_namespace_ownership_policy,
    )
    result.cluster_config.ingress_config = ingress


def stage_autoscaler(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if not profile.cluster_config.autoscaler_enabled:
        return
    autoscaler = Autoscaler(
        log_verbosity=AUTOSCALER_LOG_VERBOSITY,
        max_pod_grace_period=AUTOSCALER_MAX_POD_GRACE_PERIOD,
        pod_priority_threshold=AUTOSCALER_POD_PRIORITY_THRESHOLD,
        max_node_provision_time=AUTOSCALER_MAX_NODE_PROVISION_TIME,
        balancing_ignored_labels=AUTOSCALER_BALANCING_IGNORED_LABELS,
        max_nodes_total=AUTOSCALER_MAX_NODES_TOTAL,
        min_cores=AUTOSCALER_MIN_CORES,
        max_cores=AUTOSCALER_MAX_CORES,
        min_memory=AUTOSCALER_MIN_MEMORY,
        max_memory=AUTOSCALER_MAX_MEMORY,
        scale_down_utilization_threshold=AUTOSCALER_SCALE_DOWN_UTILIZATION_THRESHOLD,
        scale_down_delay_after_add=AUTOSCALER_SCALE_DOWN_DELAY,
        scale_down_delay_after_delete=AUTOSCALER_SCALE_DOWN_DELAY,
        scale_down_delay_after_failure=AUTOSCALER_SCALE_DOWN_DELAY,
    )
    result.add(
        "--autoscaler-balance-similar-node-groups",
        "--autoscaler-skip-nodes-with-local-storage",
        "--autoscaler-log-verbosity", autoscaler.log_verbosity,
        "--autoscaler-max-pod-grace-period", autoscaler.max_pod_grace_period,
        "--autoscaler-pod-priority-threshold", autoscaler.pod_priority_threshold,
        "--autoscaler-ignore-daemonsets-utilization",
        "--autoscaler-max-node-provision-time", autoscaler.max_node_provision_time,
        "--autoscaler-balancing-ignored-labels", autoscaler.balancing_ignored_labels,
        "--autoscaler-max-nodes-total", autoscaler.max_nodes_total,
        "--autoscaler-min-cores", autoscaler.min_cores,
        "--autoscaler-max-cores", autoscaler.max_cores,
        "--autoscaler-min-memory", autoscaler.min_memory,
        "--autoscaler-max-memory", autoscaler.max_memory,
        "--autoscaler-scale-down-enabled",
        "--autoscaler-scale-down-utilization-threshold", autoscaler.scale_down_utilization_threshold,
        "--autoscaler-scale-down-delay-after-add", autoscaler.scale_down_delay_after_add,
        "--autoscaler-scale-down-delay-after-delete", autoscaler.scale_down_delay_after_delete,
        "--autoscaler-scale-down-delay-after-failure", autoscaler.scale_down_delay_after_failure,
    )
    result.cluster_config.autoscaler = autoscaler


# ============================================================================
# Network stages
# ============================================================================

def stage_networking(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if not profile.cluster_config.networking_set:
        return
    networking = Networking(
        machine_cidr=DEFAULT_MACHINE_CIDR,
        service_cidr=DEFAULT_SERVICE_CIDR,
        pod_cidr=DEFAULT_POD_CIDR,
        host_prefix=DEFAULT_HOST_PREFIX,
    )
    result.add(
        "--machine-cidr", networking.machine_cidr,
        "--service-cidr", networking.service_cidr,
        "--pod-cidr", networking.pod_cidr,
        "--host-prefix", networking.host_prefix,
    )
    result.cluster_config.networking = networking


def stage_byo_vpc(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    """Install into a prepared VPC, with optional extra security groups and a proxy."""
    cc = profile.cluster_config
    if not cc.byo_vpc:
        return
    preparer = ctx.preparer
    vpc_prefix = trim_name_by_length(cc.name, MAX_VPC_PREFIX_LENGTH)
    cidr = DEFAULT_VPC_CIDR
    if result.cluster_config.networking is not None:
        cidr = result.cluster_config.networking.machine_cidr
    logger.info("Got BYOVPC set to true. Going to prepare VPC %s with CIDR %s", vpc_prefix, cidr)
    vpc = prepare_resource("VPC", preparer.prepare_vpc, profile.region, vpc_prefix, cidr)
    result.vpc = vpc
    result.user_data.vpc_id = vpc.vpc_id

    zones = split_non_empty(cc.zones)
    subnets = prepare_resource("subnets", preparer.prepare_subnets, vpc, profile.region, zones, cc.multi_az)
    private = subnets.get("private", [])
    public = subnets.get("public", [])
    if cc.private_link:
        logger.info("Got private link set to true. Only set private subnets to cluster flags")
        subnet_ids = private
        result.cluster_config.subnets = Subnets(private_subnet_ids=",".join(private))
    else:
        subnet_ids = private + public
        result.cluster_config.subnets = Subnets(private_subnet_ids=",".join(private), public_subnet_ids=",".join(public))
    result.add("--subnet-ids", ",".join(subnet_ids))

    if cc.additional_sg_number:
        groups = prepare_resource("additional security groups", preparer.prepare_additional_security_groups,
                                 vpc, cc.additional_sg_number, vpc_prefix)
        group_ids = ",".join(groups)
        result.add(
            "--additional-infra-security-group-ids", group_ids,
            "--additional-control-plane-security-group-ids", group_ids,
            "--additional-compute-security-group-ids", group_ids,
        )
        result.cluster_config.additional_security_groups = AdditionalSecurityGroups(
            control_plane_security_groups=group_ids,
            infra_security_groups=group_ids,
            worker_security_groups=group_ids,
        )

    if cc.proxy_enabled:
        proxy = prepare_resource("proxy", preparer.prepare_proxy, vpc, profile.region,
                                ctx.settings.proxy_ssh_pem_file, ctx.settings.proxy_ca_bundle_file)
        result.add(
            "--http-proxy", proxy.http_proxy,
            "--https-proxy", proxy.https_proxy,
            "--no-proxy", proxy.no_proxy,
            "--additional-trust-bundle-file", proxy.ca_bundle_file_path,
        )
        result.cluster_config.proxy = Proxy(
            enabled=True,
            http=proxy.http_proxy,
            https=proxy.https_proxy,
            no_proxy=proxy.no_proxy,
            trust_bundle_file=proxy.ca_bundle_file_path,
        )


# ============================================================================
# Account, security and encryption stages
# ============================================================================

def stage_billing_account(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    account = profile.cluster_config.billing_account
    if account:
        result.add("--billing-account", account)
        result.cluster_config.billing_account = account


def stage_disable_scp_checks(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.disable_scp_checks:
        result.add("--disable-scp-checks")
        result.cluster_config.disable_scp_checks = True


def stage_disable_workload_monitoring(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.disable_user_workload_monitoring:
        result.add("--disable-workload-monitoring")
        result.cluster_config.disable_workload_monitoring = True


def _encryption(result: CompileResult) -> Encryption:
    if result.cluster_config.encryption is None:
        result.cluster_config.encryption = Encryption()
    return result.cluster_config.encryption


def stage_etcd_kms(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if not profile.cluster_config.etcd_kms:
        return
    key_arn = prepare_resource("etcd KMS key", ctx.preparer.prepare_kms_key, profile.region, False,
                              KMS_KEY_OWNER_TAG, profile.cluster_config.hcp)
    result.user_data.etcd_kms_key = key_arn
    result.add("--etcd-encryption-kms-arn", key_arn)
    _encryption(result).etcd_encryption_kms_arn = key_arn


def stage_ec2_metadata_http_tokens(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    tokens = profile.cluster_config.ec2_metadata_http_tokens
    if tokens:
        result.add("--ec2-metadata-http-tokens", tokens)
        result.cluster_config.ec2_metadata_http_tokens = tokens


def stage_etcd_encryption(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.etcd_encryption:
        result.add("--etcd-encryption")
        result.cluster_config.etcd_encryption = True


def stage_fips(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.fips:
        result.add("--fips")
        result.cluster_config.fips = True


def stage_hosted_cp(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.hcp:
        result.add("--hosted-cp")
        result.cluster_config.hypershift = True


def stage_compute_machine_type(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    instance_type = profile.cluster_config.instance_type
    if instance_type:
        result.add("--compute-machine-type", instance_type)
        result.cluster_config.instance_type = instance_type


def stage_kms_key(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if not profile.cluster_config.kms_key:
        return
    key_arn = prepare_resource("KMS key", ctx.preparer.prepare_kms_key, profile.region, False,
                              KMS_KEY_OWNER_TAG, profile.cluster_config.hcp)
    result.user_data.kms_key = key_arn
    result.add("--kms-key-arn", key_arn, "--enable-customer-managed-key")
    _encryption(result).kms_key_arn = key_arn


# ============================================================================
# Placement and metadata stages
# ============================================================================

def stage_worker_labels(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.label_enabled:
        result.add("--worker-mp-labels", WORKER_MP_LABELS)
        result.cluster_config.default_mp_labels = WORKER_MP_LABELS


def stage_multi_az(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.multi_az:
        result.add("--multi-az")
        result.cluster_config.multi_az = True


def stage_private(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.private:
        result.add("--private")
        result.cluster_config.private = True


def stage_private_link(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.private_link:
        result.add("--private-link")
        result.cluster_config.private_link = True


def stage_provision_shard(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    shard = profile.cluster_config.provision_shard
    if shard:
        result.add("--properties", f"{PROVISION_SHARD_PROPERTY}:{shard}")
        result.cluster_config.properties = Properties(provision_shard_id=shard)


def stage_tags(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.tag_enabled:
        result.add("--tags", CLUSTER_TAGS)
        result.cluster_config.tags = CLUSTER_TAGS


def stage_worker_disk_size(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    volume_size = profile.cluster_config.volume_size
    if volume_size:
        disk_size = f"{volume_size}GiB"
        result.add("--worker-disk-size", disk_size)
        result.cluster_config.worker_disk_size = disk_size


def stage_availability_zones(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    # BYOVPC derives zones from its subnets
    cc = profile.cluster_config
    if cc.zones and not cc.byo_vpc:
        result.add("--availability-zones", cc.zones)
        result.cluster_config.availability_zones = cc.zones


def stage_external_auth(profile: Profile, result: CompileResult, ctx: CompileContext) -> None:
    if profile.cluster_config.external_auth_config:
        result.add("--external-auth-providers-enabled")
        result.cluster_config.external_auth_config = True


STAGES: tuple[Stage, ...] = (
    stage_name,
    stage_version,
    stage_channel_group,
    stage_region,
    stage_domain_prefix,
    stage_sts,
    stage_admin_user,
    stage_autoscaling,
    stage_replicas,
    stage_ingress,
    stage_autoscaler,
    stage_networking,
    stage_byo_vpc,
    stage_billing_account,
    stage_disable_scp_checks,
    stage_disable_workload_monitoring,
    stage_etcd_kms,
    stage_ec2_metadata_http_tokens,
    stage_etcd_encryption,
    stage_fips,
    stage_hosted_cp,
    stage_compute_machine_type,
    stage_kms_key,
    stage_worker_labels,
    stage_multi_az,
    stage_private,
    stage_private_link,
    stage_provision_shard,
    stage_tags,
    stage_worker_disk_size,
    stage_availability_zones,
    stage_external_auth,
)


# ============================================================================
# Entry point
# ============================================================================

def persist_records(result: CompileResult, settings: TestConfig) -> None:
    """Write user data and cluster configuration; failures are fatal."""
    create_file_with_content(settings.user_data_file, result.user_data)
    create_file_with_content(settings.cluster_config_file, result.cluster_config)


def compile_flags(profile: Profile, ctx: CompileContext, stages: tuple[Stage, ...] = STAGES) -> CompileResult:
    """Run every stage against *profile* and persist the records.

    The profile's cluster name and version are filled in as a side effect.

    Args:
        profile: Profile to compile; ``cluster_config.name`` and ``version``
            are written back.
        ctx: Injected client, preparer and settings.
        stages: Stage pipeline, ``STAGES`` unless overridden.

    Returns:
        The accumulated flags and records.

    Raises:
        ProfileManagerError: The first stage failure, with the partial
            result attached as ``err.result``.
        PersistenceError: If the records cannot be written.
    """
    result = CompileResult()
    try:
        for stage in stages:
            try:
                stage(profile, result, ctx)
            except ProfileManagerError as err:
                logger.error("Stage %s failed: %s", stage.__name__, err)
                err.result = result
                raise
    finally:
        persist_records(result, ctx.settings)
    return result
