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

"""Create a cluster from a profile and carry it to readiness."""

from __future__ import annotations

from collections.abc import Callable

from profile_manager import console, logger
from profile_manager.client import RosaClient
from profile_manager.compiler import CompileContext, compile_flags, prepare_resource
from profile_manager.config import GlobalEnvConfig, TestConfig
from profile_manager.constants import CLUSTER_TYPE, ROSA_BINARY
from profile_manager.errors import ProfileManagerError
from profile_manager.models import ClusterDescription, ClusterDetail, Profile
from profile_manager.poller import wait_for_cluster_ready
from profile_manager.preparer import RosaResourcePreparer
from profile_manager.utils import create_file_with_content, require_command


def record_cluster_identity(description: ClusterDescription, settings: TestConfig) -> None:
    """Write the cluster detail record and the per-field compatibility files."""
    logger.info("Going to record the necessary information")
    detail = ClusterDetail(cluster_id=description.id, cluster_name=description.name, cluster_type=CLUSTER_TYPE)
    create_file_with_content(settings.cluster_detail_file, detail)
    create_file_with_content(settings.cluster_id_file, description.id)
    create_file_with_content(settings.cluster_name_file, description.name)
    create_file_with_content(settings.api_url_file, description.api_url)
    create_file_with_content(settings.console_url_file, description.console_url)
    create_file_with_content(settings.infra_id_file, description.infra_id)
    create_file_with_content(settings.cluster_type_file, CLUSTER_TYPE)


def _decorate_cluster(profile: Profile, description: ClusterDescription, ctx: CompileContext) -> None:
    cc = profile.cluster_config
    preparer = ctx.preparer
    if cc.sts and not cc.oidc_config_requested:
        logger.info("Preparing OIDC provider and operator roles for cluster %s", description.id)
        prepare_resource(f"OIDC provider for cluster {description.id}",
                         preparer.prepare_oidc_provider_by_cluster, description.id)
        prepare_resource(f"operator roles for cluster {description.id}",
                         preparer.prepare_operator_roles_by_cluster, description.id)
    if cc.kms_key:
        prepare_resource(f"KMS key policy for cluster {description.id}",
                         preparer.elaborate_kms_key, description.id, False)
    if cc.etcd_kms:
        prepare_resource(f"etcd KMS key policy for cluster {description.id}",
                         preparer.elaborate_kms_key, description.id, True)


def create_cluster_by_profile(
    profile: Profile,
    ctx: CompileContext,
    wait_for_ready: bool,
    global_env: GlobalEnvConfig | None = None,
    waiter: Callable[..., None] = wait_for_cluster_ready,
) -> ClusterDescription:
    """Compile, create, decorate and optionally wait for a cluster.

    Args:
        profile: Profile to create the cluster from.
        ctx: Injected client, preparer and settings.
        wait_for_ready: Poll until the cluster is ready before returning.
        global_env: Source of the readiness timeout; read from env when None.
        waiter: Readiness poller.

    Returns:
        The cluster description, re-read after readiness when waiting.

    Raises:
        ProfileManagerError: From any step. Errors raised once the cluster
            exists carry its description as ``err.cluster``.
    """
    settings = ctx.settings
    result = compile_flags(profile, ctx)
    logger.info("User data and flags preparation finished")

    name = profile.cluster_config.name
    _, command = ctx.client.create_cluster(name, *result.flags)
    create_file_with_content(settings.create_command_file, command)
    console.print(f"[green]✅ Cluster {name} created[/green]")

    description = ctx.client.describe_cluster(name)
    try:
        _decorate_cluster(profile, description, ctx)
        if wait_for_ready:
            timeout = (global_env or GlobalEnvConfig()).cluster_timeout
            logger.info("Waiting for the cluster %s to ready", description.id)
            waiter(ctx.client, description.id, timeout, settings)
            description = ctx.client.describe_cluster(name)
            console.print(f"[green]✅ Cluster {name} is ready[/green]")
    except ProfileManagerError as err:
        err.cluster = description
        raise
    finally:
        record_cluster_identity(description, settings)
    return description


def reverify_cluster_network(client: RosaClient, cluster_id: str) -> str:
    logger.info("verify network of cluster %s", cluster_id)
    return client.verify_network(cluster_id)


def build_context(settings: TestConfig | None = None) -> CompileContext:
    """Build the default context backed by the ``rosa`` binary and boto3.

    Raises:
        ConfigurationError: If ``rosa`` is not on PATH.
    """
    settings = settings or TestConfig()
    require_command(ROSA_BINARY)
    client = RosaClient()
    preparer = RosaResourcePreparer(client, proxy_ami_id=settings.proxy_ami_id)
    return CompileContext(client=client, preparer=preparer, settings=settings)
