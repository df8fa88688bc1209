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

"""Configuration classes loaded from the test environment."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from profile_manager.constants import (
    API_URL_FILE,
    CLUSTER_ADMIN_FILE,
    CLUSTER_CONFIG_FILE,
    CLUSTER_DETAIL_FILE,
    CLUSTER_ID_FILE,
    CLUSTER_NAME_FILE,
    CLUSTER_TYPE_FILE,
    CONSOLE_URL_FILE,
    CREATE_COMMAND_FILE,
    DEFAULT_CLUSTER_TIMEOUT_MINUTES,
    DEFAULT_PROFILES_DIR,
    DEFAULT_SHARED_DIR,
    INFRA_ID_FILE,
    INSTALL_LOG_FILE,
    USER_DATA_FILE,
)


# ============================================================================
# Configuration classes
# ============================================================================

class TestConfig(BaseSettings):
    """Test run inputs and artifact locations, auto-loaded from env vars.

    Attributes:
        test_profile: Name of the profile to provision (``TEST_PROFILE``).
        yaml_profiles_dir: Directory holding the profile YAML files.
        shared_dir: Directory every durable record is written to.
        proxy_ssh_pem_file: Private key of the key pair used by the proxy host.
        proxy_ca_bundle_file: CA bundle trusted by the cluster for the proxy.
        proxy_ami_id: Image used to launch the proxy host.
    """

    __test__ = False

    model_config = SettingsConfigDict(extra="ignore")

    test_profile: str = ""
    yaml_profiles_dir: Path = Path(DEFAULT_PROFILES_DIR)
    shared_dir: Path = Path(DEFAULT_SHARED_DIR)
    proxy_ssh_pem_file: str = ""
    proxy_ca_bundle_file: str = ""
    proxy_ami_id: str = ""

    @property
    def user_data_file(self) -> Path:
        return self.shared_dir / USER_DATA_FILE

    @property
    def cluster_config_file(self) -> Path:
        return self.shared_dir / CLUSTER_CONFIG_FILE

    @property
    def cluster_admin_file(self) -> Path:
        return self.shared_dir / CLUSTER_ADMIN_FILE

    @property
    def create_command_file(self) -> Path:
        return self.shared_dir / CREATE_COMMAND_FILE

    @property
    def cluster_detail_file(self) -> Path:
        return self.shared_dir / CLUSTER_DETAIL_FILE

    @property
    def install_log_file(self) -> Path:
        return self.shared_dir / INSTALL_LOG_FILE

    @property
    def cluster_id_file(self) -> Path:
        return self.shared_dir / CLUSTER_ID_FILE

    @property
    def cluster_name_file(self) -> Path:
        return self.shared_dir / CLUSTER_NAME_FILE

    @property
    def api_url_file(self) -> Path:
        return self.shared_dir / API_URL_FILE

    @property
    def console_url_file(self) -> Path:
        return self.shared_dir / CONSOLE_URL_FILE

    @property
    def infra_id_file(self) -> Path:
        return self.shared_dir / INFRA_ID_FILE

    @property
    def cluster_type_file(self) -> Path:
        return self.shared_dir / CLUSTER_TYPE_FILE


class GlobalEnvConfig(BaseSettings):
    """Global overrides applied on top of the selected profile.

    Attributes:
        channel_group: Overrides the profile channel group when set.
        version: Overrides the profile version selector when set.
        region: Overrides the profile region when set.
        provision_shard: Overrides the cluster provision shard when set.
        name_prefix: Overrides the profile name prefix when set.
        cluster_timeout: Minutes to wait for a cluster to become ready.
    """

    model_config = SettingsConfigDict(extra="ignore")

    channel_group: str = ""
    version: str = ""
    region: str = ""
    provision_shard: str = ""
    name_prefix: str = ""
    cluster_timeout: int = Field(default=DEFAULT_CLUSTER_TIMEOUT_MINUTES, ge=1)
