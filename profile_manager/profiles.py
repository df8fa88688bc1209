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

"""Profile loading from YAML files with environment overrides.

A profile file holds a list of named profiles::

    profiles:
      - as: rosa-hcp-advanced
        version: latest
        channel_group: stable
        region: us-west-2
        cluster:
          sts: true
          hcp: true
        account-role:
          path: /qe/
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from profile_manager import logger
from profile_manager.config import GlobalEnvConfig, TestConfig
from profile_manager.constants import DEFAULT_NAME_PREFIX
from profile_manager.errors import ConfigurationError
from profile_manager.models import Profile

PROFILE_FILE_PATTERNS = ("*.yaml", "*.yml")


def _profile_files(profiles_dir: Path) -> list[Path]:
    if not profiles_dir.is_dir():
        raise ConfigurationError(f"Profiles directory {profiles_dir} does not exist")
    return sorted(p for pattern in PROFILE_FILE_PATTERNS for p in profiles_dir.glob(pattern))


def get_profile(name: str, profiles_dir: Path) -> Profile:
    """Find the profile called *name* in the profile files of *profiles_dir*.

    Raises:
        ConfigurationError: If the directory, a file, or the profile is invalid or missing.
    """
    for path in _profile_files(profiles_dir):
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as err:
            raise ConfigurationError(f"Cannot read profile file {path}: {err}") from err
        for entry in content.get("profiles") or []:
            if entry.get("as") != name:
                continue
            try:
                return Profile.model_validate(entry)
            except ValidationError as err:
                raise ConfigurationError(f"Profile {name} in {path} is invalid: {err}") from err
    raise ConfigurationError(f"Cannot find profile {name} in {profiles_dir}")


def load_profile(name: str, profiles_dir: Path) -> Profile:
    profile = get_profile(name, profiles_dir)
    if not profile.name_prefix:
        profile.name_prefix = DEFAULT_NAME_PREFIX
    logger.info("Loaded cluster profile configuration from profile %s: %s",
                name, profile.model_dump_json(exclude={"cluster_config", "account_role_config"}))
    logger.info("Cluster config: %s", profile.cluster_config.model_dump_json())
    logger.info("Account role config: %s", profile.account_role_config.model_dump_json())
    return profile


def load_profile_by_env(test_config: TestConfig | None = None,
                        global_env: GlobalEnvConfig | None = None) -> Profile:
    """Load the profile named by ``TEST_PROFILE`` and apply global overrides.

    Args:
        test_config: Test settings; read from the environment when None.
        global_env: Global overrides; read from the environment when None.

    Returns:
        The loaded profile.

    Raises:
        ConfigurationError: If ``TEST_PROFILE`` is not set or the profile cannot be loaded.
    """
    test_config = test_config or TestConfig()
    global_env = global_env or GlobalEnvConfig()
    if not test_config.test_profile:
        raise ConfigurationError("Cannot find the TEST_PROFILE env. Please set it first")
    profile = load_profile(test_config.test_profile, test_config.yaml_profiles_dir)

    if global_env.channel_group:
        logger.info("Got global env settings for CHANNEL_GROUP, overwritten the profile setting with value %s",
                    global_env.channel_group)
        profile.channel_group = global_env.channel_group
    if global_env.version:
        logger.info("Got global env settings for VERSION, overwritten the profile setting with value %s",
                    global_env.version)
        profile.version = global_env.version
    if global_env.region:
        logger.info("Got global env settings for REGION, overwritten the profile setting with value %s",
                    global_env.region)
        profile.region = global_env.region
    if global_env.provision_shard:
        logger.info("Got global env settings for PROVISION_SHARD, overwritten the profile setting with value %s",
                    global_env.provision_shard)
        profile.cluster_config.provision_shard = global_env.provision_shard
    if global_env.name_prefix:
        logger.info("Got global env settings for NAME_PREFIX, overwritten the profile setting with value %s",
                    global_env.name_prefix)
        profile.name_prefix = global_env.name_prefix
    return profile
