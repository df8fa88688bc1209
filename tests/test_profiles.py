"""Unit tests for profile loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from profile_manager.config import GlobalEnvConfig, TestConfig
from profile_manager.errors import ConfigurationError
from profile_manager.profiles import get_profile, load_profile, load_profile_by_env

PROFILE_YAML = """\
profiles:
  - as: rosa-hcp-ci
    version: latest
    channel_group: stable
    region: us-west-2
    cluster:
      sts: true
      hcp: true
      zones: us-west-2a,us-west-2b
      volume_size: 200
      unknown_toggle: true
    account-role:
      path: /qe/
  - as: rosa-classic-ci
    name_prefix: classic
    cluster:
      multi_az: true
"""

SHIPPED_PROFILES = Path(__file__).resolve().parents[1] / "profiles"


@pytest.fixture
def profiles_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "profiles"
    directory.mkdir()
    (directory / "ci.yaml").write_text(PROFILE_YAML)
    return directory


def test_get_profile_parses_nested_configs(profiles_dir: Path) -> None:
    profile = get_profile("rosa-hcp-ci", profiles_dir)

    assert profile.name == "rosa-hcp-ci"
    assert (profile.version, profile.channel_group, profile.region) == ("latest", "stable", "us-west-2")
    assert profile.cluster_config.sts and profile.cluster_config.hcp
    assert profile.cluster_config.volume_size == 200
    assert profile.cluster_config.name == ""
    assert profile.account_role_config.path == "/qe/"


def test_get_profile_unknown_name(profiles_dir: Path) -> None:
    with pytest.raises(ConfigurationError, match="Cannot find profile missing"):
        get_profile("missing", profiles_dir)


def test_get_profile_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="does not exist"):
        get_profile("rosa-hcp-ci", tmp_path / "nowhere")


def test_load_profile_defaults_the_name_prefix(profiles_dir: Path) -> None:
    assert load_profile("rosa-hcp-ci", profiles_dir).name_prefix == "rosacli"
    assert load_profile("rosa-classic-ci", profiles_dir).name_prefix == "classic"


def test_load_profile_by_env_requires_test_profile(profiles_dir: Path) -> None:
    with pytest.raises(ConfigurationError, match="TEST_PROFILE"):
        load_profile_by_env(TestConfig(test_profile="", yaml_profiles_dir=profiles_dir), GlobalEnvConfig())


def test_load_profile_by_env_applies_overrides(monkeypatch: pytest.MonkeyPatch, profiles_dir: Path) -> None:
    monkeypatch.setenv("TEST_PROFILE", "rosa-hcp-ci")
    monkeypatch.setenv("YAML_PROFILES_DIR", str(profiles_dir))
    monkeypatch.setenv("CHANNEL_GROUP", "candidate")
    monkeypatch.setenv("VERSION", "4.16")
    monkeypatch.setenv("REGION", "eu-west-1")
    monkeypatch.setenv("PROVISION_SHARD", "shard-7")
    monkeypatch.setenv("NAME_PREFIX", "nightly")

    profile = load_profile_by_env()

    assert profile.channel_group == "candidate"
    assert profile.version == "4.16"
    assert profile.region == "eu-west-1"
    assert profile.cluster_config.provision_shard == "shard-7"
    assert profile.name_prefix == "nightly"


@pytest.mark.parametrize("name", ["rosa-classic-sts", "rosa-classic-byovpc-proxy", "rosa-hcp-advanced",
                                  "rosa-hcp-private-link"])
def test_shipped_profiles_load(name: str) -> None:
    assert load_profile(name, SHIPPED_PROFILES).name == name
