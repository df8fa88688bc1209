"""Unit tests for version resolution."""

from __future__ import annotations

import pytest
from conftest import FakeRosaClient

from profile_manager.errors import ProvisioningError
from profile_manager.models import OpenShiftVersion
from profile_manager.versions import resolve_version, select_version

VERSIONS = [
    OpenShiftVersion(raw_id=raw_id, channel_group="stable")
    for raw_id in ("4.14.30", "4.15.9", "4.15.20", "4.16.1", "4.16.3", "4.16.10")
]


@pytest.mark.parametrize(
    ("requested", "expected"),
    [
        ("latest", "4.16.10"),
        ("", "4.16.10"),
        ("y-1", "4.15.20"),
        ("z-1", "4.16.3"),
        ("4.15", "4.15.20"),
        ("4.14.30", "4.14.30"),
    ],
)
def test_select_version(requested: str, expected: str) -> None:
    assert select_version(VERSIONS, requested).raw_id == expected


def test_select_version_without_match() -> None:
    assert select_version(VERSIONS, "4.13") is None
    assert select_version(VERSIONS[:1], "z-1") is None
    assert select_version([], "latest") is None


def test_resolve_version_filters_disabled_and_hcp() -> None:
    client = FakeRosaClient(versions=[
        OpenShiftVersion(raw_id="4.16.10", enabled=False, hosted_control_plane_enabled=True),
        OpenShiftVersion(raw_id="4.16.3", hosted_control_plane_enabled=False),
        OpenShiftVersion(raw_id="4.16.1", hosted_control_plane_enabled=True),
    ])
    version = resolve_version(client, "latest", "stable", hcp=True)

    assert version.raw_id == "4.16.1"
    assert version.channel_group == "stable"
    assert client.calls == [("list_versions", ("stable", True))]


def test_resolve_version_without_match_fails() -> None:
    with pytest.raises(ProvisioningError, match="'4.99'"):
        resolve_version(FakeRosaClient(versions=VERSIONS), "4.99", "stable", hcp=False)
