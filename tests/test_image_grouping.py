"""Unit tests for release_cleanup/image_grouping.py"""

import pytest

from release_cleanup.image_grouping import extract_base_name, group_images_by_name
from release_cleanup.models import RegistryImage, RegistryKind


class TestExtractBaseName:
    """Tests for extract_base_name"""

    @pytest.mark.parametrize("full_name,expected", [
        ("ghcr.io/user/gitpod-bun", "gitpod-bun"),
        ("registry.gitlab.com/user/project/gitpod-bun", "gitpod-bun"),
        ("devcontainers/bun-node", "bun-node"),
        ("bun-node", "bun-node"),
    ])
    def test_returns_last_path_segment(self, full_name, expected):
        """Test that the last segment of the path is the base name"""
        assert extract_base_name(full_name) == expected

    def test_empty_input_returned_unchanged(self):
        """Test that an empty name stays empty"""
        assert extract_base_name("") == ""

    def test_trailing_slash_returns_input(self):
        """Test that an empty last segment falls back to the whole input"""
        assert extract_base_name("user/app/") == "user/app/"


class TestGroupImagesByName:
    """Tests for group_images_by_name"""

    def test_groups_same_base_name_across_registries(self):
        """Test that one image per registry lands in one group"""
        groups = group_images_by_name({
            RegistryKind.GHCR: [RegistryImage(id=1, name="user/app", tags=["v1", "v2"])],
            RegistryKind.GITLAB: [RegistryImage(id=7, name="group/project/app", tags=["v1"])],
            RegistryKind.DOCKER_HUB: [RegistryImage(id="user/app", name="app", tags=[])],
        })

        assert len(groups) == 1
        group = groups[0]
        assert group.base_name == "app"
        assert set(group.registries) == {RegistryKind.GHCR, RegistryKind.GITLAB, RegistryKind.DOCKER_HUB}
        assert group.registries[RegistryKind.GITLAB].id == 7
        assert group.total_versions == 3

    def test_groups_sorted_by_base_name(self):
        """Test that groups come back in base name order"""
        groups = group_images_by_name({
            RegistryKind.GHCR: [
                RegistryImage(id=1, name="zeta"),
                RegistryImage(id=2, name="alpha"),
            ],
            RegistryKind.DOCKER_HUB: [RegistryImage(id="u/mid", name="mid")],
        })

        assert [g.base_name for g in groups] == ["alpha", "mid", "zeta"]

    def test_last_image_wins_within_registry_but_tags_accumulate(self):
        """Test collisions within one registry keep the last image and sum the tag counts"""
        first = RegistryImage(id=1, name="a/app", tags=["v1"])
        second = RegistryImage(id=2, name="b/app", tags=["v2", "v3"])

        groups = group_images_by_name({RegistryKind.GITLAB: [first, second]})

        assert len(groups) == 1
        assert groups[0].registries[RegistryKind.GITLAB] is second
        assert groups[0].total_versions == 3

    def test_accepts_string_keys(self):
        """Test that registry keys may be given by their values"""
        groups = group_images_by_name({
            "ghcr": [RegistryImage(id=1, name="app")],
            "dockerHub": [RegistryImage(id="u/app", name="app")],
        })

        assert groups[0].present_kinds() == [RegistryKind.GHCR, RegistryKind.DOCKER_HUB]

    def test_missing_and_empty_registries(self):
        """Test that absent registries are treated as empty"""
        assert group_images_by_name({}) == []
        assert group_images_by_name({RegistryKind.GHCR: []}) == []

    def test_unknown_registry_key_raises(self):
        """Test that an unknown registry kind is rejected"""
        with pytest.raises(ValueError):
            group_images_by_name({"quay": [RegistryImage(id=1, name="app")]})

    def test_every_image_is_in_exactly_one_group(self):
        """Test that grouping neither drops nor duplicates distinct images"""
        images = {
            RegistryKind.GHCR: [RegistryImage(id=i, name=f"user/img-{i}") for i in range(5)],
            RegistryKind.GITLAB: [RegistryImage(id=i, name=f"g/p/img-{i}") for i in range(3, 8)],
        }

        groups = group_images_by_name(images)

        assert len(groups) == 8
        ghcr_members = [g for g in groups if RegistryKind.GHCR in g.registries]
        gitlab_members = [g for g in groups if RegistryKind.GITLAB in g.registries]
        assert len(ghcr_members) == 5
        assert len(gitlab_members) == 5
        assert all(g.registries for g in groups)

    def test_repeated_calls_give_identical_groups(self):
        """Test that grouping the same input twice gives the same order and aggregates"""
        images = {
            RegistryKind.GHCR: [RegistryImage(id=1, name="a/x", tags=["1", "2"]), RegistryImage(id=2, name="a/b")],
            RegistryKind.GITLAB: [RegistryImage(id=3, name="b/x", tags=["1"])],
            RegistryKind.DOCKER_HUB: [],
        }

        assert group_images_by_name(images) == group_images_by_name(images)
