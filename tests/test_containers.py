"""Unit tests for the grouped container cleanup in release_cleanup/containers.py"""

from unittest.mock import MagicMock, call

import pytest

from release_cleanup.containers import (
    confirm_and_delete_group,
    format_group_label,
    format_version_label,
    resolve_versions,
    run_container_cleanup,
    select_image_groups,
    select_versions_for_group,
)
from release_cleanup.models import (
    DeletionStatus,
    GroupedVersionSelection,
    ImageGroup,
    RegistryImage,
    RegistryKind,
    VersionRecord,
)
from release_cleanup.registries.base import RegistryGateway


def make_gateway(kind, versions=None, delete_result=(0, 0)):
    gateway = MagicMock(spec=RegistryGateway)
    gateway.kind = kind
    gateway.label = kind.label
    gateway.list_versions.return_value = versions or []
    gateway.delete_versions.return_value = delete_result
    return gateway


def record(id, name=None, tags=None, digest=None, package="user/app"):
    return VersionRecord(id=id, name=name or str(id), tags=tags or [], digest=digest,
                         created_at="2024-03-05T10:00:00Z", package_name=package)


@pytest.fixture
def group():
    return ImageGroup(
        base_name="app",
        registries={
            RegistryKind.GHCR: RegistryImage(id=1, name="user/app", tags=["v1"]),
            RegistryKind.DOCKER_HUB: RegistryImage(id="user/app", name="app"),
        },
        total_versions=1,
    )


class TestLabels:
    """Tests for prompt labels"""

    def test_group_label_lists_registries_and_count(self, group):
        assert format_group_label(group) == "app (GHCR, Docker Hub) - 1 total versions"

    def test_version_label_with_tags(self):
        assert format_version_label(record(1, tags=["v1", "latest"])) == "v1, latest (2024-03-05)"

    def test_version_label_uses_short_digest(self):
        version = record(1, digest="sha256:0123456789abcdef")
        assert format_version_label(version) == "sha256:01234 (2024-03-05)"

    def test_version_label_falls_back_to_id(self):
        version = VersionRecord(id=99, name="x")
        assert format_version_label(version) == "99 (unknown date)"


class TestSelectImageGroups:
    """Tests for select_image_groups"""

    def test_empty_input_does_not_prompt(self, prompter):
        assert select_image_groups([], prompter) == []
        prompter.checkbox.assert_not_called()

    def test_only_first_group_is_prechecked(self, prompter):
        groups = [ImageGroup("a"), ImageGroup("b"), ImageGroup("c")]
        prompter.checkbox.return_value = []

        select_image_groups(groups, prompter)

        choices = prompter.checkbox.call_args[0][1]
        assert [c.checked for c in choices] == [True, False, False]
        assert prompter.checkbox.call_args[1]["empty_selects_all"] is False

    def test_preserves_original_order(self, prompter):
        groups = [ImageGroup("a"), ImageGroup("b"), ImageGroup("c")]
        prompter.checkbox.return_value = [groups[2], groups[0]]

        assert select_image_groups(groups, prompter) == [groups[0], groups[2]]


class TestResolveVersions:
    """Tests for resolve_versions"""

    def test_uses_the_images_qualified_name(self, group):
        gateway = make_gateway(RegistryKind.GHCR, [record(1)])

        assert resolve_versions(group, RegistryKind.GHCR, {RegistryKind.GHCR: gateway}) == [record(1)]
        gateway.list_versions.assert_called_once_with(group.registries[RegistryKind.GHCR])

    def test_absent_kind_is_not_resolved(self, group):
        gitlab = make_gateway(RegistryKind.GITLAB, [record(1)])

        assert resolve_versions(group, RegistryKind.GITLAB, {RegistryKind.GITLAB: gitlab}) == []
        gitlab.list_versions.assert_not_called()

    def test_gateway_failure_reads_as_no_versions(self, group):
        gateway = make_gateway(RegistryKind.GHCR)
        gateway.list_versions.side_effect = RuntimeError("boom")

        assert resolve_versions(group, RegistryKind.GHCR, {RegistryKind.GHCR: gateway}) == []


class TestSelectVersionsForGroup:
    """Tests for select_versions_for_group"""

    def test_only_present_kinds_are_resolved(self, group, prompter):
        ghcr = make_gateway(RegistryKind.GHCR, [record(1)])
        gitlab = make_gateway(RegistryKind.GITLAB, [record(2)])
        hub = make_gateway(RegistryKind.DOCKER_HUB, [record(3)])
        prompter.checkbox.side_effect = lambda message, choices, **kw: [choices[0].value]

        selection = select_versions_for_group(
            group, {RegistryKind.GHCR: ghcr, RegistryKind.GITLAB: gitlab, RegistryKind.DOCKER_HUB: hub}, prompter
        )

        gitlab.list_versions.assert_not_called()
        assert selection.for_kind(RegistryKind.GHCR) == [record(1)]
        assert selection.for_kind(RegistryKind.DOCKER_HUB) == [record(3)]
        assert selection.for_kind(RegistryKind.GITLAB) == []

    def test_selecting_nothing_never_falls_back_to_all(self, group, prompter):
        ghcr = make_gateway(RegistryKind.GHCR, [record(1), record(2)])
        prompter.checkbox.return_value = []

        selection = select_versions_for_group(group, {RegistryKind.GHCR: ghcr}, prompter)

        assert selection.total() == 0
        assert prompter.checkbox.call_args[1]["empty_selects_all"] is False
        assert not any(c.checked for c in prompter.checkbox.call_args[0][1])

    def test_failing_registry_does_not_stop_the_others(self, group, prompter):
        ghcr = make_gateway(RegistryKind.GHCR)
        ghcr.list_versions.side_effect = RuntimeError("401 Unauthorized")
        hub = make_gateway(RegistryKind.DOCKER_HUB, [record(3)])
        prompter.checkbox.side_effect = lambda message, choices, **kw: [c.value for c in choices]

        selection = select_versions_for_group(group, {RegistryKind.GHCR: ghcr, RegistryKind.DOCKER_HUB: hub}, prompter)

        assert selection.for_kind(RegistryKind.DOCKER_HUB) == [record(3)]
        assert prompter.checkbox.call_count == 1


class TestConfirmAndDeleteGroup:
    """Tests for confirm_and_delete_group"""

    def test_empty_selection_skips_without_prompt_or_delete(self, prompter):
        gateway = make_gateway(RegistryKind.GHCR)
        selection = GroupedVersionSelection("app", {kind: [] for kind in RegistryKind})

        outcome = confirm_and_delete_group(selection, {RegistryKind.GHCR: gateway}, prompter)

        assert outcome.status is DeletionStatus.SKIPPED_EMPTY
        prompter.confirm.assert_not_called()
        gateway.delete_versions.assert_not_called()

    def test_declined_confirmation_deletes_nothing(self, prompter):
        gateway = make_gateway(RegistryKind.GHCR)
        selection = GroupedVersionSelection("app", {RegistryKind.GHCR: [record(1)]})
        prompter.confirm.return_value = False

        outcome = confirm_and_delete_group(selection, {RegistryKind.GHCR: gateway}, prompter)

        assert outcome.status is DeletionStatus.DECLINED
        gateway.delete_versions.assert_not_called()

    def test_confirmation_names_total_and_defaults_to_no(self, prompter):
        gateway = make_gateway(RegistryKind.GHCR, delete_result=(2, 0))
        hub = make_gateway(RegistryKind.DOCKER_HUB, delete_result=(1, 0))
        selection = GroupedVersionSelection(
            "app", {RegistryKind.GHCR: [record(1), record(2)], RegistryKind.DOCKER_HUB: [record(3)]}
        )
        prompter.confirm.return_value = True

        confirm_and_delete_group(selection, {RegistryKind.GHCR: gateway, RegistryKind.DOCKER_HUB: hub}, prompter)

        message = prompter.confirm.call_args[0][0]
        assert "3 total versions" in message and '"app"' in message
        assert prompter.confirm.call_args[1]["default"] is False

    def test_failures_in_one_registry_do_not_stop_the_next(self, prompter):
        ghcr = make_gateway(RegistryKind.GHCR, delete_result=(1, 1))
        hub = make_gateway(RegistryKind.DOCKER_HUB, delete_result=(1, 0))
        selection = GroupedVersionSelection(
            "app", {RegistryKind.GHCR: [record(1), record(2)], RegistryKind.DOCKER_HUB: [record(3)]}
        )
        prompter.confirm.return_value = True

        outcome = confirm_and_delete_group(selection, {RegistryKind.GHCR: ghcr, RegistryKind.DOCKER_HUB: hub}, prompter)

        ghcr.delete_versions.assert_called_once_with([record(1), record(2)])
        hub.delete_versions.assert_called_once_with([record(3)])
        assert outcome.status is DeletionStatus.DELETED
        assert outcome.total_deleted == 2
        assert outcome.total_failed == 1

    def test_missing_gateway_counts_as_failed(self, prompter):
        selection = GroupedVersionSelection("app", {RegistryKind.GITLAB: [record(1), record(2)]})
        prompter.confirm.return_value = True

        outcome = confirm_and_delete_group(selection, {}, prompter)

        assert outcome.failed == {RegistryKind.GITLAB: 2}
        assert outcome.status is DeletionStatus.FAILED

    def test_every_delete_failing_reports_failed(self, prompter):
        gateway = make_gateway(RegistryKind.GHCR, delete_result=(0, 2))
        selection = GroupedVersionSelection("app", {RegistryKind.GHCR: [record(1), record(2)]})
        prompter.confirm.return_value = True

        outcome = confirm_and_delete_group(selection, {RegistryKind.GHCR: gateway}, prompter)

        assert outcome.status is DeletionStatus.FAILED
        assert outcome.total_deleted == 0
        assert outcome.total_failed == 2


class TestRunContainerCleanup:
    """Tests for run_container_cleanup"""

    def _groups(self):
        return [
            ImageGroup("a", {RegistryKind.GHCR: RegistryImage(id=1, name="u/a")}),
            ImageGroup("b", {RegistryKind.GHCR: RegistryImage(id=2, name="u/b")}),
            ImageGroup("c", {RegistryKind.GHCR: RegistryImage(id=3, name="u/c")}),
        ]

    def test_declining_to_continue_stops_remaining_groups(self, prompter):
        groups = self._groups()
        gateway = make_gateway(RegistryKind.GHCR, [record(1)], delete_result=(1, 0))
        # Group selection, then version selection for group "a"
        prompter.checkbox.side_effect = [groups, [record(1)]]
        # Confirm deletion of "a", then decline to continue
        prompter.confirm.side_effect = [True, False]

        outcomes = run_container_cleanup(groups, {RegistryKind.GHCR: gateway}, prompter)

        assert [o.base_name for o in outcomes] == ["a"]
        assert gateway.list_versions.call_count == 1
        assert prompter.confirm.call_args_list[-1] == call("➡️  Continue with next image group?", default=True)

    def test_continue_is_asked_after_skipped_groups_too(self, prompter):
        groups = self._groups()[:2]
        gateway = make_gateway(RegistryKind.GHCR, [record(1)])
        prompter.checkbox.side_effect = [groups, [], []]
        prompter.confirm.side_effect = [True]

        outcomes = run_container_cleanup(groups, {RegistryKind.GHCR: gateway}, prompter)

        assert [o.status for o in outcomes] == [DeletionStatus.SKIPPED_EMPTY, DeletionStatus.SKIPPED_EMPTY]
        # Only the continue question, never a delete confirmation
        assert prompter.confirm.call_count == 1
        gateway.delete_versions.assert_not_called()

    def test_no_groups_selected(self, prompter):
        prompter.checkbox.return_value = []

        assert run_container_cleanup(self._groups(), {}, prompter) == []
        prompter.confirm.assert_not_called()
