"""
Grouped container image cleanup.

Images that share a base name across GHCR, the GitLab Container Registry and
Docker Hub are handled together: the operator picks image groups, then the
versions to delete in each registry of a group, confirms, and the deletions
run registry by registry.

Workflow per group:
- Resolve versions for every registry the group is present in (fail-soft)
- Let the operator pick versions per registry (nothing pre-selected)
- Summarize, confirm (default: no), delete with per-item error isolation
"""

from typing import List, Mapping, Optional, Sequence

from release_cleanup.error_utils import describe_request_error
from release_cleanup.logging_utils import get_logger
from release_cleanup.models import (
    DeletionOutcome,
    DeletionStatus,
    GroupedVersionSelection,
    ImageGroup,
    RegistryKind,
    VersionRecord,
)
from release_cleanup.prompts import Choice, Prompter
from release_cleanup.registries.base import RegistryGateway
from release_cleanup.report_utils import format_date, sizeof_fmt

logger = get_logger(__name__)

Gateways = Mapping[RegistryKind, RegistryGateway]


def format_group_label(group: ImageGroup) -> str:
    registries = ", ".join(kind.label for kind in group.present_kinds())
    return f"{group.base_name} ({registries}) - {group.total_versions} total versions"


def format_version_label(version: VersionRecord) -> str:
    """Tags and date for tagged versions, short digest (or id) and date otherwise"""
    date = format_date(version.created_at)
    if version.tags:
        return f"{', '.join(version.tags)} ({date})"
    identifier = version.digest[:12] if version.digest else str(version.id)
    return f"{identifier} ({date})"


def select_image_groups(groups: Sequence[ImageGroup], prompter: Optional[Prompter] = None) -> List[ImageGroup]:
    """Ask which image groups to clean up. Only the first group is pre-checked.

    Returns:
        Selected groups in their original (sorted) order
    """
    if not groups:
        logger.info("ℹ️  No container images found")
        return []

    prompter = prompter or Prompter()
    choices = [Choice(format_group_label(group), group, checked=(i == 0)) for i, group in enumerate(groups)]
    selected = prompter.checkbox("📦 Select image groups to clean up:", choices, empty_selects_all=False)

    chosen_ids = {id(group) for group in selected}
    return [group for group in groups if id(group) in chosen_ids]


def resolve_versions(group: ImageGroup, kind: RegistryKind, gateways: Gateways) -> List[VersionRecord]:
    """Fetch the versions of the group's image in one registry.

    Returns an empty list when the group has no image in that registry, no
    gateway is configured for it, or the registry call fails.
    """
    image = group.registries.get(kind)
    gateway = gateways.get(kind)
    if image is None or gateway is None:
        return []

    try:
        return gateway.list_versions(image)
    except Exception as e:
        logger.error(f"⚠️  Error fetching {kind.label} versions for {image.name}: {describe_request_error(e)}")
        return []


def select_versions_for_group(
    group: ImageGroup, gateways: Gateways, prompter: Optional[Prompter] = None
) -> GroupedVersionSelection:
    """Let the operator pick versions to delete in every registry of the group.

    An empty answer selects nothing for that registry.
    """
    prompter = prompter or Prompter()
    logger.info(f"\n🔍 Working on: {group.base_name}")

    selection = GroupedVersionSelection(base_name=group.base_name, versions={kind: [] for kind in RegistryKind})
    for kind in group.present_kinds():
        logger.info(f"\n📍 Fetching {kind.label} versions...")
        versions = resolve_versions(group, kind, gateways)
        if not versions:
            continue

        choices = [Choice(format_version_label(version), version) for version in versions]
        selection.versions[kind] = prompter.checkbox(
            f'🎯 [{kind.label}] Select versions of "{group.base_name}" to delete:',
            choices,
            empty_selects_all=False,
        )
    return selection


def _summary_line(kind: RegistryKind, versions: Sequence[VersionRecord]) -> str:
    line = f"  • {kind.label}: {len(versions)} versions"
    sizes = [v.size for v in versions if v.size]
    if sizes:
        line += f" ({sizeof_fmt(sum(sizes))})"
    return line


def confirm_and_delete_group(
    selection: GroupedVersionSelection, gateways: Gateways, prompter: Optional[Prompter] = None
) -> DeletionOutcome:
    """Confirm and delete the selected versions of one image group.

    Nothing selected skips the group without prompting. Declining the
    confirmation skips it as well. Deletions run one registry after another
    and a failed item never stops the remaining ones.
    """
    total = selection.total()
    if total == 0:
        logger.info(f'\n⏭️  No versions selected for "{selection.base_name}". Skipping...')
        return DeletionOutcome(selection.base_name, DeletionStatus.SKIPPED_EMPTY)

    prompter = prompter or Prompter()
    logger.info(f'\n📊 Summary for "{selection.base_name}":')
    for kind in RegistryKind:
        versions = selection.for_kind(kind)
        if versions:
            logger.info(_summary_line(kind, versions))

    if not prompter.confirm(f'🗑️  Delete {total} total versions of "{selection.base_name}"?', default=False):
        logger.info(f'❌ Skipped "{selection.base_name}"')
        return DeletionOutcome(selection.base_name, DeletionStatus.DECLINED)

    outcome = DeletionOutcome(selection.base_name, DeletionStatus.DELETED)
    for kind in RegistryKind:
        versions = selection.for_kind(kind)
        if not versions:
            continue
        gateway = gateways.get(kind)
        if gateway is None:
            logger.error(f"❌ No {kind.label} client configured, cannot delete {len(versions)} versions")
            outcome.failed[kind] = len(versions)
            continue
        deleted, failed = gateway.delete_versions(versions)
        outcome.deleted[kind] = deleted
        outcome.failed[kind] = failed

    if not outcome.total_deleted:
        outcome.status = DeletionStatus.FAILED
        logger.error(f'❌ Could not delete any of the {total} versions of "{selection.base_name}"')
    elif outcome.total_failed:
        logger.warning(
            f'⚠️  Deleted {outcome.total_deleted} of {total} versions of "{selection.base_name}" '
            f"({outcome.total_failed} failed)"
        )
    else:
        logger.info(f'✅ Deleted versions of "{selection.base_name}"')
    return outcome


def run_container_cleanup(
    groups: Sequence[ImageGroup], gateways: Gateways, prompter: Optional[Prompter] = None
) -> List[DeletionOutcome]:
    """Select image groups and walk through them one at a time.

    After each group (whatever its result) the operator is asked whether to
    continue; declining stops the loop for all remaining groups.
    """
    prompter = prompter or Prompter()
    selected = select_image_groups(groups, prompter)

    outcomes: List[DeletionOutcome] = []
    for index, group in enumerate(selected):
        selection = select_versions_for_group(group, gateways, prompter)
        outcomes.append(confirm_and_delete_group(selection, gateways, prompter))

        if index < len(selected) - 1:
            if not prompter.confirm("➡️  Continue with next image group?", default=True):
                logger.info("\n⏭️  Skipping remaining groups...")
                break
    return outcomes
