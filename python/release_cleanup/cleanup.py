"""
Interactive cleanup run: scope, credentials, listing, selection, deletion.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from release_cleanup.config_manager import ConfigManager, Credentials
from release_cleanup.containers import run_container_cleanup
from release_cleanup.error_utils import describe_request_error
from release_cleanup.git_platforms import GitHubClient, GitLabClient, GitPlatformClient
from release_cleanup.image_grouping import group_images_by_name
from release_cleanup.logging_utils import get_logger
from release_cleanup.models import DeletionOutcome, PlatformNeeds, Release, Tag
from release_cleanup.prompts import Prompter
from release_cleanup.registries import build_gateways, fetch_all_images
from release_cleanup.report_utils import format_outcomes_table
from release_cleanup.selectors import BACK_OPTION, DeletionScope, select_items, select_platforms, select_what_to_delete

logger = get_logger(__name__)


@dataclass
class GitSelection:
    """Releases and tags picked on one git platform"""

    client: GitPlatformClient
    releases: List[Release] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.releases) + len(self.tags)


@dataclass
class CleanupResult:
    """What a cleanup run did, for the caller and for tests"""

    container_outcomes: List[DeletionOutcome] = field(default_factory=list)
    git_deleted: int = 0
    git_failed: int = 0
    cancelled: bool = False


def choose_scope(prompter: Prompter) -> Optional[Tuple[DeletionScope, PlatformNeeds]]:
    """Steps 1 and 2 with back navigation. Returns None when the operator exits."""
    while True:
        scope = select_what_to_delete(prompter)
        if scope is None:
            return None

        needs = select_platforms(scope, prompter)
        if needs == BACK_OPTION:
            logger.info("")
            continue
        return scope, needs


def print_summary(scope: DeletionScope, needs: PlatformNeeds) -> None:
    logger.info("\n📋 Configuration Summary:")
    logger.info("━" * 50)
    if scope.releases:
        logger.info("✓ Deleting releases")
    if scope.tags:
        logger.info("✓ Deleting tags")
    if scope.containers:
        logger.info("✓ Deleting containers")
    logger.info("\n🌐 From platforms:")
    for selected, label in (
        (needs.github, "GitHub"),
        (needs.gitlab, "GitLab"),
        (needs.ghcr, "GitHub Container Registry (GHCR)"),
        (needs.gitlab_registry, "GitLab Container Registry"),
        (needs.docker_hub, "Docker Hub"),
    ):
        if selected:
            logger.info(f"  • {label}")
    logger.info("━" * 50 + "\n")


def build_git_clients(
    config_manager: ConfigManager, credentials: Credentials, needs: PlatformNeeds
) -> Dict[str, GitPlatformClient]:
    common = {"timeout": config_manager.get_http_timeout(), "page_size": config_manager.get_page_size()}
    clients: Dict[str, GitPlatformClient] = {}
    if needs.github:
        clients["GitHub"] = GitHubClient(
            credentials.github_token,
            credentials.github_owner,
            credentials.github_repo,
            base_url=config_manager.get_github_api_url(),
            **common,
        )
    if needs.gitlab:
        clients["GitLab"] = GitLabClient(
            credentials.gitlab_token,
            f"{credentials.gitlab_owner}/{credentials.gitlab_repo}",
            base_url=config_manager.get_gitlab_api_url(),
            **common,
        )
    return clients


def _fetch_items_safely(platform: str, client: GitPlatformClient) -> Tuple[List[Release], List[Tag]]:
    try:
        releases, tags = client.fetch_items()
        logger.info(f"📦 {platform}: {len(releases)} releases, {len(tags)} tags")
        return releases, tags
    except Exception as e:
        logger.error(f"⚠️  Error fetching {platform} releases/tags: {describe_request_error(e)}")
        return [], []


def fetch_git_items(clients: Dict[str, GitPlatformClient]) -> Dict[str, Tuple[List[Release], List[Tag]]]:
    """Fetch releases and tags of every platform in parallel, fail-soft per platform"""
    if not clients:
        return {}
    with ThreadPoolExecutor(max_workers=len(clients)) as executor:
        futures = {
            platform: executor.submit(_fetch_items_safely, platform, client) for platform, client in clients.items()
        }
        return {platform: future.result() for platform, future in futures.items()}


def select_git_items(
    scope: DeletionScope,
    clients: Dict[str, GitPlatformClient],
    items: Dict[str, Tuple[List[Release], List[Tag]]],
    prompter: Prompter,
) -> List[GitSelection]:
    selections = []
    for platform, client in clients.items():
        releases, tags = items.get(platform, ([], []))
        selection = GitSelection(client)
        if scope.releases:
            selection.releases = select_items(releases, "releases", platform, prompter)
        if scope.tags:
            selection.tags = select_items(tags, "tags", platform, prompter)
        selections.append(selection)
    return selections


def run_cleanup(config_manager: ConfigManager, prompter: Optional[Prompter] = None) -> CleanupResult:
    """Run one interactive cleanup.

    Container image groups are confirmed and deleted one group at a time;
    the selected releases and tags are confirmed once, at the end.
    """
    prompter = prompter or Prompter()
    result = CleanupResult()
    logger.info("🚀 Welcome to Release Cleanup Tool!\n")

    chosen = choose_scope(prompter)
    if chosen is None:
        logger.info("👋 Bye!")
        result.cancelled = True
        return result
    scope, needs = chosen

    if not needs.any_selected():
        logger.info("❌ No platforms selected. Exiting...")
        result.cancelled = True
        return result

    print_summary(scope, needs)

    credentials = config_manager.collect_credentials(needs, prompter)
    gateways = build_gateways(config_manager, credentials, needs.registry_kinds())
    clients = build_git_clients(config_manager, credentials, needs)

    logger.info("🔍 Fetching items...\n")
    git_items = fetch_git_items(clients)
    git_selections = select_git_items(scope, clients, git_items, prompter)

    if scope.containers and gateways:
        images = fetch_all_images(gateways, max_workers=config_manager.get_max_workers())
        groups = group_images_by_name(images)
        result.container_outcomes = run_container_cleanup(groups, gateways, prompter)
        if result.container_outcomes:
            logger.info("\n" + format_outcomes_table(result.container_outcomes))

    total = sum(selection.total for selection in git_selections)
    if total == 0:
        logger.info("\n✅ Cleanup completed.")
        return result

    logger.info(f"\n⚠️  Total releases/tags to delete: {total}")
    if not prompter.confirm("🗑️  Are you sure you want to delete the selected releases/tags?", default=False):
        logger.info("❌ Operation cancelled")
        result.cancelled = True
        return result

    logger.info("\n🔄 Starting cleanup...\n")
    for selection in git_selections:
        if selection.total == 0:
            continue
        deleted, failed = selection.client.delete_items(selection.releases, selection.tags)
        result.git_deleted += deleted
        result.git_failed += failed

    if result.git_failed:
        logger.warning(f"\n⚠️  Cleanup finished with {result.git_failed} failed deletions")
    else:
        logger.info("\n✅ Cleanup completed successfully!")
    return result
