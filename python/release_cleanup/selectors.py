"""
Operator prompts that scope a cleanup run.

Step 1 asks what to delete, step 2 from where (with a way back to step 1),
step 3 picks concrete releases or tags.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, TypeVar, Union

from release_cleanup.logging_utils import get_logger
from release_cleanup.models import PlatformNeeds, Release, Tag
from release_cleanup.prompts import Choice, Prompter, Separator

logger = get_logger(__name__)

BACK_OPTION = "← Go Back"

T = TypeVar("T", Release, Tag)


@dataclass
class DeletionScope:
    """What kinds of artifacts the operator wants to delete"""

    releases: bool = False
    tags: bool = False
    containers: bool = False

    @property
    def needs_git_platforms(self) -> bool:
        return self.releases or self.tags


def select_what_to_delete(prompter: Optional[Prompter] = None) -> Optional[DeletionScope]:
    """Ask what to delete. Returns None when the operator chooses to exit."""
    prompter = prompter or Prompter()
    answer = prompter.select(
        "📦 What do you want to delete?",
        [
            Choice("Releases only", "releases"),
            Choice("Tags only", "tags"),
            Choice("Containers only", "containers"),
            Choice("Releases & Tags", "releases-tags"),
            Choice("Everything Everywhere All at Once 🎬", "everything"),
            Separator(),
            Choice("❌ Exit", "exit"),
        ],
    )
    if answer == "exit":
        return None

    return DeletionScope(
        releases=answer in ("releases", "releases-tags", "everything"),
        tags=answer in ("tags", "releases-tags", "everything"),
        containers=answer in ("containers", "everything"),
    )


def select_platforms(scope: DeletionScope, prompter: Optional[Prompter] = None) -> Union[PlatformNeeds, str]:
    """Ask which platforms to clean up.

    Returns:
        The selected platforms, or BACK_OPTION when the operator goes back
    """
    prompter = prompter or Prompter()
    needs = PlatformNeeds()

    if scope.needs_git_platforms:
        answer = prompter.select(
            "🌐 From where do you want to delete?",
            [
                Choice("GitHub", "github"),
                Choice("GitLab", "gitlab"),
                Choice("Everywhere", "everywhere"),
                Separator(),
                Choice(BACK_OPTION, "back"),
            ],
        )
        if answer == "back":
            return BACK_OPTION

        needs.github = answer in ("github", "everywhere")
        needs.gitlab = answer in ("gitlab", "everywhere")

        if scope.containers and answer == "everywhere":
            needs.ghcr = needs.gitlab_registry = needs.docker_hub = True
            return needs

        # GitHub releases/tags imply its container registry
        if scope.containers and needs.github:
            needs.ghcr = True

    if scope.containers:
        choices: List[Choice] = []
        if not needs.ghcr:
            choices.append(Choice("GitHub Container Registry (GHCR)", "ghcr", checked=True))
        choices += [
            Choice("GitLab Container Registry", "gitlab-registry"),
            Choice("Docker Hub", "dockerhub"),
            Choice("Everywhere", "all-containers"),
            Choice(BACK_OPTION, "back"),
        ]
        # Nothing picked means every registry, unlike the destructive selections
        selected = prompter.checkbox("📦 Select container registries:", choices, empty_selects_all=True)

        if "back" in selected and "all-containers" not in selected:
            return BACK_OPTION

        if "all-containers" in selected:
            needs.ghcr = needs.gitlab_registry = needs.docker_hub = True
        else:
            needs.ghcr = needs.ghcr or "ghcr" in selected
            needs.gitlab_registry = "gitlab-registry" in selected
            needs.docker_hub = "dockerhub" in selected

    return needs


def format_item_label(item: Union[Release, Tag]) -> str:
    if isinstance(item, Release):
        return f"{item.tag_name} - {item.name or 'No title'}"
    return item.name


def select_items(items: Sequence[T], item_type: str, platform: str, prompter: Optional[Prompter] = None) -> List[T]:
    """Pick releases or tags to delete. Selecting nothing skips them."""
    if not items:
        logger.info(f"ℹ️  No {item_type} found on {platform}")
        return []

    prompter = prompter or Prompter()
    selected = prompter.checkbox(
        f"🎯 Select {platform} {item_type} to delete:",
        [Choice(format_item_label(item), item) for item in items],
        empty_selects_all=False,
    )
    if not selected:
        logger.info(f"⚠️  No {item_type} selected from {platform}. Skipping...")
        return []
    return selected
