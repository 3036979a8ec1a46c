"""
Data model shared by the registry gateways and the cleanup workflow.

Registry images and versions are rebuilt from the REST APIs on every fetch
and never persisted. Image groups unify same-named images across the
container registries; a group holds at most one image per registry kind.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class RegistryKind(Enum):
    """Container registries that can take part in a cross-registry group.

    Declaration order is the processing order used everywhere (grouping,
    version selection and deletion).
    """

    GHCR = "ghcr"
    GITLAB = "gitlab"
    DOCKER_HUB = "dockerHub"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]

    @classmethod
    def coerce(cls, value: Union["RegistryKind", str]) -> "RegistryKind":
        """Accept an enum member, its value or a case-insensitive alias like 'dockerhub'."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "").replace("_", "")
        for kind in cls:
            if kind.value.lower() == normalized:
                return kind
        if normalized in ("gitlabregistry", "gitlabcontainerregistry"):
            return cls.GITLAB
        raise ValueError(f"Unknown registry kind: {value}")


_KIND_LABELS = {
    RegistryKind.GHCR: "GHCR",
    RegistryKind.GITLAB: "GitLab",
    RegistryKind.DOCKER_HUB: "Docker Hub",
}


@dataclass(frozen=True)
class RegistryImage:
    """One image/package as reported by a single registry"""

    id: Any
    name: str  # registry-qualified path, e.g. "org/project/image"
    tags: List[str] = field(default_factory=list)
    created_at: Optional[str] = None


@dataclass
class ImageGroup:
    """Same-named images across registries, keyed by base name.

    total_versions is the tag count seen at listing time. It is a display
    hint only and can diverge from the versions fetched later.
    """

    base_name: str
    registries: Dict[RegistryKind, RegistryImage] = field(default_factory=dict)
    total_versions: int = 0

    def present_kinds(self) -> List[RegistryKind]:
        return [kind for kind in RegistryKind if kind in self.registries]


@dataclass
class VersionRecord:
    """One deletable unit (tag or digest-addressed manifest) of a registry image.

    package_name is the qualified name of the RegistryImage the record was
    resolved from, which the delete endpoints need.
    """

    id: Any
    name: str
    tags: List[str] = field(default_factory=list)
    digest: Optional[str] = None
    created_at: Optional[str] = None
    size: Optional[int] = None
    package_name: str = ""

    def to_delete_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "packageName": self.package_name,
            "tags": list(self.tags),
        }


@dataclass
class GroupedVersionSelection:
    """Versions chosen by the operator for one image group, per registry kind"""

    base_name: str
    versions: Dict[RegistryKind, List[VersionRecord]] = field(default_factory=dict)

    def for_kind(self, kind: RegistryKind) -> List[VersionRecord]:
        return self.versions.get(kind, [])

    def total(self) -> int:
        return sum(len(records) for records in self.versions.values())


class DeletionStatus(Enum):
    SKIPPED_EMPTY = "skipped_empty"
    DECLINED = "declined"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass
class DeletionOutcome:
    """Result of the confirm/delete step for one image group"""

    base_name: str
    status: DeletionStatus
    deleted: Dict[RegistryKind, int] = field(default_factory=dict)
    failed: Dict[RegistryKind, int] = field(default_factory=dict)

    @property
    def total_deleted(self) -> int:
        return sum(self.deleted.values())

    @property
    def total_failed(self) -> int:
        return sum(self.failed.values())


@dataclass
class Release:
    """GitHub or GitLab release"""

    tag_name: str
    name: Optional[str] = None
    id: Optional[int] = None


@dataclass
class Tag:
    """GitHub or GitLab git tag"""

    name: str


@dataclass
class PlatformNeeds:
    """Platforms the operator chose to clean up in this run"""

    github: bool = False
    gitlab: bool = False
    ghcr: bool = False
    gitlab_registry: bool = False
    docker_hub: bool = False

    def any_selected(self) -> bool:
        return any((self.github, self.gitlab, self.ghcr, self.gitlab_registry, self.docker_hub))

    def registry_kinds(self) -> List[RegistryKind]:
        kinds = []
        if self.ghcr:
            kinds.append(RegistryKind.GHCR)
        if self.gitlab_registry:
            kinds.append(RegistryKind.GITLAB)
        if self.docker_hub:
            kinds.append(RegistryKind.DOCKER_HUB)
        return kinds
