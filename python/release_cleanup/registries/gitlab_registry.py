"""GitLab Container Registry gateway (project registry repositories API)"""

from typing import Any, List
from urllib.parse import quote

from release_cleanup.error_utils import RegistryError
from release_cleanup.models import RegistryImage, RegistryKind, VersionRecord
from release_cleanup.registries.base import RegistryGateway


class GitLabRegistryGateway(RegistryGateway):
    """Registry repositories of one GitLab project.

    Tags are deleted by name under the numeric repository id, which is looked
    up again from the repository path at delete time.
    """

    kind = RegistryKind.GITLAB

    def __init__(self, token: str, project: str, base_url: str = "https://gitlab.com/api/v4", **kwargs):
        super().__init__(base_url, **kwargs)
        self.project = project
        self.http.headers.update({"PRIVATE-TOKEN": token})

    @property
    def _repositories_path(self) -> str:
        return f"/projects/{quote(str(self.project), safe='')}/registry/repositories"

    def _fetch_repositories(self) -> List[dict]:
        return list(self._get_link_pages(self._repositories_path, params={"per_page": self.page_size}))

    def list_images(self) -> List[RegistryImage]:
        return [
            RegistryImage(id=repo["id"], name=repo.get("path") or repo.get("name"), created_at=repo.get("created_at"))
            for repo in self._fetch_repositories()
        ]

    def list_versions(self, image: RegistryImage) -> List[VersionRecord]:
        tags = self._get_link_pages(f"{self._repositories_path}/{image.id}/tags", params={"per_page": self.page_size})
        return [
            VersionRecord(
                id=tag["name"],
                name=tag["name"],
                tags=[tag["name"]],
                digest=tag.get("digest"),
                created_at=tag.get("created_at"),
                size=tag.get("total_size"),
                package_name=image.name,
            )
            for tag in tags
        ]

    def find_repository_id(self, package_name: str) -> Any:
        """Map a repository path back to its numeric id"""
        for repo in self._fetch_repositories():
            if (repo.get("path") or repo.get("name")) == package_name:
                return repo["id"]
        raise RegistryError(f"repository {package_name} not found in project {self.project}")

    def delete_version(self, version: VersionRecord, credential: Any = None) -> None:
        repo_id = self.find_repository_id(version.package_name)
        self._request("DELETE", f"{self._repositories_path}/{repo_id}/tags/{quote(version.name, safe='')}")
