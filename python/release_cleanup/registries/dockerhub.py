"""Docker Hub gateway (hub.docker.com v2 API)"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import quote

from release_cleanup.logging_utils import get_logger
from release_cleanup.models import RegistryImage, RegistryKind, VersionRecord
from release_cleanup.registries.base import RegistryGateway

logger = get_logger(__name__)


@dataclass(frozen=True)
class DockerHubSession:
    """Bearer token from one login, valid for one call chain"""

    token: str

    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class DockerHubGateway(RegistryGateway):
    """Repositories of one Docker Hub account.

    Every call chain (a listing, a version fetch, a delete batch) logs in
    first and passes the resulting DockerHubSession explicitly; the shared
    HTTP session never carries the token.
    """

    kind = RegistryKind.DOCKER_HUB

    def __init__(self, username: str, token: str, base_url: str = "https://hub.docker.com/v2", **kwargs):
        super().__init__(base_url, **kwargs)
        self.username = username
        self._password = token

    def login(self) -> DockerHubSession:
        response = self._request(
            "POST", "/users/login", json={"username": self.username, "password": self._password}
        )
        logger.debug(f"Logged in to Docker Hub as {self.username}")
        return DockerHubSession(token=response.json()["token"])

    def open_session(self) -> DockerHubSession:
        return self.login()

    def _get_results(self, path: str, session: DockerHubSession, params: Optional[Dict[str, Any]] = None) -> Iterator[Any]:
        """Yield results of a Docker Hub list endpoint, following the 'next' links"""
        response = self._request("GET", path, headers=session.headers(), params=params)
        while True:
            body = response.json()
            for item in body.get("results") or []:
                yield item
            next_url = body.get("next")
            if not next_url:
                return
            response = self._request("GET", next_url, headers=session.headers())

    def _repository_path(self, repository: str) -> str:
        return f"/repositories/{self.username}/{quote(repository, safe='')}"

    def list_images(self) -> List[RegistryImage]:
        session = self.login()
        repos = self._get_results(f"/repositories/{self.username}/", session, params={"page_size": self.page_size})
        return [
            RegistryImage(
                id=f"{repo.get('namespace', self.username)}/{repo['name']}",
                name=repo["name"],
                created_at=repo.get("last_updated"),
            )
            for repo in repos
        ]

    def list_versions(self, image: RegistryImage, session: Optional[DockerHubSession] = None) -> List[VersionRecord]:
        session = session or self.login()
        tags = self._get_results(
            f"{self._repository_path(image.name)}/tags", session, params={"page_size": self.page_size}
        )
        return [
            VersionRecord(
                id=tag.get("id"),
                name=tag["name"],
                tags=[tag["name"]],
                digest=tag.get("digest"),
                created_at=tag.get("last_updated"),
                size=tag.get("full_size"),
                package_name=image.name,
            )
            for tag in tags
        ]

    def delete_version(self, version: VersionRecord, credential: Optional[DockerHubSession] = None) -> None:
        session = credential or self.login()
        self._request(
            "DELETE",
            f"{self._repository_path(version.package_name)}/tags/{quote(version.name, safe='')}/",
            headers=session.headers(),
        )
