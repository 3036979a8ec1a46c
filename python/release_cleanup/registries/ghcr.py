"""GitHub Container Registry gateway (GitHub Packages REST API)"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from release_cleanup.error_utils import describe_request_error
from release_cleanup.logging_utils import get_logger
from release_cleanup.models import RegistryImage, RegistryKind, VersionRecord
from release_cleanup.registries.base import RegistryGateway

logger = get_logger(__name__)


class GhcrGateway(RegistryGateway):
    """Container packages of one GitHub user or organization.

    Versions are deleted by their numeric package version id.
    """

    kind = RegistryKind.GHCR

    def __init__(self, token: str, owner: str, base_url: str = "https://api.github.com", **kwargs):
        super().__init__(base_url, **kwargs)
        self.owner = owner
        self.http.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })
        self._owner_prefix: Optional[str] = None

    def _packages_path(self) -> str:
        """Resolve /users/<owner> or /orgs/<owner> for the package endpoints.

        User packages are tried first; a 404 means the owner is an organization.
        """
        if self._owner_prefix is None:
            user_prefix = f"/users/{self.owner}"
            try:
                self._request("GET", f"{user_prefix}/packages", params={"package_type": "container", "per_page": 1})
                self._owner_prefix = user_prefix
            except requests.exceptions.HTTPError as e:
                if e.response is None or e.response.status_code != 404:
                    raise
                logger.debug(f"No user packages for {self.owner}, using organization endpoints")
                self._owner_prefix = f"/orgs/{self.owner}"
        return f"{self._owner_prefix}/packages"

    def _versions_path(self, package_name: str) -> str:
        return f"{self._packages_path()}/container/{quote(package_name, safe='')}/versions"

    def list_images(self) -> List[RegistryImage]:
        packages = self._get_link_pages(
            self._packages_path(),
            params={"package_type": "container", "per_page": self.page_size},
        )

        images = []
        for pkg in packages:
            try:
                versions = self._fetch_raw_versions(pkg["name"])
            except Exception as e:
                logger.error(f"⚠️  Error fetching versions for {pkg['name']}: {describe_request_error(e)}")
                continue
            tags = [tag for version in versions for tag in _container_tags(version)]
            images.append(RegistryImage(id=pkg["id"], name=pkg["name"], tags=tags, created_at=pkg.get("created_at")))
        return images

    def _fetch_raw_versions(self, package_name: str) -> List[Dict[str, Any]]:
        return list(self._get_link_pages(self._versions_path(package_name), params={"per_page": self.page_size}))

    def list_versions(self, image: RegistryImage) -> List[VersionRecord]:
        return [
            VersionRecord(
                id=v["id"],
                name=v["name"],
                tags=_container_tags(v),
                digest=v["name"],
                created_at=v.get("created_at"),
                package_name=image.name,
            )
            for v in self._fetch_raw_versions(image.name)
        ]

    def delete_version(self, version: VersionRecord, credential: Any = None) -> None:
        self._request("DELETE", f"{self._versions_path(version.package_name)}/{version.id}")

    def describe_version(self, version: VersionRecord) -> str:
        tag_info = f" ({', '.join(version.tags)})" if version.tags else ""
        return f"{version.package_name}{tag_info}"


def _container_tags(version: Dict[str, Any]) -> List[str]:
    return list(((version.get("metadata") or {}).get("container") or {}).get("tags") or [])
