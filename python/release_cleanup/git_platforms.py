"""
Release and tag clients for GitHub and GitLab repositories.

Both clients list everything the repository has and delete items one by
one; a failed deletion is logged and the remaining items are still
attempted.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import requests

from release_cleanup.error_utils import describe_request_error
from release_cleanup.logging_utils import get_logger
from release_cleanup.models import Release, Tag

logger = get_logger(__name__)


class GitPlatformClient(ABC):
    """Shared HTTP plumbing for the git hosting APIs"""

    platform = ""

    def __init__(self, base_url: str, headers: Dict[str, str], timeout: float = 30, page_size: int = 100,
                 http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self.http = http or requests.Session()
        self.http.headers.update(headers)

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response

    def _get_all(self, path: str) -> List[dict]:
        """Fetch all pages of a list endpoint (Link header pagination)"""
        items: List[dict] = []
        response = self._request("GET", path, params={"per_page": self.page_size})
        while True:
            items.extend(response.json())
            next_url = response.links.get("next", {}).get("url")
            if not next_url:
                return items
            response = self._request("GET", next_url)

    def fetch_items(self) -> Tuple[List[Release], List[Tag]]:
        return self.fetch_releases(), self.fetch_tags()

    @abstractmethod
    def fetch_releases(self) -> List[Release]:
        """List every release of the repository"""

    @abstractmethod
    def fetch_tags(self) -> List[Tag]:
        """List every tag of the repository"""

    @abstractmethod
    def delete_release(self, release: Release) -> None:
        """Delete one release. Raises on failure."""

    @abstractmethod
    def delete_tag(self, tag: Tag) -> None:
        """Delete one tag. Raises on failure."""

    def delete_items(self, releases: Sequence[Release] = (), tags: Sequence[Tag] = ()) -> Tuple[int, int]:
        """Delete releases first, then tags.

        Returns:
            Tuple of (deleted, failed)
        """
        deleted = failed = 0
        for release in releases:
            try:
                self.delete_release(release)
                deleted += 1
                logger.info(f"✅ Deleted {self.platform} release: {release.tag_name}")
            except Exception as e:
                failed += 1
                logger.error(f"❌ Error deleting {self.platform} release {release.tag_name}: {describe_request_error(e)}")

        for tag in tags:
            try:
                self.delete_tag(tag)
                deleted += 1
                logger.info(f"✅ Deleted {self.platform} tag: {tag.name}")
            except Exception as e:
                failed += 1
                logger.error(f"❌ Error deleting {self.platform} tag {tag.name}: {describe_request_error(e)}")
        return deleted, failed


class GitHubClient(GitPlatformClient):
    platform = "GitHub"

    def __init__(self, token: str, owner: str, repo: str, base_url: str = "https://api.github.com", **kwargs):
        super().__init__(
            base_url,
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            **kwargs,
        )
        self.repo_path = f"/repos/{owner}/{repo}"

    def fetch_releases(self) -> List[Release]:
        return [
            Release(tag_name=r["tag_name"], name=r.get("name"), id=r.get("id"))
            for r in self._get_all(f"{self.repo_path}/releases")
        ]

    def fetch_tags(self) -> List[Tag]:
        return [Tag(name=t["name"]) for t in self._get_all(f"{self.repo_path}/tags")]

    def delete_release(self, release: Release) -> None:
        self._request("DELETE", f"{self.repo_path}/releases/{release.id}")

    def delete_tag(self, tag: Tag) -> None:
        self._request("DELETE", f"{self.repo_path}/git/refs/tags/{quote(tag.name)}")


class GitLabClient(GitPlatformClient):
    platform = "GitLab"

    def __init__(self, token: str, project_path: str, base_url: str = "https://gitlab.com/api/v4", **kwargs):
        super().__init__(base_url, {"PRIVATE-TOKEN": token}, **kwargs)
        self.project_path = f"/projects/{quote(project_path, safe='')}"

    def fetch_releases(self) -> List[Release]:
        return [Release(tag_name=r["tag_name"], name=r.get("name")) for r in self._get_all(f"{self.project_path}/releases")]

    def fetch_tags(self) -> List[Tag]:
        return [Tag(name=t["name"]) for t in self._get_all(f"{self.project_path}/repository/tags")]

    def delete_release(self, release: Release) -> None:
        self._request("DELETE", f"{self.project_path}/releases/{quote(release.tag_name, safe='')}")

    def delete_tag(self, tag: Tag) -> None:
        self._request("DELETE", f"{self.project_path}/repository/tags/{quote(tag.name, safe='')}")
