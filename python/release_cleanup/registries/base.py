"""
Common plumbing for the container registry gateways.

Each registry kind has exactly one gateway class with the same capability
set: list images, list the versions of one image, delete one version. Calls
go through a requests.Session with a fixed timeout and are never retried;
failures surface as exceptions and are isolated by the callers.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import requests

from release_cleanup.error_utils import describe_request_error
from release_cleanup.logging_utils import get_logger
from release_cleanup.models import RegistryImage, RegistryKind, VersionRecord

logger = get_logger(__name__)


class RegistryGateway(ABC):
    """Uniform REST access to one container registry"""

    kind: RegistryKind

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        page_size: int = 100,
        http: Optional[requests.Session] = None,
    ):
        """Initialize the gateway

        Args:
            base_url: API root, e.g. https://api.github.com
            timeout: Per-request timeout in seconds
            page_size: Page size for list endpoints
            http: Session to reuse (a new one is created if omitted)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self.http = http or requests.Session()

    @property
    def label(self) -> str:
        return self.kind.label

    def _request(self, method: str, path: str, headers: Optional[Dict[str, str]] = None, **kwargs) -> requests.Response:
        """Make an HTTP request to the registry API and raise for HTTP errors"""
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response

    def _get_link_pages(
        self, path: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None
    ) -> Iterator[Any]:
        """Yield items of a list endpoint paginated with Link: rel="next" headers"""
        response = self._request("GET", path, headers=headers, params=params)
        while True:
            for item in response.json():
                yield item
            next_url = response.links.get("next", {}).get("url")
            if not next_url:
                return
            response = self._request("GET", next_url, headers=headers)

    # Capability set

    @abstractmethod
    def list_images(self) -> List[RegistryImage]:
        """List every image/package the configured owner has in this registry"""

    @abstractmethod
    def list_versions(self, image: RegistryImage) -> List[VersionRecord]:
        """List the deletable versions of one image"""

    @abstractmethod
    def delete_version(self, version: VersionRecord, credential: Any = None) -> None:
        """Delete one version. Raises on failure.

        Args:
            version: Version to delete; package_name locates the owning image
            credential: Value returned by open_session() for this batch
        """

    def open_session(self) -> Any:
        """Obtain the credential value for one call chain.

        Registries authenticated with a static token need nothing; registries
        that log in return their short-lived session here.
        """
        return None

    def describe_version(self, version: VersionRecord) -> str:
        return f"{version.package_name}:{version.name}"

    def delete_versions(self, versions: Sequence[VersionRecord]) -> Tuple[int, int]:
        """Delete versions one after another, isolating per-item failures.

        Returns:
            Tuple of (deleted, failed)
        """
        if not versions:
            return 0, 0

        try:
            credential = self.open_session()
        except Exception as e:
            logger.error(f"❌ Error authenticating with {self.label}: {describe_request_error(e)}")
            return 0, len(versions)

        deleted = failed = 0
        for version in versions:
            try:
                self.delete_version(version, credential)
                deleted += 1
                logger.info(f"✅ Deleted {self.label} version: {self.describe_version(version)}")
            except Exception as e:
                failed += 1
                logger.error(
                    f"❌ Error deleting {self.label} version {self.describe_version(version)}: "
                    f"{describe_request_error(e)}"
                )
        return deleted, failed
