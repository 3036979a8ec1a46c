"""
Container registry gateways.

This package provides one gateway per registry kind:
- GHCR (GitHub Packages API)
- GitLab Container Registry (project registry repositories API)
- Docker Hub (hub.docker.com v2 API)
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from release_cleanup.error_utils import actionable_error_for, describe_request_error
from release_cleanup.logging_utils import get_logger
from release_cleanup.models import RegistryImage, RegistryKind
from release_cleanup.registries.base import RegistryGateway
from release_cleanup.registries.dockerhub import DockerHubGateway, DockerHubSession
from release_cleanup.registries.ghcr import GhcrGateway
from release_cleanup.registries.gitlab_registry import GitLabRegistryGateway

__all__ = [
    "RegistryGateway",
    "GhcrGateway",
    "GitLabRegistryGateway",
    "DockerHubGateway",
    "DockerHubSession",
    "build_gateways",
    "fetch_all_images",
]

logger = get_logger(__name__)


def build_gateways(config_manager, credentials, kinds: Iterable[RegistryKind]) -> Dict[RegistryKind, RegistryGateway]:
    """Create gateways for the selected registry kinds that have credentials.

    Args:
        config_manager: ConfigManager providing API URLs, timeout and page size
        credentials: Credentials resolved for this run
        kinds: Registry kinds selected by the operator
    """
    common = {"timeout": config_manager.get_http_timeout(), "page_size": config_manager.get_page_size()}
    gateways: Dict[RegistryKind, RegistryGateway] = {}

    for kind in kinds:
        if kind is RegistryKind.GHCR:
            if credentials.ghcr_token and credentials.ghcr_owner:
                gateways[kind] = GhcrGateway(
                    credentials.ghcr_token, credentials.ghcr_owner, base_url=config_manager.get_github_api_url(), **common
                )
                continue
        elif kind is RegistryKind.GITLAB:
            if credentials.gitlab_token and credentials.gitlab_project:
                gateways[kind] = GitLabRegistryGateway(
                    credentials.gitlab_token,
                    credentials.gitlab_project,
                    base_url=config_manager.get_gitlab_api_url(),
                    **common,
                )
                continue
        elif kind is RegistryKind.DOCKER_HUB:
            if credentials.docker_hub_token and credentials.docker_hub_username:
                gateways[kind] = DockerHubGateway(
                    credentials.docker_hub_username,
                    credentials.docker_hub_token,
                    base_url=config_manager.get_dockerhub_api_url(),
                    **common,
                )
                continue
        logger.warning(f"⚠️  Missing credentials for {kind.label}, skipping it")

    return gateways


def _list_images_safely(gateway: RegistryGateway) -> List[RegistryImage]:
    try:
        images = gateway.list_images()
        logger.debug(f"{gateway.label}: found {len(images)} images")
        return images
    except Exception as e:
        logger.error(f"⚠️  Error fetching {gateway.label} images: {describe_request_error(e)}")
        guidance = actionable_error_for(gateway.label, gateway.base_url, e)
        if guidance is not None:
            logger.debug(guidance.format_message())
        return []


def fetch_all_images(
    gateways: Dict[RegistryKind, RegistryGateway], max_workers: Optional[int] = None
) -> Dict[RegistryKind, List[RegistryImage]]:
    """List images of every gateway in parallel.

    The listings are independent reads; a failing registry contributes an
    empty list and does not affect the others.
    """
    results: Dict[RegistryKind, List[RegistryImage]] = {kind: [] for kind in RegistryKind}
    if not gateways:
        return results

    with ThreadPoolExecutor(max_workers=max_workers or len(gateways)) as executor:
        futures = {kind: executor.submit(_list_images_safely, gateway) for kind, gateway in gateways.items()}
        for kind, future in futures.items():
            results[kind] = future.result()
    return results
