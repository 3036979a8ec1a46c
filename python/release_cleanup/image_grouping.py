#!/usr/bin/env python3
"""
Cross-registry image grouping.

Registries name the same image differently (ghcr.io/user/app, group/project/app,
user/app). Grouping keys every image by the last segment of its path so that
one logical image can be cleaned up across all registries at once.
"""

from typing import Dict, List, Mapping, Sequence, Union

from release_cleanup.models import ImageGroup, RegistryImage, RegistryKind


def extract_base_name(full_name: str) -> str:
    """Extract the base image name from a registry-qualified path.

    Examples:
        ghcr.io/user/gitpod-bun -> gitpod-bun
        registry.gitlab.com/user/project/gitpod-bun -> gitpod-bun
        devcontainers/bun-node -> bun-node
        bun-node -> bun-node

    An empty last segment (empty input or a trailing slash) returns the input unchanged.
    """
    last = full_name.split("/")[-1]
    return last or full_name


def group_images_by_name(
    images_by_registry: Mapping[Union[RegistryKind, str], Sequence[RegistryImage]],
) -> List[ImageGroup]:
    """Group images by base name across all registries.

    Args:
        images_by_registry: Images per registry kind. Keys may be RegistryKind
            members or their values ("ghcr", "gitlab", "dockerHub"); missing
            registries count as empty.

    Returns:
        One ImageGroup per base name, sorted by base name. Within a registry
        kind the last image with a given base name wins, while every image
        contributes its tag count to total_versions.
    """
    normalized: Dict[RegistryKind, Sequence[RegistryImage]] = {
        RegistryKind.coerce(key): images for key, images in images_by_registry.items()
    }

    groups: Dict[str, ImageGroup] = {}
    for kind in RegistryKind:
        for image in normalized.get(kind) or []:
            base_name = extract_base_name(image.name)
            group = groups.get(base_name)
            if group is None:
                group = ImageGroup(base_name=base_name)
                groups[base_name] = group
            group.registries[kind] = image
            group.total_versions += len(image.tags or [])

    return sorted(groups.values(), key=lambda g: g.base_name)
