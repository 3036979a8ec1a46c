"""
Persistence of prompted credentials to a local .env file.

Values entered at the credential prompts are appended to .env so that the
next run does not ask again. Keys already present are never rewritten, and
.env is added to .gitignore so that tokens are not committed by accident.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from dotenv import dotenv_values

from release_cleanup.logging_utils import get_logger
from release_cleanup.models import PlatformNeeds

logger = get_logger(__name__)

ENV_HEADER = "# Release Cleanup Configuration\n# Auto-generated - DO NOT COMMIT\n\n"

# Prompt answer name -> environment variable
ANSWER_ENV_KEYS = [
    ("github_token", "GH_TOKEN"),
    ("github_owner", "GH_OWNER"),
    ("github_repo", "GH_REPO"),
    ("gitlab_token", "GITLAB_TOKEN"),
    ("gitlab_owner", "GL_OWNER"),
    ("gitlab_repo", "GL_REPO"),
    ("gitlab_project", "GL_PROJECT"),
    ("docker_hub_token", "DOCKERHUB_TOKEN"),
    ("docker_hub_username", "DOCKER_HUB_USERNAME"),
]


def build_env_entries(answers: Dict[str, str], needs: PlatformNeeds) -> List[tuple]:
    """Map prompt answers to (KEY, value) pairs in file order.

    GitHub credentials are mirrored into GHCR_* when GHCR is part of the run.
    """
    entries = []
    for answer_key, env_key in ANSWER_ENV_KEYS:
        value = answers.get(answer_key)
        if value:
            entries.append((env_key, value))

    if needs.ghcr:
        if answers.get("github_token"):
            entries.append(("GHCR_TOKEN", answers["github_token"]))
        if answers.get("github_owner"):
            entries.append(("GHCR_OWNER", answers["github_owner"]))
    return entries


def save_to_env(
    answers: Dict[str, str],
    needs: PlatformNeeds,
    env_path: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Append newly entered credentials to the .env file.

    Args:
        answers: Prompt answers keyed by answer name (see ANSWER_ENV_KEYS)
        needs: Platforms selected for this run
        env_path: Target file (default: .env in the working directory)

    Returns:
        The environment variable names that were written
    """
    path = Path(env_path) if env_path else Path.cwd() / ".env"
    existing = dotenv_values(path) if path.exists() else {}

    new_entries = [(key, value) for key, value in build_env_entries(answers, needs) if key not in existing]
    if not new_entries:
        return []

    is_new_file = not path.exists() or path.stat().st_size == 0
    header = ENV_HEADER if is_new_file else "\n"
    content = header + "\n".join(f"{key}={value}" for key, value in new_entries) + "\n"

    with open(path, "a") as f:
        f.write(content)
    logger.debug(f"Wrote {len(new_entries)} variable(s) to {path}")

    ensure_gitignore(path.parent / ".gitignore")
    return [key for key, _ in new_entries]


def ensure_gitignore(gitignore_path: Optional[Union[str, Path]] = None) -> None:
    """Ensure .env is listed in .gitignore"""
    path = Path(gitignore_path) if gitignore_path else Path.cwd() / ".gitignore"

    if path.exists():
        content = path.read_text()
        if ".env" not in content.splitlines():
            with open(path, "a") as f:
                f.write("\n# Environment variables\n.env\n")
    else:
        path.write_text("# Environment variables\n.env\n")

