#!/usr/bin/env python3
"""
Configuration Manager for Release Cleanup

This module handles loading and managing configuration from config.yaml,
environment variables and the local .env file, and collects any missing
platform credentials interactively.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from release_cleanup.env_utils import save_to_env
from release_cleanup.error_utils import ConfigValidationError
from release_cleanup.models import PlatformNeeds
from release_cleanup.prompts import Prompter, validate_required


@dataclass
class Credentials:
    """Resolved credentials and targets for every platform of a run"""

    github_token: str = ""
    github_owner: str = ""
    github_repo: str = ""
    gitlab_token: str = ""
    gitlab_owner: str = ""
    gitlab_repo: str = ""
    gitlab_project: str = ""
    ghcr_token: str = ""
    ghcr_owner: str = ""
    docker_hub_token: str = ""
    docker_hub_username: str = ""


class ConfigManager:
    """Manages configuration for the release cleanup tool"""

    def __init__(self, config_file: str = None, env_file: str = None, validate: bool = True):
        """Initialize ConfigManager

        Args:
            config_file: Path to configuration YAML file (defaults to config.yaml or CONFIG_FILE env var)
            env_file: Path to the .env file (defaults to config env_file or ENV_FILE env var)
            validate: If True, validate configuration on initialization
        """
        if config_file is None:
            config_file = os.environ.get("CONFIG_FILE", "config.yaml")
        self.config_file = config_file
        self.config = self._load_config()

        self.env_file = env_file or os.environ.get("ENV_FILE") or self.config["env_file"]
        # Real environment variables always win over .env entries
        load_dotenv(self.env_file, override=False)

        if validate:
            self.validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file with defaults"""
        default_config = {
            "api": {
                "github": "https://api.github.com",
                "gitlab": "https://gitlab.com/api/v4",
                "dockerhub": "https://hub.docker.com/v2",
            },
            "http": {"timeout": 30, "page_size": 100},
            "listing": {"max_workers": 3},
            "env_file": ".env",
        }

        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r") as f:
                    user_config = yaml.safe_load(f) or {}
                return self._merge_config(default_config, user_config)
            else:
                logging.debug(f"Config file {self.config_file} not found, using defaults")
                return default_config
        except Exception as e:
            logging.error(f"Error loading config file: {e}")
            return default_config

    def _merge_config(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge user config with defaults"""
        result = default.copy()
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    # API configuration
    def get_github_api_url(self) -> str:
        return os.environ.get("GITHUB_API_URL") or self.config["api"]["github"]

    def get_gitlab_api_url(self) -> str:
        return os.environ.get("GITLAB_API_URL") or self.config["api"]["gitlab"]

    def get_dockerhub_api_url(self) -> str:
        return os.environ.get("DOCKERHUB_API_URL") or self.config["api"]["dockerhub"]

    def get_http_timeout(self) -> float:
        """Get HTTP timeout in seconds from config, with type coercion"""
        timeout = self.config["http"]["timeout"]
        try:
            return float(timeout)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"http.timeout must be a number, got: {timeout} (type: {type(timeout).__name__})"
            )

    def get_page_size(self) -> int:
        """Get page size for list endpoints from config, with type coercion"""
        page_size = self.config["http"]["page_size"]
        try:
            return int(page_size)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"http.page_size must be an integer, got: {page_size} (type: {type(page_size).__name__})"
            )

    def get_max_workers(self) -> int:
        """Get max parallel registry listings from config, with type coercion"""
        workers = self.config["listing"]["max_workers"]
        try:
            return int(workers)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"listing.max_workers must be an integer, got: {workers} (type: {type(workers).__name__})"
            )

    # Credentials from environment (.env already loaded)
    def get_env_credentials(self) -> Credentials:
        """Read credentials with the cross-platform fallbacks.

        GHCR reuses the GitHub token and owner unless GHCR_* is set; owners and
        repositories fall back across GitHub and GitLab.
        """
        env = os.environ.get
        return Credentials(
            github_token=env("GH_TOKEN", ""),
            github_owner=env("GH_OWNER") or env("GL_OWNER", ""),
            github_repo=env("GH_REPO") or env("GL_REPO", ""),
            gitlab_token=env("GITLAB_TOKEN", ""),
            gitlab_owner=env("GL_OWNER") or env("GH_OWNER", ""),
            gitlab_repo=env("GL_REPO") or env("GH_REPO", ""),
            gitlab_project=env("GL_PROJECT", ""),
            ghcr_token=env("GHCR_TOKEN") or env("GH_TOKEN", ""),
            ghcr_owner=env("GHCR_OWNER") or env("GH_OWNER", ""),
            docker_hub_token=env("DOCKERHUB_TOKEN", ""),
            docker_hub_username=env("DOCKER_HUB_USERNAME", ""),
        )

    def collect_credentials(self, needs: PlatformNeeds, prompter: Optional[Prompter] = None) -> Credentials:
        """Return credentials for the selected platforms, prompting for missing ones.

        New answers are saved to the .env file so they are not asked again.
        """
        prompter = prompter or Prompter()
        creds = self.get_env_credentials()
        answers: Dict[str, str] = {}

        def ask(key: str, message: str, field_name: str, secret: bool = False) -> None:
            validator = lambda value: validate_required(value, field_name)
            if secret:
                answers[key] = prompter.secret(message, validate=validator)
            else:
                answers[key] = prompter.text(message, validate=validator)

        if needs.github or needs.ghcr:
            # GHCR_* already falls back to GH_*, so only ask when the selected platform lacks a value
            if (needs.github and not creds.github_token) or (needs.ghcr and not creds.ghcr_token):
                ask("github_token", "🔑 Enter GitHub Personal Access Token:", "Token", secret=True)
            if (needs.github and not creds.github_owner) or (needs.ghcr and not creds.ghcr_owner):
                ask("github_owner", "👤 Enter GitHub username/organization:", "Username")
            if needs.github and not creds.github_repo:
                ask("github_repo", "📦 Enter GitHub repository name:", "Repository")

        if needs.gitlab or needs.gitlab_registry:
            if not creds.gitlab_token:
                ask("gitlab_token", "🔑 Enter GitLab Personal Access Token:", "Token", secret=True)
            if needs.gitlab and not creds.gitlab_owner:
                ask("gitlab_owner", "👤 Enter GitLab username/organization:", "Username")
            if needs.gitlab and not creds.gitlab_repo:
                ask("gitlab_repo", "📦 Enter GitLab repository name:", "Repository")
            if needs.gitlab_registry and not creds.gitlab_project:
                ask("gitlab_project", "📦 Enter GitLab project ID or path (e.g., username/project):", "Project ID")

        if needs.docker_hub:
            if not creds.docker_hub_token:
                ask("docker_hub_token", "🔑 Enter Docker Hub password or access token:", "Token", secret=True)
            if not creds.docker_hub_username:
                ask("docker_hub_username", "👤 Enter Docker Hub username:", "Username")

        creds = Credentials(
            github_token=creds.github_token or answers.get("github_token", ""),
            github_owner=creds.github_owner or answers.get("github_owner", ""),
            github_repo=creds.github_repo or answers.get("github_repo", ""),
            gitlab_token=creds.gitlab_token or answers.get("gitlab_token", ""),
            gitlab_owner=creds.gitlab_owner or answers.get("gitlab_owner", ""),
            gitlab_repo=creds.gitlab_repo or answers.get("gitlab_repo", ""),
            gitlab_project=creds.gitlab_project or answers.get("gitlab_project", ""),
            ghcr_token=creds.ghcr_token or answers.get("github_token", ""),
            ghcr_owner=creds.ghcr_owner or answers.get("github_owner", ""),
            docker_hub_token=creds.docker_hub_token or answers.get("docker_hub_token", ""),
            docker_hub_username=creds.docker_hub_username or answers.get("docker_hub_username", ""),
        )

        if answers:
            logging.info("\n💾 Saving credentials to .env file...")
            save_to_env(answers, needs, self.env_file)
            logging.info("✅ Credentials saved! You won't need to enter them again.\n")

        return creds

    def validate_config(self) -> None:
        """Validate configuration values

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        errors = []
        warnings = []

        for name, url in (
            ("api.github", self.get_github_api_url()),
            ("api.gitlab", self.get_gitlab_api_url()),
            ("api.dockerhub", self.get_dockerhub_api_url()),
        ):
            if not url or not url.strip():
                errors.append(f"{name} is required and cannot be empty")
            elif not self._is_valid_api_url(url):
                errors.append(f"{name} '{url}' is not a valid http(s) URL")

        timeout = self.get_http_timeout()
        if timeout <= 0:
            errors.append(f"http.timeout must be a positive number (seconds), got: {timeout}")
        elif timeout > 600:
            warnings.append(f"http.timeout is very high ({timeout}s), a stalled registry will block the run")

        page_size = self.get_page_size()
        if page_size < 1 or page_size > 100:
            errors.append(f"http.page_size must be between 1 and 100, got: {page_size}")

        max_workers = self.get_max_workers()
        if max_workers < 1:
            errors.append(f"listing.max_workers must be a positive integer, got: {max_workers}")

        # Log warnings
        for warning in warnings:
            logging.warning(f"Configuration warning: {warning}")

        # Raise error if there are validation errors
        if errors:
            error_msg = "Configuration validation failed:\n  " + "\n  ".join(errors)
            logging.error(error_msg)
            raise ConfigValidationError(error_msg)

    def _is_valid_api_url(self, url: str) -> bool:
        """Validate API base URL format"""
        pattern = r"^https?://[a-zA-Z0-9]([a-zA-Z0-9\-\.]*[a-zA-Z0-9])?(:[0-9]{1,5})?(/[^\s]*)?$"
        return bool(re.match(pattern, url))

    def print_config(self):
        """Print current configuration"""
        creds = self.get_env_credentials()
        print("Current Configuration:")
        print(f"  Config File: {self.config_file}")
        print(f"  Env File: {self.env_file}")
        print(f"  GitHub API: {self.get_github_api_url()}")
        print(f"  GitLab API: {self.get_gitlab_api_url()}")
        print(f"  Docker Hub API: {self.get_dockerhub_api_url()}")
        print(f"  HTTP Timeout: {self.get_http_timeout()}")
        print(f"  Page Size: {self.get_page_size()}")
        print(f"  GitHub: {creds.github_owner or 'Not set'}/{creds.github_repo or 'Not set'}")
        print(f"  GitLab: {creds.gitlab_owner or 'Not set'}/{creds.gitlab_repo or 'Not set'}")
        print(f"  GitLab Registry Project: {creds.gitlab_project or 'Not set'}")
        print(f"  GHCR Owner: {creds.ghcr_owner or 'Not set'}")
        print(f"  Docker Hub Username: {creds.docker_hub_username or 'Not set'}")

        for label, secret in (
            ("GitHub Token", creds.github_token),
            ("GitLab Token", creds.gitlab_token),
            ("GHCR Token", creds.ghcr_token),
            ("Docker Hub Token", creds.docker_hub_token),
        ):
            print(f"  {label}: {'*' * 8 if secret else 'Not set'}")
