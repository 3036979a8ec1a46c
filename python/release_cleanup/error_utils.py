"""
Error message utilities for providing actionable guidance to users.

This module provides functions to create helpful error messages with
suggested fixes, and to reduce HTTP client failures to one readable line.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

import requests


class ErrorCategory(Enum):
    """Categories of errors for better error handling"""
    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    PERMISSION = "permission"
    RESOURCE = "resource"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""


class RegistryError(Exception):
    """Raised by a registry gateway when a registry call cannot be completed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ActionableError(Exception):
    """Exception with actionable guidance for users"""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN,
                 suggestions: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize actionable error

        Args:
            message: Primary error message
            category: Error category for classification
            suggestions: List of suggested fixes
            details: Additional context information
        """
        self.message = message
        self.category = category
        self.suggestions = suggestions or []
        self.details = details or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message with suggestions"""
        lines = [f"❌ {self.message}"]

        if self.suggestions:
            lines.append("\n💡 Suggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        if self.details:
            lines.append("\n📋 Additional details:")
            for key, value in self.details.items():
                lines.append(f"   {key}: {value}")

        return "\n".join(lines)


def describe_request_error(error: Exception) -> str:
    """Reduce an HTTP client failure to a one-line reason."""
    if isinstance(error, requests.exceptions.HTTPError) and error.response is not None:
        response = error.response
        reason = response.reason or "HTTP error"
        message = ""
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("message") or body.get("detail") or body.get("error") or ""
        except ValueError:
            pass
        text = f"{response.status_code} {reason}"
        return f"{text}: {message}" if message else text
    if isinstance(error, requests.exceptions.Timeout):
        return f"request timed out ({error})"
    if isinstance(error, requests.exceptions.ConnectionError):
        return f"connection failed ({error})"
    return str(error) or type(error).__name__


def create_registry_connection_error(registry_name: str, base_url: str, error: Exception) -> ActionableError:
    """Create actionable error for registry connection failures"""
    error_str = str(error).lower()

    suggestions = [
        f"Verify the API base URL is correct: {base_url}",
        "Check network connectivity to the registry",
        "Check whether a proxy or firewall blocks the request",
    ]

    if "timeout" in error_str or "timed out" in error_str:
        suggestions.insert(1, "Increase http.timeout in config.yaml")

    if "name resolution" in error_str or "dns" in error_str:
        suggestions.insert(1, "Verify DNS resolution for the API hostname")

    return ActionableError(
        message=f"Failed to connect to {registry_name} at {base_url}",
        category=ErrorCategory.CONNECTION,
        suggestions=suggestions,
        details={
            "base_url": base_url,
            "error_type": type(error).__name__,
            "error_message": str(error)
        }
    )


def create_registry_auth_error(registry_name: str, error: Exception) -> ActionableError:
    """Create actionable error for registry authentication failures"""
    suggestions = [
        "Verify the token has not expired or been revoked",
        "Remove the stale value from .env to be prompted again",
    ]

    if registry_name in ("GitHub", "GHCR"):
        suggestions.insert(0, "Check GH_TOKEN / GHCR_TOKEN has the read:packages and delete:packages scopes")
    elif registry_name == "GitLab":
        suggestions.insert(0, "Check GITLAB_TOKEN has the api scope")
    elif registry_name == "Docker Hub":
        suggestions.insert(0, "Check DOCKER_HUB_USERNAME and DOCKERHUB_TOKEN (password or access token)")
        suggestions.insert(1, "Access tokens need the Read, Write, Delete permission to remove tags")

    return ActionableError(
        message=f"Failed to authenticate with {registry_name}",
        category=ErrorCategory.AUTHENTICATION,
        suggestions=suggestions,
        details={
            "registry": registry_name,
            "error_type": type(error).__name__,
            "error_message": describe_request_error(error)
        }
    )


def create_rate_limit_error(registry_name: str, retry_after: Optional[float] = None) -> ActionableError:
    """Create actionable error for rate limiting"""
    suggestions = [
        "Wait before running the cleanup again",
        "Select fewer image groups per run",
    ]

    if retry_after:
        suggestions.insert(0, f"Wait {retry_after:.1f} seconds before retrying")

    return ActionableError(
        message=f"Rate limit exceeded for {registry_name}",
        category=ErrorCategory.NETWORK,
        suggestions=suggestions,
        details={
            "registry": registry_name,
            "retry_after": retry_after
        }
    )


def actionable_error_for(registry_name: str, base_url: str, error: Exception) -> Optional[ActionableError]:
    """Map a requests failure to an ActionableError when guidance exists for it."""
    if isinstance(error, requests.exceptions.HTTPError) and error.response is not None:
        status = error.response.status_code
        if status in (401, 403):
            return create_registry_auth_error(registry_name, error)
        if status == 429:
            retry_after = error.response.headers.get("Retry-After")
            try:
                seconds = float(retry_after) if retry_after else None
            except ValueError:
                seconds = None
            return create_rate_limit_error(registry_name, seconds)
        return None
    if isinstance(error, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return create_registry_connection_error(registry_name, base_url, error)
    return None
