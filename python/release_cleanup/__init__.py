"""Interactive cleanup of releases, tags and container images across GitHub, GitLab and Docker Hub."""

__version__ = "1.0.0"
