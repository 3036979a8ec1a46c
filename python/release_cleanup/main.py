import argparse
import logging
import sys

from release_cleanup.cleanup import run_cleanup
from release_cleanup.config_manager import ConfigManager
from release_cleanup.logging_utils import DEFAULT_FORMAT, get_logger, log_exception, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactively delete releases, tags and container images on GitHub, GitLab and Docker Hub",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  The tool uses config.yaml for API endpoints and HTTP settings. Credentials
  come from environment variables or the .env file, and are prompted for
  (and saved to .env) when missing:
  - GH_TOKEN, GH_OWNER, GH_REPO: GitHub releases/tags
  - GHCR_TOKEN, GHCR_OWNER: GitHub Container Registry (default to GH_*)
  - GITLAB_TOKEN, GL_OWNER, GL_REPO: GitLab releases/tags
  - GL_PROJECT: GitLab Container Registry project ID or path
  - DOCKERHUB_TOKEN, DOCKER_HUB_USERNAME: Docker Hub

Examples:
  # Start an interactive cleanup
  release-cleanup

  # Use another config file and .env file
  release-cleanup --config-file ci/config.yaml --env-file ci/.env
        """
    )

    parser.add_argument(
        '--config',
        action='store_true',
        help="Show current configuration and exit"
    )

    parser.add_argument(
        '--config-file',
        help="Path to the YAML configuration file (default: CONFIG_FILE or config.yaml)"
    )

    parser.add_argument(
        '--env-file',
        help="Path to the .env file holding saved credentials (default: .env)"
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help="Enable debug logging with timestamps"
    )

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        setup_logging(level=logging.DEBUG, fmt=DEFAULT_FORMAT, force=True)
    else:
        setup_logging()
    logger = get_logger(__name__)

    try:
        config = ConfigManager(config_file=args.config_file, env_file=args.env_file)

        # Show configuration if requested
        if args.config:
            config.print_config()
            return 0

        run_cleanup(config)
        return 0
    except KeyboardInterrupt:
        logger.info("\n👋 Interrupted, nothing else will be deleted")
        return 130
    except Exception as e:
        log_exception(logger, f"\n❌ Error: {e}", e)
        return 1


if __name__ == '__main__':
    sys.exit(main())
