"""MCP server exposing repository provisioning to scaffolding agents."""

import logging
import sys
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from . import __version__
from .chrome import NonInteractiveChrome
from .config import Config, load_configuration, validate_configuration
from .errors import ConfigurationError
from .models import Distribution, ScaffoldContext
from .platform import validate_git_availability
from .provisioner import RepositoryProvisioner


def setup_logging(config: Config) -> None:
    """Setup logging with structured operation prefixes."""
    class StructuredFormatter(logging.Formatter):
        def format(self, record):
            if hasattr(record, 'operation'):
                record.msg = f"[{record.operation}] {record.msg}"
            return super().format(record)

    # Logs go to stderr, stdout belongs to the stdio transport
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    loggers = [
        'ghprovision.init',
        'ghprovision.provisioner',
        'ghprovision.github_api',
        'ghprovision.local_git',
        'ghprovision.credentials',
        'ghprovision.error_handler'
    ]

    formatter = StructuredFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, config.log_level.upper()))

        if not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.propagate = False


def register_tools(server: FastMCP, server_config: Config) -> None:
    """Register MCP tools with the server instance."""

    @server.tool()
    def create_repository(
        mint_root: str,
        repo: Optional[str] = None,
        descr: Optional[str] = None,
        project_name: Optional[str] = None
    ) -> dict:
        """
        Create a GitHub repository for a freshly scaffolded project.

        Call this right after a new project directory has been generated. If
        the directory is already a git working copy, a remote pointing at the
        new repository is added and the current branch is set to track it.

        Args:
            mint_root: Path of the scaffolded project directory
            repo: Repository name; defaults to the configured template or the project name
            descr: Short description shown on GitHub
            project_name: Project name; defaults to the directory name of mint_root

        Returns:
            Dictionary with the repository name, SSH URL and local wiring details,
            or an error description
        """
        root = Path(mint_root).expanduser()
        distribution = Distribution(name=project_name or root.name)

        provisioner = RepositoryProvisioner(server_config, distribution, chrome=NonInteractiveChrome())
        outcome = provisioner.after_mint(ScaffoldContext(mint_root=root, repo=repo, descr=descr))
        return outcome.to_dict()

    init_logger = logging.getLogger('ghprovision.init')
    init_logger.info("MCP tools registered successfully")


def initialize_server() -> FastMCP:
    """Load configuration, set up logging and build the MCP server."""
    server_config = load_configuration()
    validation_issues = validate_configuration(server_config)

    setup_logging(server_config)
    init_logger = logging.getLogger('ghprovision.init')

    error_count = 0
    for issue in validation_issues:
        if issue.startswith("ERROR:"):
            error_count += 1
            init_logger.error(issue[7:])
        elif issue.startswith("WARNING:"):
            init_logger.warning(issue[9:])

    if error_count > 0:
        raise ConfigurationError(f"Server startup failed due to {error_count} configuration error(s)")

    git_available, git_error = validate_git_availability()
    if not git_available:
        init_logger.warning(f"Git not available, local remotes will not be configured: {git_error}")

    if server_config.prompt:
        init_logger.warning("Confirmation prompts are answered with 'yes' over MCP")

    server = FastMCP("GitHub Repository Provisioner", log_level=server_config.log_level.upper())
    register_tools(server, server_config)

    init_logger.info(f"ghprovision {__version__} initialized")
    return server


def main():
    """Entry point: run the MCP server over stdio."""
    try:
        server = initialize_server()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logging.getLogger('ghprovision.init').critical(f"Server initialization failed: {e}")
        sys.exit(1)

    try:
        server.run(transport="stdio")
    except KeyboardInterrupt:
        logging.getLogger('ghprovision.init').info("Server stopped by user (Ctrl+C)")


if __name__ == "__main__":
    main()
