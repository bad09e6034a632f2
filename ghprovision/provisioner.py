"""
Post-scaffolding action: create the GitHub repository and track it locally.

The flow is linear: confirm, resolve the name, resolve credentials, send the
creation request, then wire the local git working copy. Local git is only
touched after GitHub confirmed the repository exists.
"""

import logging
from typing import List, Mapping, Any, Optional, Union

import requests
from git import GitError

from .chrome import Chrome, NonInteractiveChrome
from .config import Config
from .credentials import Resolver, default_resolvers, resolve_credentials
from .errors import ConfigurationError, RemoteAPIError, TransportError, error_handler
from .github_api import create_repository
from .local_git import wire_local_repository
from .models import Distribution, ProvisionOutcome, ProvisionRequest, ScaffoldContext
from .naming import resolve_repo_name


class RepositoryProvisioner:
    """Creates a GitHub repository for a newly minted project."""

    def __init__(
        self,
        config: Config,
        distribution: Distribution,
        chrome: Optional[Chrome] = None,
        resolvers: Optional[List[Resolver]] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize RepositoryProvisioner.

        Args:
            config: Provisioner options
            distribution: Metadata of the project being scaffolded
            chrome: Prompt surface; defaults to non-interactive
            resolvers: Credential resolvers in priority order
            session: HTTP session used for the API call
        """
        self.config = config
        self.distribution = distribution
        self.chrome = chrome or NonInteractiveChrome()
        self.resolvers = resolvers if resolvers is not None else default_resolvers(config.identity_path)
        self.session = session
        self.logger = logging.getLogger('ghprovision.provisioner')

    def confirm(self) -> bool:
        """Ask whether the repository should be created."""
        prompt = f"Shall I create a GitHub repository for {self.distribution.name}?"
        return self.chrome.prompt_yn(prompt, default=True)

    def build_request(self, repo_name: str, description: Optional[str]) -> ProvisionRequest:
        """Assemble the creation parameters from the options and the caller's description."""
        request = ProvisionRequest(
            repository_name=repo_name,
            is_public=self.config.public,
            description=description or None,
            issues_enabled=self.config.has_issues,
            wiki_enabled=self.config.has_wiki,
            downloads_enabled=self.config.has_downloads,
        )
        self.logger.debug("Issues enabled" if request.issues_enabled else "Issues disabled")
        self.logger.debug("Wiki enabled" if request.wiki_enabled else "Wiki disabled")
        self.logger.debug("Downloads enabled" if request.downloads_enabled else "Downloads disabled")
        return request

    def after_mint(self, context: Union[ScaffoldContext, Mapping[str, Any]]) -> ProvisionOutcome:
        """
        Run the provisioning flow for one scaffolded project.

        Args:
            context: ScaffoldContext or the host's ``{mint_root, repo, descr}`` dict

        Returns:
            ProvisionOutcome; failures are reported in it rather than raised
        """
        if not isinstance(context, ScaffoldContext):
            context = ScaffoldContext.from_mapping(context)

        if self.config.prompt and not self.confirm():
            self.logger.info("Repository creation declined")
            return ProvisionOutcome(
                success=True,
                message="Repository creation declined by user",
                operation="declined"
            )

        try:
            repo_name = resolve_repo_name(context.repo, self.config.repo, self.distribution)
        except ConfigurationError as e:
            self.logger.error(str(e))
            return ProvisionOutcome(
                success=False,
                message=str(e),
                operation="create_repository",
                error_code=e.error_code
            )

        credentials = resolve_credentials(self.resolvers, self.chrome)

        self.logger.info(f"Creating new GitHub repository '{repo_name}'")
        request = self.build_request(repo_name, context.descr)

        error_context = {'repository': repo_name, 'url': self.config.repos_endpoint}
        try:
            result = create_repository(request, credentials, self.config, session=self.session)
        except RemoteAPIError as e:
            error = error_handler.handle_remote_api_error(e, error_context)
            return ProvisionOutcome(
                success=False,
                message=e.message,
                operation="create_repository",
                repository_name=repo_name,
                error_code=error.error_code,
                error=error
            )
        except TransportError as e:
            error = error_handler.handle_transport_error(e, error_context)
            return ProvisionOutcome(
                success=False,
                message=e.message,
                operation="create_repository",
                repository_name=repo_name,
                error_code=error.error_code,
                error=error
            )

        self.logger.info(f"Created GitHub repository '{result.full_name or repo_name}'")

        try:
            wiring = wire_local_repository(context.mint_root, result.ssh_clone_url, self.config.remote)
        except (GitError, OSError) as e:
            error = error_handler.handle_local_git_error(
                e, {'repository_path': str(context.mint_root), 'repository': repo_name}
            )
            return ProvisionOutcome(
                success=False,
                message=error.message,
                operation="wire_local_repository",
                repository_name=repo_name,
                ssh_url=result.ssh_clone_url,
                error_code=error.error_code,
                error=error
            )

        return ProvisionOutcome(
            success=True,
            message=f"Created GitHub repository '{repo_name}'",
            operation="create_repository",
            repository_name=repo_name,
            ssh_url=result.ssh_clone_url,
            local_wiring=wiring
        )
