"""Local git state checks and the remote/tracking setup for a freshly created repository."""

import configparser
import logging
from pathlib import Path
from typing import Optional

from git import Repo, GitCommandError

from .models import LocalWiringResult

logger = logging.getLogger('ghprovision.local_git')


def has_local_repository(root: Path) -> bool:
    """Check whether the scaffold root already holds a git working copy."""
    return (root / ".git").exists()


def remote_exists(repo: Repo, remote_name: str) -> bool:
    """Check for a configured remote or remote-tracking refs with this name."""
    if (Path(repo.git_dir) / "refs" / "remotes" / remote_name).is_dir():
        return True
    return any(remote.name == remote_name for remote in repo.remotes)


def get_current_branch(repo: Repo) -> Optional[str]:
    """Symbolic name of the checked-out branch, None when HEAD is detached or unreadable."""
    try:
        return repo.active_branch.name
    except (TypeError, ValueError, GitCommandError) as e:
        logger.debug(f"Could not determine current branch: {e}")
        return None


def _branch_section(branch: str) -> str:
    return f'branch "{branch}"'


def tracking_configured(repo: Repo, branch: str) -> bool:
    """
    Check whether ``branch.<name>.merge`` or ``branch.<name>.remote`` is set.

    A configuration that cannot be read counts as not configured.
    """
    section = _branch_section(branch)
    try:
        reader = repo.config_reader()
        return reader.has_option(section, "merge") or reader.has_option(section, "remote")
    except (configparser.Error, OSError) as e:
        logger.debug(f"Could not read tracking configuration for '{branch}': {e}")
        return False


def configure_tracking(repo: Repo, branch: str, remote_name: str) -> None:
    """Point ``branch`` at ``refs/heads/<branch>`` on ``remote_name``."""
    section = _branch_section(branch)
    with repo.config_writer() as writer:
        writer.set_value(section, "merge", f"refs/heads/{branch}")
        writer.set_value(section, "remote", remote_name)


def wire_local_repository(root: Path, clone_url: str, remote_name: str) -> LocalWiringResult:
    """
    Add ``remote_name`` pointing at ``clone_url`` and make the current branch track it.

    Nothing is changed when ``root`` has no git repository or already has the
    remote. Existing tracking configuration for the branch is left alone.

    Args:
        root: Scaffold root directory
        clone_url: SSH clone URL of the new GitHub repository
        remote_name: Name of the remote to add

    Returns:
        LocalWiringResult describing what was done

    Raises:
        git.GitError: If the repository cannot be opened or a write fails
    """
    result = LocalWiringResult(remote_name=remote_name)

    if not has_local_repository(root):
        result.skipped_reason = "no local git repository"
        logger.debug(f"No git repository at {root}, not adding remote")
        return result

    repo = Repo(root)
    try:
        if remote_exists(repo, remote_name):
            result.skipped_reason = f"remote '{remote_name}' already exists"
            logger.info(f"Remote '{remote_name}' already exists, leaving it untouched")
            return result

        logger.info(f"Setting GitHub remote '{remote_name}'")
        repo.create_remote(remote_name, clone_url)
        result.remote_added = True

        branch = get_current_branch(repo)
        result.branch = branch
        if not branch:
            return result

        if tracking_configured(repo, branch):
            logger.debug(f"Branch '{branch}' already tracks a remote")
            return result

        logger.info(f"Setting up remote tracking for branch '{branch}'.")
        configure_tracking(repo, branch, remote_name)
        result.tracking_configured = True
        return result
    finally:
        repo.close()
