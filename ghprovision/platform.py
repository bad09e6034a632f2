"""Cross-platform helpers for paths and external executables."""

import platform
import subprocess
from pathlib import Path
from typing import Optional, Union


IDENTITY_FILE_NAME = ".github"


def is_windows() -> bool:
    """Check if running on Windows."""
    return platform.system().lower() == "windows"


def normalize_path(path: Union[str, Path]) -> Path:
    """
    Normalize a path for the current platform.

    Args:
        path: Path to normalize

    Returns:
        Normalized Path object
    """
    if isinstance(path, str):
        path = Path(path)

    # Expand user home directory (~) first, then resolve to absolute path
    return path.expanduser().resolve()


def get_default_identity_file() -> Path:
    """Per-user identity file for the hosting service (~/.github)."""
    return Path.home() / IDENTITY_FILE_NAME


def get_git_executable() -> str:
    """
    Get the Git executable name for the current platform.

    Returns:
        Git executable name
    """
    return "git.exe" if is_windows() else "git"


def get_gpg_executable() -> str:
    """Get the GnuPG executable name for the current platform."""
    return "gpg.exe" if is_windows() else "gpg"


def validate_git_availability() -> tuple[bool, Optional[str]]:
    """
    Validate that Git is available on the current platform.

    Returns:
        Tuple of (is_available, error_message)
    """
    git_cmd = get_git_executable()

    try:
        result = subprocess.run(
            [git_cmd, "--version"],
            capture_output=True,
            text=True,
            timeout=10
        )

        if result.returncode == 0:
            return True, None
        else:
            return False, f"Git command failed: {result.stderr}"

    except FileNotFoundError:
        return False, f"Git executable '{git_cmd}' not found"
    except subprocess.TimeoutExpired:
        return False, "Git command timed out"
