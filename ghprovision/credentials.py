"""
Credential resolution for the hosting service.

Credentials are looked up by an ordered list of resolvers. Each resolver is a
plain callable returning ``Credentials`` or None; the first complete
login/password pair wins. Without one, the first login found is used and the
user is asked for its password.
"""

import logging
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional

from git import Git, GitCommandError, GitCommandNotFound

from .chrome import Chrome
from .models import Credentials
from .platform import get_gpg_executable

logger = logging.getLogger('ghprovision.credentials')

Resolver = Callable[[], Optional[Credentials]]

GIT_CONFIG_USER_KEY = "github.user"
GIT_CONFIG_PASSWORD_KEY = "github.password"

PGP_ARMOR_HEADER = "-----BEGIN PGP MESSAGE-----"


def read_global_git_config(key: str) -> Optional[str]:
    """Read a key from the global git configuration, None when unset."""
    try:
        value = Git().config("--global", "--get", key)
    except GitCommandNotFound:
        logger.debug("Git executable not found, skipping global git config")
        return None
    except GitCommandError:
        # git config exits 1 for a missing key
        return None
    return value.strip() or None


def git_config_resolver(reader: Callable[[str], Optional[str]] = read_global_git_config) -> Resolver:
    """Resolver for ``github.user`` / ``github.password`` in the global git config."""

    def resolve() -> Optional[Credentials]:
        login = reader(GIT_CONFIG_USER_KEY)
        if not login:
            return None
        logger.debug(f"Found GitHub login '{login}' in global git config")
        return Credentials(login=login, secret=reader(GIT_CONFIG_PASSWORD_KEY))

    return resolve


def parse_identity(text: str) -> Dict[str, str]:
    """Parse ``key value`` lines of an identity file, skipping blanks and comments."""
    identity = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition(" ")
        identity[key.strip().lower()] = value.strip()
    return identity


def read_identity_file(path: Path) -> Optional[str]:
    """Return the identity file's plaintext, decrypting GPG-armored content."""
    if not path.is_file():
        logger.debug(f"No identity file at {path}")
        return None

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read identity file {path}: {e}")
        return None

    if not content.lstrip().startswith(PGP_ARMOR_HEADER):
        return content

    logger.debug(f"Decrypting identity file {path}")
    try:
        result = subprocess.run(
            [get_gpg_executable(), "--quiet", "--decrypt", str(path)],
            capture_output=True,
            text=True,
            timeout=120
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Could not decrypt identity file {path}: {e}")
        return None

    if result.returncode != 0:
        logger.warning(f"Could not decrypt identity file {path}: {result.stderr.strip()}")
        return None
    return result.stdout


def identity_file_resolver(path: Path) -> Resolver:
    """Resolver for ``login`` / ``password`` lines in the identity file."""

    def resolve() -> Optional[Credentials]:
        text = read_identity_file(path)
        if text is None:
            return None
        identity = parse_identity(text)
        login = identity.get("login")
        if not login:
            logger.debug(f"Identity file {path} has no login")
            return None
        logger.debug(f"Found GitHub login '{login}' in {path}")
        return Credentials(login=login, secret=identity.get("password") or None)

    return resolve


def default_resolvers(identity_path: Path) -> List[Resolver]:
    """Global git config first, then the identity file."""
    return [git_config_resolver(), identity_file_resolver(identity_path)]


def resolve_credentials(resolvers: List[Resolver], chrome: Optional[Chrome] = None) -> Optional[Credentials]:
    """
    Run the resolvers in order and return the first complete login/secret pair.

    When no source has both, the first login found is used and ``chrome`` is
    asked for its password. Returns None when no resolver produced a login;
    the request is then sent without authentication.
    """
    login_only = None
    for resolver in resolvers:
        credentials = resolver()
        if credentials is None:
            continue
        if credentials.secret:
            return credentials
        if login_only is None:
            login_only = credentials

    if login_only is None:
        logger.info("No GitHub credentials found, sending the request unauthenticated")
        return None

    if chrome is not None:
        secret = chrome.prompt_str(f"GitHub password for '{login_only.login}'", secret=True)
        if secret:
            return Credentials(login=login_only.login, secret=secret)
    return login_only
