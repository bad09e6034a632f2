"""
User-interaction surface used for confirmation and password prompts.

The MCP server always uses ``NonInteractiveChrome``, which answers the
confirmation with its default (yes). ``TerminalChrome`` is for host
integrations that call ``RepositoryProvisioner`` from an interactive
scaffolding command; they pass it as ``chrome``.
"""

import getpass
import logging
import sys
from typing import Optional


class Chrome:
    """Interface of the prompts the provisioner needs from its host."""

    def prompt_yn(self, prompt: str, default: bool = True) -> bool:
        raise NotImplementedError

    def prompt_str(self, prompt: str, secret: bool = False) -> Optional[str]:
        raise NotImplementedError


class TerminalChrome(Chrome):
    """Prompts on the controlling terminal."""

    def __init__(self, input_func=input, getpass_func=getpass.getpass, stream=None):
        self._input = input_func
        self._getpass = getpass_func
        self._stream = stream or sys.stderr

    def prompt_yn(self, prompt: str, default: bool = True) -> bool:
        """Ask a yes/no question; an empty answer takes the default."""
        suffix = " [Y/n] " if default else " [y/N] "
        while True:
            answer = self._input(prompt + suffix).strip().lower()
            if not answer:
                return default
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            print("Please answer 'y' or 'n'.", file=self._stream)

    def prompt_str(self, prompt: str, secret: bool = False) -> Optional[str]:
        """Read a line of input, without echo when ``secret`` is set."""
        reader = self._getpass if secret else self._input
        value = reader(prompt + ": ")
        return value or None


class NonInteractiveChrome(Chrome):
    """Answers every question with its default; used when stdio is not a terminal."""

    def __init__(self):
        self.logger = logging.getLogger('ghprovision.chrome')

    def prompt_yn(self, prompt: str, default: bool = True) -> bool:
        self.logger.info(f"{prompt} (non-interactive, assuming {'yes' if default else 'no'})")
        return default

    def prompt_str(self, prompt: str, secret: bool = False) -> Optional[str]:
        self.logger.debug(f"Cannot prompt for '{prompt}' in non-interactive mode")
        return None
