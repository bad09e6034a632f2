"""Repository-name resolution and name-template expansion."""

import logging
from typing import Optional

from jinja2 import StrictUndefined, TemplateSyntaxError, UndefinedError
from jinja2.sandbox import SandboxedEnvironment

from .errors import ConfigurationError
from .models import Distribution

logger = logging.getLogger('ghprovision.naming')

_env = SandboxedEnvironment(undefined=StrictUndefined)


def check_template(template: str) -> Optional[str]:
    """Return a syntax error message for ``template``, or None if it parses."""
    try:
        _env.parse(template)
    except TemplateSyntaxError as e:
        return f"line {e.lineno}: {e.message}"
    return None


def fill_in_string(template: str, dist: Distribution) -> str:
    """
    Expand a repository-name template against the project metadata.

    The project is available as ``dist``, e.g. ``{{ dist.name | lower }}``.
    A string without template markup expands to itself.

    Raises:
        ConfigurationError: If the template is invalid or references an
            unknown variable, or expands to an empty name
    """
    try:
        rendered = _env.from_string(template).render(dist=dist).strip()
    except TemplateSyntaxError as e:
        raise ConfigurationError(f"Invalid repo template {template!r}: {e.message}")
    except UndefinedError as e:
        raise ConfigurationError(f"Repo template {template!r} uses an undefined value: {e.message}")

    if not rendered:
        raise ConfigurationError(f"Repo template {template!r} expanded to an empty name")
    return rendered


def resolve_repo_name(explicit: Optional[str], template: Optional[str], dist: Distribution) -> str:
    """Pick the repository name: caller-supplied, then expanded template, then project name."""
    if explicit:
        logger.debug(f"Using repository name supplied by the caller: {explicit}")
        return explicit
    if template:
        name = fill_in_string(template, dist)
        logger.debug(f"Expanded repository name template to: {name}")
        return name
    return dist.name
