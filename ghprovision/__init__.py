"""
GitHub repository provisioner - creates the remote repository for a freshly
scaffolded project and wires the local git working copy to track it.
"""

__version__ = "1.0.0"
__author__ = "ghprovision Team"
__description__ = "Create a GitHub repository on project scaffolding and track it locally"

from .config import Config, load_configuration
from .models import ScaffoldContext, Distribution, ProvisionOutcome
from .provisioner import RepositoryProvisioner

__all__ = [
    "Config",
    "load_configuration",
    "ScaffoldContext",
    "Distribution",
    "ProvisionOutcome",
    "RepositoryProvisioner",
]
