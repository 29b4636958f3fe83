"""
cazdo - Browse local git branches alongside their Azure DevOps work items
"""

from .__version__ import __version__
from .core.session import BranchSession
from .cli.main import main

__all__ = ["BranchSession", "main", "__version__"]
