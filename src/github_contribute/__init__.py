"""GitHub contribution helper.

Prepares local working copies so that `origin` points at the contributor's
fork and `upstream` at the canonical repository, and transfers Gerrit changes
into GitHub pull requests.
"""

__version__ = "0.1.0"

from github_contribute.orchestrator.config import ContributeSettings

__all__ = ["__version__", "ContributeSettings"]
