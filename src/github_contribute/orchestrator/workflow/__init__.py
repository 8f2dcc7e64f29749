"""Explicit workflow domain concepts.

This package holds the two interactive flows and the state machines that
describe them:
- fork bootstrap (one configured repository at a time)
- patch transfer (one Gerrit change into one pull request)
"""

__all__: list[str] = []
