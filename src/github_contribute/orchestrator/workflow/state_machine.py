from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)


class ForkSetupState(str, Enum):
    NO_FORK_CONFIGURED = "no_fork_configured"
    CHECKING_EXISTING_FORK = "checking_existing_fork"
    FORK_FOUND = "fork_found"
    FORK_MISSING_RECORD = "fork_missing_record"
    RECORD_EXISTING_FORK = "record_existing_fork"
    CREATE_FORK_VIA_API = "create_fork_via_api"
    FORK_SKIPPED = "fork_skipped"
    SETTINGS_PERSISTED = "settings_persisted"
    REMOTES_CONFIGURED = "remotes_configured"


class PatchTransferState(str, Enum):
    STARTED = "started"
    AUTHENTICATED = "authenticated"
    PATCH_RESOLVED = "patch_resolved"
    PREVIEW_GENERATED = "preview_generated"
    APPLY_DECLINED = "apply_declined"
    APPLY_CONFIRMED = "apply_confirmed"
    BRANCH_CREATED = "branch_created"
    PATCH_APPLIED = "patch_applied"
    PUSH_DECLINED = "push_declined"
    PUSH_CONFIRMED = "push_confirmed"
    PUSHED = "pushed"
    PULL_REQUEST_OPENED = "pull_request_opened"
    CLEANUP = "cleanup"


FORK_SETUP_TRANSITIONS: dict[ForkSetupState, set[ForkSetupState]] = {
    ForkSetupState.NO_FORK_CONFIGURED: {
        ForkSetupState.CHECKING_EXISTING_FORK,
        ForkSetupState.FORK_MISSING_RECORD,
    },
    ForkSetupState.CHECKING_EXISTING_FORK: {
        ForkSetupState.FORK_FOUND,
        ForkSetupState.FORK_MISSING_RECORD,
    },
    ForkSetupState.FORK_FOUND: {ForkSetupState.REMOTES_CONFIGURED},
    ForkSetupState.FORK_MISSING_RECORD: {
        ForkSetupState.RECORD_EXISTING_FORK,
        ForkSetupState.CREATE_FORK_VIA_API,
        ForkSetupState.FORK_SKIPPED,
    },
    ForkSetupState.RECORD_EXISTING_FORK: {ForkSetupState.SETTINGS_PERSISTED},
    ForkSetupState.CREATE_FORK_VIA_API: {ForkSetupState.SETTINGS_PERSISTED},
    ForkSetupState.SETTINGS_PERSISTED: {ForkSetupState.REMOTES_CONFIGURED},
    ForkSetupState.FORK_SKIPPED: set(),
    ForkSetupState.REMOTES_CONFIGURED: set(),
}

PATCH_TRANSFER_TRANSITIONS: dict[PatchTransferState, set[PatchTransferState]] = {
    PatchTransferState.STARTED: {PatchTransferState.AUTHENTICATED},
    PatchTransferState.AUTHENTICATED: {PatchTransferState.PATCH_RESOLVED},
    PatchTransferState.PATCH_RESOLVED: {PatchTransferState.PREVIEW_GENERATED},
    PatchTransferState.PREVIEW_GENERATED: {
        PatchTransferState.APPLY_CONFIRMED,
        PatchTransferState.APPLY_DECLINED,
    },
    PatchTransferState.APPLY_CONFIRMED: {PatchTransferState.BRANCH_CREATED},
    PatchTransferState.BRANCH_CREATED: {PatchTransferState.PATCH_APPLIED},
    PatchTransferState.PATCH_APPLIED: {
        PatchTransferState.PUSH_CONFIRMED,
        PatchTransferState.PUSH_DECLINED,
    },
    PatchTransferState.PUSH_CONFIRMED: {PatchTransferState.PUSHED},
    PatchTransferState.PUSHED: {PatchTransferState.PULL_REQUEST_OPENED},
    PatchTransferState.PULL_REQUEST_OPENED: {PatchTransferState.CLEANUP},
    PatchTransferState.APPLY_DECLINED: set(),
    PatchTransferState.PUSH_DECLINED: set(),
    PatchTransferState.CLEANUP: set(),
}


class IllegalTransitionError(ValueError):
    pass


S = TypeVar("S", ForkSetupState, PatchTransferState)


def transition(*, current: S, to: S, allowed: Mapping[S, set[S]]) -> S:
    if to not in allowed.get(current, set()):
        raise IllegalTransitionError(f"Illegal transition: {current.value} -> {to.value}")
    return to


class StateTracker(Generic[S]):
    """Walks one flow through its states and remembers the path taken."""

    def __init__(self, initial: S, allowed: Mapping[S, set[S]]) -> None:
        self._allowed = allowed
        self._history: list[S] = [initial]

    @property
    def state(self) -> S:
        return self._history[-1]

    @property
    def history(self) -> list[S]:
        return list(self._history)

    @property
    def finished(self) -> bool:
        return not self._allowed.get(self.state)

    def advance(self, to: S) -> S:
        current = self.state
        transition(current=current, to=to, allowed=self._allowed)
        self._history.append(to)
        logger.debug("State transition", extra={"from": current.value, "to": to.value})
        return to
