"""CLI entrypoint.

This is the single place where failures become exit statuses: stages raise
`ContributeError` subclasses and `main()` reports them.
"""

from __future__ import annotations

import argparse
import logging
import sys

import click
from pydantic import ValidationError

from github_contribute import __version__
from github_contribute.orchestrator.config import ContributeSettings
from github_contribute.orchestrator.console import Console
from github_contribute.orchestrator.contribute import Orchestrator
from github_contribute.orchestrator.errors import CommandExecutionError, ContributeError
from github_contribute.orchestrator.gerrit.client import GerritClient
from github_contribute.orchestrator.github.client import GitHubClient
from github_contribute.orchestrator.logging import configure_logging
from github_contribute.orchestrator.remotes import RemoteReconciler
from github_contribute.orchestrator.settings_tree import SettingsStore
from github_contribute.orchestrator.shell import ShellExecutor
from github_contribute.orchestrator.workflow.fork_bootstrap import ForkBootstrap
from github_contribute.orchestrator.workflow.patch_transfer import PatchTransferPipeline

logger = logging.getLogger(__name__)


def _patch_id(value: str) -> str:
    value = value.strip()
    if not value.isdigit() or int(value) <= 0:
        raise argparse.ArgumentTypeError(
            f"invalid patch id: {value!r} (expected a positive number)"
        )
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contribute",
        description="Set up contributor forks and transfer Gerrit patches to GitHub pull requests",
    )
    parser.add_argument("--version", action="version", version=f"github-contribute {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    setup = subparsers.add_parser(
        "setup",
        help="Interactively configure your forks and the origin/upstream remotes",
    )
    setup.add_argument(
        "--force",
        action="store_true",
        help="Set up every installed repository without asking for confirmation",
    )

    transfer = subparsers.add_parser(
        "create-pull-request-from-patch",
        help="Apply a Gerrit change locally, push it to your fork and open a pull request",
    )
    transfer.add_argument("patch_id", type=_patch_id, help="The Gerrit change number")

    return parser


def build_orchestrator(settings: ContributeSettings, console: Console) -> Orchestrator:
    store = SettingsStore(settings.settings_path, key=settings.settings_key)
    tree = store.load()

    executor = ShellExecutor(console)
    hosting = GitHubClient(
        base_url=settings.github_base_url,
        web_url=settings.github_web_url,
        ssh_host=settings.github_ssh_host,
    )
    review = GerritClient(
        base_url=settings.gerrit_base_url,
        root_path=settings.root_path,
        package_directories=[b.package_directory for b in tree.bindings()],
        patch_directory=settings.patch_directory,
    )
    reconciler = RemoteReconciler(
        executor=executor,
        hosting=hosting,
        root_path=settings.root_path,
        upstream_url_template=settings.upstream_url_template,
    )
    return Orchestrator(
        console=console,
        store=store,
        hosting=hosting,
        review=review,
        bootstrap=ForkBootstrap(
            console=console, hosting=hosting, store=store, reconciler=reconciler
        ),
        pipeline=PatchTransferPipeline(
            console=console, executor=executor, hosting=hosting, review=review
        ),
        root_path=settings.root_path,
        settings=tree,
    )


def _report(console: Console, error: ContributeError) -> None:
    if isinstance(error, CommandExecutionError) and error.output.strip():
        console.error(error.output.rstrip("\n"))
    console.error(error.message)
    if error.hint:
        console.line(error.hint)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ContributeSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    console = Console()

    try:
        orchestrator = build_orchestrator(settings, console)
        try:
            if args.command == "setup":
                orchestrator.setup(force=args.force)
                return 0

            if args.command == "create-pull-request-from-patch":
                outcome = orchestrator.create_pull_request_from_patch(args.patch_id)
                logger.info(
                    "Patch transfer finished",
                    extra={"patch_id": outcome.patch_id, "state": outcome.state.value},
                )
                return 0
        finally:
            orchestrator.close()

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except ContributeError as e:
        logger.debug("Run aborted", extra={"error": type(e).__name__, "exit_code": e.exit_code})
        _report(console, e)
        return e.exit_code

    except (KeyboardInterrupt, click.Abort):
        console.error("\nAborted.")
        return 130

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
