"""Command-line interface for cazdo"""

import dataclasses
import os
import sys
from typing import List

from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from cazdo.cli.args import parse_args
from cazdo.config import Config, get_config_path
from cazdo.constants import DEFAULT_PROTECTED_BRANCHES, PAT_ENV_VAR, Styles
from cazdo.core.session import BranchSession
from cazdo.exceptions import CazdoError, ConfigError, NoBranchesError, ProviderError
from cazdo.formatters import format_provider_error, format_work_item_lines
from cazdo.logging_config import get_log_file, setup_logging
from cazdo.models.branch import DeletedBranch
from cazdo.services.azure_devops_service import AzureDevOpsService
from cazdo.services.branch_validation_service import BranchValidationService, extract_work_item_id
from cazdo.services.fetch_coordinator import FetchCoordinator
from cazdo.services.git import GitOperations
from cazdo.utils.threading import get_threading_info

console = Console()


def load_config(parsed_args) -> Config:
    """Load the config file and apply command-line overrides."""
    config = Config.load(parsed_args.config)
    overrides = {"verbose": parsed_args.verbose, "debug": parsed_args.debug}
    if parsed_args.protected:
        overrides["protected_branches"] = list(parsed_args.protected)
    if parsed_args.workers is not None:
        overrides["workers"] = parsed_args.workers
    return dataclasses.replace(config, **overrides)


def print_debug_info(config: Config) -> None:
    console.print("[yellow]Debug mode enabled[/yellow]")
    threading_info = get_threading_info()
    console.print("[yellow]Threading Information:[/yellow]")
    console.print(f"  Python version: {threading_info['python_version']}")
    console.print(f"  Threading mode: {threading_info['mode']}")
    console.print(f"  CPU count: {threading_info['cpu_count']}")
    console.print(f"  Fetch workers: {config.workers or threading_info['fetch_workers']}")
    console.print(f"  Free-threading enabled: {threading_info['free_threading']}")

    console.print("[yellow]Configuration:[/yellow]")
    for key, value in config.to_dict().items():
        console.print(Text(f"  {key}: {value}"))
    console.print(f"[dim]Log file: {get_log_file()}[/dim]")


def print_deleted_branches(deleted: List[DeletedBranch]) -> None:
    """Print the branches deleted in the session with commands to restore them."""
    if not deleted:
        return
    console.print()
    console.print(Text(f"Deleted {len(deleted)} branch(es) this session:", style=Styles.WARNING))
    for branch in deleted:
        console.print(Text.assemble("  ", (branch.name, "bold"), (f" (was {branch.short_sha})", Styles.MUTED)))
    console.print()
    console.print(Text("To restore a branch:", style=Styles.MUTED))
    for branch in deleted:
        console.print(Text(f"  {branch.restore_command}", style=Styles.ACCENT))


def run_tui(config: Config) -> int:
    """Start the interactive branch browser in the current repository."""
    git_ops = GitOperations(os.getcwd())
    refs = git_ops.list_branches()
    if not refs:
        raise NoBranchesError()
    branches = BranchValidationService.build_branches(refs, config.protected_branches)

    provider = AzureDevOpsService.from_config(config)
    coordinator = FetchCoordinator(provider, max_workers=config.workers)

    from cazdo.tui import CazdoApp

    session = BranchSession(branches, coordinator)
    app = CazdoApp(session, git_ops)
    try:
        app.run()
    finally:
        coordinator.shutdown()
        provider.close()

    print_deleted_branches(session.deleted_branches)
    return 0


def run_info(config: Config) -> int:
    """Print the work item linked to the current branch."""
    git_ops = GitOperations(os.getcwd())
    branch_name = git_ops.current_branch()
    if branch_name is None:
        console.print(Text("Not on a branch (detached HEAD)", style=Styles.ERROR))
        return 1

    work_item_id = extract_work_item_id(branch_name)
    if work_item_id is None:
        console.print(Text(f"Branch '{branch_name}' does not reference a work item", style=Styles.WARNING))
        return 0

    provider = AzureDevOpsService.from_config(config)
    try:
        with console.status(f"Fetching work item #{work_item_id}..."):
            details = provider.fetch(work_item_id)
    except ProviderError as e:
        console.print(Text(format_provider_error(e), style=Styles.ERROR))
        return 1
    finally:
        provider.close()

    console.print(Text.assemble(("Branch: ", Styles.MUTED), (branch_name, Styles.CURRENT_BRANCH)))
    for line in format_work_item_lines(details, console.width):
        console.print(line)
    if details.url:
        console.print()
        console.print(Text.assemble(("  ", ""), (details.url, Styles.ACCENT)))
    return 0


def run_config_init(parsed_args) -> int:
    config_path = parsed_args.config or get_config_path()
    protected = list(DEFAULT_PROTECTED_BRANCHES)
    url = parsed_args.url
    if config_path.exists():
        try:
            existing = Config.load(config_path)
        except ConfigError:
            existing = None
        if existing is not None:
            protected = existing.protected_branches
            url = url or existing.organization_url

    if not url:
        url = Prompt.ask("Azure DevOps organization URL", default="https://dev.azure.com/")

    config = Config(organization_url=url, protected_branches=protected)
    written = config.save(config_path)
    console.print(Text(f"Configuration saved to {written}", style=Styles.SUCCESS))
    if config.pat_source() is None:
        console.print(Text(f"Set the {PAT_ENV_VAR} environment variable to your Personal Access Token.", style=Styles.WARNING))
    return 0


def run_config_show(parsed_args) -> int:
    config = Config.load(parsed_args.config)
    console.print(Text.assemble(("Config file: ", Styles.MUTED), str(parsed_args.config or get_config_path())))
    for key in ("organization_url", "request_timeout", "protected_branches"):
        console.print(Text(f"  {key}: {config.get(key)}"))
    source = config.pat_source()
    console.print(Text(f"  pat: {'set (' + source + ')' if source else 'not set'}"))
    return 0


def run_config_verify(parsed_args) -> int:
    config = Config.load(parsed_args.config)
    provider = AzureDevOpsService.from_config(config)
    try:
        with console.status(f"Connecting to {config.organization_url}..."):
            count = provider.verify()
    except ProviderError as e:
        console.print(Text(f"Verification failed: {format_provider_error(e)}", style=Styles.ERROR))
        return 1
    finally:
        provider.close()
    console.print(Text(f"Connected to {config.organization_url} ({count} project(s) visible)", style=Styles.SUCCESS))
    return 0


CONFIG_COMMANDS = {
    "init": run_config_init,
    "show": run_config_show,
    "verify": run_config_verify,
}


def main(argv=None):
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        # The TUI owns the terminal, so its logs go to a file only
        tui_mode = parsed_args.command is None
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug, tui_mode=tui_mode)

        if parsed_args.command == "config":
            return CONFIG_COMMANDS[parsed_args.config_command](parsed_args)

        config = load_config(parsed_args)
        if parsed_args.debug:
            print_debug_info(config)

        if parsed_args.command == "info":
            return run_info(config)
        return run_tui(config)

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except ConfigError as e:
        console.print(Text(f"Configuration error: {e}", style=Styles.ERROR))
        return 1
    except CazdoError as e:
        console.print(Text(f"Error: {e}", style=Styles.ERROR))
        return 1
    except Exception as e:
        console.print(Text(f"Error: {e}", style=Styles.ERROR))
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
