"""Command-line argument parsing for cazdo."""

import argparse
from pathlib import Path

from cazdo.__version__ import __version__
from cazdo.constants import PAT_ENV_VAR


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="cazdo",
        description="Browse local git branches alongside their Azure DevOps work items",
        epilog=f"Setup: Requires the {PAT_ENV_VAR} environment variable or 'pat' in the config file. "
        "Create a Personal Access Token with 'Work Items (Read)' scope in Azure DevOps.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"cazdo {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Path to config.toml (default: $XDG_CONFIG_HOME/cazdo/config.toml)",
    )
    parser.add_argument(
        "--protected",
        nargs="+",
        metavar="PATTERN",
        help="Protected branch patterns for this session (overrides the config file)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel work item requests (default: auto-detect)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.add_parser("info", help="Show the work item linked to the current branch")

    config_parser = subparsers.add_parser("config", help="Manage the configuration file")
    config_sub = config_parser.add_subparsers(dest="config_command", metavar="ACTION", required=True)
    init_parser = config_sub.add_parser("init", help="Create or update the configuration file")
    init_parser.add_argument(
        "--url", help="Organization URL, e.g. https://dev.azure.com/myorg (prompted if omitted)"
    )
    config_sub.add_parser("show", help="Print the current configuration")
    config_sub.add_parser("verify", help="Check the organization URL and PAT against Azure DevOps")

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
