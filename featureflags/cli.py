#!/usr/bin/env python3
"""
Feature flag command line tool.

Usage:
    featureflags enable dark_mode
    featureflags enable dark_mode --scope beta
    featureflags enable api_limit --scope plan:pro --value 1000
    featureflags disable dark_mode --scope beta
    featureflags remove dark_mode --scope beta
    featureflags list --scope beta
    featureflags copy global beta --overwrite
    featureflags check dark_mode --scope beta

Exit codes:
    0 = success (for check: the feature is enabled)
    1 = storage, validation or configuration error
    2 = usage error
    3 = check only: the feature is disabled
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from featureflags.config import AppConfig, load_config
from featureflags.core.exceptions import FeatureFlagError, log_exception
from featureflags.core.logging_config import get_logger, log_operation, setup_logging
from featureflags.feature_mgmt.service import FeatureService, create_feature_service
from featureflags.storage.base import GLOBAL_SCOPE, FeatureRecord
from featureflags.storage.codec import parse_cli_value

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
# Distinct from EXIT_ERROR so scripts can tell "off" from an outage
EXIT_DISABLED = 3


# ANSI colors for terminal output
class Colors:
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BOLD = "\033[1m"
    END = "\033[0m"
    CYAN = "\033[96m"


def format_enabled(enabled: bool) -> str:
    """Format an enabled flag with color."""
    if enabled:
        return f"{Colors.GREEN}yes{Colors.END}"
    return f"{Colors.RED}no{Colors.END}"


def format_value(value) -> str:
    return json.dumps(value) if value is not None else "-"


def print_table(scope: str, records: List[FeatureRecord]) -> None:
    """Print records as an aligned table."""
    print(f"{Colors.BOLD}{Colors.CYAN}Feature flags for scope: {scope}{Colors.END}")
    print(f"{Colors.CYAN}{'-' * 60}{Colors.END}")

    width = max([len("Name")] + [len(r.name) for r in records])
    print(f"{'Name':<{width}}  {'Enabled':<7}  Value")
    for record in records:
        # Pad on the plain text; ANSI codes would skew the column width
        pad = " " * (7 - len("yes" if record.enabled else "no"))
        print(f"{record.name:<{width}}  {format_enabled(record.enabled)}{pad}  {format_value(record.value)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="featureflags",
        description="Manage scope-based feature flags",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 = success (check: enabled)
  1 = error
  2 = usage error
  3 = check: disabled

Examples:
  featureflags enable dark_mode
  featureflags enable api_limit --scope plan:pro --value 1000
  featureflags list --scope beta --json
        """,
    )
    parser.add_argument(
        "--database-url", "-d",
        default=None,
        help="SQLAlchemy database URL (overrides config and environment)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to a feature_flags.yaml config file",
    )
    parser.add_argument(
        "--log-level", "-l",
        default=None,
        help="Logging level (default: from config, INFO)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    def add_scope(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--scope", "-s",
            default=GLOBAL_SCOPE,
            help=f"Scope string (default: {GLOBAL_SCOPE})",
        )

    p_enable = sub.add_parser("enable", help="Enable a feature flag")
    p_enable.add_argument("name", help="The feature name to enable")
    add_scope(p_enable)
    p_enable.add_argument(
        "--value", "-v",
        default=None,
        help="Optional JSON value to store alongside the flag",
    )

    p_disable = sub.add_parser("disable", help="Disable a feature flag")
    p_disable.add_argument("name", help="The feature name to disable")
    add_scope(p_disable)

    p_remove = sub.add_parser("remove", help="Remove a flag record so the scope falls back to global")
    p_remove.add_argument("name", help="The feature name to remove")
    add_scope(p_remove)

    p_list = sub.add_parser("list", help="List all feature flags for a scope")
    add_scope(p_list)
    p_list.add_argument("--json", "-j", action="store_true", help="Output raw JSON")

    p_copy = sub.add_parser("copy", help="Copy all flags from one scope to another")
    p_copy.add_argument("from_scope", help="Source scope")
    p_copy.add_argument("to_scope", help="Target scope")
    p_copy.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite records that already exist in the target scope",
    )

    p_check = sub.add_parser("check", help="Print the resolved state of a flag")
    p_check.add_argument("name", help="The feature name to check")
    add_scope(p_check)

    return parser


def _load_config(args: argparse.Namespace) -> AppConfig:
    config = load_config(args.config, use_cache=False)
    if args.database_url:
        config.database.url = args.database_url
    if args.log_level:
        config.general.log_level = args.log_level.upper()
    return config


def run_command(args: argparse.Namespace, service: FeatureService) -> int:
    """Execute a parsed command against a service bound to 'global'."""
    command = args.command
    log = get_logger(__name__, command=command)

    if command == "enable":
        value = parse_cli_value(args.value)
        service.bind_scope(args.scope).enable(args.name, value)
        print(f"{Colors.GREEN}Feature '{args.name}' enabled for scope '{args.scope}'.{Colors.END}")
        return EXIT_OK

    if command == "disable":
        service.bind_scope(args.scope).disable(args.name)
        print(f"{Colors.GREEN}Feature '{args.name}' disabled for scope '{args.scope}'.{Colors.END}")
        return EXIT_OK

    if command == "remove":
        if service.bind_scope(args.scope).remove(args.name):
            print(f"{Colors.GREEN}Feature '{args.name}' removed from scope '{args.scope}'.{Colors.END}")
        else:
            print(f"{Colors.YELLOW}No record for '{args.name}' in scope '{args.scope}'.{Colors.END}")
        return EXIT_OK

    if command == "list":
        records = service.bind_scope(args.scope).list_all()
        log.debug(f"Listed {len(records)} feature(s) in scope {args.scope!r}")
        if args.json:
            print(json.dumps([r.to_dict() for r in records], indent=2))
        elif not records:
            print(f"No feature flags found for scope '{args.scope}'.")
        else:
            print_table(args.scope, records)
        return EXIT_OK

    if command == "copy":
        with log_operation("copy_scope", logger, logging.INFO):
            copied = service.bind_scope(args.from_scope).copy_to(
                args.to_scope, overwrite=args.overwrite
            )
        print(f"Copied {copied} feature(s) from '{args.from_scope}' to '{args.to_scope}'.")
        return EXIT_OK

    if command == "check":
        scoped = service.bind_scope(args.scope)
        enabled = scoped.is_enabled(args.name)
        value = scoped.get_value(args.name)
        log.debug(f"Checked {args.name!r} in scope {args.scope!r}: enabled={enabled}")
        print(f"{args.name} [{args.scope}]: enabled={format_enabled(enabled)} value={format_value(value)}")
        return EXIT_OK if enabled else EXIT_DISABLED

    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    service = None
    try:
        config = _load_config(args)
        setup_logging(level=config.general.log_level, json_format=config.general.json_logs)
        service = create_feature_service(config)
        return run_command(args, service)
    except FeatureFlagError as e:
        log_exception(e, context=f"featureflags {args.command}", log_level=logging.DEBUG)
        print(f"{Colors.RED}Error: {e.message}{Colors.END}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        if service is not None:
            service.resolver.store.close()


if __name__ == "__main__":
    sys.exit(main())
