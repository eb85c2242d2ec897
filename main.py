"""Command-line entry point for the node_modules deduplication plugin.

Loads environment variables, applies CLI overrides, then either lists the
duplicate groups of a project or shows the deduplication decision for a
single module request.
"""
from dotenv import load_dotenv
import argparse
import json
import os
import sys
from dataclasses import asdict

# Load environment variables first, before any other imports
load_dotenv()

from nmdedup.config import reload_config
from nmdedup.dedup.request import ResolveRequest
from nmdedup.plugin import DeduplicationPlugin
from nmdedup.utils.logger import configure_logging, log_error


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collapse duplicated node_modules installs onto canonical copies.")
    parser.add_argument('--root', type=str, help='Project root containing node_modules.')
    parser.add_argument('--cache-dir', type=str, help='Directory for cached duplicate groups.')
    parser.add_argument('--groups-file', type=str, help='YAML/JSON file with duplicate groups (skips discovery).')
    parser.add_argument('--strict', action='store_true', help='Fail when duplicate groups overlap.')
    parser.add_argument('--force-rebuild', action='store_true', help='Ignore cached duplicate groups.')
    parser.add_argument('--log-level', type=str, help='Logging level.')
    parser.add_argument('--json', dest='as_json', action='store_true', help='Print machine-readable output.')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('groups', help='List duplicate package groups.')
    resolve = sub.add_parser('resolve', help='Show the decision for one module request.')
    resolve.add_argument('request', type=str, help='Module specifier, e.g. "lodash/get".')
    resolve.add_argument('--context', type=str, default='.', help='Directory the request is resolved from.')
    return parser


def apply_overrides(args: argparse.Namespace) -> None:
    """Copy CLI options into the environment read by ``Config``."""
    if args.root is not None:
        os.environ['DEDUP_ROOT_PATH'] = args.root
    if args.cache_dir is not None:
        os.environ['DEDUP_CACHE_DIR'] = args.cache_dir
    if args.groups_file is not None:
        os.environ['DEDUP_GROUPS_FILE'] = args.groups_file
    if args.strict:
        os.environ['DEDUP_STRICT_GROUPS'] = 'true'
    if args.force_rebuild:
        os.environ['DEDUP_FORCE_REBUILD'] = 'true'
    if args.log_level is not None:
        os.environ['LOG_LEVEL'] = args.log_level


def print_groups(plugin: DeduplicationPlugin, as_json: bool) -> None:
    groups = plugin.load_groups()
    if not isinstance(groups, dict):
        groups = {str(i): list(g) for i, g in enumerate(groups)}
    if as_json:
        print(json.dumps(groups, indent=2))
        return
    if not groups:
        print("No duplicated packages found.")
        return
    for key, candidates in groups.items():
        print(key)
        print(f"  * {candidates[0]}")
        for candidate in candidates[1:]:
            print(f"    {candidate}")


def print_decision(plugin: DeduplicationPlugin, request: str, context: str, as_json: bool) -> None:
    record = ResolveRequest(request=request, context=os.path.abspath(context))
    result = plugin.detector.check(record)
    if as_json:
        print(json.dumps(asdict(result), indent=2))
        return
    print(f"reason:   {result.reason}")
    print(f"resolved: {result.resolved_path or '-'}")
    if result.rewritten:
        print(f"rewrite:  {result.request}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    apply_overrides(args)

    config = reload_config()
    configure_logging(config.log_level, config.log_format)
    config.log_configuration()

    issues = config.validate_configuration()
    if issues:
        log_error("Configuration validation failed", issues=issues)
        print("❌ Configuration issues found:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    plugin = DeduplicationPlugin(config=config)
    if args.command == 'groups':
        print_groups(plugin, args.as_json)
    else:
        print_decision(plugin, args.request, args.context, args.as_json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
