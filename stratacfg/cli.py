# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for stratacfg.

This module provides the ``strata`` entry point for inspecting and checking
resolved configuration from a shell or a CI job.

Commands:

    validate: Resolve configuration and check required settings
    get: Print the value at a dot-path
    show: Print the full resolved configuration
    flag: Evaluate a feature flag, optionally for a rollout subject

Example:
    Validate the production configuration before deploying:
        ```bash
        $ strata validate --config-dir config --env production
        ```

    Look up one value:
        ```bash
        $ strata get logging.level --env staging
        ```

    Check a flag for a user:
        ```bash
        $ strata flag advancedAnalytics --subject user-42
        ```

Exit Codes:

- 0: Success
- 1: Error (missing required settings, absent path, unreadable config)

Note:
    Without --config-dir the built-in tables are used. Without --env the
    environment is read from STRATA_ENV, APP_ENV or NODE_ENV. Verbose mode
    shows full tracebacks on errors.
"""

from __future__ import annotations

import argparse
from collections.abc import Mapping
from importlib.metadata import version
from pathlib import Path
import sys
from typing import Any

import yaml

from stratacfg.core import build_layers
from stratacfg.environment import EnvironmentSnapshot, active_environment
from stratacfg.exceptions import StrataError
from stratacfg.features import FeatureFlags, bucket_for
from stratacfg.logging import get_logger, set_global_logger
from stratacfg.paths import is_absent
from stratacfg.resolver import ResolvedConfig, resolve, thaw
from stratacfg.validation import check_required_paths


def _configure_logger(args: argparse.Namespace) -> None:
    logger = get_logger(verbose=args.verbose, debug=getattr(args, "debug", False))
    set_global_logger(logger)


def _resolve_from_args(
    args: argparse.Namespace,
) -> tuple[ResolvedConfig, tuple[str, ...]]:
    """Resolve configuration from --config-dir/--env/--env-file; no validation."""
    snapshot = EnvironmentSnapshot.from_os(args.env_file)
    env = args.env or active_environment(snapshot)
    config_dir = Path(args.config_dir) if args.config_dir else None
    base, overlays, required = build_layers(snapshot, config_dir)
    return resolve(base, overlays, env), tuple(required)


def _format_value(value: Any) -> str:
    if isinstance(value, (Mapping, list, tuple)):
        return yaml.safe_dump(
            thaw(value), default_flow_style=False, sort_keys=False
        ).rstrip()
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _report_error(args: argparse.Namespace, err: Exception) -> int:
    print(f"Error: {err}")
    if args.verbose or getattr(args, "debug", False):
        import traceback

        traceback.print_exc()
    return 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'strata validate' command.

    Resolves the configuration for the selected environment and checks
    every required path, listing all missing ones.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 if every required path is set, 1 otherwise).
    """
    _configure_logger(args)

    try:
        cfg, required = _resolve_from_args(args)
    except StrataError as err:
        return _report_error(args, err)

    result = check_required_paths(cfg, required)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Environment: {cfg.env}")
    print(f"Status:      {result.status.upper()}")
    print(f"Checked:     {result.checked} path(s)")
    print()

    if result.missing:
        print(f"Missing ({len(result.missing)}):")
        for path in result.missing:
            print(f"  [X] {path}")
        print()

    print("=" * 70)

    if result.is_valid:
        print()
        print("[SUCCESS] Configuration is valid!")
        return 0
    print()
    print(
        f"[FAILED] Missing required configuration: {', '.join(result.missing)}"
    )
    return 1


def cmd_get(args: argparse.Namespace) -> int:
    """Handler for 'strata get' command.

    Returns:
        Exit code (0 if the path resolves, 1 if it is absent).
    """
    _configure_logger(args)

    try:
        cfg, _ = _resolve_from_args(args)
    except StrataError as err:
        return _report_error(args, err)

    value = cfg.get(args.path)
    if is_absent(value):
        print(f"Error: path not found: {args.path}")
        return 1
    print(_format_value(value))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handler for 'strata show' command."""
    _configure_logger(args)

    try:
        cfg, _ = _resolve_from_args(args)
    except StrataError as err:
        return _report_error(args, err)

    print(f"# environment: {cfg.env}")
    print(f"# fingerprint: {cfg.fingerprint()}")
    print(_format_value(cfg.as_mapping()))
    return 0


def cmd_flag(args: argparse.Namespace) -> int:
    """Handler for 'strata flag' command.

    Prints whether a flag is enabled and, with --subject, whether that
    subject is inside the current rollout percentage.

    Returns:
        Exit code (0 on success, 1 if the configuration cannot be loaded).
    """
    _configure_logger(args)

    try:
        cfg, _ = _resolve_from_args(args)
        flags = FeatureFlags.from_config(cfg)
    except StrataError as err:
        return _report_error(args, err)

    enabled = flags.is_enabled(args.name)
    print(f"Flag:        {args.name}")
    print(f"Enabled:     {'yes' if enabled else 'no'}")

    if args.subject is not None:
        percentage = flags.schedule.percentage() if flags.schedule else 100
        print(f"Subject:     {args.subject}")
        print(f"Bucket:      {bucket_for(args.subject)}")
        print(f"Rollout:     {percentage}%")
        in_rollout = flags.is_in_rollout(args.name, args.subject)
        print(f"In rollout:  {'yes' if in_rollout else 'no'}")
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config-dir",
        default=None,
        help="YAML configuration directory (default: built-in tables)",
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Environment name (default: from STRATA_ENV, APP_ENV or NODE_ENV)",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help=".env file with additional variables (process environment wins)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the strata CLI."""
    parser = argparse.ArgumentParser(
        prog="strata",
        description="stratacfg - layered, environment-aware configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"strata {version('stratacfg')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Check that every required setting is present",
        description="Resolve configuration and list every missing required path.",
    )
    _add_common_arguments(parser_validate)
    parser_validate.set_defaults(func=cmd_validate)

    # 'get' command
    parser_get = subparsers.add_parser(
        "get",
        help="Print the value at a dot-path",
        description="Resolve configuration and print one value (YAML for sections).",
    )
    parser_get.add_argument("path", help="Dot-path, e.g. apis.govwin.timeout")
    _add_common_arguments(parser_get)
    parser_get.set_defaults(func=cmd_get)

    # 'show' command
    parser_show = subparsers.add_parser(
        "show",
        help="Print the full resolved configuration",
        description="Resolve configuration and print the whole tree as YAML.",
    )
    _add_common_arguments(parser_show)
    parser_show.set_defaults(func=cmd_show)

    # 'flag' command
    parser_flag = subparsers.add_parser(
        "flag",
        help="Evaluate a feature flag",
        description="Show whether a flag is enabled and whether a subject is in its rollout.",
    )
    parser_flag.add_argument("name", help="Feature flag name")
    parser_flag.add_argument(
        "--subject",
        default=None,
        help="Rollout subject id (user, tenant, ...) to check",
    )
    _add_common_arguments(parser_flag)
    parser_flag.set_defaults(func=cmd_flag)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the strata CLI.

    This function is registered as the 'strata' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
