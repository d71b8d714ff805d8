#!/usr/bin/env python3
"""repokeeper CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from repokeeper.lib.config import ConfigError, build_config
from repokeeper.lib.constants import DEFAULT_REPO_DIR, EXIT_CONFIG_ERROR
from repokeeper.commands import sync as cmd_sync_module
from repokeeper.commands import reset as cmd_reset_module


def get_config(args):
    """Build the run configuration from positional args, flags and --env-file."""
    return build_config(
        repo_dir=args.repo_dir,
        remote=args.remote,
        main_branch=args.main_branch,
        env_file=Path(args.env_file) if args.env_file else None,
        expected_remote_url=getattr(args, 'remote_url', None),
        push_tags=getattr(args, 'push_tags', None),
        verbose=args.verbose,
    )


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(levelname)s %(asctime)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


def cmd_sync(args):
    config = get_config(args)
    setup_logging(config.log_level)
    return cmd_sync_module.cmd_sync(args, config)


def cmd_reset(args):
    config = get_config(args)
    setup_logging(config.log_level)
    return cmd_reset_module.cmd_reset(args, config)


def add_repo_arguments(parser):
    parser.add_argument('repo_dir', nargs='?', default=DEFAULT_REPO_DIR,
                        help='Repository directory (default: .)')
    parser.add_argument('remote', nargs='?', default=None,
                        help='Remote name (default: origin)')
    parser.add_argument('main_branch', nargs='?', default=None,
                        help='Main branch name (default: main)')
    parser.add_argument('--env-file', '-e', help='Settings file (KEY=value)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show every git command')


def build_parser():
    parser = argparse.ArgumentParser(prog='repokeeper', description='Bulk git branch maintenance')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # repokeeper sync
    p_sync = subparsers.add_parser('sync', help='Commit WIP on all branches and push them')
    add_repo_arguments(p_sync)
    p_sync.set_defaults(func=cmd_sync)

    # repokeeper reset
    p_reset = subparsers.add_parser('reset', help='DESTRUCTIVE: collapse history into one commit on main')
    add_repo_arguments(p_reset)
    p_reset.add_argument('--remote-url', help='Expected remote URL (added or corrected before pushing)')
    p_reset.add_argument('--push-tags', action='store_true', default=None,
                         help='Push all local tags after the reset')
    p_reset.add_argument('--confirm', metavar='TOKEN',
                         help='Confirmation token (skips the prompt; must be YES)')
    p_reset.set_defaults(func=cmd_reset)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except ConfigError as e:
        print(f"ERROR: {e}")
        return EXIT_CONFIG_ERROR


def push_all_main():
    """Console script alias: push-all [repo_dir] [remote] [main_branch]"""
    return main(['sync'] + sys.argv[1:])


def reset_repo_main():
    """Console script alias: reset-repo [repo_dir] [remote] [main_branch]"""
    return main(['reset'] + sys.argv[1:])


if __name__ == '__main__':
    sys.exit(main())
