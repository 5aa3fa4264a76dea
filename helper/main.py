"""
``parallel-helper`` entry point.

Usage:
    parallel-helper sovereign 2085
    parallel-helper launch --network heiko-dev --env-file .env.local
    parallel-helper add-market markets.csv --dry-run
"""
import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from blockchain.exceptions import ChainError
from config.logging import configure_logging
from config.networks import DEFAULT_NETWORK
from config.settings import load_settings
from helper.commands import COMMANDS, load_command_class
from helper.commands.base import CommandError
from launch.genesis import GenesisExportError
from launch.schema import ConfigError

logger = logging.getLogger('helper')


def common_arguments() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument('--relay-ws', '-r', help='the relaychain API endpoint (default from RELAY_CHAIN_TYPE)')
    parser.add_argument('--para-ws', '-p', help='the parachain API endpoint (default from RELAY_CHAIN_TYPE)')
    parser.add_argument('--dry-run', '-d', action='store_true', help='print the hex-encoded call instead of submitting')
    parser.add_argument('--network', '-n', default=DEFAULT_NETWORK, help='network name or path to a network config')
    parser.add_argument('--env-file', help='load environment variables from this file first')
    parser.add_argument('--log-level', help='override LOG_LEVEL')
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='parallel-helper', description='Parallel network launch and operations helper')
    subparsers = parser.add_subparsers(dest='command', metavar='command')
    subparsers.required = True
    common = common_arguments()
    for name in COMMANDS:
        command_class = load_command_class(name)
        subparser = subparsers.add_parser(name, help=command_class.help, parents=[common])
        command_class.add_arguments(subparser)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.env_file:
        if not load_dotenv(args.env_file, override=True):
            print(f"Warning: nothing loaded from {args.env_file}", file=sys.stderr)

    try:
        settings = load_settings().with_endpoints(args.relay_ws, args.para_ws)
    except ValueError as e:
        configure_logging()
        logger.error(str(e))
        return 1

    configure_logging(args.log_level or settings.log_level, settings.log_file)

    command = load_command_class(args.command)(settings)
    try:
        command.handle(**vars(args))
    except (ChainError, ConfigError, GenesisExportError, CommandError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.error(f"{args.command} interrupted")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
