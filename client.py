#!/usr/bin/env python3
"""
Command-line entry point for the guild client.

Usage:
  python client.py whoami
  python client.py members
  python client.py manage KICK <user_id> [--yes]
  python client.py health

The session cookie lives only for the life of the process, so every command
starts with the profile bootstrap; set CONFIG_PATH / SENADB_API_URL in the
environment or a .env file to point at a backend.
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from config.config_loader import ClientSettings, ConfigLoader
from helpers.error_messages import action_label, format_user_error
from helpers.permissions_helper import available_actions_for
from services.service_container import ServiceContainer
from utils.errors import ConfigError, RequestError
from utils.logging import get_logger, setup_logging, shutdown_logging
from utils.types import ManagementAction

logger = get_logger(__name__)


def _confirm_on_tty(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SenaDB guild client")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("whoami", help="Show the signed-in identity")
    sub.add_parser("members", help="List guild members and what you may do to them")
    sub.add_parser("health", help="Print client health as JSON")

    manage = sub.add_parser("manage", help="Run a management action on a member")
    manage.add_argument("action", choices=[a.value for a in ManagementAction])
    manage.add_argument("user_id")
    manage.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    return parser


async def _run(args: argparse.Namespace, settings: ClientSettings) -> int:
    confirm = None if getattr(args, "yes", False) else _confirm_on_tty
    async with ServiceContainer(settings, confirm=confirm) as container:
        if args.command == "health":
            print(json.dumps(await container.health_check(), ensure_ascii=False, indent=2))
            return 0

        identity = container.session.identity
        if identity is None:
            print(format_user_error("NOT_AUTHENTICATED"))
            return 1

        if args.command == "whoami":
            role = identity.role.value if identity.role else "-"
            print(f"{identity.user_id} guild={identity.guild_id or '-'} role={role}")
            return 0

        members = await container.guild.list_members()

        if args.command == "members":
            for member in members:
                actions = available_actions_for(identity, member)
                labels = ", ".join(action_label(a) for a in actions) or "-"
                print(f"{member.nickname}#{member.tag}\t{member.role.value}\t{labels}")
            return 0

        target = next((m for m in members if m.user_id == args.user_id), None)
        if target is None:
            print(f"No guild member with id {args.user_id}")
            return 1

        outcome = await container.dispatcher.dispatch(ManagementAction(args.action), target)
        if outcome.message:
            print(outcome.message)
        return 0 if outcome.completed else 1


def main() -> int:
    """Main entry point for the client CLI."""
    load_dotenv()
    args = _build_parser().parse_args()

    setup_logging()
    try:
        settings = ClientSettings.from_config(ConfigLoader.load_config())
        return asyncio.run(_run(args, settings))
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except RequestError as e:
        print(e.user_message)
        return 1
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
