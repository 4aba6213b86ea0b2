#!/usr/bin/env python3
"""
WithYou Command Line Interface

Main entry point for the `withyou` command.

Usage:
    withyou parse "remind me to call the dentist tomorrow morning"
    withyou parse "pay rent friday" --now 2026-01-05T10:00:00
    withyou token set 9f1c...           # cache the push token
    withyou register                    # register the cached token if needed
    withyou register --token 9f1c... --force
    withyou status                      # install id + registration bookkeeping
    withyou stuck --items items.json    # "I'm stuck" suggestions
    withyou --version
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from withyou import __version__


def iso_datetime(value: str) -> datetime:
    """argparse type for --now."""
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 date/time: {value!r}") from None


def _load(args: argparse.Namespace):
    from withyou.config import load_config

    return load_config(args.config)


def cmd_parse(args: argparse.Namespace) -> int:
    from withyou.capture.models import UserProfile
    from withyou.capture.parser import parse_capture

    config = _load(args)
    profile = UserProfile.from_dict(config.profile.model_dump())
    parsed = parse_capture(" ".join(args.text), profile=profile, now=args.now)
    print(json.dumps(parsed.to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_token(args: argparse.Namespace) -> int:
    from withyou.devices.store import PreferenceStore

    store = PreferenceStore(args.db)
    if args.token_command == "set":
        store.store_token(args.token)
        print("Token cached.")
        return 0

    token = store.cached_token()
    print(token or "No token cached.")
    return 0 if token else 1


async def _register(args: argparse.Namespace) -> Any:
    from withyou.devices.registrar import DeviceRegistrar

    registrar = DeviceRegistrar.from_config(_load(args), db_path=args.db)
    try:
        if args.token:
            registrar.store_token(args.token)
            return await registrar.register_if_needed(args.token, force=args.force)
        return await registrar.refresh(force=args.force)
    finally:
        await registrar.client.close()


def cmd_register(args: argparse.Namespace) -> int:
    from withyou.devices.registrar import RegistrationOutcome

    outcome = asyncio.run(_register(args))
    print(json.dumps({"outcome": outcome.value}, indent=2))
    return 1 if outcome in (RegistrationOutcome.FAILED, RegistrationOutcome.NO_TOKEN) else 0


def cmd_status(args: argparse.Namespace) -> int:
    from withyou.devices.runtime import RuntimeEnvironment
    from withyou.devices.store import PreferenceStore

    config = _load(args)
    store = PreferenceStore(args.db)
    runtime = RuntimeEnvironment.from_config(config)

    status = {
        "install_id": store.install_id(),
        "cached_token": store.cached_token(),
        "backend": config.backend.base_url,
        "api_key_configured": config.backend.api_key is not None,
        "timezone": runtime.timezone(),
        "apns_environment": runtime.apns_environment(),
        "registration": store.registration_state().to_dict(),
    }
    print(json.dumps(status, indent=2))
    return 0


def cmd_stuck(args: argparse.Namespace) -> int:
    from withyou.tasks.models import FocusSession, InboxItem, Reminder
    from withyou.tasks.stuck import suggestions

    with open(args.items, encoding="utf-8") as f:
        data = json.load(f)

    inbox = [InboxItem.from_dict(item) for item in data.get("inbox", [])]
    reminders = [Reminder.from_dict(item) for item in data.get("reminders", [])]
    sessions = [FocusSession.from_dict(item) for item in data.get("focus_sessions", [])]

    picks = suggestions(
        focus_sessions=sessions, reminders=reminders, inbox_items=inbox, now=args.now
    )
    if not picks:
        print("Nothing waiting. That's allowed.")
        return 0
    print(json.dumps([p.to_dict() for p in picks], indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="withyou",
        description="Capture parsing and push device registration",
    )
    parser.add_argument("--version", action="version", version=f"withyou {__version__}")
    parser.add_argument("--config", type=Path, help="Config file (default: args/withyou.yaml)")
    parser.add_argument("--db", type=Path, help="Preferences database (default: data/withyou.db)")
    parser.add_argument("--log-level", help="Log level (default: WITHYOU_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser("parse", help="Parse a capture")
    parse_parser.add_argument("text", nargs="+", help="Captured text")
    parse_parser.add_argument("--now", type=iso_datetime, help="Reference time (ISO-8601)")
    parse_parser.set_defaults(func=cmd_parse)

    token_parser = subparsers.add_parser("token", help="Manage the cached push token")
    token_sub = token_parser.add_subparsers(dest="token_command", required=True)
    token_set = token_sub.add_parser("set", help="Cache a push token")
    token_set.add_argument("token", help="Push token (hex)")
    token_sub.add_parser("show", help="Print the cached push token")
    token_parser.set_defaults(func=cmd_token)

    register_parser = subparsers.add_parser("register", help="Register the device with the backend")
    register_parser.add_argument("--token", help="Push token (defaults to the cached one)")
    register_parser.add_argument("--force", action="store_true", help="Ignore signature and cool-down")
    register_parser.set_defaults(func=cmd_register)

    status_parser = subparsers.add_parser("status", help="Show registration bookkeeping")
    status_parser.set_defaults(func=cmd_status)

    stuck_parser = subparsers.add_parser("stuck", help="Suggest a way back in")
    stuck_parser.add_argument(
        "--items", required=True, help="JSON file with 'inbox', 'reminders' and 'focus_sessions'"
    )
    stuck_parser.add_argument("--now", type=iso_datetime, help="Reference time (ISO-8601)")
    stuck_parser.set_defaults(func=cmd_stuck)

    return parser


def main(argv: list[str] | None = None) -> int:
    from withyou.logging_config import setup_logging

    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
