"""
Aura Command Line Interface.

Provides commands for managing device bindings and trust records:
- device: Show the installation id and manage user bindings
- trust: Evaluate or calculate trust scores
- validate: Check the configuration file
- serve: Run the REST API
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from aura import __version__
from aura.config import AuraConfig, load_config, validate_config
from aura.device.binding import DeviceBindingPolicy
from aura.storage import attempt, create_store
from aura.trust.evaluator import evaluate
from aura.trust.models import TrustScore
from aura.trust.scoring import build_trust_score


logger = logging.getLogger("aura")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="aura",
        description="Account device binding and trust scoring",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c", "--config",
        metavar="FILE",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # device command
    device_parser = subparsers.add_parser("device", help="Manage device bindings")
    device_sub = device_parser.add_subparsers(dest="device_cmd")

    device_sub.add_parser("id", help="Show this installation's device id")
    device_sub.add_parser("info", help="Show this installation's device record")
    device_sub.add_parser("list", help="List all user bindings")

    check_parser = device_sub.add_parser("check", help="Check a user's device restriction")
    check_parser.add_argument("user_id", help="User identifier")

    register_parser = device_sub.add_parser("register", help="Bind this device to a user")
    register_parser.add_argument("user_id", help="User identifier")
    register_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Replace a binding to another device",
    )

    unregister_parser = device_sub.add_parser("unregister", help="Remove a user's binding")
    unregister_parser.add_argument("user_id", help="User identifier")

    show_parser = device_sub.add_parser("show", help="Show the device bound to a user")
    show_parser.add_argument("user_id", help="User identifier")

    device_parser.set_defaults(func=cmd_device)

    # trust command
    trust_parser = subparsers.add_parser("trust", help="Evaluate trust scores")
    trust_sub = trust_parser.add_subparsers(dest="trust_cmd")

    evaluate_parser = trust_sub.add_parser("evaluate", help="Evaluate a trust record")
    evaluate_parser.add_argument("file", help="JSON file with the trust record ('-' for stdin)")

    calc_parser = trust_sub.add_parser("calculate", help="Score behavioral counters")
    calc_parser.add_argument("--verified-id", action="store_true")
    calc_parser.add_argument("--verified-business", action="store_true")
    calc_parser.add_argument("--bookings", type=int, default=0, help="Completed bookings")
    calc_parser.add_argument(
        "--response-time", type=float, default=0.0, help="Average response time (minutes)"
    )
    calc_parser.add_argument(
        "--cancellation-rate", type=float, default=0.0, help="Cancellation rate (0-1)"
    )
    calc_parser.add_argument("--disputes", type=int, default=0, help="Dispute count")

    trust_parser.set_defaults(func=cmd_trust)

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Validate configuration")
    validate_parser.set_defaults(func=cmd_validate)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Bind port")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (yaml.YAMLError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        config.logging.log_level = "debug"
    setup_logging(config)

    return args.func(args, config)


def setup_logging(config: AuraConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.logging.log_level.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.logging.log_file:
        log_path = Path(config.logging.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def output(data: Any, args: argparse.Namespace) -> None:
    """Output data in requested format."""
    if getattr(args, "json", False):
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif isinstance(data, dict):
        for key, value in data.items():
            print(f"{key}: {value}")
    elif isinstance(data, list):
        for item in data:
            if isinstance(item, dict):
                for key, value in item.items():
                    print(f"  {key}: {value}")
                print()
            else:
                print(f"  {item}")
    else:
        print(data)


async def _run_device(args: argparse.Namespace, config: AuraConfig) -> int:
    store = create_store(config.storage)
    policy = DeviceBindingPolicy.from_config(config, store)

    try:
        if args.device_cmd == "id" or args.device_cmd is None:
            output(await policy.get_device_id(), args)

        elif args.device_cmd == "info":
            output((await policy.get_device_info()).to_dict(), args)

        elif args.device_cmd == "list":
            result = await attempt(policy.mapping.all(), config.storage.timeout)
            if not result.ok:
                print(f"Error reading bindings: {result.error}", file=sys.stderr)
                return 1
            bindings = result.value
            output(
                [{"userId": user_id, **record.to_dict()} for user_id, record in bindings.items()],
                args,
            )

        elif args.device_cmd == "check":
            result = await policy.check_device_restriction(args.user_id)
            output(result.to_dict(), args)
            return 0 if result.allowed else 2

        elif args.device_cmd == "register":
            if not args.force:
                result = await policy.check_device_restriction(args.user_id)
                if not result.allowed:
                    print(f"Error: {result.reason}", file=sys.stderr)
                    return 2
            await policy.register_user_device(args.user_id)
            record = await policy.get_user_device(args.user_id)
            if record is None:
                print("Error: device binding could not be stored", file=sys.stderr)
                return 1
            output(record.to_dict(), args)

        elif args.device_cmd == "unregister":
            await policy.unregister_user_device(args.user_id)
            output({"userId": args.user_id, "unregistered": True}, args)

        elif args.device_cmd == "show":
            record = await policy.get_user_device(args.user_id)
            if record is None:
                print(f"No device bound to user: {args.user_id}", file=sys.stderr)
                return 1
            output(record.to_dict(), args)

        return 0

    finally:
        await store.close()


def cmd_device(args: argparse.Namespace, config: AuraConfig) -> int:
    """Manage device bindings."""
    return asyncio.run(_run_device(args, config))


def cmd_trust(args: argparse.Namespace, config: AuraConfig) -> int:
    """Evaluate or calculate trust scores."""
    if args.trust_cmd == "evaluate":
        try:
            if args.file == "-":
                raw = sys.stdin.read()
            else:
                raw = Path(args.file).read_text()
            trust_score = TrustScore.from_dict(json.loads(raw))
        except (OSError, ValueError, TypeError) as e:
            print(f"Error: invalid trust record: {e}", file=sys.stderr)
            return 1

        output(evaluate(trust_score), args)
        return 0

    if args.trust_cmd == "calculate":
        try:
            trust_score = build_trust_score(
                verified_id=args.verified_id,
                verified_business=args.verified_business,
                completed_bookings=args.bookings,
                avg_response_time=args.response_time,
                cancellation_rate=args.cancellation_rate,
                dispute_count=args.disputes,
            )
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        output(trust_score.to_dict(), args)
        return 0

    print("Usage: aura trust {evaluate,calculate}", file=sys.stderr)
    return 1


def cmd_validate(args: argparse.Namespace, config: AuraConfig) -> int:
    """Validate configuration."""
    errors = validate_config(config)
    if errors:
        print("Configuration errors:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        return 1

    print("Configuration is valid")
    return 0


def cmd_serve(args: argparse.Namespace, config: AuraConfig) -> int:
    """Run the REST API."""
    import uvicorn

    from aura.api import configure_services, create_app

    errors = validate_config(config)
    if errors:
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        return 1

    app = create_app(cors_origins=config.api.cors_origins)
    configure_services(config, create_store(config.storage))

    uvicorn.run(
        app,
        host=args.host or config.api.host,
        port=args.port or config.api.port,
        log_level=config.logging.log_level,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
