"""
Coffers CLI - Command-line interface for the engine.

Usage:
    coffers validate <definitions_file>   Validate a card/event definitions file
    coffers play <card_id> [--seed N]     Play one card against the starter setup
    coffers serve [--host H] [--port P]   Run the REST API
"""

import argparse
import json
import logging
import sys

from .config import EngineConfig, configure_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Coffers - Deck-builder effect engine",
        prog="coffers",
    )
    parser.add_argument("--log-level", help="Logging level (default: COFFERS_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a definitions file")
    validate_parser.add_argument("definitions_file", help="Path to definitions JSON")
    validate_parser.add_argument("--strict", action="store_true", help="Treat warnings as errors")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a card against the starter setup")
    play_parser.add_argument("card_id", help="Card id from the starter catalog")
    play_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    play_parser.add_argument("--definitions", help="Extra definitions JSON to load first")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "validate":
        return cmd_validate(args)
    elif args.command == "play":
        return cmd_play(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_validate(args):
    """Validate a definitions file."""
    from pydantic import ValidationError
    from .definitions import load_catalog, validate_catalog

    print(f"Validating: {args.definitions_file}")
    try:
        catalog = load_catalog(args.definitions_file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.definitions_file}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}")
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: Malformed definitions ({e.error_count()} problem(s))")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            print(f"  - {location}: {error['msg']}")
        sys.exit(1)

    result = validate_catalog(catalog)
    print(f"Cards: {len(catalog.cards)}")
    print(f"Events: {len(catalog.events)}")

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")

    if not result.valid or (args.strict and result.warnings):
        sys.exit(1)
    print("\nOK")
    return 0


def cmd_play(args):
    """Play one card headlessly, auto-selecting targets."""
    from .definitions import load_catalog
    from .games.starter import create_starter_catalog
    from .session import SessionError, SessionManager

    catalog = create_starter_catalog()
    if args.definitions:
        load_catalog(args.definitions, catalog)

    if not catalog.has_card(args.card_id):
        print(f"Error: Unknown card: {args.card_id}")
        sys.exit(1)

    config = EngineConfig.from_env()
    config.auto_select_targets = True
    manager = SessionManager(config=config, catalog=catalog)
    session = manager.create_session(random_seed=args.seed)
    state = session.game_state

    # The card is put straight into hand so any card can be tried
    card = state.new_card(args.card_id)
    state.hand.append(card)

    print(f"Gold: {state.gold}  Hand: {', '.join(c.card_id for c in state.hand)}")
    try:
        outcome = session.play_card(card.instance_id)
    except SessionError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"\nPlayed {args.card_id}:")
    for result in outcome.results:
        status = "ok" if result.success else "failed"
        print(f"  - {result.to_dict()['kind']}: {status} (count={result.count}, value={result.value})")

    print(f"\nGold: {state.gold}  Actions: {state.actions_remaining}")
    print(f"Hand: {', '.join(c.card_id for c in state.hand)}")
    return 0


def cmd_serve(args):
    """Run the REST API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        raise ImportError("uvicorn not installed. Install with: pip install uvicorn")

    from .api import create_app

    logger.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    main()
