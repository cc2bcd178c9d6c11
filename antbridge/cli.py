"""
Ant Bridge CLI - Command-line interface for the engine.

Usage:
    antbridge validate [catalog_file]      Validate a catalog (built-in if omitted)
    antbridge new <name> [<name> ...]      Set up a game and print its snapshot
    antbridge export-catalog [-o file]     Write the built-in catalog as JSON
    antbridge serve [--host H --port P]    Run the API server
"""

import argparse
import json
import logging
import sys

from .config import Settings, configure_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Ant Bridge - card game rules engine",
        prog="antbridge",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from ANTBRIDGE_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a catalog")
    validate_parser.add_argument("catalog_file", nargs="?", help="Path to catalog JSON bundle")

    # New game command
    new_parser = subparsers.add_parser("new", help="Set up a game and print the snapshot")
    new_parser.add_argument("players", nargs="+", help="Player names in seating order")
    new_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    new_parser.add_argument("--catalog", help="Path to catalog JSON bundle")

    # Export command
    export_parser = subparsers.add_parser("export-catalog", help="Write the built-in catalog as JSON")
    export_parser.add_argument("--output", "-o", help="Output file (stdout if omitted)")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(args.log_level or settings.log_level)

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "new":
        cmd_new(args)
    elif args.command == "export-catalog":
        cmd_export_catalog(args)
    elif args.command == "serve":
        cmd_serve(args, settings)
    else:
        parser.print_help()
        sys.exit(1)


def _load(path):
    from .catalog import CatalogError, default_catalog, load_catalog

    if not path:
        return default_catalog()
    try:
        return load_catalog(path)
    except CatalogError as e:
        print(f"Error: {e}")
        sys.exit(1)


def cmd_validate(args):
    """Validate a catalog."""
    from .catalog import validate_catalog

    catalog = _load(args.catalog_file)
    print(f"Validating: {args.catalog_file or 'built-in catalog'}")
    result = validate_catalog(catalog)

    print(f"Cards: {len(catalog.cards)}")
    print(f"Objectives: {len(catalog.objectives)} across {len(catalog.objectives_by_tier())} tier(s)")
    print(f"Starter deck: {len(catalog.starter_deck)} cards")

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print("\nCatalog is valid")


def cmd_new(args):
    """Set up a game and print its snapshot."""
    from .engine_core import GameState, Rules, serialize_state

    catalog = _load(args.catalog)
    players = [(f"p{i + 1}", name) for i, name in enumerate(args.players)]
    state = GameState.create("local", players)
    state.random_seed = args.seed
    Rules(catalog).setup_game(state)
    print(json.dumps(serialize_state(state), indent=2))


def cmd_export_catalog(args):
    """Write the built-in catalog as a JSON bundle."""
    from .catalog import catalog_to_bundle, default_catalog

    text = json.dumps(catalog_to_bundle(default_catalog()), indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        print(f"Wrote {args.output}")
    else:
        print(text)


def cmd_serve(args, settings):
    """Run the API server."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install 'antbridge[api]'")
        sys.exit(1)

    from .api.app import create_app

    logger.info("Serving on %s:%d (%s)", args.host, args.port, settings.env)
    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
