"""Hexdelve CLI entry point.

Provides subcommands for running the world API server and for generating a
world from a seed on the command line. Accepts configuration via flags and
environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from dataclasses import replace
from textwrap import dedent

from dotenv import load_dotenv


def _load_version() -> str:
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "VERSION")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Hexdelve world generator

    Run the world API server or generate a world from a seed and print a
    summary. Configuration can be provided via CLI flags or environment
    variables. If both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                   Bind address for the web server (default: 0.0.0.0)
          PORT                   Port for the web server (default: 5000)
          DATABASE_URL           SQLAlchemy database URI (default: sqlite:///instance/hexdelve.db)
          HEXDELVE_DEPTH_COUNT   Dungeon depths below the overland (default: 10)
          HEXDELVE_LOG_LEVEL     Structured event log level (debug|info|warn|error)

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Generate a world and dump the layout of its first depth
          python run.py generate --seed 1234 --dump-depth 1

          # Load variables from .env then run the server
          python run.py --env-file .env server
        """
    )

    parser = argparse.ArgumentParser(
        prog="Hexdelve",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Hexdelve {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the world API web server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask world API server",
    )
    server_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    server_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    server_parser.add_argument(
        "--db",
        dest="db_uri",
        default=None,
        help="Database URI (default: env DATABASE_URL or sqlite:///instance/hexdelve.db)",
    )
    server_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    server_parser.set_defaults(command="server")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a world and print a JSON summary",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate the world for a seed without starting the server.",
    )
    gen_parser.add_argument("--seed", type=int, required=True, help="World seed")
    gen_parser.add_argument(
        "--depths",
        type=int,
        default=None,
        help="Number of dungeon depths (default: env HEXDELVE_DEPTH_COUNT or 10)",
    )
    gen_parser.add_argument(
        "--dump-depth",
        dest="dump_depth",
        type=int,
        default=None,
        help="Also print an ASCII view of this depth's sector",
    )
    gen_parser.set_defaults(command="generate")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    return parser.parse_args(argv)


def generate(seed: int, depths=None, dump_depth=None) -> int:
    from hexdelve.config import WorldConfig
    from hexdelve.mapgen import MapgenError
    from hexdelve.world.worldgen import Worldgen

    config = WorldConfig.from_env()
    if depths is not None:
        config = replace(config, depth_count=depths)
    try:
        world = Worldgen(seed, config)
    except MapgenError as e:
        print(f"[ERROR] World generation failed for seed {seed}: {e}", file=sys.stderr)
        return 1

    summary = {
        "seed": world.seed(),
        "depths": config.depth_count,
        "terrain_cells": len(world.terrain),
        "portals": [[p.origin.to_list(), p.destination.to_list()] for _, p in sorted(world.portals.items())],
        "spawns": len(world.spawns()),
        "player_entry": world.player_entry().to_list(),
    }
    print(json.dumps(summary, indent=2))
    if dump_depth is not None:
        print(world.sector_grid(dump_depth).to_text())
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return generate(args.seed, args.depths, args.dump_depth)

    env_host = os.getenv("HOST", "0.0.0.0")
    env_port = int(os.getenv("PORT", "5000"))
    host = getattr(args, "host", None) or env_host
    port = int(getattr(args, "port", None) or env_port)

    # DATABASE_URL must be set before the Flask app module is imported.
    db_uri_cli = getattr(args, "db_uri", None)
    if db_uri_cli:
        os.environ["DATABASE_URL"] = db_uri_cli
    db_banner = db_uri_cli or os.getenv("DATABASE_URL") or "auto (instance/hexdelve.db)"

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    from hexdelve.logging_utils import log
    from hexdelve.server import start_server

    divider = "=" * 40
    print(
        "\n".join(
            [
                divider,
                "  Hexdelve Server Bootup",
                divider,
                f"  {'Host:':12} {host}",
                f"  {'Port:':12} {port}",
                f"  {'Database:':12} {db_banner}",
                divider,
                "",
            ]
        )
    )
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")
    log.info(event="listen", host=host, port=port, debug=debug)
    start_server(host=host, port=port, debug=debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
