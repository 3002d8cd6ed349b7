"""CLI entry point for LLM Discovery.

Usage:
    # List models served by LM Studio / llama-server
    llm-discovery discover --endpoint http://localhost:1234

    # Same, as JSON
    llm-discovery discover --endpoint http://localhost:1234 --json

    # Serve the catalog over HTTP, re-discovering every minute
    llm-discovery serve --endpoint http://localhost:1234 --refresh 60

    # Using environment variables
    export LOCAL_ENDPOINT=http://localhost:1234
    llm-discovery discover
"""

import argparse
import json
import logging
import sys
from dataclasses import replace

from .config import Config, ConfigValidationError, load_config, setup_logging
from .defaults import DefaultsStore
from .discovery import DEFAULT_ROLE_KEYS, DiscoveryResult, discover_local_models
from .models import ModelRegistry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llm-discovery",
        description="Discover models served by a local inference server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  LOCAL_ENDPOINT          Base address of the local server (e.g. http://localhost:1234)
  LLM_DISCOVERY_TIMEOUT   Per-request timeout in seconds
  LLM_LOG_LEVEL           Logging level

Examples:
  %(prog)s discover --endpoint http://localhost:1234
  %(prog)s serve --endpoint http://localhost:8080 --port 8100 --refresh 60
        """,
    )
    parser.add_argument("--config", "-c", help="Path to a YAML or JSON config file")
    parser.add_argument("--endpoint", "-e", help="Base address of the local server")
    parser.add_argument("--timeout", "-t", type=float, help="Per-request timeout in seconds")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: from config, info)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    discover = subparsers.add_parser("discover", help="Run one discovery pass and print the models")
    discover.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    serve = subparsers.add_parser("serve", help="Serve the discovered catalog over HTTP")
    serve.add_argument("--host", "-H", help="Host to bind to (default: 127.0.0.1)")
    serve.add_argument("--port", "-p", type=int, help="Port to bind to (default: 8100)")
    serve.add_argument(
        "--refresh", type=float, help="Re-discover every N seconds (default: 0, startup only)"
    )
    serve.add_argument("--api-key", "-k", help="Optional API key for admin endpoints")

    return parser


def _apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Override config values with CLI arguments."""
    discovery = config.discovery
    if args.endpoint is not None:
        discovery = replace(discovery, endpoint=args.endpoint)
    if args.timeout is not None:
        discovery = replace(discovery, timeout=args.timeout)
    if getattr(args, "refresh", None) is not None:
        discovery = replace(discovery, refresh_interval=args.refresh)

    server = config.server
    if getattr(args, "host", None):
        server = replace(server, host=args.host)
    if getattr(args, "port", None):
        server = replace(server, port=args.port)
    if getattr(args, "api_key", None):
        server = replace(server, api_key=args.api_key)

    logging_config = config.logging
    if args.log_level:
        logging_config = replace(logging_config, level=args.log_level)

    return replace(config, discovery=discovery, server=server, logging=logging_config)


def _print_result(result: DiscoveryResult, defaults: DefaultsStore, as_json: bool) -> None:
    if as_json:
        payload = {
            "endpoint": result.endpoint,
            "models": [model.to_dict() for model in result.models],
            "defaults": {key: defaults.get(key) for key in DEFAULT_ROLE_KEYS},
        }
        print(json.dumps(payload, indent=2))
        return

    if not result.models:
        print(f"No local models found at {result.endpoint}")
        return

    id_width = max(len(model.id) for model in result.models)
    name_width = max(len(model.name) for model in result.models)
    print(f"{'ID':<{id_width}}  {'NAME':<{name_width}}  CONTEXT")
    for model in result.models:
        print(f"{model.id:<{id_width}}  {model.name:<{name_width}}  {model.context_window}")

    print()
    for key in DEFAULT_ROLE_KEYS:
        print(f"{key} = {defaults.get(key)}")


def run_discover(config: Config, as_json: bool = False) -> int:
    """Run one discovery pass and print it. Returns the exit code."""
    defaults = DefaultsStore()
    result = discover_local_models(config.discovery, ModelRegistry(), defaults)
    if not result.enabled:
        print("Error: no local endpoint configured. Use --endpoint or set LOCAL_ENDPOINT.")
        return 1

    _print_result(result, defaults, as_json)
    return 0


def run_serve(config: Config) -> int:
    """Serve the catalog until interrupted. Returns the exit code."""
    # Import here to avoid slow startup for --help
    try:
        from .server import DiscoveryServer
    except ImportError as e:
        logger.error(f"Failed to import server module: {e}")
        print(f"Error: {e}")
        print("Make sure you have installed: pip install llm-discovery")
        return 1

    server = DiscoveryServer(config=config)
    try:
        server.start()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        print("\nServer stopped.")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _apply_args(load_config(args.config), args)
    except (ConfigValidationError, OSError, ValueError) as e:
        print(f"Error: invalid configuration: {e}")
        sys.exit(2)

    setup_logging(config.logging)

    if args.command == "discover":
        sys.exit(run_discover(config, as_json=args.json))
    sys.exit(run_serve(config))


if __name__ == "__main__":
    main()
