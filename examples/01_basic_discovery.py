#!/usr/bin/env python3
"""
Example 01: Basic Discovery

Demonstrates:
- Running one discovery pass against LM Studio or llama-server
- Reading the registry and the offered role defaults
- Keeping an explicit default that discovery must not override

Usage:
    # Start LM Studio (port 1234) or llama-server, then:
    LOCAL_ENDPOINT=http://localhost:1234 python examples/01_basic_discovery.py
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from llm_discovery import (
    DEFAULT_ROLE_KEYS,
    DefaultsStore,
    ModelRegistry,
    discover_local_models,
    get_config,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


def main():
    config = get_config().discovery
    if not config.enabled:
        print("Set LOCAL_ENDPOINT (e.g. http://localhost:1234) to run this example")
        return 1

    print("=" * 60)
    print(f"Discovering models at {config.endpoint}")
    print("=" * 60)

    registry = ModelRegistry()
    # User-chosen value; discovery only fills roles left unset
    defaults = DefaultsStore({"agents.title.model": "openai.gpt-4o-mini"})

    result = discover_local_models(config, registry, defaults)

    for model in registry:
        print(f"{model.id:<50} {model.name:<25} ctx={model.context_window}")

    print()
    for key in DEFAULT_ROLE_KEYS:
        print(f"{key:<28} {defaults.get(key)}")

    print(f"\nSlots reported: {result.slots_found}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
