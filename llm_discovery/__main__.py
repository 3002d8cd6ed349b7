#!/usr/bin/env python3
"""
Entry point for running llm_discovery as a module.

Usage:
    python -m llm_discovery discover --endpoint http://localhost:1234
    python -m llm_discovery serve --port 8100
    python -m llm_discovery --help
"""

from llm_discovery.cli import main

if __name__ == "__main__":
    main()
