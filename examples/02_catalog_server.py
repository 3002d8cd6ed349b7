#!/usr/bin/env python3
"""
Example 02: Catalog Server

Demonstrates:
- Serving the discovered catalog over HTTP
- Listing models and defaults with requests
- Re-triggering discovery through the admin endpoint

Usage:
    # Terminal 1: Start server
    llm-discovery --endpoint http://localhost:1234 serve --port 8100

    # Terminal 2: Run example
    python examples/02_catalog_server.py
"""

import sys

import requests

BASE_URL = "http://127.0.0.1:8100"


def main():
    try:
        health = requests.get(f"{BASE_URL}/health", timeout=5).json()
    except requests.RequestException as e:
        print(f"Server not reachable at {BASE_URL}: {e}")
        return 1

    print(f"Server {health['version']}: {health['models_registered']} models registered")

    print("\nLocal models:")
    models = requests.get(f"{BASE_URL}/v1/models", params={"provider": "local"}, timeout=5).json()
    for model in models["data"]:
        print(f"  {model['id']:<50} {model['context_window']}")

    print("\nDefaults:")
    for key, value in requests.get(f"{BASE_URL}/v1/defaults", timeout=5).json().items():
        print(f"  {key:<28} {value}")

    print("\nRefreshing...")
    status = requests.post(f"{BASE_URL}/admin/discovery/refresh", timeout=30).json()
    print(f"  {status['models_found']} models, {status['slots_found']} slots")
    return 0


if __name__ == "__main__":
    sys.exit(main())
