"""Tests package for llm_discovery."""
