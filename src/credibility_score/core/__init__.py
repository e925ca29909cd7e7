"""Core score engine — tokenizer, parser, element catalog, and evaluator.

This module is framework-agnostic. It has no dependency on MCP or any server
framework, and performs no I/O.
"""
