"""
The `config` package provides two core building blocks for establishing and managing database connections.

Contents:
    - config: Configuration layer - strongly typed app settings loaded from environment variables (with .env support), built lazily through `get_settings()`
    - connection_engine: Database layer - builds a connection URL from those settings and wraps the Engine and session factory in a `Database` object with an explicit init/teardown lifecycle
"""
