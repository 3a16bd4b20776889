"""ABOUTME: tierdex ranks Pokemon by simulated raid and PVP performance.
ABOUTME: Exposes the package version used by settings and the CLI."""

__version__ = "0.1.0"
