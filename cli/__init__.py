"""
Scripture Study - Command Line Interface

Main CLI entry point for the study engine.
"""
from cli.main import app, main

__all__ = ["app", "main"]
