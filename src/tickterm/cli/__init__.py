"""Command line interface: demo and debugging commands."""
