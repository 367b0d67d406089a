"""Command line interface (Typer + Rich).

Only presentation lives here; every command delegates to `core.services`.
"""
