"""Tailwind CSS + shadcn/ui setup CLI for Vite projects.

The command surface is implemented with Typer and Rich; the config patching
core lives in plain modules so it can be exercised without a terminal or a
package manager.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
