"""User interface helpers for Restore simulation."""

from .interactive import run_interactive_wizard

__all__ = ["run_interactive_wizard"]
