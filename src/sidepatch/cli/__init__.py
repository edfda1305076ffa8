"""
CLI Command Modules

Each module contains a logical group of related commands.
"""

from sidepatch.cli import patch, recipe

__all__ = ['patch', 'recipe']
