"""Command-line interface modules for glide pipeline execution.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from glide.cli.run_pipeline import run_glide_pipeline, main

__all__ = ['run_glide_pipeline', 'main']
