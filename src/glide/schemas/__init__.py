"""Pydantic configuration schemas for GLIDE pipeline.

This module provides strictly typed configuration models for the growth
line extraction pipeline. All configuration validation, coercion, and
normalization happens at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from glide.schemas.resolve import resolve_config
from glide.schemas.internal import InternalConfig
from glide.schemas.param import ParamConfig
from glide.schemas.user import UserConfig
from glide.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
