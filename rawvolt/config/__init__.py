# This module exposes the runtime configuration.

"""Configuration for the rawvolt reader."""

from . import config

__all__ = ['config']
