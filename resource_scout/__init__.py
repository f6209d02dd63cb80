"""
ResourceScout package initializer.
Defines package version; the CLI lives in :mod:`resource_scout.cli`.
"""
__version__ = "0.1.0"
