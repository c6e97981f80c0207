"""CLI module.

This module provides the mediflow command line interface.
"""
