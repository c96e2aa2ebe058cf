"""
Local site inventory for multi-container development environments.

The package classifies running containers into logical sites, merges their
per-container facts, and waits for published ports to become available.
"""

__all__ = []
