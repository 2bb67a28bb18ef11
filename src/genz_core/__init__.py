"""Shared leaf layer: errors, guard modes, configuration and descriptors."""
