"""Harvest an iCloud web trust token for rclone's iclouddrive backend."""

__version__ = "0.3.0"
