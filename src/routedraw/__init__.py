"""Freehand route drawing service."""
