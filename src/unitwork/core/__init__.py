"""Ambient primitives: errors, logging, settings, connection protocol and factory."""
