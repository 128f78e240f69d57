"""Protocols and type aliases shared between the engine and its collaborators."""
