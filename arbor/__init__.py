"""Arbor: a chess engine built on a reusable, lazily expanded alpha-beta search tree."""

__version__ = "0.1.0"
