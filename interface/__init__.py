"""Caller-facing front ends for the engine."""
