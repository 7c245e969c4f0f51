"""Operational scripts for the Fantasy Book Hub backend."""
