"""Shared helpers for the drive API server and CLI."""
