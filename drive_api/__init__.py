"""Cloud drive API service."""
