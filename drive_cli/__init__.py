"""Interactive command-line client for the drive API."""
