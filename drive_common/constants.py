"""Project-wide constants shared by the API server and the CLI."""

KIB: int = 1024
MIB: int = 1024 * KIB
GIB: int = 1024 * MIB

API_KEY_PREFIX: str = "drv_"

DEFAULT_API_PORT: int = 8000

VIEW_NAMES = ("my-drive", "recent", "starred", "trash")

SORT_FIELDS = ("name", "size", "createdAt", "updatedAt")
