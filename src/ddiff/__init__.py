"""ddiff - Compare two directory trees by content hash."""

__version__ = "0.1.0"

# Directory and file constants
CONFIG_DIR = "~/.config/ddiff"
CONFIG_FILE = "config.json"

# Files are read in 16 KiB chunks, matching BLAKE3's internal chunk batching
DEFAULT_CHUNK_SIZE = 16 * 1024
