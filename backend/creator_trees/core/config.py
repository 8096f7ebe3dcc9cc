import os
from dotenv import load_dotenv

# Load .env from the backend directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

# Storage defaults live in backend/data/
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(BASE_DIR, "..", ".."))


def backend_path(path: str) -> str:
    """Relative paths from the environment resolve against backend/, not the cwd."""
    return path if os.path.isabs(path) else os.path.abspath(os.path.join(BACKEND_DIR, path))


CREATOR_TREES_DB_PATH: str = backend_path(os.getenv(
    "CREATOR_TREES_DB_PATH",
    os.path.join(BACKEND_DIR, "data", "creator_trees.db"),
))

# One key per user in the key-value store: <prefix><user_id>
STORAGE_KEY_PREFIX: str = os.getenv("STORAGE_KEY_PREFIX", "gep_creatorTrees_")

# Master graph export (list of concept records or {"nodes": [...]})
MASTER_GRAPH_PATH: str = backend_path(os.getenv(
    "MASTER_GRAPH_PATH",
    os.path.join(BACKEND_DIR, "data", "master_graph.json"),
))

# Slugs: slugify(title) + "-" + random suffix, capped at SLUG_MAX_LENGTH
SLUG_SUFFIX_LENGTH: int = int(os.getenv("SLUG_SUFFIX_LENGTH", "12"))
SLUG_MAX_LENGTH: int = int(os.getenv("SLUG_MAX_LENGTH", "80"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
