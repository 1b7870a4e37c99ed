import os

# The engine is built at import time, so point it at SQLite before anything imports tt_core.db.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
