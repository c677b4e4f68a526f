"""Global pytest configuration."""

import os

# Tests run against the in-memory store unless a fixture wires SQL explicitly
os.environ.pop("DATABASE_URL", None)
