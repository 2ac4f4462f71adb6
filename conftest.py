"""Root conftest: runs before any test module imports."""

import os

# Rich honours FORCE_COLOR even under CliRunner; tests compare plain text.
os.environ.pop("FORCE_COLOR", None)
os.environ["NO_COLOR"] = "1"
