from __future__ import annotations

import os
import tempfile

# Settings are loaded at import time; keep test logs out of the working tree.
os.environ.setdefault("ATTACHKIT_LOGGING_DIRECTORY", tempfile.mkdtemp(prefix="attachkit-logs-"))
