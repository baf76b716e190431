"""Module entrypoint.

Allows:
    python -m loglens
"""

from __future__ import annotations

from loglens.server.log_server import main

if __name__ == "__main__":
    main()
