"""CLI package executable module.

Allows running the CLI via:

    python -m chatgate.service.cli [args]
"""

from __future__ import annotations

from . import main


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
