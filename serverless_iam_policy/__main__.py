"""Module entry-point for ``python -m serverless_iam_policy``."""
from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
