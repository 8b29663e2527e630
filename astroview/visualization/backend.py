"""Configure matplotlib backend for headless/non-headless operation."""

from __future__ import annotations

import os


def configure_matplotlib_backend() -> str:
    """Configure matplotlib backend based on environment.

    Checks ASTROVIEW_HEADLESS environment variable:
    - "true", "1", "yes" (case-insensitive) -> headless mode (Agg backend)
    - anything else or unset -> non-headless mode (default backend)

    Also respects MPLBACKEND if set (takes precedence).

    Returns:
        Backend name that was configured
    """
    if 'MPLBACKEND' in os.environ:
        return os.environ['MPLBACKEND']

    if _headless_flag():
        # Must be set before matplotlib.pyplot is imported
        os.environ['MPLBACKEND'] = 'Agg'
        return 'Agg'

    return 'default'


def _headless_flag() -> bool:
    return os.environ.get('ASTROVIEW_HEADLESS', '').lower() in ('true', '1', 'yes')


def is_headless() -> bool:
    """Check if running in headless mode (flag set or Agg backend selected)."""
    backend = os.environ.get('MPLBACKEND', '').lower()
    return _headless_flag() or backend == 'agg'
