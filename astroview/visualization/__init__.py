"""Point cloud visualization with matplotlib.

Plotting lives in `astroview.visualization.plotting`; it is not imported here
so that `configure_matplotlib_backend` can run before matplotlib loads.
"""

from astroview.visualization.backend import configure_matplotlib_backend, is_headless

__all__ = [
    'configure_matplotlib_backend',
    'is_headless',
]
