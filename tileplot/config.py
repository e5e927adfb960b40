"""
Default settings for trace resolution, fitting and figure themes.
"""
import os
from pathlib import Path

# ========== Confidence intervals ==========

DEFAULT_CI_LEVELS = (0.67, 0.95)  # roughly 1 and 2 standard errors
DEFAULT_CI_MARK = ("shaded",)
CI_MARKS = ("shaded", "dashed")

# ========== Fits ==========

FIT_METHODS = ("linear", "wls", "robust", "mmest", "loess")
DEFAULT_FIT_METHOD = "linear"
DEFAULT_FIT_CI = (0.95,)
DEFAULT_FIT_MARK = ("shaded",)
DEFAULT_FIT_COL = "black"
DEFAULT_FIT_SPAN = 0.95
DEFAULT_FIT_GRID = 100
DEFAULT_LOESS_BOOTSTRAP = 200

# ========== Figures ==========

DEFAULT_LINE_COL = "black"
DEFAULT_LINE_WIDTH = 1.5
BAND_OPACITY = 0.2
FADED_BAND_OPACITY = 0.08
FADED_LINE_OPACITY = 0.45

THEMES = {
    # Scientific style inspired by ROOT/matplotlib
    'professional': {
        'template': 'plotly_white',
        'grid_color': 'rgba(200, 200, 200, 0.3)',
        'bg_color': 'white',
        'paper_bg': '#f8f9fa',
        'font_family': 'Computer Modern, serif',
        'title_font_size': 18,
        'axis_font_size': 12,
    },
    'dark': {
        'template': 'plotly_dark',
        'grid_color': 'rgba(100, 100, 100, 0.3)',
        'bg_color': '#111111',
        'paper_bg': '#0a0a0a',
        'font_family': 'Computer Modern, monospace',
        'title_font_size': 18,
        'axis_font_size': 12,
    },
    'default': {
        'template': 'plotly',
        'grid_color': 'rgba(200, 200, 200, 0.3)',
        'bg_color': 'white',
        'paper_bg': 'white',
        'font_family': 'Arial, sans-serif',
        'title_font_size': 16,
        'axis_font_size': 11,
    },
}


def default_theme() -> str:
    """Theme used when none is requested (``TILEPLOT_THEME`` overrides)."""
    return os.environ.get("TILEPLOT_THEME", "professional")


def get_theme(name: str = None) -> dict:
    """Return the theme settings, falling back to plain plotly for unknown names."""
    return THEMES.get(name or default_theme(), THEMES['default'])


def output_dir() -> Path:
    """Directory where rendered figures go when no explicit path is given."""
    override = os.environ.get("TILEPLOT_OUTPUT_DIR")
    if override:
        return Path(override)
    return Path.home() / ".tileplot"
