"""
Module: charts.py
Tolerance chart for floor vibration checks

Draws the AISC DG11 Fig. 2-1 human comfort curves on log-log axes together
with the calculated peak accelerations of the low and high frequency regimes.
The chart has no computational role: curve values are the baseline table
scaled by the occupancy multipliers, the points come from the results.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
from pathlib import Path
import logging

try:
    import matplotlib
    matplotlib.use('Agg')  # Non-interactive backend
    import matplotlib.pyplot as plt
except ImportError:
    raise ImportError("Matplotlib is required for chart generation. Install it with: pip install matplotlib")

import numpy as np

from floorvib.analyses.vibration import (
    BASELINE_CURVE,
    VibrationInputs,
    VibrationResults,
)

logger = logging.getLogger(__name__)


# Threshold curves drawn on the chart: multiplier -> (label, colour)
THRESHOLD_CURVES = {
    10.0: ('Office Threshold Curve', '#10b981'),
    30.0: ('Mall Threshold Curve', '#f59e0b'),
    100.0: ('Bridge/Track Threshold', '#ef4444'),
}

FREQUENCY_DOMAIN = (1.0, 80.0)      # Hz
ACCELERATION_DOMAIN = (0.01, 20.0)  # %g


@dataclass
class ChartSettings:
    """
    Chart appearance.

    Attributes:
        multipliers: Occupancy multipliers of the threshold curves to draw
        frequency_domain: x axis limits [Hz]
        acceleration_domain: y axis limits [%g]
        figsize: Figure size [in]
        dpi: Resolution when saved as raster image
        title: Chart title
        show_footnote: If True, adds the reference note under the axes
    """
    multipliers: Tuple[float, ...] = (10.0, 30.0, 100.0)
    frequency_domain: Tuple[float, float] = FREQUENCY_DOMAIN
    acceleration_domain: Tuple[float, float] = ACCELERATION_DOMAIN
    figsize: Tuple[float, float] = (10.0, 6.0)
    dpi: int = 200
    title: str = 'Floor Vibration Performance'
    show_footnote: bool = True


@dataclass
class CurveSeries:
    """Plottable (frequency, acceleration) series"""
    label: str
    multiplier: float
    frequencies: np.ndarray = field(repr=False)
    accelerations: np.ndarray = field(repr=False)

    def points(self) -> List[Tuple[float, float]]:
        return [(float(f), float(a)) for f, a in zip(self.frequencies, self.accelerations)]


def threshold_series(multipliers: Sequence[float] = (10.0, 30.0, 100.0)) -> List[CurveSeries]:
    """
    Baseline comfort curve scaled by each occupancy multiplier.

    Args:
        multipliers: Occupancy multipliers M

    Returns:
        One CurveSeries per multiplier, in the given order
    """
    series = []
    for M in multipliers:
        label = THRESHOLD_CURVES.get(float(M), (f'Threshold M={M:g}', None))[0]
        series.append(CurveSeries(
            label=label,
            multiplier=float(M),
            frequencies=BASELINE_CURVE[:, 0].copy(),
            accelerations=BASELINE_CURVE[:, 1] * M,
        ))
    return series


def response_points(inputs: VibrationInputs,
                    results: VibrationResults) -> List[Tuple[str, float, float]]:
    """
    Calculated response points.

    Returns:
        [(name, frequency [Hz], peak acceleration [%g])] for low and high regime
    """
    return [
        ('Peak: Low Freq', inputs.low.dominant_freq_hz, results.low_freq.peak_acceleration),
        ('Peak: High Freq', inputs.high.dominant_freq_hz, results.high_freq.peak_acceleration),
    ]


def plot_vibration_chart(inputs: VibrationInputs,
                         results: VibrationResults,
                         settings: Optional[ChartSettings] = None) -> plt.Figure:
    """
    Plot threshold curves and calculated peaks on log-log axes.

    Args:
        inputs: Evaluated inputs (dominant frequencies)
        results: Calculation results (peak accelerations)
        settings: Chart settings (default: ChartSettings())

    Returns:
        matplotlib Figure (caller closes it)
    """
    settings = settings or ChartSettings()
    fig, ax = plt.subplots(figsize=settings.figsize)

    for series in threshold_series(settings.multipliers):
        colour = THRESHOLD_CURVES.get(series.multiplier, (None, None))[1]
        ax.plot(series.frequencies, series.accelerations,
                color=colour, linewidth=2, label=series.label)

    (_, f_low, a_low), (_, f_high, a_high) = response_points(inputs, results)
    ax.scatter([f_low], [a_low], marker='*', s=220, color='#3b82f6',
               edgecolors='black', zorder=5, label='Low Freq Response')
    ax.scatter([f_high], [a_high], marker='D', s=80, color='#6366f1',
               edgecolors='black', zorder=5, label='High Freq Response')

    ax.set_xscale('log')
    ax.set_yscale('log')
    ax.set_xlim(*settings.frequency_domain)
    ax.set_ylim(*settings.acceleration_domain)

    ax.set_xlabel('Frequency (Hz)', fontsize=12)
    ax.set_ylabel('Peak Acceleration (%g)', fontsize=12)
    ax.set_title(settings.title, fontsize=14, fontweight='bold')
    ax.grid(True, which='both', alpha=0.3, linestyle='--')
    ax.legend(loc='upper left', fontsize=9)

    if settings.show_footnote:
        fig.text(0.5, 0.01,
                 '* Based on AISC Guide 11 Fig 2-1 Human Comfort Tolerance Limits. '
                 'Star/Diamond points indicate the calculated peak floor response.',
                 ha='center', fontsize=8, style='italic', color='grey')

    plt.tight_layout(rect=(0, 0.03, 1, 1))
    return fig


def save_vibration_chart(inputs: VibrationInputs,
                         results: VibrationResults,
                         path: str,
                         settings: Optional[ChartSettings] = None) -> Path:
    """
    Render the chart and save it (format from the file extension).

    Returns:
        Path of the saved image
    """
    settings = settings or ChartSettings()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig = plot_vibration_chart(inputs, results, settings)
    try:
        fig.savefig(path, dpi=settings.dpi, bbox_inches='tight')
    finally:
        plt.close(fig)

    logger.info(f"Chart saved: {path}")
    return path
