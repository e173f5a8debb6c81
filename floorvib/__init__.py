"""
FLOORVIB v1.0.0

Floor vibration serviceability checks according to AISC Design Guide 11.

Main modules:
- analyses.vibration: limit-curve interpolation and peak acceleration formulas
- reports: chart rendering and report export (PDF, Word, Markdown)
- cli: command line input form

License: MIT
"""

__version__ = '1.0.0'

from floorvib.analyses.vibration import (
    ActivityType,
    RegimeInput,
    VibrationInputs,
    RegimeResult,
    VibrationResults,
    InputValidationError,
    limit_at_frequency,
    evaluate_regime,
    calculate_results,
)

__all__ = [
    'ActivityType',
    'RegimeInput',
    'VibrationInputs',
    'RegimeResult',
    'VibrationResults',
    'InputValidationError',
    'limit_at_frequency',
    'evaluate_regime',
    'calculate_results',
    '__version__',
]
