"""
Module: vibration/__init__.py
Floor vibration serviceability check per AISC Design Guide 11

This module evaluates the peak floor acceleration produced by human activity
and compares it with the frequency-dependent human comfort limits of
AISC Design Guide 11 Fig. 2-1 (ISO 2631-2 baseline scaled by occupancy).

Two regimes are checked with the same activity, damping and body weight:
- low frequency (resonant build-up, fn <= 9 Hz for walking)
- high frequency (transient / impulsive response)

Check types supported:
- 'WALKING': walking excitation, office/residential limits (Eq 7-1)
- 'RUNNING': running on tracks/outdoor bridges (Eq 7-7)
- 'WALKING & RUNNING': walking formulas, office/residential limits
- 'RHYTHMIC': rhythmic activities, shopping/dining limits (Eq 7-9)
- 'SENSITIVE EQUIPMENT': equipment sensitivity check (Eq 7-11)

Units: FRF in %g/lb, frequency in Hz, body weight converted kg -> lb,
accelerations in %g.

Examples:
    >>> from floorvib.analyses.vibration import (
    ...     VibrationInputs, RegimeInput, ActivityType, calculate_results
    ... )
    >>> inputs = VibrationInputs(
    ...     activity_type=ActivityType.WALKING,
    ...     damping_ratio_percent=3.0,
    ...     body_weight_kg=75.0,
    ...     low=RegimeInput(frf_max=0.02, dominant_freq_hz=5.5),
    ...     high=RegimeInput(frf_max=0.015, dominant_freq_hz=12.0),
    ... )
    >>> results = calculate_results(inputs)
    >>> print(f"Low freq: {results.low_freq.peak_acceleration:.4f} %g")
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from enum import Enum
import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
# ENUMS AND CONSTANTS
# ============================================================================

class ActivityType(Enum):
    """Vibration check types (activity / occupancy category)"""
    WALKING = 'WALKING'
    RUNNING = 'RUNNING'
    WALKING_AND_RUNNING = 'WALKING & RUNNING'
    RHYTHMIC = 'RHYTHMIC'
    SENSITIVE_EQUIPMENT = 'SENSITIVE EQUIPMENT'

    @classmethod
    def parse(cls, value: Union['ActivityType', str]) -> 'ActivityType':
        """
        Resolve an activity type from a member, its name or its display value.

        Matching is case-insensitive; '_' and ' ' are interchangeable and the
        legacy spelling 'RHYTHMETIC' is accepted.

        Raises:
            ValueError: If the value matches no activity type
        """
        if isinstance(value, cls):
            return value

        key = str(value).strip().upper().replace('_', ' ')
        key = ' '.join(key.split())
        if key == 'RHYTHMETIC':
            return cls.RHYTHMIC

        for member in cls:
            if key in (member.value, member.name.replace('_', ' ')):
                return member

        raise ValueError(
            f"Activity type {value!r} not supported. "
            f"Available: {[m.value for m in cls]}"
        )


class Regime(Enum):
    """Frequency regime of a check"""
    LOW = 'low'    # Resonant response
    HIGH = 'high'  # Transient / impulsive response


# kg -> lb (all formulas are written in pound-force based units)
KG_TO_LB = 2.20462

# AISC DG11 Fig. 2-1 - ISO 2631-2 baseline [Hz, %g] at M = 1.
# Read-only: shared by every evaluation.
BASELINE_CURVE = np.array([
    [1.0, 0.10],
    [2.0, 0.07],
    [4.0, 0.05],
    [8.0, 0.05],
    [16.0, 0.10],
    [32.0, 0.20],
    [64.0, 0.40],
    [100.0, 0.625],
])
BASELINE_CURVE.setflags(write=False)

# Occupancy multipliers M applied to the baseline curve
OCCUPANCY_MULTIPLIERS = {
    ActivityType.WALKING: 10.0,              # Offices, residences
    ActivityType.WALKING_AND_RUNNING: 10.0,  # Offices, residences
    ActivityType.RUNNING: 100.0,             # Outdoor bridges, tracks
    ActivityType.RHYTHMIC: 30.0,             # Shopping malls, dining
    ActivityType.SENSITIVE_EQUIPMENT: 2.0,   # High sensitivity (~0.1 %g)
}

# Recommended tolerance limits [%g] - AISC DG11 Table 2-1
COMFORT_LIMITS = {
    'OFFICE': 0.5,
    'MALL': 1.5,
    'BRIDGE_OUTDOOR': 5.0,
    'SENSITIVE_01': 0.1,
}

# Rhythmic excitation limits [%g] - AISC DG11 Table 5-2
RHYTHMIC_LIMITS = {
    'OFFICE': 0.5,
    'DINING': 2.0,
    'AEROBICS': 5.0,  # Average of the 4-7 %g range
}

# Walking: resonant formula applies up to this frequency [Hz]
RESONANT_FREQ_LIMIT = 9.0

# Running: (lower bound [Hz], harmonic); the last bound exceeded wins
RUNNING_HARMONIC_BANDS = ((4.0, 2), (8.0, 3), (12.0, 4))
RUNNING_DYNAMIC_COEFFICIENTS = {1: 1.4, 2: 0.4, 3: 0.2}
RUNNING_DYNAMIC_COEFFICIENT_HIGHER = 0.1
RUNNING_STEPS = 10

RHYTHMIC_DYNAMIC_COEFFICIENT = 1.25

# Formula labels (report traceability only)
FORMULA_WALKING_RESONANT = "ap = FRF_Max * α * Q * ρ (Eq 7-1)"
FORMULA_WALKING_TRANSIENT = "Effective Peak Approximation (ESPA-based)"
FORMULA_RUNNING = "ap = FRF_Max * αh * Q * [1 - e^(-2πβhN)] (Eq 7-7)"
FORMULA_RHYTHMIC = "ap,i = FRF * αi * wp (Eq 7-9)"
FORMULA_SENSITIVE = "ap = 1.3 * FRF_Max * α * Q (Eq 7-11)"


class InputValidationError(ValueError):
    """Raised when vibration input parameters fail validation"""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


# ============================================================================
# INPUT AND RESULT DATACLASSES
# ============================================================================

@dataclass(frozen=True)
class RegimeInput:
    """
    Regime-specific floor parameters.

    Attributes:
        frf_max: Maximum frequency response factor [%g/lb]
        dominant_freq_hz: Dominant frequency of the governing mode [Hz]
    """
    frf_max: float
    dominant_freq_hz: float


@dataclass(frozen=True)
class VibrationInputs:
    """
    Input parameters for one vibration evaluation.

    No validation on construction: the calculation accepts any number and
    propagates non-finite values. Call validate() before evaluating user data.

    Attributes:
        activity_type: Check type (drives formula and occupancy multiplier)
        damping_ratio_percent: Modal damping ratio [%], e.g. 3.0
        body_weight_kg: Design body weight Q [kg]
        low: Low-frequency regime parameters
        high: High-frequency regime parameters
    """
    activity_type: ActivityType
    damping_ratio_percent: float
    body_weight_kg: float
    low: RegimeInput
    high: RegimeInput

    @property
    def damping_ratio(self) -> float:
        """Damping ratio β as a fraction of critical"""
        return self.damping_ratio_percent / 100.0

    @property
    def weight_lb(self) -> float:
        """Body weight Q [lb]"""
        return self.body_weight_kg * KG_TO_LB

    def regime(self, regime: Regime) -> RegimeInput:
        return self.low if regime == Regime.LOW else self.high

    def validate(self) -> 'VibrationInputs':
        """
        Check that every numeric field is finite and strictly positive.

        Returns:
            self, to allow chaining

        Raises:
            InputValidationError: On the first invalid field
        """
        fields = [
            ('dampingRatioPercent', self.damping_ratio_percent),
            ('bodyWeightKg', self.body_weight_kg),
            ('frfMaxLow', self.low.frf_max),
            ('dominantFreqLow', self.low.dominant_freq_hz),
            ('frfMaxHigh', self.high.frf_max),
            ('dominantFreqHigh', self.high.dominant_freq_hz),
        ]
        for name, value in fields:
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise InputValidationError(name, f"expected a number, got {value!r}")
            if not math.isfinite(value):
                raise InputValidationError(name, f"must be finite, got {value}")
            if value <= 0:
                raise InputValidationError(name, f"must be > 0, got {value}")
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'VibrationInputs':
        """
        Build inputs from a form/case-file record.

        Accepts the nested shape ({'low': {'frfMax', 'dominantFreqHz'}, ...})
        or the flat shape (frfMaxLow, dominantFreqLow, ...), with camelCase
        or snake_case keys. 'checkType' is accepted for 'activityType'.

        Raises:
            InputValidationError: If a field is missing or not numeric
        """
        def pick(source: Mapping[str, Any], *names: str) -> Any:
            for name in names:
                if name in source and source[name] is not None:
                    return source[name]
            raise InputValidationError(names[0], "missing")

        def number(name: str, value: Any) -> float:
            try:
                return float(value)
            except (TypeError, ValueError):
                raise InputValidationError(name, f"expected a number, got {value!r}")

        def regime(key: str, suffix: str) -> RegimeInput:
            nested = data.get(key)
            if isinstance(nested, Mapping):
                frf = pick(nested, 'frfMax', 'frf_max')
                freq = pick(nested, 'dominantFreqHz', 'dominant_freq_hz', 'dominantFreq')
            else:
                frf = pick(data, f'frfMax{suffix}', f'frf_max_{key}')
                freq = pick(data, f'dominantFreq{suffix}', f'dominant_freq_{key}',
                            f'dominantFreqHz{suffix}')
            return RegimeInput(
                frf_max=number(f'frfMax{suffix}', frf),
                dominant_freq_hz=number(f'dominantFreq{suffix}', freq),
            )

        activity = pick(data, 'activityType', 'activity_type', 'checkType', 'check_type')
        try:
            activity_type = ActivityType.parse(activity)
        except ValueError as e:
            raise InputValidationError('activityType', str(e))

        return cls(
            activity_type=activity_type,
            damping_ratio_percent=number(
                'dampingRatioPercent',
                pick(data, 'dampingRatioPercent', 'damping_ratio_percent', 'dampingRatio')),
            body_weight_kg=number(
                'bodyWeightKg', pick(data, 'bodyWeightKg', 'body_weight_kg')),
            low=regime('low', 'Low'),
            high=regime('high', 'High'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'activityType': self.activity_type.value,
            'dampingRatioPercent': self.damping_ratio_percent,
            'bodyWeightKg': self.body_weight_kg,
            'low': {'frfMax': self.low.frf_max, 'dominantFreqHz': self.low.dominant_freq_hz},
            'high': {'frfMax': self.high.frf_max, 'dominantFreqHz': self.high.dominant_freq_hz},
        }


@dataclass(frozen=True)
class RegimeResult:
    """
    Outcome of the check for one regime.

    Attributes:
        peak_acceleration: Predicted peak acceleration ap [%g]
        limit: Tolerance limit at the dominant frequency [%g]
        is_acceptable: True if ap <= limit
        formula_used: Label of the equation applied (traceability only)
        harmonic: Governing harmonic (running only)
    """
    peak_acceleration: float
    limit: float
    is_acceptable: bool
    formula_used: str
    harmonic: Optional[int] = None

    @property
    def ratio(self) -> float:
        """Demand/capacity ratio ap/limit"""
        if self.limit == 0:
            return math.inf
        return self.peak_acceleration / self.limit

    @property
    def status(self) -> str:
        return 'PASS' if self.is_acceptable else 'FAIL'

    def to_dict(self) -> Dict[str, Any]:
        out = {
            'peakAcceleration': self.peak_acceleration,
            'limit': self.limit,
            'isAcceptable': self.is_acceptable,
            'formulaUsed': self.formula_used,
        }
        if self.harmonic is not None:
            out['harmonic'] = self.harmonic
        return out


@dataclass(frozen=True)
class VibrationResults:
    """Results for both regimes"""
    low_freq: RegimeResult
    high_freq: RegimeResult

    @property
    def all_acceptable(self) -> bool:
        return self.low_freq.is_acceptable and self.high_freq.is_acceptable

    def regime(self, regime: Regime) -> RegimeResult:
        return self.low_freq if regime == Regime.LOW else self.high_freq

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lowFreq': self.low_freq.to_dict(),
            'highFreq': self.high_freq.to_dict(),
        }


# ============================================================================
# THRESHOLD INTERPOLATOR
# ============================================================================

def occupancy_multiplier(activity_type: ActivityType) -> float:
    """Occupancy multiplier M for a check type"""
    return OCCUPANCY_MULTIPLIERS[ActivityType.parse(activity_type)]


def limit_at_frequency(frequency_hz: float, activity_type: ActivityType) -> float:
    """
    Acceptable peak acceleration at a frequency [%g].

    Log-log linear interpolation between the baseline anchors, scaled by the
    occupancy multiplier. Outside the tabulated range the boundary anchor
    value is used (no extrapolation).

    Args:
        frequency_hz: Frequency [Hz]
        activity_type: Check type (selects M)

    Returns:
        Limit [%g]; NaN if frequency_hz is NaN
    """
    M = occupancy_multiplier(activity_type)
    freqs = BASELINE_CURVE[:, 0]
    accels = BASELINE_CURVE[:, 1]

    if frequency_hz < freqs[0]:
        return float(accels[0] * M)
    if frequency_hz > freqs[-1]:
        return float(accels[-1] * M)

    # Segment index i such that freqs[i] <= f <= freqs[i+1]
    i = int(np.searchsorted(freqs, frequency_hz, side='right')) - 1
    i = min(max(i, 0), len(freqs) - 2)

    f1, f2 = freqs[i], freqs[i + 1]
    a1, a2 = accels[i], accels[i + 1]

    # Anchors are returned as tabulated
    if frequency_hz == f2:
        return float(a2 * M)

    # Straight line in log-log space: a = a1 * (f / f1) ** slope
    slope = np.log10(a2 / a1) / np.log10(f2 / f1)
    return float(a1 * (frequency_hz / f1) ** slope * M)


def limit_curve(activity_type: ActivityType,
                frequencies: Optional[np.ndarray] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample the limit curve of a check type.

    Args:
        activity_type: Check type
        frequencies: Sampling frequencies [Hz] (default: 1-100 Hz, log spaced)

    Returns:
        (frequencies, limits) arrays
    """
    if frequencies is None:
        frequencies = np.logspace(0.0, 2.0, 60)
    frequencies = np.asarray(frequencies, dtype=float)
    limits = np.array([limit_at_frequency(f, activity_type) for f in frequencies])
    return frequencies, limits


# ============================================================================
# PEAK RESPONSE CALCULATOR
# ============================================================================

def resonance_factor(damping_ratio: float) -> float:
    """
    Damping-dependent resonance build-up factor ρ (walking, Eq 7-1).

    ρ = 1.0 for β >= 0.03, 50β + 0.25 for β < 0.01, 12.5β + 0.625 otherwise.
    """
    if damping_ratio >= 0.03:
        return 1.0
    if damping_ratio < 0.01:
        return 50.0 * damping_ratio + 0.25
    return 12.5 * damping_ratio + 0.625


def running_harmonic(dominant_freq_hz: float) -> int:
    """Governing running harmonic h for a dominant frequency"""
    h = 1
    for lower_bound, harmonic in RUNNING_HARMONIC_BANDS:
        if dominant_freq_hz > lower_bound:
            h = harmonic
    return h


def _walking(frf_max, f, beta, Q):
    if f <= RESONANT_FREQ_LIMIT:
        alpha = 0.09 * np.exp(-0.075 * f)
        rho = resonance_factor(beta)
        return frf_max * alpha * Q * rho, FORMULA_WALKING_RESONANT, None
    # High frequency: transient footstep response, ESPA scaling (DG11 §7.4.1)
    return frf_max * 0.085 * Q, FORMULA_WALKING_TRANSIENT, None


def _running(frf_max, f, beta, Q):
    h = running_harmonic(f)
    alpha_h = RUNNING_DYNAMIC_COEFFICIENTS.get(h, RUNNING_DYNAMIC_COEFFICIENT_HIGHER)
    build_up = 1.0 - np.exp(-2.0 * np.pi * beta * h * RUNNING_STEPS)
    return frf_max * alpha_h * Q * build_up, FORMULA_RUNNING, h


def _rhythmic(frf_max, f, beta, Q):
    return frf_max * RHYTHMIC_DYNAMIC_COEFFICIENT * (Q / 25.0), FORMULA_RHYTHMIC, None


def _sensitive(frf_max, f, beta, Q):
    alpha = 0.1 * np.exp(-0.1 * f)
    return 1.3 * frf_max * alpha * Q, FORMULA_SENSITIVE, None


_PEAK_FORMULAS = {
    ActivityType.WALKING: _walking,
    ActivityType.WALKING_AND_RUNNING: _walking,
    ActivityType.RUNNING: _running,
    ActivityType.RHYTHMIC: _rhythmic,
    ActivityType.SENSITIVE_EQUIPMENT: _sensitive,
}


def evaluate_regime(
    frf_max: float,
    dominant_freq_hz: float,
    activity_type: ActivityType,
    damping_ratio: float,
    weight_lb: float
) -> RegimeResult:
    """
    Predicted peak acceleration for one regime and its comparison with the limit.

    Args:
        frf_max: Maximum FRF [%g/lb]
        dominant_freq_hz: Dominant frequency [Hz]
        activity_type: Check type
        damping_ratio: Damping ratio β (fraction, e.g. 0.03)
        weight_lb: Body weight Q [lb]

    Returns:
        RegimeResult
    """
    activity_type = ActivityType.parse(activity_type)
    peak, formula, harmonic = _PEAK_FORMULAS[activity_type](
        frf_max, dominant_freq_hz, damping_ratio, weight_lb
    )
    peak = float(peak)
    limit = limit_at_frequency(dominant_freq_hz, activity_type)

    logger.debug(
        f"{activity_type.value} @ {dominant_freq_hz} Hz: ap={peak:.4f} %g, "
        f"limit={limit:.3f} %g [{formula}]"
    )

    return RegimeResult(
        peak_acceleration=peak,
        limit=limit,
        is_acceptable=bool(peak <= limit),
        formula_used=formula,
        harmonic=harmonic,
    )


def calculate_results(inputs: VibrationInputs) -> VibrationResults:
    """
    Evaluate both regimes of a vibration check.

    Damping is converted from % to a fraction and body weight from kg to lb
    before the formulas are applied.
    """
    beta = inputs.damping_ratio
    Q = inputs.weight_lb

    return VibrationResults(
        low_freq=evaluate_regime(inputs.low.frf_max, inputs.low.dominant_freq_hz,
                                 inputs.activity_type, beta, Q),
        high_freq=evaluate_regime(inputs.high.frf_max, inputs.high.dominant_freq_hz,
                                  inputs.activity_type, beta, Q),
    )


__all__ = [
    'ActivityType',
    'Regime',
    'RegimeInput',
    'VibrationInputs',
    'RegimeResult',
    'VibrationResults',
    'InputValidationError',
    'KG_TO_LB',
    'BASELINE_CURVE',
    'OCCUPANCY_MULTIPLIERS',
    'COMFORT_LIMITS',
    'RHYTHMIC_LIMITS',
    'RUNNING_STEPS',
    'occupancy_multiplier',
    'limit_at_frequency',
    'limit_curve',
    'resonance_factor',
    'running_harmonic',
    'evaluate_regime',
    'calculate_results',
]
