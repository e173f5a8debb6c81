"""
Test Suite for Vibration Module - AISC Design Guide 11
======================================================

Test cases for the limit-curve interpolation and the peak acceleration
formulas of the floor vibration check.
"""

import math

import pytest
import numpy as np
from floorvib.analyses.vibration import (
    ActivityType,
    Regime,
    RegimeInput,
    VibrationInputs,
    RegimeResult,
    InputValidationError,
    BASELINE_CURVE,
    OCCUPANCY_MULTIPLIERS,
    KG_TO_LB,
    occupancy_multiplier,
    limit_at_frequency,
    limit_curve,
    resonance_factor,
    running_harmonic,
    evaluate_regime,
    calculate_results,
)


@pytest.fixture
def office_inputs():
    """Initial values of the input form (walking, office)"""
    return VibrationInputs(
        activity_type=ActivityType.WALKING,
        damping_ratio_percent=3.0,
        body_weight_kg=75.0,
        low=RegimeInput(frf_max=0.02, dominant_freq_hz=5.5),
        high=RegimeInput(frf_max=0.015, dominant_freq_hz=12.0),
    )


class TestActivityType:
    """Test ActivityType parsing"""

    def test_parse_member(self):
        assert ActivityType.parse(ActivityType.RUNNING) is ActivityType.RUNNING

    def test_parse_display_value(self):
        assert ActivityType.parse('WALKING & RUNNING') is ActivityType.WALKING_AND_RUNNING
        assert ActivityType.parse('SENSITIVE EQUIPMENT') is ActivityType.SENSITIVE_EQUIPMENT

    def test_parse_name_case_insensitive(self):
        assert ActivityType.parse('walking_and_running') is ActivityType.WALKING_AND_RUNNING
        assert ActivityType.parse('sensitive_equipment') is ActivityType.SENSITIVE_EQUIPMENT
        assert ActivityType.parse(' rhythmic ') is ActivityType.RHYTHMIC

    def test_parse_legacy_spelling(self):
        """Legacy 'RHYTHMETIC' value maps to RHYTHMIC"""
        assert ActivityType.parse('RHYTHMETIC') is ActivityType.RHYTHMIC

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="not supported"):
            ActivityType.parse('DANCING')


class TestThresholdInterpolator:
    """Test frequency-dependent tolerance limits"""

    def test_multipliers(self):
        assert occupancy_multiplier(ActivityType.WALKING) == 10.0
        assert occupancy_multiplier(ActivityType.WALKING_AND_RUNNING) == 10.0
        assert occupancy_multiplier(ActivityType.RUNNING) == 100.0
        assert occupancy_multiplier(ActivityType.RHYTHMIC) == 30.0
        assert occupancy_multiplier(ActivityType.SENSITIVE_EQUIPMENT) == 2.0

    def test_flat_segment(self):
        """4-8 Hz is flat at 0.05 %g baseline -> 0.5 %g for offices"""
        assert limit_at_frequency(4.0, ActivityType.WALKING) == 0.5
        assert limit_at_frequency(8.0, ActivityType.WALKING) == 0.5
        assert limit_at_frequency(5.5, ActivityType.WALKING) == 0.5
        assert limit_at_frequency(6.0, ActivityType.RHYTHMIC) == 1.5

    def test_boundary_anchors(self):
        assert limit_at_frequency(1.0, ActivityType.WALKING) == 1.0
        assert limit_at_frequency(100.0, ActivityType.WALKING) == 6.25

    def test_every_anchor_is_reproduced(self):
        for f, a in BASELINE_CURVE:
            assert limit_at_frequency(f, ActivityType.WALKING) == a * 10.0

    def test_clamping_below_range(self):
        assert limit_at_frequency(0.5, ActivityType.WALKING) == pytest.approx(
            limit_at_frequency(1.0, ActivityType.WALKING))

    def test_clamping_above_range(self):
        assert limit_at_frequency(150.0, ActivityType.WALKING) == pytest.approx(
            limit_at_frequency(100.0, ActivityType.WALKING))

    def test_log_log_interpolation(self):
        """Between 8 and 16 Hz the baseline is proportional to f"""
        # 0.05 * (12/8) * 10
        assert limit_at_frequency(12.0, ActivityType.WALKING) == pytest.approx(0.75)

    def test_log_log_interpolation_descending_segment(self):
        """Between 1 and 2 Hz: log-linear between 0.10 and 0.07"""
        f = 1.5
        slope = math.log10(0.07 / 0.10) / math.log10(2.0)
        expected = 10 ** (math.log10(0.10) + slope * math.log10(f)) * 10.0
        assert limit_at_frequency(f, ActivityType.WALKING) == pytest.approx(expected)

    @pytest.mark.parametrize("f", [0.5, 1.0, 3.0, 6.0, 12.0, 20.0, 50.0, 80.0, 100.0, 200.0])
    def test_running_is_ten_times_walking(self, f):
        assert limit_at_frequency(f, ActivityType.RUNNING) == pytest.approx(
            10.0 * limit_at_frequency(f, ActivityType.WALKING))

    def test_string_activity_accepted(self):
        assert limit_at_frequency(6.0, 'RHYTHMIC') == pytest.approx(1.5)

    def test_nan_frequency_propagates(self):
        assert math.isnan(limit_at_frequency(float('nan'), ActivityType.WALKING))

    def test_baseline_is_read_only(self):
        with pytest.raises(ValueError):
            BASELINE_CURVE[0, 1] = 1.0

    def test_limit_curve_sampling(self):
        freqs, limits = limit_curve(ActivityType.WALKING, np.array([1.0, 4.0, 100.0]))
        np.testing.assert_allclose(limits, [1.0, 0.5, 6.25])
        freqs, limits = limit_curve(ActivityType.SENSITIVE_EQUIPMENT)
        assert len(freqs) == len(limits) == 60
        assert np.all(limits > 0)


class TestResonanceFactor:
    """Test damping-dependent resonance factor ρ"""

    def test_high_damping(self):
        assert resonance_factor(0.03) == 1.0
        assert resonance_factor(0.05) == 1.0

    def test_boundary_one_percent(self):
        """β = 0.01 uses 12.5β + 0.625, not the low-damping branch"""
        assert resonance_factor(0.01) == pytest.approx(0.75)

    def test_low_damping(self):
        assert resonance_factor(0.005) == pytest.approx(50 * 0.005 + 0.25)

    def test_intermediate_damping(self):
        assert resonance_factor(0.02) == pytest.approx(12.5 * 0.02 + 0.625)


class TestRunningHarmonic:
    """Test running harmonic bands (last threshold exceeded wins)"""

    @pytest.mark.parametrize("f,h", [
        (2.0, 1), (4.0, 1), (4.01, 2), (8.0, 2), (8.01, 3),
        (12.0, 3), (12.01, 4), (30.0, 4),
    ])
    def test_bands(self, f, h):
        assert running_harmonic(f) == h

    @pytest.mark.parametrize("f,h,alpha", [(3.0, 1, 1.4), (6.0, 2, 0.4), (10.0, 3, 0.2), (15.0, 4, 0.1)])
    def test_running_formula(self, f, h, alpha):
        frf, beta, Q = 0.01, 0.02, 165.0
        result = evaluate_regime(frf, f, ActivityType.RUNNING, beta, Q)
        expected = frf * alpha * Q * (1 - np.exp(-2 * np.pi * beta * h * 10))
        assert result.peak_acceleration == pytest.approx(expected)
        assert result.harmonic == h
        assert "Eq 7-7" in result.formula_used


class TestPeakResponseCalculator:
    """Test per-activity peak acceleration formulas"""

    def test_walking_resonant_branch(self):
        frf, f, beta, Q = 0.02, 5.0, 0.02, 165.0
        result = evaluate_regime(frf, f, ActivityType.WALKING, beta, Q)
        expected = frf * 0.09 * np.exp(-0.075 * f) * Q * (12.5 * beta + 0.625)
        assert result.peak_acceleration == pytest.approx(expected)
        assert "Eq 7-1" in result.formula_used
        assert result.harmonic is None

    def test_walking_branch_switch_at_9hz(self):
        """f = 9 is resonant, just above 9 is transient"""
        at_9 = evaluate_regime(0.02, 9.0, ActivityType.WALKING, 0.03, 165.0)
        above_9 = evaluate_regime(0.02, 9.0001, ActivityType.WALKING, 0.03, 165.0)
        assert "Eq 7-1" in at_9.formula_used
        assert "ESPA" in above_9.formula_used
        assert at_9.formula_used != above_9.formula_used

    def test_walking_transient_ignores_damping(self):
        a = evaluate_regime(0.015, 12.0, ActivityType.WALKING, 0.01, 165.0)
        b = evaluate_regime(0.015, 12.0, ActivityType.WALKING, 0.05, 165.0)
        assert a.peak_acceleration == b.peak_acceleration == pytest.approx(0.015 * 0.085 * 165.0)

    def test_walking_damping_boundaries(self):
        frf, f, Q = 0.02, 5.0, 100.0
        alpha = 0.09 * np.exp(-0.075 * f)
        at_1pct = evaluate_regime(frf, f, ActivityType.WALKING, 0.01, Q)
        at_3pct = evaluate_regime(frf, f, ActivityType.WALKING, 0.03, Q)
        assert at_1pct.peak_acceleration == pytest.approx(frf * alpha * Q * 0.75)
        assert at_3pct.peak_acceleration == pytest.approx(frf * alpha * Q * 1.0)

    def test_walking_and_running_uses_walking_formulas(self):
        a = evaluate_regime(0.02, 6.0, ActivityType.WALKING, 0.02, 165.0)
        b = evaluate_regime(0.02, 6.0, ActivityType.WALKING_AND_RUNNING, 0.02, 165.0)
        assert a == b

    def test_rhythmic(self):
        result = evaluate_regime(0.02, 6.0, ActivityType.RHYTHMIC, 0.02, 165.0)
        assert result.peak_acceleration == pytest.approx(0.02 * 1.25 * 165.0 / 25.0)
        assert result.limit == pytest.approx(1.5)
        assert "Eq 7-9" in result.formula_used

    def test_sensitive_equipment(self):
        frf, f, Q = 0.01, 10.0, 165.0
        result = evaluate_regime(frf, f, ActivityType.SENSITIVE_EQUIPMENT, 0.03, Q)
        assert result.peak_acceleration == pytest.approx(1.3 * frf * 0.1 * np.exp(-1.0) * Q)
        assert "Eq 7-11" in result.formula_used

    def test_acceptability_is_inclusive(self):
        """ap == limit is acceptable"""
        # Rhythmic at 6 Hz: limit 1.5 %g; ap = 0.3 * 1.25 * 100 / 25 = 1.5
        result = evaluate_regime(0.3, 6.0, ActivityType.RHYTHMIC, 0.02, 100.0)
        assert result.peak_acceleration == 1.5
        assert result.limit == 1.5
        assert result.is_acceptable is True
        assert result.status == 'PASS'

    def test_just_above_limit_fails(self):
        result = evaluate_regime(0.3001, 6.0, ActivityType.RHYTHMIC, 0.02, 100.0)
        assert result.limit == 1.5
        assert result.is_acceptable is False

    def test_failing_check(self):
        result = evaluate_regime(0.5, 5.0, ActivityType.WALKING, 0.03, 165.0)
        assert not result.is_acceptable
        assert result.status == 'FAIL'
        assert result.ratio > 1.0

    def test_non_finite_inputs_propagate(self):
        result = evaluate_regime(float('nan'), 5.0, ActivityType.WALKING, 0.03, 165.0)
        assert math.isnan(result.peak_acceleration)
        assert not result.is_acceptable

    def test_degenerate_inputs_not_rejected(self):
        result = evaluate_regime(-0.02, 5.0, ActivityType.WALKING, 0.03, 0.0)
        assert result.peak_acceleration == pytest.approx(0.0)
        assert result.is_acceptable


class TestCalculateResults:
    """Test two-regime evaluation"""

    def test_unit_conversions(self, office_inputs):
        assert office_inputs.damping_ratio == pytest.approx(0.03)
        assert office_inputs.weight_lb == pytest.approx(75.0 * KG_TO_LB)
        assert office_inputs.weight_lb == pytest.approx(165.3465)

    def test_office_walking_scenario(self, office_inputs):
        """Walking, β = 3 %, Q = 75 kg, low 5.5 Hz / high 12 Hz"""
        results = calculate_results(office_inputs)
        Q = 75.0 * 2.20462

        low = results.low_freq
        assert "Eq 7-1" in low.formula_used
        assert low.peak_acceleration == pytest.approx(0.02 * 0.09 * np.exp(-0.075 * 5.5) * Q)
        assert low.peak_acceleration == pytest.approx(0.1970, rel=1e-3)
        assert low.limit == pytest.approx(0.5)
        assert low.is_acceptable

        high = results.high_freq
        assert "ESPA" in high.formula_used
        assert high.peak_acceleration == pytest.approx(0.015 * 0.085 * Q)
        assert high.peak_acceleration == pytest.approx(0.2108, rel=1e-3)
        assert high.limit == pytest.approx(0.75)
        assert high.is_acceptable

        assert results.all_acceptable

    def test_regime_order_independence(self, office_inputs):
        beta, Q = office_inputs.damping_ratio, office_inputs.weight_lb
        high_first = evaluate_regime(0.015, 12.0, ActivityType.WALKING, beta, Q)
        low_second = evaluate_regime(0.02, 5.5, ActivityType.WALKING, beta, Q)
        results = calculate_results(office_inputs)
        assert results.high_freq == high_first
        assert results.low_freq == low_second

    def test_regime_accessors(self, office_inputs):
        results = calculate_results(office_inputs)
        assert office_inputs.regime(Regime.LOW).dominant_freq_hz == 5.5
        assert office_inputs.regime(Regime.HIGH).dominant_freq_hz == 12.0
        assert results.regime(Regime.LOW) is results.low_freq
        assert results.regime(Regime.HIGH) is results.high_freq

    def test_to_dict_output_record(self, office_inputs):
        out = calculate_results(office_inputs).to_dict()
        assert set(out) == {'lowFreq', 'highFreq'}
        assert set(out['lowFreq']) == {'peakAcceleration', 'limit', 'isAcceptable', 'formulaUsed'}
        assert out['highFreq']['isAcceptable'] is True

    def test_running_result_carries_harmonic(self):
        inputs = VibrationInputs(ActivityType.RUNNING, 2.0, 75.0,
                                 RegimeInput(0.01, 3.0), RegimeInput(0.01, 10.0))
        out = calculate_results(inputs).to_dict()
        assert out['lowFreq']['harmonic'] == 1
        assert out['highFreq']['harmonic'] == 3


class TestVibrationInputs:
    """Test input record parsing and validation"""

    def test_from_dict_flat(self, office_inputs):
        data = {
            'checkType': 'WALKING',
            'dampingRatio': 3.0,
            'bodyWeightKg': 75,
            'frfMaxLow': 0.02,
            'dominantFreqLow': 5.5,
            'frfMaxHigh': 0.015,
            'dominantFreqHigh': 12.0,
        }
        assert VibrationInputs.from_dict(data) == office_inputs

    def test_from_dict_nested(self, office_inputs):
        data = {
            'activityType': 'WALKING',
            'dampingRatioPercent': 3.0,
            'bodyWeightKg': 75,
            'low': {'frfMax': 0.02, 'dominantFreqHz': 5.5},
            'high': {'frfMax': 0.015, 'dominantFreqHz': 12.0},
        }
        assert VibrationInputs.from_dict(data) == office_inputs

    def test_to_dict_round_trip(self, office_inputs):
        assert VibrationInputs.from_dict(office_inputs.to_dict()) == office_inputs

    def test_from_dict_missing_field(self):
        with pytest.raises(InputValidationError, match="bodyWeightKg"):
            VibrationInputs.from_dict({'activityType': 'WALKING', 'dampingRatioPercent': 3.0})

    def test_from_dict_not_numeric(self):
        data = {'activityType': 'WALKING', 'dampingRatioPercent': 'abc', 'bodyWeightKg': 75,
                'frfMaxLow': 0.02, 'dominantFreqLow': 5.5, 'frfMaxHigh': 0.015, 'dominantFreqHigh': 12}
        with pytest.raises(InputValidationError, match="dampingRatioPercent"):
            VibrationInputs.from_dict(data)

    def test_from_dict_unknown_activity(self):
        with pytest.raises(InputValidationError, match="activityType"):
            VibrationInputs.from_dict({'activityType': 'JUMPING'})

    def test_validate_accepts_positive(self, office_inputs):
        assert office_inputs.validate() is office_inputs

    @pytest.mark.parametrize("field,value", [
        ('damping_ratio_percent', 0.0),
        ('damping_ratio_percent', -1.0),
        ('body_weight_kg', float('inf')),
        ('body_weight_kg', float('nan')),
    ])
    def test_validate_rejects(self, office_inputs, field, value):
        bad = VibrationInputs(**{**office_inputs.__dict__, field: value})
        with pytest.raises(InputValidationError):
            bad.validate()

    def test_validate_rejects_regime_values(self, office_inputs):
        bad = VibrationInputs(office_inputs.activity_type, 3.0, 75.0,
                              RegimeInput(0.02, 5.5), RegimeInput(0.015, 0.0))
        with pytest.raises(InputValidationError, match="dominantFreqHigh"):
            bad.validate()

    def test_frozen(self, office_inputs):
        with pytest.raises(Exception):
            office_inputs.body_weight_kg = 80.0

    def test_all_multipliers_defined(self):
        assert set(OCCUPANCY_MULTIPLIERS) == set(ActivityType)


class TestRegimeResult:
    """Test RegimeResult helpers"""

    def test_ratio_and_status(self):
        result = RegimeResult(0.25, 0.5, True, 'x')
        assert result.ratio == pytest.approx(0.5)
        assert result.status == 'PASS'

    def test_ratio_zero_limit(self):
        assert math.isinf(RegimeResult(0.25, 0.0, False, 'x').ratio)
