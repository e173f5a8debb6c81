#!/usr/bin/env python3
"""
Example: Floor Vibration Check - AISC Design Guide 11
======================================================

Dimostra l'utilizzo del modulo vibration per la verifica a vibrazione di
solai soggetti ad attività umane.

Scenario:
---------
- Office floor, walking excitation (M = 10)
- Damping 3 %, design body weight 75 kg
- Low-frequency mode 5.5 Hz (FRF 0.02 %g/lb)
- High-frequency mode 12 Hz (FRF 0.015 %g/lb)
"""

import sys
from pathlib import Path

# Add floorvib package to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from floorvib.analyses.vibration import (
    ActivityType,
    RegimeInput,
    VibrationInputs,
    calculate_results,
    limit_curve,
)
from floorvib.cli import format_summary


def example_1_office_walking():
    """
    Esempio 1: Solaio uffici - camminata
    """
    print("\n" + "="*70)
    print("EXAMPLE 1: Office Floor - Walking")
    print("="*70)

    inputs = VibrationInputs(
        activity_type=ActivityType.WALKING,
        damping_ratio_percent=3.0,  # β = 0.03 -> ρ = 1.0
        body_weight_kg=75.0,        # Q ≈ 165 lb
        low=RegimeInput(frf_max=0.02, dominant_freq_hz=5.5),
        high=RegimeInput(frf_max=0.015, dominant_freq_hz=12.0),
    )

    results = calculate_results(inputs)
    print(format_summary(inputs, results))

    return inputs, results


def example_2_damping_sensitivity():
    """
    Esempio 2: Influenza dello smorzamento sul regime risonante
    """
    print("\n" + "="*70)
    print("EXAMPLE 2: Damping Sensitivity (walking, 5.5 Hz)")
    print("="*70)

    print(f"{'β [%]':<8} {'ap [%g]':<10} {'limit [%g]':<12} {'result':<8}")
    print("-" * 40)
    for damping in (0.5, 1.0, 2.0, 3.0, 5.0):
        inputs = VibrationInputs(
            activity_type=ActivityType.WALKING,
            damping_ratio_percent=damping,
            body_weight_kg=75.0,
            low=RegimeInput(frf_max=0.06, dominant_freq_hz=5.5),
            high=RegimeInput(frf_max=0.015, dominant_freq_hz=12.0),
        )
        low = calculate_results(inputs).low_freq
        print(f"{damping:<8.1f} {low.peak_acceleration:<10.4f} {low.limit:<12.3f} {low.status:<8}")


def example_3_limit_curves():
    """
    Esempio 3: Soglie di comfort per tipologia di verifica
    """
    print("\n" + "="*70)
    print("EXAMPLE 3: Tolerance Limits by Check Type [%g]")
    print("="*70)

    frequencies = [2.0, 5.0, 12.0, 30.0, 80.0]
    print(f"{'Check type':<22}" + "".join(f"{f:>8.0f}Hz" for f in frequencies))
    print("-" * 72)
    for activity in ActivityType:
        _, limits = limit_curve(activity, frequencies)
        print(f"{activity.value:<22}" + "".join(f"{a:>10.3f}" for a in limits))


def example_4_report(output_dir: Path):
    """
    Esempio 4: Grafico e relazione PDF
    """
    from floorvib.reports import (
        ReportGenerator, ReportMetadata, ReportSettings, save_vibration_chart
    )

    print("\n" + "="*70)
    print("EXAMPLE 4: Chart and PDF Report")
    print("="*70)

    inputs, results = example_1_office_walking()

    chart = save_vibration_chart(inputs, results, str(output_dir / 'office_walking.png'))
    print(f"Chart: {chart}")

    generator = ReportGenerator(
        inputs, results,
        ReportMetadata(project_name="Office Building - Level 3", engineer_name="Eng. Jane Doe"),
        ReportSettings(output_format='pdf', include_reference_limits=True),
    )
    report = generator.generate_report(str(output_dir / 'office_walking.pdf'))
    print(f"Report: {report}")


if __name__ == "__main__":
    print("\nFLOORVIB - Floor Vibration Check Examples")
    print("=" * 70)

    example_1_office_walking()
    example_2_damping_sensitivity()
    example_3_limit_curves()
    example_4_report(Path(__file__).parent / 'output')

    print("\n" + "="*70)
    print("All examples completed")
    print("="*70)
