"""
Command line input form for floor vibration checks.

Collects the six input fields (check type, damping, body weight and FRF /
dominant frequency for the low and high regimes) from a YAML/JSON case file
and/or command line flags, evaluates both regimes and optionally writes the
tolerance chart and the report.

Usage:
    floorvib --case configs/office.yaml --report out/office.pdf
    floorvib --activity RUNNING --damping 1.5 --freq-low 3.2 --freq-high 10 --json
"""

from typing import Any, Dict, List, Optional
from pathlib import Path
import argparse
import json
import logging
import sys

import yaml

from floorvib import __version__
from floorvib.analyses.vibration import (
    ActivityType,
    InputValidationError,
    Regime,
    VibrationInputs,
    VibrationResults,
    calculate_results,
)

logger = logging.getLogger(__name__)

# Initial values of the input form
DEFAULT_CASE = {
    'activityType': ActivityType.WALKING.value,
    'dampingRatioPercent': 3.0,
    'bodyWeightKg': 75.0,
    'frfMaxLow': 0.02,
    'dominantFreqLow': 5.5,
    'frfMaxHigh': 0.015,
    'dominantFreqHigh': 12.0,
}

CASE_KEY_ALIASES = {
    'checkType': 'activityType',
    'activity_type': 'activityType',
    'check_type': 'activityType',
    'dampingRatio': 'dampingRatioPercent',
    'damping_ratio_percent': 'dampingRatioPercent',
    'body_weight_kg': 'bodyWeightKg',
    'frf_max_low': 'frfMaxLow',
    'dominant_freq_low': 'dominantFreqLow',
    'frf_max_high': 'frfMaxHigh',
    'dominant_freq_high': 'dominantFreqHigh',
}

# argparse dest -> flat case key
FLAG_FIELDS = {
    'activity': 'activityType',
    'damping': 'dampingRatioPercent',
    'weight': 'bodyWeightKg',
    'frf_low': 'frfMaxLow',
    'freq_low': 'dominantFreqLow',
    'frf_high': 'frfMaxHigh',
    'freq_high': 'dominantFreqHigh',
}

EXIT_OK = 0
EXIT_CHECK_FAILED = 1
EXIT_INVALID_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='floorvib',
        description='Floor vibration check per AISC Design Guide 11 (peak acceleration vs. comfort limits)',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--case', metavar='FILE', help='YAML/JSON case file with the input fields')

    form = parser.add_argument_group('input fields (override the case file)')
    form.add_argument('--activity', metavar='TYPE',
                      help=f"check type: {', '.join(repr(t.value) for t in ActivityType)}")
    form.add_argument('--damping', type=float, metavar='PCT', help='damping ratio [%%]')
    form.add_argument('--weight', type=float, metavar='KG', help='design body weight [kg]')
    form.add_argument('--frf-low', type=float, metavar='FRF', help='low-frequency FRF max [%%g/lb]')
    form.add_argument('--freq-low', type=float, metavar='HZ', help='low-frequency dominant frequency [Hz]')
    form.add_argument('--frf-high', type=float, metavar='FRF', help='high-frequency FRF max [%%g/lb]')
    form.add_argument('--freq-high', type=float, metavar='HZ', help='high-frequency dominant frequency [Hz]')

    out = parser.add_argument_group('output')
    out.add_argument('--json', action='store_true', help='print inputs and results as JSON')
    out.add_argument('--chart', metavar='PATH', help='save the tolerance chart (png, pdf, svg)')
    out.add_argument('--report', metavar='PATH', help='write the report')
    out.add_argument('--format', choices=('pdf', 'docx', 'md'), default=None,
                     help='report format (default: from --report extension, else pdf)')
    out.add_argument('--project', default='Floor Vibration Check', help='project name for the report')
    out.add_argument('--engineer', default='N/A', help='project engineer for the report')
    out.add_argument('--strict', action='store_true', help='exit with status 1 if any check fails')
    out.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    return parser


def load_case(path: str) -> Dict[str, Any]:
    """
    Read a case file (YAML; JSON is accepted as a YAML subset).

    Raises:
        InputValidationError: If the file does not contain a mapping
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InputValidationError('case', f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def _flatten(case: Dict[str, Any]) -> Dict[str, Any]:
    """Normalise a case record (nested low/high sections, aliases) to the flat form keys"""
    flat = {CASE_KEY_ALIASES.get(key, key): value for key, value in case.items()}
    for key, suffix in (('low', 'Low'), ('high', 'High')):
        section = flat.pop(key, None)
        if section is None:
            continue
        if not isinstance(section, dict):
            raise InputValidationError(
                key, f"must be a mapping with frfMax and dominantFreqHz, got {section!r}")
        for name in ('frfMax', 'frf_max'):
            if name in section:
                flat[f'frfMax{suffix}'] = section[name]
                break
        for name in ('dominantFreqHz', 'dominant_freq_hz', 'dominantFreq'):
            if name in section:
                flat[f'dominantFreq{suffix}'] = section[name]
                break
    return flat


def collect_inputs(args: argparse.Namespace) -> VibrationInputs:
    """
    Merge form defaults, case file and command line flags into validated inputs.

    Raises:
        InputValidationError: If a field is missing, not numeric or not positive
    """
    case = dict(DEFAULT_CASE)
    if args.case:
        case.update(_flatten(load_case(args.case)))
        logger.debug(f"Case file loaded: {args.case}")

    for dest, key in FLAG_FIELDS.items():
        value = getattr(args, dest, None)
        if value is not None:
            case[key] = value

    return VibrationInputs.from_dict(case).validate()


def format_summary(inputs: VibrationInputs, results: VibrationResults) -> str:
    """Text table of both regimes"""
    lines = [
        f"Vibration check: {inputs.activity_type.value}  "
        f"(β = {inputs.damping_ratio_percent:g} %, Q = {inputs.body_weight_kg:g} kg)",
        '',
        f"{'Regime':<10} {'f [Hz]':>8} {'FRF':>8} {'ap [%g]':>10} {'limit [%g]':>11} {'ratio':>7}  result",
        '-' * 68,
    ]
    for regime in Regime:
        regime_input, result = inputs.regime(regime), results.regime(regime)
        lines.append(
            f"{regime.name.title():<10} {regime_input.dominant_freq_hz:>8.2f} {regime_input.frf_max:>8.4f} "
            f"{result.peak_acceleration:>10.4f} {result.limit:>11.3f} {result.ratio:>7.3f}  {result.status}"
        )
    lines.append('')
    for regime in Regime:
        result = results.regime(regime)
        harmonic = f" (h = {result.harmonic})" if result.harmonic is not None else ''
        lines.append(f"{regime.name.title()} formula: {result.formula_used}{harmonic}")
    return '\n'.join(lines)


def _write_outputs(args: argparse.Namespace, inputs: VibrationInputs, results: VibrationResults):
    if args.chart:
        from floorvib.reports import save_vibration_chart
        save_vibration_chart(inputs, results, args.chart)

    if args.report:
        from floorvib.reports import ReportGenerator, ReportMetadata, ReportSettings
        output_format = args.format or Path(args.report).suffix.lstrip('.').lower() or 'pdf'
        if output_format == 'markdown':
            output_format = 'md'
        generator = ReportGenerator(
            inputs, results,
            ReportMetadata(project_name=args.project, engineer_name=args.engineer),
            ReportSettings(output_format=output_format),
        )
        generator.generate_report(args.report)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        inputs = collect_inputs(args)
    except (InputValidationError, OSError, yaml.YAMLError) as e:
        logger.error(f"Invalid input: {e}")
        return EXIT_INVALID_INPUT

    results = calculate_results(inputs)

    if args.json:
        print(json.dumps({'inputs': inputs.to_dict(), 'results': results.to_dict()}, indent=2))
    else:
        print(format_summary(inputs, results))

    try:
        _write_outputs(args, inputs, results)
    except (ValueError, OSError, RuntimeError) as e:
        logger.error(f"Output not written: {e}")
        return EXIT_INVALID_INPUT

    if args.strict and not results.all_acceptable:
        return EXIT_CHECK_FAILED
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
