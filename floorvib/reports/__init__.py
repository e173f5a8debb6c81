"""
Module: reports/__init__.py
Chart rendering and report export for floor vibration checks

Modules:
- charts.py: log-log tolerance chart (matplotlib)
- report_generator.py: report export in PDF (reportlab), Word DOCX
  (python-docx) and Markdown (Jinja2)

The report layer is formatting only: it receives the inputs and results of
floorvib.analyses.vibration and performs no further calculation.
"""

from .charts import (
    ChartSettings,
    CurveSeries,
    threshold_series,
    response_points,
    plot_vibration_chart,
    save_vibration_chart,
)

from .report_generator import (
    ReportGenerator,
    ReportMetadata,
    ReportSettings,
    default_report_name,
    register_pdf_fonts,
)

__all__ = [
    'ChartSettings',
    'CurveSeries',
    'threshold_series',
    'response_points',
    'plot_vibration_chart',
    'save_vibration_chart',
    'ReportGenerator',
    'ReportMetadata',
    'ReportSettings',
    'default_report_name',
    'register_pdf_fonts',
]
