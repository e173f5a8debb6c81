"""
Module: report_generator.py
Automatic Report Generation for Floor Vibration Checks

Questo modulo genera la relazione di verifica a vibrazione dei solai secondo
AISC Design Guide 11: dati di input, risultati per regime (bassa/alta
frequenza), grafico delle soglie di comfort e metodologia.

Output formats:
- PDF (via reportlab platypus, paginated with "Page i of n" footer)
- Word DOCX (via python-docx)
- Markdown (via Jinja2 template)

Charts: Matplotlib (see charts.py)

References:
- AISC Steel Design Guide 11, 2nd ed., Chapter 7 (FEA-based evaluation)
- ISO 2631-2 human comfort baseline
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
from pathlib import Path
from datetime import datetime
from xml.sax.saxutils import escape
import logging
import re
import shutil
import tempfile

try:
    from jinja2 import Environment, FileSystemLoader, Template, TemplateNotFound
except ImportError:
    raise ImportError("Jinja2 is required for report generation. Install it with: pip install jinja2")

try:
    from reportlab.lib.pagesizes import A4, LETTER
    from reportlab.lib import colors
    from reportlab.lib.units import cm
    from reportlab.platypus import (
        SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, Image, KeepTogether
    )
    from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
    from reportlab.lib.enums import TA_CENTER
    from reportlab.pdfgen import canvas
    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont
except ImportError:
    raise ImportError("reportlab is required for PDF generation. Install it with: pip install reportlab")

import matplotlib.pyplot as plt
from matplotlib import font_manager

from floorvib.analyses.vibration import (
    COMFORT_LIMITS,
    RHYTHMIC_LIMITS,
    ActivityType,
    Regime,
    VibrationInputs,
    VibrationResults,
    occupancy_multiplier,
)
from .charts import ChartSettings, plot_vibration_chart

logger = logging.getLogger(__name__)


OUTPUT_FORMATS = ('pdf', 'docx', 'md')

PAGE_SIZES = {
    'A4': A4,
    'LETTER': LETTER,
}

# TrueType font for the PDF: the reportlab base fonts have no glyphs for α, β, ρ, ≤
PDF_FONT = 'DejaVuSans'
PDF_FONT_BOLD = 'DejaVuSans-Bold'


def register_pdf_fonts():
    """
    Registra DejaVu Sans (distribuito con matplotlib) presso reportlab.

    Returns:
        (regular, bold) font names
    """
    if PDF_FONT not in pdfmetrics.getRegisteredFontNames():
        regular = font_manager.findfont(font_manager.FontProperties(family='DejaVu Sans'))
        bold = font_manager.findfont(font_manager.FontProperties(family='DejaVu Sans', weight='bold'))
        pdfmetrics.registerFont(TTFont(PDF_FONT, regular))
        pdfmetrics.registerFont(TTFont(PDF_FONT_BOLD, bold))
        pdfmetrics.registerFontFamily(PDF_FONT, normal=PDF_FONT, bold=PDF_FONT_BOLD,
                                      italic=PDF_FONT, boldItalic=PDF_FONT_BOLD)
        logger.debug(f"PDF fonts registered: {regular}, {bold}")
    return PDF_FONT, PDF_FONT_BOLD


# Regime -> (formula label, results table row, conclusions wording)
REGIME_LABELS = {
    Regime.LOW: ('Low-Freq', 'Low-Freq Response (Resonant)', 'low-frequency'),
    Regime.HIGH: ('High-Freq', 'High-Freq Response (Transient)', 'high-frequency'),
}

METHODOLOGY = [
    ("Standards Applied",
     "Analysis follows the AISC Steel Design Guide 11, Chapter 7 (Finite Element Method). "
     "Performance thresholds are mapped to ISO 2631-2 human comfort baseline curves."),
    ("Frequency Threshold Calculation",
     "Limits are frequency-dependent. The tool performs log-linear interpolation across the "
     "spectrum from 1 Hz to 100 Hz, scaling baseline values by site-specific multipliers "
     "(M=10 for Offices, M=30 for Malls, M=100 for Outdoor Bridges/Tracks, M=2 for sensitive "
     "equipment)."),
    ("Resonant Peak Response (fn ≤ 9 Hz)",
     "Uses the resonant build-up model: ap = FRF_Max * α * Q * ρ. It accounts for dynamic "
     "coefficients (α) and the damping-dependent resonance factor (ρ)."),
    ("Impulsive Peak Response (fn > 9 Hz)",
     "Evaluates the transient decay of individual footsteps using the Effective Peak "
     "Acceleration (ESPA) strategy for floors dominated by stiffness."),
]


def default_report_name(activity_type: ActivityType, output_format: str = 'pdf') -> str:
    """File name used when no output path is given, e.g. Vibration_Analysis_WALKING.pdf"""
    activity = re.sub(r'\s+', '_', ActivityType.parse(activity_type).value)
    return f"Vibration_Analysis_{activity}.{output_format}"


@dataclass
class ReportMetadata:
    """
    Metadata relazione di verifica

    Attributes:
        project_name: Nome progetto/commessa
        engineer_name: Progettista responsabile della verifica
        organisation: Studio / società (opzionale)
        project_location: Località (opzionale)
        report_date: Data relazione (auto: oggi)
        revision: Numero revisione (default: "0")
    """
    project_name: str
    engineer_name: str

    organisation: str = ""
    project_location: str = ""
    report_date: str = field(default_factory=lambda: datetime.now().strftime("%d/%m/%Y"))
    revision: str = "0"


@dataclass
class ReportSettings:
    """
    Impostazioni generazione report

    Attributes:
        template_name: Nome template Markdown (senza estensione)
        output_format: Formato output ('pdf', 'docx', 'md')
        include_graphs: Se True, include il grafico delle soglie
        include_methodology: Se True, include la sezione metodologia
        include_reference_limits: Se True, include la tabella dei limiti di riferimento
        page_size: Dimensione pagina ('A4', 'Letter')
        title: Titolo relazione
        subtitle: Sottotitolo
        footer_text: Testo a piè di pagina
        chart: Impostazioni grafico
    """
    template_name: str = 'aisc_dg11_standard'
    output_format: str = 'pdf'  # 'pdf', 'docx', 'md'
    include_graphs: bool = True
    include_methodology: bool = True
    include_reference_limits: bool = False
    page_size: str = 'A4'
    title: str = 'Structural Vibration Analysis Report'
    subtitle: str = 'Performance Evaluation based on AISC Design Guide 11'
    footer_text: str = 'Vibration Check Report - AISC Design Guide 11 Performance Tool'
    chart: ChartSettings = field(default_factory=ChartSettings)


class ReportGenerator:
    """
    Generatore relazione di verifica vibrazioni solai

    Example:
        >>> from floorvib.reports import ReportGenerator, ReportMetadata, ReportSettings
        >>> metadata = ReportMetadata(
        ...     project_name="Office Building - Level 3",
        ...     engineer_name="Eng. Jane Doe",
        ... )
        >>> generator = ReportGenerator(inputs, results, metadata, ReportSettings(output_format='pdf'))
        >>> pdf_path = generator.generate_report('output/vibration.pdf')

    Attributes:
        inputs: Parametri di input valutati
        results: Risultati del calcolo (entrambi i regimi)
        metadata: Informazioni progetto
        settings: Impostazioni generazione
        figures: Figure matplotlib generate
        template_env: Environment Jinja2
    """

    def __init__(self,
                 inputs: VibrationInputs,
                 results: VibrationResults,
                 metadata: ReportMetadata,
                 settings: Optional[ReportSettings] = None):
        """
        Inizializza generatore report

        Raises:
            ValueError: Se metadata essenziali mancano o il formato non è supportato
        """
        self.inputs = inputs
        self.results = results
        self.metadata = metadata
        self.settings = settings or ReportSettings()

        # Storage figure generate
        self.figures: List[plt.Figure] = []

        # Temporary directory per file intermedi
        self.temp_dir: Optional[Path] = None

        self._validate_metadata()
        if self.settings.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Output format {self.settings.output_format!r} not supported. "
                f"Available: {list(OUTPUT_FORMATS)}"
            )
        if self.settings.page_size.upper() not in PAGE_SIZES:
            raise ValueError(
                f"Page size {self.settings.page_size!r} not supported. "
                f"Available: {list(PAGE_SIZES)}"
            )

        template_dir = Path(__file__).parent / 'templates'
        self.template_env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _validate_metadata(self):
        """Valida metadata essenziali"""
        required = ['project_name', 'engineer_name']
        for name in required:
            if not getattr(self.metadata, name):
                raise ValueError(f"Missing required metadata field: {name}")

    def generate_report(self, output_path: Optional[str] = None) -> str:
        """
        Genera relazione completa

        Args:
            output_path: Path file output (default: Vibration_Analysis_<TYPE>.<fmt>)

        Returns:
            Path file generato

        Raises:
            RuntimeError: Se generazione fallisce
        """
        if output_path is None:
            output_path = default_report_name(self.inputs.activity_type, self.settings.output_format)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        context = self._prepare_context()

        if self.settings.include_graphs:
            self._generate_figures()

        try:
            if self.settings.output_format == 'pdf':
                result = self._generate_pdf(context, output_path)
            elif self.settings.output_format == 'docx':
                result = self._generate_docx(context, output_path)
            else:  # markdown
                result = self._generate_markdown(context, output_path)
        finally:
            self._cleanup()

        if not Path(result).exists():
            raise RuntimeError(f"Report generation failed - output file not created: {result}")

        logger.info(f"Report generated: {result}")
        return str(result)

    # ========================================================================
    # CONTESTO DATI
    # ========================================================================

    def _prepare_context(self) -> Dict[str, Any]:
        """
        Prepara contesto dati comune a tutti i formati

        Returns:
            Dizionario con tutte le variabili per template
        """
        return {
            'metadata': self.metadata,
            'settings': self.settings,
            'check_type': self.inputs.activity_type.value,
            'multiplier': occupancy_multiplier(self.inputs.activity_type),
            'tables': {
                'inputs': self._get_inputs_table(),
                'results': self._get_results_table(),
                'reference_limits': self._get_reference_limits_table(),
            },
            'formulas': [
                (REGIME_LABELS[regime][0], self.results.regime(regime).formula_used)
                for regime in Regime
            ],
            'methodology': METHODOLOGY if self.settings.include_methodology else [],
            'conclusions': self._get_conclusions(),
            'today': datetime.now().strftime("%d/%m/%Y"),
            'year': datetime.now().year,
        }

    def _get_inputs_table(self) -> Dict[str, Any]:
        inputs = self.inputs
        return {
            'caption': '1. Design Inputs',
            'headers': ['Parameter', 'Value', 'Unit'],
            'rows': [
                ['Damping Ratio (β)', f"{inputs.damping_ratio_percent:g}", '%'],
                ['Design Step Weight (Q)', f"{inputs.body_weight_kg:g}", 'kg'],
                ['Low Freq FRF Max', f"{inputs.low.frf_max:g}", '%g/lb'],
                ['Low Freq Dominant Frequency', f"{inputs.low.dominant_freq_hz:g}", 'Hz'],
                ['High Freq FRF Max', f"{inputs.high.frf_max:g}", '%g/lb'],
                ['High Freq Dominant Frequency', f"{inputs.high.dominant_freq_hz:g}", 'Hz'],
            ],
        }

    def _get_results_table(self) -> Dict[str, Any]:
        rows = []
        for regime in Regime:
            result = self.results.regime(regime)
            rows.append([
                REGIME_LABELS[regime][1],
                f"{result.peak_acceleration:.4f}%g",
                f"{result.limit:.3f}%g",
                f"{result.ratio:.3f}",
                result.status,
            ])
        return {
            'caption': '2. Analysis Results & Compliance',
            'headers': ['Check Description', 'Calc. Peak', 'Limit (ISO)', 'Ratio', 'Result'],
            'rows': rows,
        }

    def _get_reference_limits_table(self) -> Dict[str, Any]:
        rows = [[f"Comfort - {name.replace('_', ' ').title()}", f"{value:g}"]
                for name, value in COMFORT_LIMITS.items()]
        rows += [[f"Rhythmic - {name.title()}", f"{value:g}"]
                 for name, value in RHYTHMIC_LIMITS.items()]
        return {
            'caption': 'Reference Tolerance Limits',
            'headers': ['Occupancy', 'Limit [%g]'],
            'rows': rows,
        }

    def _get_conclusions(self) -> str:
        failed = [REGIME_LABELS[regime][2] for regime in Regime
                  if not self.results.regime(regime).is_acceptable]
        if not failed:
            return ("Both the low-frequency and the high-frequency peak accelerations are within "
                    f"the tolerance limits for the {self.inputs.activity_type.value} check: PASS.")
        return (f"The {' and '.join(failed)} peak acceleration exceeds the tolerance limit for the "
                f"{self.inputs.activity_type.value} check: FAIL. Stiffening, added mass or damping "
                "should be considered.")

    # ========================================================================
    # GRAFICI
    # ========================================================================

    def _generate_figures(self):
        """Genera il grafico delle soglie"""
        try:
            self.figures.append(plot_vibration_chart(self.inputs, self.results, self.settings.chart))
        except Exception as e:
            logger.warning(f"Chart generation failed, report continues without it: {e}")

    def _save_figures(self) -> List[Path]:
        """Salva le figure come PNG nella directory temporanea"""
        if self.temp_dir is None:
            self.temp_dir = Path(tempfile.mkdtemp())
        paths = []
        for i, fig in enumerate(self.figures):
            fig_path = self.temp_dir / f'figure_{i+1}.png'
            fig.savefig(fig_path, dpi=self.settings.chart.dpi, bbox_inches='tight')
            paths.append(fig_path)
        return paths

    # ========================================================================
    # EXPORT
    # ========================================================================

    def _generate_pdf(self, context: Dict, output_path: Path) -> Path:
        """
        Genera PDF via reportlab

        Args:
            context: Contesto dati
            output_path: Path output PDF

        Returns:
            Path PDF generato
        """
        register_pdf_fonts()
        page_size = PAGE_SIZES[self.settings.page_size.upper()]
        doc = SimpleDocTemplate(str(output_path), pagesize=page_size,
                                leftMargin=2*cm, rightMargin=2*cm,
                                topMargin=2*cm, bottomMargin=2*cm,
                                title=self.settings.title,
                                author=self.metadata.engineer_name)
        content_width = page_size[0] - 4*cm

        story = []
        styles = getSampleStyleSheet()

        title_style = ParagraphStyle(
            'ReportTitle',
            parent=styles['Heading1'],
            fontName=PDF_FONT_BOLD,
            fontSize=20,
            textColor=colors.HexColor('#0f172a'),
            spaceAfter=4,
            alignment=TA_CENTER
        )
        subtitle_style = ParagraphStyle(
            'ReportSubtitle',
            parent=styles['Normal'],
            fontName=PDF_FONT,
            fontSize=10,
            textColor=colors.HexColor('#64748b'),
            spaceAfter=18,
            alignment=TA_CENTER
        )
        section_style = ParagraphStyle(
            'Section',
            parent=styles['Heading2'],
            fontName=PDF_FONT_BOLD,
            fontSize=12,
            textColor=colors.HexColor('#0f172a'),
            spaceBefore=12,
            spaceAfter=6
        )
        body_style = ParagraphStyle('Body', parent=styles['Normal'],
                                    fontName=PDF_FONT, fontSize=9, leading=12)

        story.append(Paragraph(escape(self.settings.title), title_style))
        story.append(Paragraph(escape(self.settings.subtitle), subtitle_style))

        # Report details
        metadata = self.metadata
        details = [
            [Paragraph('<b>REPORT DETAILS</b>', body_style), ''],
            [Paragraph(f"<b>Project:</b> {escape(metadata.project_name)}", body_style),
             Paragraph(f"<b>Project Engineer:</b> {escape(metadata.engineer_name)}", body_style)],
            [Paragraph(f"<b>Date of Issue:</b> {escape(metadata.report_date)}", body_style),
             Paragraph(f"<b>Revision:</b> {escape(metadata.revision)}", body_style)],
            [Paragraph(f"<b>Vibration Case:</b> {escape(context['check_type'])}", body_style),
             Paragraph(f"<b>Occupancy Multiplier:</b> M = {context['multiplier']:g}", body_style)],
        ]
        if metadata.organisation or metadata.project_location:
            details.append([
                Paragraph(f"<b>Organisation:</b> {escape(metadata.organisation)}", body_style),
                Paragraph(f"<b>Location:</b> {escape(metadata.project_location)}", body_style),
            ])
        details_table = Table(details, colWidths=[content_width / 2] * 2)
        details_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), colors.HexColor('#f8fafc')),
            ('BOX', (0, 0), (-1, -1), 0.75, colors.HexColor('#cbd5e1')),
            ('SPAN', (0, 0), (-1, 0)),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]))
        story.append(details_table)

        # Input table
        inputs_table = context['tables']['inputs']
        story.append(Paragraph(inputs_table['caption'], section_style))
        story.append(self._pdf_table(inputs_table, content_width, [0.55, 0.25, 0.20],
                                     header_colour='#f1f5f9', header_text='#0f172a'))

        # Results table
        results_table = context['tables']['results']
        story.append(Paragraph(results_table['caption'], section_style))
        table = self._pdf_table(results_table, content_width, [0.40, 0.17, 0.17, 0.12, 0.14],
                                header_colour='#0f172a', header_text='#ffffff')
        verdict_styles = []
        for row_idx, row in enumerate(results_table['rows'], start=1):
            colour = '#15803d' if row[-1] == 'PASS' else '#dc2626'
            verdict_styles.append(('TEXTCOLOR', (-1, row_idx), (-1, row_idx), colors.HexColor(colour)))
            verdict_styles.append(('FONTNAME', (-1, row_idx), (-1, row_idx), PDF_FONT_BOLD))
        table.setStyle(TableStyle(verdict_styles))
        story.append(table)

        story.append(Spacer(1, 0.3*cm))
        for label, formula in context['formulas']:
            story.append(Paragraph(f"<b>{label} formula:</b> {escape(formula)}", body_style))

        if self.settings.include_reference_limits:
            limits_table = context['tables']['reference_limits']
            story.append(Paragraph(limits_table['caption'], section_style))
            story.append(self._pdf_table(limits_table, content_width, [0.7, 0.3],
                                         header_colour='#f1f5f9', header_text='#0f172a'))

        # Chart
        if self.figures:
            for fig_path in self._save_figures():
                fig_w, fig_h = self.settings.chart.figsize
                img = Image(str(fig_path), width=content_width,
                            height=content_width * fig_h / fig_w)
                story.append(Spacer(1, 0.5*cm))
                story.append(KeepTogether([img]))

        # Methodology
        if context['methodology']:
            story.append(Paragraph('3. Engineering Methodology', section_style))
            for heading, text in context['methodology']:
                story.append(KeepTogether([
                    Paragraph(f"<b>{escape(heading)}:</b>", body_style),
                    Paragraph(escape(text), body_style),
                    Spacer(1, 0.2*cm),
                ]))

        story.append(Paragraph('4. Conclusions', section_style))
        story.append(Paragraph(escape(context['conclusions']), body_style))

        footer_text = self.settings.footer_text
        left_text = f"© {context['year']} {metadata.engineer_name}"

        class NumberedCanvas(canvas.Canvas):
            """Canvas che scrive il piè di pagina 'Page i of n' a documento completo"""

            def __init__(self, *args, **kwargs):
                canvas.Canvas.__init__(self, *args, **kwargs)
                self._saved_page_states = []

            def showPage(self):
                self._saved_page_states.append(dict(self.__dict__))
                self._startPage()

            def save(self):
                n_pages = len(self._saved_page_states)
                for state in self._saved_page_states:
                    self.__dict__.update(state)
                    self._draw_footer(n_pages)
                    canvas.Canvas.showPage(self)
                canvas.Canvas.save(self)

            def _draw_footer(self, n_pages):
                width, _ = self._pagesize
                self.setFont(PDF_FONT, 8)
                self.setFillColor(colors.HexColor('#94a3b8'))
                self.drawCentredString(width / 2, 1.2*cm, footer_text)
                self.drawRightString(width - 2*cm, 1.2*cm, f"Page {self.getPageNumber()} of {n_pages}")
                self.drawString(2*cm, 0.8*cm, left_text)

        doc.build(story, canvasmaker=NumberedCanvas)
        return output_path

    def _pdf_table(self, table_data: Dict[str, Any], width: float, fractions: List[float],
                   header_colour: str, header_text: str) -> Table:
        data = [table_data['headers']] + table_data['rows']
        table = Table(data, colWidths=[width * f for f in fractions])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(header_colour)),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.HexColor(header_text)),
            ('FONTNAME', (0, 0), (-1, -1), PDF_FONT),
            ('FONTNAME', (0, 0), (-1, 0), PDF_FONT_BOLD),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('LINEBELOW', (0, 0), (-1, -1), 0.5, colors.HexColor('#e2e8f0')),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ]))
        return table

    def _generate_docx(self, context: Dict, output_path: Path) -> Path:
        """
        Genera Word DOCX

        Args:
            context: Contesto dati
            output_path: Path output DOCX

        Returns:
            Path DOCX generato
        """
        try:
            from docx import Document
            from docx.shared import Inches, RGBColor
            from docx.enum.text import WD_ALIGN_PARAGRAPH
        except ImportError:
            raise ImportError("python-docx required for Word generation. Install: pip install python-docx")

        doc = Document()

        title = doc.add_heading(self.settings.title, 0)
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER
        subtitle = doc.add_paragraph(self.settings.subtitle)
        subtitle.alignment = WD_ALIGN_PARAGRAPH.CENTER

        doc.add_heading('Report Details', level=1)
        metadata_rows = [
            ('Project', self.metadata.project_name),
            ('Project Engineer', self.metadata.engineer_name),
            ('Date of Issue', self.metadata.report_date),
            ('Revision', self.metadata.revision),
            ('Vibration Case', context['check_type']),
            ('Occupancy Multiplier', f"M = {context['multiplier']:g}"),
        ]
        table = doc.add_table(rows=len(metadata_rows), cols=2)
        table.style = 'Light Grid Accent 1'
        for i, (label, value) in enumerate(metadata_rows):
            table.rows[i].cells[0].text = label
            table.rows[i].cells[1].text = str(value)

        table_keys = ['inputs', 'results']
        if self.settings.include_reference_limits:
            table_keys.append('reference_limits')
        for key in table_keys:
            table_data = context['tables'][key]
            doc.add_heading(table_data['caption'], level=1)
            table = doc.add_table(rows=len(table_data['rows']) + 1, cols=len(table_data['headers']))
            table.style = 'Light Grid Accent 1'
            for j, header in enumerate(table_data['headers']):
                table.rows[0].cells[j].text = header
            for i, row in enumerate(table_data['rows'], start=1):
                for j, cell in enumerate(row):
                    table.rows[i].cells[j].text = str(cell)
                    if key == 'results' and cell in ('PASS', 'FAIL'):
                        run = table.rows[i].cells[j].paragraphs[0].runs[0]
                        run.bold = True
                        run.font.color.rgb = RGBColor(0x15, 0x80, 0x3D) if cell == 'PASS' else RGBColor(0xDC, 0x26, 0x26)

        for label, formula in context['formulas']:
            doc.add_paragraph(f"{label} formula: {formula}")

        if self.figures:
            doc.add_heading('Tolerance Chart', level=1)
            for i, fig_path in enumerate(self._save_figures()):
                doc.add_picture(str(fig_path), width=Inches(6))
                caption = doc.add_paragraph(f'Figure {i+1}')
                caption.alignment = WD_ALIGN_PARAGRAPH.CENTER

        if context['methodology']:
            doc.add_heading('3. Engineering Methodology', level=1)
            for heading, text in context['methodology']:
                p = doc.add_paragraph()
                p.add_run(f"{heading}: ").bold = True
                p.add_run(text)

        doc.add_heading('4. Conclusions', level=1)
        doc.add_paragraph(context['conclusions'])

        doc.save(str(output_path))
        return output_path

    def _generate_markdown(self, context: Dict, output_path: Path) -> Path:
        """
        Genera Markdown dal template Jinja2

        Args:
            context: Contesto dati
            output_path: Path output MD

        Returns:
            Path MD generato
        """
        try:
            template = self.template_env.get_template(f'{self.settings.template_name}.md')
        except TemplateNotFound:
            logger.warning(f"Template {self.settings.template_name}.md not found, using embedded template")
            template = self._get_minimal_markdown_template()

        figure_names = []
        if self.figures:
            for i, fig in enumerate(self.figures):
                fig_path = output_path.with_name(f"{output_path.stem}_figure_{i+1}.png")
                fig.savefig(fig_path, dpi=self.settings.chart.dpi, bbox_inches='tight')
                figure_names.append(fig_path.name)

        md_content = template.render(figures=figure_names, **context)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(md_content)

        return output_path

    def _get_minimal_markdown_template(self) -> Template:
        """Template Markdown minimale embedded"""
        return Template(
            "# {{ settings.title }}\n\n"
            "**Project**: {{ metadata.project_name }}  \n"
            "**Project Engineer**: {{ metadata.engineer_name }}  \n"
            "**Vibration Case**: {{ check_type }}\n\n"
            "{% for key in ['inputs', 'results'] %}{% set t = tables[key] %}"
            "## {{ t.caption }}\n\n"
            "| {{ t.headers|join(' | ') }} |\n"
            "|{% for h in t.headers %} --- |{% endfor %}\n"
            "{% for row in t.rows %}| {{ row|join(' | ') }} |\n{% endfor %}\n"
            "{% endfor %}"
            "{{ conclusions }}\n"
        )

    def _cleanup(self):
        """Cleanup file temporanei e figure"""
        if self.temp_dir and self.temp_dir.exists():
            shutil.rmtree(self.temp_dir, ignore_errors=True)
        self.temp_dir = None

        for fig in self.figures:
            plt.close(fig)
        self.figures.clear()

    def __repr__(self) -> str:
        return (f"ReportGenerator(project='{self.metadata.project_name}', "
                f"format='{self.settings.output_format}', "
                f"check='{self.inputs.activity_type.value}')")
