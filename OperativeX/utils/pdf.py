# PATH: /OperativeX/utils/pdf.py
"""Tabular PDF exports rendered with ReportLab."""

from __future__ import annotations

from io import BytesIO
from typing import Iterable, Sequence

from django.http import HttpResponse
from django.utils import timezone
from django.utils.html import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import LongTable, Paragraph, SimpleDocTemplate, Spacer, TableStyle

from .xlsx import sanitize_value


def build_table_pdf(
    *,
    report_title: str,
    headers: Sequence[str],
    rows: Iterable[Sequence[object]],
    filename: str,
    include_timestamp: bool = True,
) -> HttpResponse:
    """Landscape A4 download with a title, optional timestamp and one long table."""
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=landscape(A4), rightMargin=28, leftMargin=28, topMargin=28, bottomMargin=28,
    )
    styles = getSampleStyleSheet()
    cell_style = ParagraphStyle('cell', parent=styles['Normal'], fontSize=8, leading=10)
    header_style = ParagraphStyle('head', parent=cell_style, fontName='Helvetica-Bold')

    story = [Paragraph(escape(report_title), styles['Title'])]
    if include_timestamp:
        story.append(Paragraph(f"Generated: {sanitize_value(timezone.now())}", styles['Normal']))
    story.append(Spacer(1, 10))

    # Paragraph cells wrap long descriptions instead of overflowing the page.
    data = [[Paragraph(escape(h), header_style) for h in headers]]
    for row in rows:
        data.append([Paragraph(escape(sanitize_value(value)), cell_style) for value in row])

    table = LongTable(data, repeatRows=1, hAlign='LEFT')
    table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.8, colors.HexColor('#D1D5DB')),
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#EDE9FE')),
        ('LEFTPADDING', (0, 0), (-1, -1), 4),
        ('RIGHTPADDING', (0, 0), (-1, -1), 4),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]))
    story.append(table)
    doc.build(story)

    resp = HttpResponse(buf.getvalue(), content_type='application/pdf')
    resp['Content-Disposition'] = f'attachment; filename="{filename}"'
    return resp
