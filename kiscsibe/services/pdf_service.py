"""
PDF generation service for the kitchen's daily prep sheet.
"""
from io import BytesIO
import logging

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    "new": "New",
    "preparing": "Preparing",
    "ready": "Ready",
    "completed": "Completed",
    "cancelled": "Cancelled",
}


class PDFService:
    """Service for generating printable PDF reports."""

    def generate_prep_summary(self, summary: dict) -> BytesIO:
        """
        Render the items-to-prepare summary for one day.

        Args:
            summary: dict with ``date``, ``items`` (name, quantity,
                revenue_huf), ``status_counts`` and ``total_orders``

        Returns:
            BytesIO buffer containing the PDF
        """
        logger.info("Generating prep summary PDF for %s", summary["date"])

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=0.5 * inch,
            leftMargin=0.5 * inch,
            topMargin=0.5 * inch,
            bottomMargin=0.5 * inch,
        )

        elements = []
        styles = getSampleStyleSheet()
        title_style = styles['Heading1']
        subtitle_style = styles['Heading2']
        normal_style = styles['Normal']

        elements.append(Paragraph(f"Items to prepare: {summary['date']}", title_style))
        elements.append(Spacer(1, 0.2 * inch))

        if not summary["items"]:
            elements.append(Paragraph("No orders for this day.", normal_style))
        else:
            table_data = [['Item', 'Quantity', 'Revenue (HUF)']]
            for line in summary["items"]:
                table_data.append([
                    line['name'],
                    str(line['quantity']),
                    f"{line['revenue_huf']:,}".replace(",", " "),
                ])
            total_qty = sum(line['quantity'] for line in summary["items"])
            total_revenue = sum(line['revenue_huf'] for line in summary["items"])
            table_data.append([
                'Total',
                str(total_qty),
                f"{total_revenue:,}".replace(",", " "),
            ])

            table = Table(table_data, repeatRows=1, hAlign='LEFT', colWidths=[3.8 * inch, 1.2 * inch, 1.6 * inch])
            table_style = TableStyle([
                ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#2c3e50')),
                ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
                ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                ('FONTSIZE', (0, 0), (-1, 0), 10),
                ('BOTTOMPADDING', (0, 0), (-1, 0), 8),

                ('FONTNAME', (0, 1), (-1, -2), 'Helvetica'),
                ('FONTSIZE', (0, 1), (-1, -2), 9),
                ('ALIGN', (1, 1), (-1, -1), 'RIGHT'),

                ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor('#ecf0f1')),
                ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),

                ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ])
            for i in range(1, len(table_data) - 1):
                if i % 2 == 0:
                    table_style.add('BACKGROUND', (0, i), (-1, i), colors.HexColor('#f7f9fb'))
            table.setStyle(table_style)
            elements.append(table)

        elements.append(Spacer(1, 0.3 * inch))
        elements.append(Paragraph("Orders by status", subtitle_style))
        elements.append(Spacer(1, 0.1 * inch))

        status_data = [['Status', 'Orders']]
        for key, label in STATUS_LABELS.items():
            status_data.append([label, str(summary["status_counts"].get(key, 0))])
        status_data.append(['Total', str(summary["total_orders"])])
        status_table = Table(status_data, colWidths=[3 * inch, 1.2 * inch], hAlign='LEFT')
        status_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#3498db')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('ALIGN', (1, 1), (1, -1), 'RIGHT'),
            ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor('#e8f6f3')),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 1, colors.grey),
        ]))
        elements.append(status_table)

        doc.build(elements)
        buffer.seek(0)

        logger.info("Prep summary PDF generated")
        return buffer
