"""Printable corrective-action form.

Builds the signed-paper version of a corrective action with reportlab's
platypus layout engine and returns the PDF as bytes.
"""

from __future__ import annotations

import logging
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.datetime_utils import as_date, format_date
from ..core.enums import SignerType
from ..discipline.model import CorrectiveAction

logger = logging.getLogger(__name__)

HEADER_BLUE = colors.HexColor("#1e3a5f")
LABEL_GREY = colors.HexColor("#f1f5f9")
VOID_RED = colors.HexColor("#b91c1c")


def corrective_action_filename(action: CorrectiveAction) -> str:
    return (
        f"Corrective_Action_{action.employee_last_name}_{action.employee_first_name}_"
        f"{as_date(action.violation_date).isoformat()}.pdf"
    )


def form_number(action: CorrectiveAction) -> str:
    return f"CA-{action.action_id:06d}"


def _text(value) -> str:
    return escape(str(value)).replace("\n", "<br/>")


def _styles():
    styles = getSampleStyleSheet()
    styles.add(
        ParagraphStyle(
            name="FormTitle",
            parent=styles["Title"],
            fontSize=16,
            textColor=HEADER_BLUE,
            alignment=TA_CENTER,
            spaceAfter=4,
        )
    )
    styles.add(
        ParagraphStyle(
            name="Section",
            parent=styles["Heading3"],
            textColor=HEADER_BLUE,
            spaceBefore=10,
            spaceAfter=4,
        )
    )
    styles.add(ParagraphStyle(name="Body", parent=styles["Normal"], fontSize=9.5, leading=13))
    styles.add(ParagraphStyle(name="Small", parent=styles["Normal"], fontSize=8, textColor=colors.grey))
    styles.add(
        ParagraphStyle(
            name="VoidBanner",
            parent=styles["Normal"],
            fontSize=12,
            textColor=colors.white,
            alignment=TA_CENTER,
            fontName="Helvetica-Bold",
        )
    )
    return styles


def _field_table(rows: list[tuple[str, str]], styles) -> Table:
    data = [
        [Paragraph(f"<b>{_text(label)}</b>", styles["Body"]), Paragraph(_text(value), styles["Body"])]
        for label, value in rows
    ]
    table = Table(data, colWidths=[1.9 * inch, 5.1 * inch])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (0, -1), LABEL_GREY),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    return table


def _signature_table(action: CorrectiveAction, styles) -> Table:
    rows = [["Signer", "Name", "Date"]]
    for signer_type, label in (
        (SignerType.SUPERVISOR, "Supervisor"),
        (SignerType.EMPLOYEE, "Employee"),
        (SignerType.WITNESS, "Witness"),
    ):
        sig = action.signature_for(signer_type)
        if sig:
            rows.append([label, sig.signer_name or "-", format_date(sig.signed_at)])
        else:
            rows.append([label, "", "Pending"])

    table = Table(rows, colWidths=[1.5 * inch, 3.5 * inch, 2.0 * inch], rowHeights=[None] + [0.45 * inch] * 3)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_BLUE),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    return table


def render_corrective_action_pdf(
    action: CorrectiveAction,
    current_points: int,
    organization_name: str,
    *,
    compress: bool = True,
) -> bytes:
    """Render the corrective-action form for `action` and return the PDF bytes.

    With `compress=False` the page streams are written as plain text.
    """

    styles = _styles()
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
        title=f"Corrective Action {form_number(action)}",
        pageCompression=1 if compress else 0,
    )

    story = []
    story.append(Paragraph(_text(organization_name), styles["Small"]))
    story.append(Paragraph("EMPLOYEE CORRECTIVE ACTION FORM", styles["FormTitle"]))
    story.append(Paragraph(f"Form No. {form_number(action)}", styles["Small"]))
    story.append(Spacer(1, 0.15 * inch))

    if action.is_voided:
        banner = Table(
            [[Paragraph(f"VOIDED on {format_date(action.voided_at)}", styles["VoidBanner"])]],
            colWidths=[7.0 * inch],
        )
        banner.setStyle(TableStyle([("BACKGROUND", (0, 0), (-1, -1), VOID_RED)]))
        story.append(banner)
        if action.void_reason:
            story.append(Paragraph(f"Reason: {_text(action.void_reason)}", styles["Body"]))
        story.append(Spacer(1, 0.1 * inch))

    story.append(Paragraph("Employee Information", styles["Section"]))
    story.append(
        _field_table(
            [
                ("Employee", action.employee_name),
                ("Position", action.employee_position or "N/A"),
                ("Hire Date", format_date(action.employee_hire_date)),
                ("House", action.house_name or "N/A"),
                ("Issued By", action.issued_by_name),
            ],
            styles,
        )
    )

    story.append(Paragraph("Violation Details", styles["Section"]))
    when = format_date(action.violation_date)
    if action.violation_time:
        when = f"{when} at {action.violation_time}"
    story.append(
        _field_table(
            [
                ("Date of Violation", when),
                ("Category", action.category_name),
                ("Severity", action.severity_level.value.replace("_", " ").title()),
                ("Discipline Level", action.discipline_level.label),
            ],
            styles,
        )
    )

    story.append(Paragraph("Description of Incident", styles["Section"]))
    story.append(Paragraph(_text(action.incident_description), styles["Body"]))
    if action.mitigating_circumstances:
        story.append(Paragraph("Mitigating Circumstances", styles["Section"]))
        story.append(Paragraph(_text(action.mitigating_circumstances), styles["Body"]))

    story.append(Paragraph("Points Assessment", styles["Section"]))
    points_rows = [("Points for this Action", str(action.points))]
    if action.points_adjusted is not None:
        points_rows.append(("Original Points", str(action.points_assigned)))
    points_rows.append(("Current 90-Day Total", str(current_points)))
    if action.adjustment_reason:
        points_rows.append(("Adjustment Reason", action.adjustment_reason))
    story.append(_field_table(points_rows, styles))

    story.append(Paragraph("Expectations for Improvement", styles["Section"]))
    if action.corrective_expectations:
        for i, item in enumerate(action.corrective_expectations, start=1):
            story.append(Paragraph(f"{i}. {_text(item)}", styles["Body"]))
    else:
        story.append(Paragraph("None specified.", styles["Body"]))

    story.append(Paragraph("Consequences of Further Violations", styles["Section"]))
    story.append(Paragraph(_text(action.consequences_text or ""), styles["Body"]))

    if action.pip_scheduled:
        story.append(Paragraph("Performance Improvement Plan", styles["Section"]))
        story.append(
            Paragraph(
                f"A Performance Improvement Plan meeting is scheduled for {format_date(action.pip_date)}.",
                styles["Body"],
            )
        )

    if action.employee_comments:
        story.append(Paragraph("Employee Comments", styles["Section"]))
        story.append(Paragraph(_text(action.employee_comments), styles["Body"]))

    story.append(Paragraph("Signatures", styles["Section"]))
    story.append(
        Paragraph(
            "The employee's signature acknowledges receipt of this form and does not necessarily "
            "indicate agreement with its contents.",
            styles["Small"],
        )
    )
    story.append(Spacer(1, 0.05 * inch))
    story.append(_signature_table(action, styles))

    story.append(Spacer(1, 0.3 * inch))
    story.append(
        Paragraph(
            f"CONFIDENTIAL - This document contains personnel information of {_text(organization_name)} "
            "and must be kept in the employee's personnel file.",
            styles["Small"],
        )
    )

    doc.build(story)
    logger.debug("Rendered corrective action PDF %s", form_number(action))
    return buffer.getvalue()
