# src/report.py
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from population import REFERENCE_YEAR
from stats_utils import interpret

TABLE_STYLE = TableStyle([
    ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
    ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
    ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
    ('FONTSIZE', (0, 0), (-1, 0), 11),
    ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
    ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
    ('GRID', (0, 0), (-1, -1), 1, colors.black)
])


def summary_text(results, alpha=0.05):
    totals = results["totals"]
    per_capita = results["per_capita"]
    test = results["test"]

    lines = []
    lines.append(f"Shooting incidents with a known borough: {int(totals['Incidents'].sum()):,}")

    top = totals.sort_values("Incidents", ascending=False).iloc[0]
    lines.append(f"- Most incidents: {top['Borough']} ({int(top['Incidents']):,})")
    if not per_capita.empty:
        top_rate = per_capita.sort_values("Rate per 100k", ascending=False).iloc[0]
        lines.append(
            f"- Highest rate per 100,000 residents ({REFERENCE_YEAR} census): "
            f"{top_rate['Borough']} ({top_rate['Rate per 100k']:.1f})"
        )

    if test is None:
        lines.append("Goodness-of-fit test could not be run for these inputs.")
        return "\n".join(lines)

    stat, dof, p_value = test
    p_txt = "< 1e-300" if p_value == 0 else f"{p_value:.3g}"
    decision = interpret(p_value, alpha)
    lines.append(f"Chi-square goodness-of-fit: X2 = {stat:.2f}, df = {dof}, p-value = {p_txt}")
    if decision == "reject":
        lines.append(
            f"At alpha = {alpha}, we reject the null hypothesis: incidents are not distributed "
            "across boroughs in proportion to population."
        )
    else:
        lines.append(
            f"At alpha = {alpha}, we fail to reject the null hypothesis: the borough distribution "
            "of incidents is consistent with population shares."
        )
    return "\n".join(lines)


def _table(df, columns, formats):
    data = [columns]
    for _, row in df.iterrows():
        data.append([formats.get(c, "{}").format(row[c]) for c in columns])
    t = Table(data)
    t.setStyle(TABLE_STYLE)
    return t


def build_pdf(results, alpha=0.05):
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter)
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Title'],
        fontSize=18,
        spaceAfter=30,
        alignment=1  # Center
    )

    story = []
    story.append(Paragraph("NYC Shooting Incidents by Borough", title_style))
    for line in summary_text(results, alpha).split("\n"):
        story.append(Paragraph(line, styles['Normal']))
    story.append(Spacer(1, 12))

    story.append(Paragraph("Observed vs Expected", styles['Heading2']))
    story.append(_table(
        results["comparison"],
        ["Borough", "Observed", "Expected Proportion", "Expected"],
        {"Observed": "{:,.0f}", "Expected Proportion": "{:.4f}", "Expected": "{:,.1f}"},
    ))
    story.append(Spacer(1, 12))

    story.append(Paragraph(f"Incidents per 100,000 Residents ({REFERENCE_YEAR})", styles['Heading2']))
    story.append(_table(
        results["per_capita"],
        ["Borough", "Incidents", "Population", "Rate per 100k"],
        {"Incidents": "{:,}", "Population": "{:,}", "Rate per 100k": "{:.1f}"},
    ))

    doc.build(story)
    pdf = buffer.getvalue()
    buffer.close()
    return pdf
