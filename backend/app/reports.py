from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import List

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from dispatch_engine.models import AnomalyRecord, ReadinessRecord, ShortageForecast

READINESS_COLUMNS = ["region", "readiness_score", "avg_response_mins", "closure_rate", "skill_gaps"]


def readiness_frame(records: List[ReadinessRecord]) -> pd.DataFrame:
    rows = [
        {
            "region": r.region,
            "readiness_score": round(r.readiness_score, 3),
            "avg_response_mins": round(r.avg_response_mins, 1),
            "closure_rate": round(r.closure_rate, 3),
            "skill_gaps": "; ".join(r.skill_gaps),
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=READINESS_COLUMNS)
    return df.sort_values("readiness_score", kind="stable").reset_index(drop=True)


def build_ops_pdf(
    readiness: List[ReadinessRecord],
    shortages: List[ShortageForecast],
    anomalies: List[AnomalyRecord],
) -> bytes:
    buff = io.BytesIO()
    pdf = canvas.Canvas(buff, pagesize=letter)
    width, height = letter

    y = height - 40
    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawString(40, y, "Regional Readiness Summary")
    y -= 18
    pdf.setFont("Helvetica", 10)
    pdf.drawString(40, y, f"Generated: {datetime.now(timezone.utc).isoformat(timespec='seconds')}")
    y -= 20

    short_by_region = {s.region: s.shortages for s in shortages}
    flagged_by_region = {}
    for a in anomalies:
        flagged_by_region.setdefault(a.region, []).append(a)

    for record in readiness:
        if y < 120:
            pdf.showPage()
            y = height - 40

        flagged = flagged_by_region.get(record.region, [])
        box_height = 58 + 12 * len(flagged)
        pdf.setStrokeColor(colors.red if record.readiness_score < 0.5 else colors.darkblue)
        pdf.rect(35, y - box_height, width - 70, box_height - 5, stroke=1, fill=0)
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(45, y - 15, f"{record.region} | readiness {record.readiness_score:.2f}")
        pdf.setFont("Helvetica", 9)
        pdf.drawString(
            45,
            y - 28,
            f"Avg response: {record.avg_response_mins:.1f} min  |  Closure rate: {record.closure_rate:.0%}",
        )
        pdf.drawString(45, y - 41, f"Skill gaps: {', '.join(record.skill_gaps) or 'None'}")
        pdf.drawString(45, y - 54, f"Shortages: {', '.join(short_by_region.get(record.region, [])) or 'None'}")
        for idx, anomaly in enumerate(flagged):
            pdf.drawString(
                55, y - 67 - idx * 12, f"Flagged {anomaly.incident_id} ({anomaly.suspicion_score}): {anomaly.reason}"
            )

        y -= box_height + 10

    pdf.save()
    buff.seek(0)
    return buff.read()
