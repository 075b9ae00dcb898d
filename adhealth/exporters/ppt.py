from io import BytesIO
from typing import Any, Dict, List

from pptx import Presentation
from pptx.util import Inches, Pt

TABLE_COLUMNS = [
    ("Campaign", "campaign_name"),
    ("Health", "health_score"),
    ("ROAS", "roas_score"),
    ("Pacing", "delivery_pacing_score"),
    ("Burn", "burn_rate_score"),
    ("Overspend", "overspend_score"),
    ("Complete %", "completion_percentage"),
]
ROWS_PER_SLIDE = 12


def _fmt(v: Any) -> str:
    if isinstance(v, float):
        return f"{v:.1f}"
    return "" if v is None else str(v)


def build_ppt(d: Dict[str, Any], title: str = "Campaign Health Report") -> BytesIO:
    """Title slide with the health buckets, then the scored campaigns in pages of 12."""
    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[0])
    slide.shapes.title.text = title
    s = d.get("summary", {})
    slide.placeholders[1].text = (
        f"{s.get('total_campaigns', 0)} campaigns | avg {s.get('average_score', 0)} | "
        f"healthy {s.get('healthy', 0)} / warning {s.get('warning', 0)} / critical {s.get('critical', 0)}"
    )

    campaigns: List[Dict[str, Any]] = d.get("campaigns", [])
    blank = prs.slide_layouts[5]
    for start in range(0, len(campaigns), ROWS_PER_SLIDE):
        page = campaigns[start:start + ROWS_PER_SLIDE]
        sl = prs.slides.add_slide(blank)
        sl.shapes.title.text = f"Campaigns {start + 1}-{start + len(page)}"
        table = sl.shapes.add_table(len(page) + 1, len(TABLE_COLUMNS),
                                    Inches(0.3), Inches(1.4), Inches(9.4), Inches(0.3) * (len(page) + 1)).table
        table.columns[0].width = Inches(3.4)
        for j, (label, _) in enumerate(TABLE_COLUMNS):
            table.cell(0, j).text = label
        for i, rec in enumerate(page, start=1):
            for j, (_, key) in enumerate(TABLE_COLUMNS):
                cell = table.cell(i, j)
                cell.text = _fmt(rec.get(key))
                cell.text_frame.paragraphs[0].font.size = Pt(10)

    missing = d.get("missing_contract_terms", [])
    if missing:
        sl = prs.slides.add_slide(prs.slide_layouts[1])
        sl.shapes.title.text = "Campaigns missing contract terms"
        sl.placeholders[1].text = "\n".join(
            f"{m['campaign_name']} ({m['total_impressions']:,.0f} impressions)" for m in missing[:15]
        )

    bio = BytesIO()
    prs.save(bio)
    bio.seek(0)
    return bio
