"""보고서 HTML 템플릿 — 화면 미리보기와 PDF 내보내기가 공유.

Report HTML template shared by the on-screen preview and the PDF export.
Every page is a fixed 1123×794 px ``.pdf-page`` section (A4 landscape at
96 DPI); the PDF exporter breaks pages on that marker.

Pages:
    1. 표지 — 모스크 정보와 위성 지도 (cover: site details and map)
    2. 이슈마다 한 페이지 — 항목 표와 사진 (one page per issue)
    3. 요약 — 이슈별 금액과 합계 (summary with totals)
"""

from html import escape

from app.schemas.issue import IssueResponse
from app.schemas.report import ReportDetailResponse
from app.services.pdf_service import PAGE_HEIGHT, PAGE_WIDTH

REPORT_HTML = """<!DOCTYPE html>
<html lang="ar" dir="rtl">
<head>
<meta charset="utf-8">
<title>{{TITLE}}</title>
<style>
body{margin:0;background:#e5e5e5;font-family:"Tajawal","Segoe UI",Tahoma,sans-serif;color:#1f2933}
.pdf-page{width:{{WIDTH}}px;height:{{HEIGHT}}px;box-sizing:border-box;padding:36px 44px;background:#fff;overflow:hidden;margin:0 auto 16px;page-break-after:always;position:relative}
h1{font-size:30px;margin:0 0 8px}
h2{font-size:22px;margin:0 0 12px;color:#0b6e4f}
.sub{color:#52606d;font-size:14px;margin-bottom:20px}
.grid{display:grid;grid-template-columns:1fr 1fr;gap:24px}
.info td{padding:6px 10px;font-size:15px}
.info td:first-child{color:#52606d;width:150px}
.map{width:100%;height:420px;object-fit:cover;border-radius:8px;border:1px solid #cbd2d9}
.empty{display:flex;align-items:center;justify-content:center;background:#f5f7fa;color:#9aa5b1}
table.items{width:100%;border-collapse:collapse;font-size:14px;margin-bottom:16px}
table.items th{background:#0b6e4f;color:#fff;padding:8px}
table.items td{border-bottom:1px solid #e4e7eb;padding:8px;text-align:center}
.photos{display:grid;grid-template-columns:repeat(3,1fr);gap:12px}
.photos img{width:100%;height:300px;object-fit:cover;border-radius:6px}
.notes{font-size:14px;color:#3e4c59;margin-bottom:12px}
.total{font-size:18px;font-weight:bold;text-align:left;margin-top:12px}
.footer{position:absolute;bottom:16px;left:44px;right:44px;font-size:12px;color:#9aa5b1;display:flex;justify-content:space-between}
</style>
</head>
<body>
{{PAGES}}
</body>
</html>"""


def _money(value: float) -> str:
    return f"{value:,.2f}"


def _page(body: str, number: int, total_pages: int, title: str) -> str:
    return (
        '<section class="pdf-page">'
        f"{body}"
        f'<div class="footer"><span>{escape(title)}</span><span>{number} / {total_pages}</span></div>'
        "</section>"
    )


def _cover(report: ReportDetailResponse) -> str:
    mosque = report.mosque
    rows = [
        ("اسم المسجد", mosque.name),
        ("المشرف", mosque.supervisor_name),
        ("جوال المشرف", mosque.supervisor_phone),
        ("الحي", mosque.district),
        ("المدينة", mosque.city),
        ("العنوان", mosque.address or ""),
        ("تاريخ التقرير", report.report_date.isoformat()),
        ("عدد البنود", str(len(report.issues))),
    ]
    info = "".join(f"<tr><td>{escape(k)}</td><td>{escape(v)}</td></tr>" for k, v in rows)
    if report.map_photo_url:
        map_html = f'<img class="map" src="{escape(report.map_photo_url)}" alt="map">'
    elif mosque.main_photo_url:
        map_html = f'<img class="map" src="{escape(mosque.main_photo_url)}" alt="mosque">'
    else:
        map_html = '<div class="map empty"></div>'
    return (
        "<h1>تقرير فحص المسجد</h1>"
        f'<div class="sub">{escape(mosque.name)}</div>'
        f'<div class="grid"><table class="info">{info}</table>{map_html}</div>'
    )


def _issue(issue: IssueResponse, index: int) -> str:
    rows = "".join(
        "<tr>"
        f"<td>{escape(item.name_table or item.sub_item_name_ar or item.sub_item_name)}</td>"
        f"<td>{item.quantity}</td>"
        f"<td>{escape(item.unit_ar or item.unit)}</td>"
        f"<td>{_money(item.unit_price)}</td>"
        f"<td>{_money(item.line_total)}</td>"
        "</tr>"
        for item in issue.items
    )
    photos = "".join(
        f'<img src="{escape(photo.photo_url)}" alt="photo {n + 1}">'
        for n, photo in enumerate(issue.photos)
    )
    notes = f'<div class="notes">{escape(issue.notes)}</div>' if issue.notes else ""
    return (
        f"<h2>{index}. {escape(issue.main_item_name_ar or issue.main_item_name)}</h2>"
        f"{notes}"
        '<table class="items"><thead><tr>'
        "<th>البند</th><th>الكمية</th><th>الوحدة</th><th>سعر الوحدة</th><th>الإجمالي</th>"
        f"</tr></thead><tbody>{rows}</tbody></table>"
        f'<div class="photos">{photos}</div>'
    )


def _summary(report: ReportDetailResponse) -> str:
    rows = "".join(
        f"<tr><td>{n}</td><td>{escape(issue.main_item_name_ar or issue.main_item_name)}</td>"
        f"<td>{len(issue.items)}</td><td>{_money(issue.total)}</td></tr>"
        for n, issue in enumerate(report.issues, start=1)
    )
    return (
        "<h2>ملخص التكلفة</h2>"
        '<table class="items"><thead><tr><th>#</th><th>البند الرئيسي</th><th>عدد البنود</th><th>الإجمالي</th>'
        f"</tr></thead><tbody>{rows}</tbody></table>"
        f'<div class="total">الإجمالي الكلي: {_money(report.total)}</div>'
    )


def render_report_html(report: ReportDetailResponse) -> str:
    """보고서 집합체를 페이지 단위 HTML로 렌더링합니다."""
    title = f"{report.mosque.name} - {report.report_date.isoformat()}"
    bodies = [_cover(report)]
    bodies.extend(_issue(issue, n) for n, issue in enumerate(report.issues, start=1))
    bodies.append(_summary(report))

    pages = "".join(
        _page(body, number, len(bodies), title) for number, body in enumerate(bodies, start=1)
    )
    return (
        REPORT_HTML.replace("{{TITLE}}", escape(title))
        .replace("{{WIDTH}}", str(PAGE_WIDTH))
        .replace("{{HEIGHT}}", str(PAGE_HEIGHT))
        .replace("{{PAGES}}", pages)
    )


def report_filename(report: ReportDetailResponse) -> str:
    """내보내기 파일 이름 — <모스크 이름>_<날짜>.pdf."""
    name = (report.mosque.name or "").strip() or "تقرير"
    safe = "".join(ch for ch in name if ch not in '\\/:*?"<>|').strip() or "report"
    return f"{safe}_{report.report_date.isoformat()}.pdf"
