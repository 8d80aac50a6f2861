import csv
import io
import json
from datetime import datetime

from models import WalletAnalysis
from utils import format_date


def to_csv(analysis: WalletAnalysis) -> bytes:
    """Export wallet analysis to CSV."""
    out = io.StringIO()
    w = csv.writer(out)
    p = analysis.profile

    w.writerow(["SOLANA WALLET ANALYSIS REPORT"])
    w.writerow(["Generated", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    w.writerow([])

    # ── Profile ───────────────────────────────────────────────────────
    w.writerow(["PROFILE"])
    w.writerow(["Address", analysis.address])
    w.writerow(["Risk Profile", str(p.risk_profile).upper()])
    w.writerow(["Diversification Score", f"{p.portfolio_diversification}/100"])
    w.writerow(["Total Transactions", p.activity_count])
    w.writerow(["Transaction Volume (SOL)", f"{p.transaction_volume:.4f}"])
    w.writerow(["First Activity", format_date(p.first_activity_date) if p.activity_count else "N/A"])
    w.writerow(["Last Activity", format_date(p.last_activity_date) if p.activity_count else "N/A"])
    w.writerow(["Favorite Protocols", ", ".join(f"{f.name} ({f.count})" for f in p.favorite_protocols)])
    w.writerow([])

    # ── Patterns ──────────────────────────────────────────────────────
    w.writerow(["BEHAVIORAL PATTERNS"])
    w.writerow(["Pattern", "Confidence", "Description"])
    for pattern in analysis.patterns:
        w.writerow([pattern.pattern_type, f"{pattern.confidence:.2f}", pattern.description])
    w.writerow([])

    # ── Positions ─────────────────────────────────────────────────────
    w.writerow(["DEFI POSITIONS (APY is an estimate)"])
    w.writerow(["Protocol", "Type", "Token", "Value (SOL)", "APY (%)", "Last Updated"])
    for pos in analysis.positions:
        w.writerow([
            pos.protocol, pos.type, pos.token_a or "Multiple",
            f"{pos.value:.6f}" if pos.value is not None else "N/A",
            f"{pos.apy:.2f}" if pos.apy is not None else "N/A",
            format_date(pos.timestamp),
        ])
    w.writerow([])

    # ── Recommendations ───────────────────────────────────────────────
    w.writerow(["STRATEGY RECOMMENDATIONS"])
    w.writerow(["Strategy", "Risk Level", "Expected Return", "Description"])
    for rec in analysis.recommendations:
        w.writerow([rec.strategy, rec.risk_level, rec.potential_return, rec.description])

    return out.getvalue().encode("utf-8")


def to_json(analysis: WalletAnalysis) -> bytes:
    """Export wallet analysis as formatted JSON."""
    return json.dumps(analysis.model_dump(), indent=2, default=str).encode("utf-8")


def to_excel(analysis: WalletAnalysis) -> bytes:
    """Export wallet analysis to a formatted Excel workbook."""
    import openpyxl
    from openpyxl.styles import Alignment, Font, PatternFill
    from openpyxl.utils import get_column_letter

    wb = openpyxl.Workbook()
    p = analysis.profile

    # ── Summary Sheet ─────────────────────────────────────────────────
    ws = wb.active
    ws.title = "Summary"

    accent = PatternFill(start_color="14f195", end_color="14f195", fill_type="solid")
    dark = PatternFill(start_color="1a1a2e", end_color="1a1a2e", fill_type="solid")
    white_bold = Font(bold=True, color="FFFFFF")
    bold = Font(bold=True)

    ws.merge_cells("A1:E1")
    ws["A1"] = "Solana Wallet Analysis Report"
    ws["A1"].font = Font(bold=True, size=16, color="1a1a2e")
    ws["A1"].fill = accent
    ws["A1"].alignment = Alignment(horizontal="center")

    rows = [
        ("Address", analysis.address),
        ("Generated", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
        ("", ""),
        ("Risk Profile", str(p.risk_profile).upper()),
        ("Diversification Score", f"{p.portfolio_diversification}/100"),
        ("Total Transactions", f"{p.activity_count:,}"),
        ("Transaction Volume (SOL)", f"{p.transaction_volume:,.4f}"),
        ("Protocols Used", str(len(p.favorite_protocols))),
        ("Patterns", ", ".join(pt.pattern_type for pt in analysis.patterns)),
    ]
    for i, (label, value) in enumerate(rows, 3):
        ws[f"A{i}"] = label
        ws[f"A{i}"].font = bold
        ws[f"B{i}"] = value

    # ── Positions Sheet ───────────────────────────────────────────────
    ws2 = wb.create_sheet("Positions")
    headers = ["Protocol", "Type", "Token", "Value (SOL)", "APY (%)", "Last Updated"]
    for col, h in enumerate(headers, 1):
        cell = ws2.cell(row=1, column=col, value=h)
        cell.font = white_bold
        cell.fill = dark

    for i, pos in enumerate(analysis.positions, 2):
        ws2.cell(row=i, column=1, value=pos.protocol)
        ws2.cell(row=i, column=2, value=pos.type)
        ws2.cell(row=i, column=3, value=pos.token_a or "Multiple")
        ws2.cell(row=i, column=4, value=pos.value)
        ws2.cell(row=i, column=5, value=round(pos.apy, 2) if pos.apy is not None else None)
        ws2.cell(row=i, column=6, value=format_date(pos.timestamp))

    # ── Recommendations Sheet ─────────────────────────────────────────
    ws3 = wb.create_sheet("Recommendations")
    headers = ["Strategy", "Risk Level", "Expected Return", "Description"]
    for col, h in enumerate(headers, 1):
        cell = ws3.cell(row=1, column=col, value=h)
        cell.font = white_bold
        cell.fill = dark

    for i, rec in enumerate(analysis.recommendations, 2):
        ws3.cell(row=i, column=1, value=rec.strategy)
        ws3.cell(row=i, column=2, value=rec.risk_level)
        ws3.cell(row=i, column=3, value=rec.potential_return)
        ws3.cell(row=i, column=4, value=rec.description)

    # Auto-fit column widths
    for sheet in [ws, ws2, ws3]:
        for col in sheet.columns:
            max_len = max(len(str(cell.value or "")) for cell in col)
            sheet.column_dimensions[get_column_letter(col[0].column)].width = min(max_len + 3, 45)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
