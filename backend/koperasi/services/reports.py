from __future__ import annotations

import xlsxwriter
from sqlalchemy import select
from sqlalchemy.orm import Session

from koperasi.models.loan import Loan
from koperasi.models.shu import SHUCalculation
from koperasi.models.user import User
from koperasi.services.loan_approval import get_payment_schedules
from koperasi.services.shu import list_distributions
from koperasi.utils.timezone import now_jakarta


def _formats(wb):
    base_font = "Calibri"
    f = {
        "meta_label": wb.add_format({"bold": True, "font_name": base_font, "font_size": 11, "font_color": "#334155"}),
        "meta_value": wb.add_format({"font_name": base_font, "font_size": 11, "font_color": "#0f172a"}),
        "subtle": wb.add_format({"font_name": base_font, "font_size": 10, "font_color": "#64748b"}),
        "header": wb.add_format(
            {
                "bold": True,
                "font_name": base_font,
                "font_size": 11,
                "bg_color": "#F1F5F9",
                "border": 1,
                "align": "center",
                "valign": "vcenter",
            }
        ),
        "date": wb.add_format({"font_name": base_font, "font_size": 11, "num_format": "yyyy-mm-dd", "border": 1}),
        "money2": wb.add_format(
            {"font_name": base_font, "font_size": 11, "num_format": "#,##0.00", "border": 1, "align": "right"}
        ),
        "int0": wb.add_format({"font_name": base_font, "font_size": 11, "num_format": "0", "border": 1, "align": "right"}),
        "text": wb.add_format({"font_name": base_font, "font_size": 11, "border": 1, "align": "left"}),
        "total_label": wb.add_format(
            {"bold": True, "font_name": base_font, "font_size": 11, "bg_color": "#F8FAFC", "border": 1, "align": "left"}
        ),
        "total_money2": wb.add_format(
            {
                "bold": True,
                "font_name": base_font,
                "font_size": 11,
                "bg_color": "#F8FAFC",
                "border": 1,
                "num_format": "#,##0.00",
                "align": "right",
            }
        ),
    }
    return f


def _write_header(ws, row: int, headers: list[str], fmt) -> None:
    ws.set_row(row, 18)
    for c, h in enumerate(headers):
        ws.write(row, c, h, fmt)


def build_schedule_report(s: Session, loan_id: int, out_file) -> None:
    """Installment schedule of one loan, with paid amounts and late fees."""
    schedule = get_payment_schedules(s, loan_id)
    loan = s.execute(select(Loan).where(Loan.id == loan_id)).scalar_one()
    member = s.get(User, loan.member_id)

    wb = xlsxwriter.Workbook(out_file, {"in_memory": True})
    f = _formats(wb)
    ws = wb.add_worksheet("Payment Schedule")

    ws.set_column(0, 0, 6)
    ws.set_column(1, 1, 12)
    ws.set_column(2, 7, 16)
    ws.set_column(8, 8, 10)

    ws.write(0, 0, "Member", f["meta_label"])
    ws.write(0, 1, f"{member.name} ({member.member_number or member.username})" if member else "-", f["meta_value"])
    ws.write(1, 0, "Loan", f["meta_label"])
    ws.write(1, 1, f"#{loan.id} {float(loan.amount):,.2f} / {loan.term_months} months @ {loan.interest_rate or 0}%", f["meta_value"])
    ws.write(2, 0, "Generated", f["meta_label"])
    ws.write(2, 1, now_jakarta().strftime("%Y-%m-%d %H:%M WIB"), f["subtle"])

    headers = ["No", "Due Date", "Principal", "Interest", "Total Due", "Paid", "Late Fee", "Paid Date", "Status"]
    _write_header(ws, 3, headers, f["header"])
    ws.freeze_panes(4, 1)

    r = 4
    for inst in schedule:
        ws.write_number(r, 0, inst.installment_number, f["int0"])
        ws.write_datetime(r, 1, inst.due_date, f["date"])
        ws.write_number(r, 2, float(inst.principal_amount), f["money2"])
        ws.write_number(r, 3, float(inst.interest_amount), f["money2"])
        ws.write_number(r, 4, float(inst.total_amount), f["money2"])
        ws.write_number(r, 5, float(inst.paid_amount), f["money2"])
        ws.write_number(r, 6, float(inst.late_fee), f["money2"])
        if inst.paid_date is not None:
            ws.write_datetime(r, 7, inst.paid_date, f["date"])
        else:
            ws.write_blank(r, 7, None, f["date"])
        ws.write(r, 8, inst.status, f["text"])
        r += 1

    last_data_row = r - 1
    if last_data_row >= 4:
        ws.autofilter(3, 0, last_data_row, 8)
        ws.write(r, 0, "Total", f["total_label"])
        ws.write_blank(r, 1, None, f["total_label"])
        for c in range(2, 7):
            col = chr(ord("A") + c)
            ws.write_formula(r, c, f"=SUM({col}5:{col}{last_data_row + 1})", f["total_money2"])

    wb.close()


def build_shu_report(s: Session, calculation_id: int, out_file) -> None:
    """Provisional and final SHU rows of one calculation, one sheet each."""
    rows = list_distributions(s, calculation_id)
    calc = s.execute(select(SHUCalculation).where(SHUCalculation.id == calculation_id)).scalar_one()
    members = {u.id: u for u in s.execute(select(User).where(User.id.in_({d.member_id for d in rows}))).scalars()}

    wb = xlsxwriter.Workbook(out_file, {"in_memory": True})
    f = _formats(wb)

    sheets = (
        ("Provisional", [d for d in rows if d.distributed_at is None]),
        ("Distributed", [d for d in rows if d.distributed_at is not None]),
    )
    for title, part in sheets:
        ws = wb.add_worksheet(title)
        ws.set_column(0, 1, 22)
        ws.set_column(2, 4, 18)
        ws.set_column(5, 5, 12)

        ws.write(0, 0, "Fiscal Year", f["meta_label"])
        ws.write(0, 1, calc.year, f["meta_value"])
        ws.write(1, 0, "Member Share", f["meta_label"])
        ws.write(1, 1, f"{float(calc.total_member_share):,.2f} ({calc.member_share_percentage}%)", f["meta_value"])

        _write_header(ws, 3, ["Member No", "Name", "Savings", "Loans", "Share", "Distributed"], f["header"])
        ws.freeze_panes(4, 0)

        r = 4
        for d in part:
            m = members.get(d.member_id)
            ws.write(r, 0, (m.member_number or m.username) if m else str(d.member_id), f["text"])
            ws.write(r, 1, m.name if m else "", f["text"])
            ws.write_number(r, 2, float(d.savings_contribution), f["money2"])
            ws.write_number(r, 3, float(d.loan_contribution), f["money2"])
            ws.write_number(r, 4, float(d.share_amount), f["money2"])
            if d.distributed_at is not None:
                ws.write_datetime(r, 5, d.distributed_at, f["date"])
            else:
                ws.write_blank(r, 5, None, f["date"])
            r += 1

        if r > 4:
            ws.write(r, 0, "Total", f["total_label"])
            ws.write_blank(r, 1, None, f["total_label"])
            for c in (2, 3, 4):
                col = chr(ord("A") + c)
                ws.write_formula(r, c, f"=SUM({col}5:{col}{r})", f["total_money2"])

    wb.close()
