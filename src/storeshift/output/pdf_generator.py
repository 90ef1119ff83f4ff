"""PDF generation for weekly rosters.

This module creates printable PDF rosters showing:
- One row per member, one column per day of the week
- Each cell's work item and shift times, shaded by assignment status
- Paid hours per member and per day
- A summary page listing slots left open
"""

from datetime import date, timedelta
from io import BytesIO
from pathlib import Path
from typing import Union

from storeshift.domain.models import Assignment, AssignmentStatus, StoreSnapshot
from storeshift.domain.timeutils import week_start
from storeshift.hours.paid_minutes import PAID_STATUSES, assignment_paid_minutes, minutes_to_hours

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    AssignmentStatus.ASSIGNED: (0.75, 0.85, 0.95),  # Light blue
    AssignmentStatus.CONFIRMED: (0.7, 0.9, 0.7),  # Green
    AssignmentStatus.CANCELLED: (0.9, 0.9, 0.9),  # Gray
    "unavailable": (0.95, 0.8, 0.8),  # Light red
    "header": (0.3, 0.3, 0.4),
}


class PDFGenerator:
    """Generates printable weekly roster PDFs.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(snapshot, date(2024, 6, 3), "roster.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        snapshot: StoreSnapshot,
        week_of: date,
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate a roster PDF and save it to a file.

        Args:
            snapshot: Store data covering the week.
            week_of: Any date inside the week to render.
            output_path: Path to save the PDF.
            include_summary: Whether to include the open-slot summary page.
        """
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw(c, snapshot, week_start(week_of), include_summary)
        c.save()

    def generate_to_buffer(
        self,
        snapshot: StoreSnapshot,
        week_of: date,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate a roster PDF and return it as a bytes buffer."""
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw(c, snapshot, week_start(week_of), include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(self, c, snapshot: StoreSnapshot, start: date, include_summary: bool) -> None:
        days = [start + timedelta(days=i) for i in range(7)]
        self._draw_roster_pages(c, snapshot, days)
        if include_summary:
            self._draw_summary_page(c, snapshot, days)

    def _week_assignments(self, snapshot: StoreSnapshot, days: list[date]) -> list[Assignment]:
        return [a for a in snapshot.assignments if days[0] <= a.date <= days[-1]]

    def _draw_roster_pages(self, c, snapshot: StoreSnapshot, days: list[date]) -> None:
        """Draw the member-by-day grid, paginated by member."""
        assignments = self._week_assignments(snapshot, days)
        by_cell: dict[tuple[str, date], list[Assignment]] = {}
        for a in assignments:
            by_cell.setdefault((a.member_id, a.date), []).append(a)

        scheduled = {a.member_id for a in assignments}
        members = [m for m in snapshot.members if m.active or m.id in scheduled]
        unavailable = {(u.member_id, u.date): u for u in snapshot.unavailability}
        items = snapshot.work_items_by_id

        row_height = 34
        header_height = 70
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))

        name_width = 110
        hours_width = 50
        day_width = (self.page_width - 2 * self.margin - name_width - hours_width) / 7
        total_pages = max(1, (len(members) + rows_per_page - 1) // rows_per_page)

        for page_index in range(total_pages):
            page_members = members[page_index * rows_per_page : (page_index + 1) * rows_per_page]
            self._draw_header(c, snapshot, days)

            y = self.page_height - self.margin - header_height
            self._draw_column_headers(c, days, y, name_width, day_width, hours_width)

            for member in page_members:
                y -= row_height
                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica", 9)
                c.drawString(self.margin, y + row_height / 2 - 3, member.name[:20])

                week_minutes = 0
                for i, d in enumerate(days):
                    x = self.margin + name_width + i * day_width
                    cell = by_cell.get((member.id, d), [])
                    off = unavailable.get((member.id, d))
                    if off is not None:
                        c.setFillColorRGB(*COLORS["unavailable"])
                        c.rect(x, y, day_width, row_height, fill=1, stroke=0)
                        if off.has_time_restriction and not cell:
                            c.setFillColorRGB(0.4, 0.1, 0.1)
                            c.setFont("Helvetica", 7)
                            c.drawString(x + 3, y + row_height / 2 - 2, f"off {off.start_time}-{off.end_time}")
                    for offset, a in enumerate(cell[:2]):
                        self._draw_cell(c, a, items, x, y, day_width, row_height, offset)
                        if a.status in PAID_STATUSES:
                            week_minutes += assignment_paid_minutes(a, items.get(a.work_item_id))

                c.setStrokeColorRGB(0.8, 0.8, 0.8)
                c.setLineWidth(0.5)
                c.line(self.margin, y, self.page_width - self.margin, y)
                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica-Bold", 9)
                c.drawRightString(
                    self.page_width - self.margin - 5,
                    y + row_height / 2 - 3,
                    f"{minutes_to_hours(week_minutes):.1f}",
                )

            self._draw_legend(c, self.margin, self.margin + 10)
            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"Page {page_index + 1} of {total_pages}",
            )
            c.showPage()

    def _draw_header(self, c, snapshot: StoreSnapshot, days: list[date]) -> None:
        """Draw page header with store name and week."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"{snapshot.store.name} - Week of {days[0].strftime('%B %d, %Y')}",
        )
        scheduled = {
            a.member_id
            for a in self._week_assignments(snapshot, days)
            if a.status is not AssignmentStatus.CANCELLED
        }
        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"{days[0].isoformat()} to {days[-1].isoformat()}  |  Members Scheduled: {len(scheduled)}",
        )

    def _draw_column_headers(
        self,
        c,
        days: list[date],
        y: float,
        name_width: float,
        day_width: float,
        hours_width: float,
    ) -> None:
        c.setFillColorRGB(*COLORS["header"])
        c.rect(self.margin, y, self.page_width - 2 * self.margin, 18, fill=1, stroke=0)
        c.setFillColorRGB(1, 1, 1)
        c.setFont("Helvetica-Bold", 9)
        c.drawString(self.margin + 4, y + 5, "Member")
        for i, d in enumerate(days):
            x = self.margin + name_width + i * day_width
            c.drawCentredString(x + day_width / 2, y + 5, d.strftime("%a %m/%d"))
        c.drawRightString(self.page_width - self.margin - 5, y + 5, "Hours")

    def _draw_cell(
        self,
        c,
        assignment: Assignment,
        items: dict,
        x: float,
        y: float,
        width: float,
        height: float,
        offset: int,
    ) -> None:
        """Draw one assignment inside a day cell; a second one stacks below."""
        half = height / 2
        top = y + height - (offset + 1) * half
        c.setFillColorRGB(*COLORS[assignment.status])
        c.rect(x + 1, top + 1, width - 2, half - 2, fill=1, stroke=0)

        item = items.get(assignment.work_item_id)
        label = item.name if item else "?"
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 7)
        c.drawString(
            x + 3,
            top + half / 2 - 2,
            f"{label[:10]} {assignment.start_time}-{assignment.end_time}",
        )

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [
            (AssignmentStatus.ASSIGNED, "Assigned"),
            (AssignmentStatus.CONFIRMED, "Confirmed"),
            (AssignmentStatus.CANCELLED, "Cancelled"),
            ("unavailable", "Unavailable"),
        ]

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for key, label in items:
            c.setFillColorRGB(*COLORS[key])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 80

    def _draw_summary_page(self, c, snapshot: StoreSnapshot, days: list[date]) -> None:
        """Draw per-day totals and the slots nobody fills."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Roster Summary - Week of {days[0].strftime('%B %d, %Y')}",
        )

        active = [a for a in self._week_assignments(snapshot, days) if a.is_active]
        items = snapshot.work_items_by_id
        filled = {(a.work_item_id, a.date) for a in active}

        y = self.page_height - self.margin - 60
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Daily Totals")
        y -= 20

        c.setFont("Helvetica", 10)
        for d in days:
            day_rows = [a for a in active if a.date == d]
            minutes = sum(assignment_paid_minutes(a, items.get(a.work_item_id)) for a in day_rows)
            c.drawString(
                self.margin + 20,
                y,
                f"{d.strftime('%a %m/%d')}: {len(day_rows)} shifts, "
                f"{minutes_to_hours(minutes):.1f} paid hours",
            )
            y -= 15

        y -= 20
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Open Slots")
        y -= 20

        c.setFont("Helvetica", 9)
        open_slots = [(w, d) for d in days for w in snapshot.work_items if (w.id, d) not in filled]
        if not open_slots:
            c.drawString(self.margin + 20, y, "Every work item is filled.")
        for work_item, d in open_slots:
            if y < self.margin + 20:
                c.drawString(self.margin + 20, y, "...")
                break
            c.drawString(
                self.margin + 20,
                y,
                f"{d.strftime('%a %m/%d')}  {work_item.name} "
                f"({work_item.start_time}-{work_item.end_time})",
            )
            y -= 13

        c.showPage()
