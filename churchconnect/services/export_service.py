import calendar
import csv
import io
from collections import Counter
from datetime import MAXYEAR, MINYEAR, date

from churchconnect.exceptions import ValidationError
from churchconnect.models.enums import value_of
from churchconnect.repositories import AttendanceRepository, MemberRepository, VisitorRepository
from churchconnect.services.attendance_service import AttendanceService
from churchconnect.services.report_service import day_bounds
from churchconnect.utils.dates import isoformat, today, utcnow

MEMBER_HEADERS = [
    "Member Name", "Title", "Gender", "Age Group", "Phone", "Email", "WhatsApp Number",
    "Address", "Date of Birth", "Wedding Anniversary", "Current Member", "Fingerprint ID",
    "Parent ID", "Created At", "Updated At",
]

VISITOR_HEADERS = [
    "ID", "Member ID", "Name", "Gender", "Age Group", "Address", "Email", "Phone",
    "WhatsApp", "Wedding Anniversary", "Birthday", "Prayer Points", "How Heard About Us",
    "Comments", "Visit Date", "Follow-up Status", "Assigned To", "Created At", "Updated At",
]

ATTENDANCE_HEADERS = [
    "No.", "Member Name", "Event", "Gender", "Age Group", "Attendance Date",
    "Check-in Time", "Method", "Type", "Phone", "Email",
]


def _blank(value):
    if value is None:
        return ""
    return isoformat(value) if hasattr(value, "isoformat") else value


def _render(rows):
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


class ExportService:
    @staticmethod
    def members_csv(church_id):
        rows = [MEMBER_HEADERS]
        for m in MemberRepository.list_for_church(church_id):
            rows.append([
                m.full_name, _blank(m.title), value_of(m.gender), value_of(m.age_group),
                _blank(m.phone), _blank(m.email), _blank(m.whatsapp_number), _blank(m.address),
                _blank(m.date_of_birth), _blank(m.wedding_anniversary),
                "true" if m.is_current_member else "false", _blank(m.fingerprint_id),
                _blank(m.parent_id), _blank(m.created_at), _blank(m.updated_at),
            ])
        return _render(rows), f"members_export_{today().isoformat()}.csv"

    @staticmethod
    def visitors_csv(church_id):
        rows = [VISITOR_HEADERS]
        for v in VisitorRepository.list_for_church(church_id):
            rows.append([
                v.id, _blank(v.member_id), v.name, _blank(value_of(v.gender)),
                _blank(value_of(v.age_group)), _blank(v.address), _blank(v.email),
                _blank(v.phone), _blank(v.whatsapp_number), _blank(v.wedding_anniversary),
                _blank(v.birthday), _blank(v.prayer_points),
                _blank(v.how_did_you_hear_about_us), _blank(v.comments),
                _blank(v.visit_date), v.follow_up_status, _blank(v.assigned_to),
                _blank(v.created_at), _blank(v.updated_at),
            ])
        return _render(rows), f"visitors_export_{today().isoformat()}.csv"

    @staticmethod
    def attendance_csv(church_id, start=None, end=None):
        start = start or today()
        end = end or today()
        if end < start:
            raise ValidationError("End date cannot be before start date")

        rows = [ATTENDANCE_HEADERS]
        records = AttendanceRepository.history(church_id, start, end)
        for index, r in enumerate(records, start=1):
            member = r.member
            name = member.full_name if member else (r.visitor_name or "Visitor")
            rows.append([
                index,
                name,
                r.event.name if r.event else "No Event",
                _blank(value_of(r.attendee_gender)),
                _blank(value_of(r.attendee_age_group)),
                isoformat(r.attendance_date),
                r.check_in_time.strftime("%H:%M:%S") if r.check_in_time else "",
                r.check_in_method,
                "Member" if member else "Visitor",
                _blank(member.phone) if member else "",
                _blank(member.email) if member else "",
            ])

        date_range = start.isoformat() if start == end else f"{start.isoformat()}_to_{end.isoformat()}"
        return _render(rows), f"attendance_history_{date_range}.csv"

    @staticmethod
    def monthly_report_csv(church_id, month=None, year=None):
        now = utcnow()
        month = now.month if month is None else month
        year = now.year if year is None else year
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")
        if not MINYEAR <= year <= MAXYEAR:
            raise ValidationError(f"Year must be between {MINYEAR} and {MAXYEAR}")

        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
        stats = AttendanceService.get_stats_range(church_id, start, end)
        lower, upper = day_bounds(start, end)
        new_members = MemberRepository.created_between(church_id, lower, upper)
        records = AttendanceRepository.in_range(church_id, start, end)

        rows = [
            [f"Monthly Report - {calendar.month_name[month]} {year}"],
            [],
            ["MONTHLY SUMMARY"],
            ["Total Days with Services", stats["totalDays"]],
            ["Total Attendance", stats["totalAttendance"]],
            ["Average Daily Attendance", stats["averagePerDay"]],
            ["Total Members", stats["memberAttendance"]],
            ["Total Visitors", stats["visitorAttendance"]],
            ["Male Attendance", stats["genderBreakdown"]["male"]],
            ["Female Attendance", stats["genderBreakdown"]["female"]],
            ["Children", stats["ageGroupBreakdown"]["child"]],
            ["Adolescents", stats["ageGroupBreakdown"]["adolescent"]],
            ["Adults", stats["ageGroupBreakdown"]["adult"]],
            [],
            ["NEW MEMBERS THIS MONTH"],
        ]
        if new_members:
            rows.append(["Name", "Gender", "Age Group", "Phone", "Email", "Registration Date"])
            for m in new_members:
                rows.append([
                    m.full_name, value_of(m.gender), value_of(m.age_group),
                    _blank(m.phone), _blank(m.email), _blank(m.created_at),
                ])
        else:
            rows.append(["No new members this month"])
        rows.append([])

        rows.append(["WEEKLY ATTENDANCE BREAKDOWN"])
        rows.append(["Date", "Gender", "Age Group", "Count"])
        breakdown = Counter(
            (r.attendance_date, value_of(r.attendee_gender), value_of(r.attendee_age_group))
            for r in records
        )
        for (day, gender, age_group), count in sorted(
            breakdown.items(), key=lambda item: (item[0][0], str(item[0][1]), str(item[0][2]))
        ):
            rows.append([isoformat(day), _blank(gender), _blank(age_group), count])

        return _render(rows), f"monthly_report_{year}_{month:02d}.csv"
