from django.contrib import admin

from .models import Attendance


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = (
        "employee",
        "date",
        "check_in_time",
        "check_out_time",
        "status",
        "minutes_late",
        "worked_hours",
        "is_auto_checkout",
    )
    list_filter = ("status", "is_auto_checkout", "date")
    search_fields = ("employee__employee_code", "employee__user__username")
    raw_id_fields = ("employee", "disciplinary_record")
    date_hierarchy = "date"
