from django.contrib import admin

from .models import ShiftOverride
from .models import ShiftPeriod
from .models import WorkShift


class ShiftPeriodInline(admin.TabularInline):
    model = ShiftPeriod
    extra = 0


@admin.register(WorkShift)
class WorkShiftAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "time_zone",
        "grace_period_minutes",
        "auto_checkout_enabled",
        "is_active",
    )
    list_filter = ("auto_checkout_enabled", "is_active")
    search_fields = ("code", "name")
    inlines = [ShiftPeriodInline]


@admin.register(ShiftOverride)
class ShiftOverrideAdmin(admin.ModelAdmin):
    list_display = ("employee", "date", "shift", "reason")
    list_filter = ("shift",)
    raw_id_fields = ("employee",)
