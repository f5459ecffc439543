from django.contrib import admin

from .models import DisciplinaryActionRule
from .models import EmployeeDisciplinaryRecord
from .models import TardinessAccumulation
from .models import TardinessRule


@admin.register(TardinessRule)
class TardinessRuleAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "type",
        "start_minutes_late",
        "end_minutes_late",
        "accumulation_count",
        "applies_after_formal_tardy",
        "is_active",
    )
    list_filter = ("type", "is_active")
    search_fields = ("code", "name")


@admin.register(DisciplinaryActionRule)
class DisciplinaryActionRuleAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "trigger_type",
        "trigger_count",
        "period_days",
        "action_type",
        "requires_approval",
        "is_active",
    )
    list_filter = ("trigger_type", "action_type", "is_active")
    search_fields = ("code", "name")


@admin.register(TardinessAccumulation)
class TardinessAccumulationAdmin(admin.ModelAdmin):
    list_display = (
        "employee",
        "year",
        "month",
        "late_arrivals_count",
        "direct_tardiness_count",
        "formal_tardies_count",
        "administrative_acts",
    )
    list_filter = ("year", "month")
    raw_id_fields = ("employee",)
    # Counters change only through the ledger.
    readonly_fields = (
        "late_arrivals_count",
        "direct_tardiness_count",
        "formal_tardies_count",
        "administrative_acts",
    )


@admin.register(EmployeeDisciplinaryRecord)
class EmployeeDisciplinaryRecordAdmin(admin.ModelAdmin):
    list_display = (
        "employee",
        "action_type",
        "status",
        "applied_date",
        "effective_date",
        "expiration_date",
    )
    list_filter = ("status", "action_type", "trigger_type")
    raw_id_fields = ("employee", "rule", "approved_by")
    date_hierarchy = "applied_date"
