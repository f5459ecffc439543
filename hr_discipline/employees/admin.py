from django.contrib import admin

from .models import Employee


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("employee_code", "user", "status", "default_shift", "is_active")
    list_filter = ("status", "is_active")
    search_fields = ("employee_code", "user__username", "user__email")
    raw_id_fields = ("user",)
