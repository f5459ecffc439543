from rest_framework import serializers

from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import EmployeeDisciplinaryRecord
from hr_discipline.discipline.models import TardinessRule


class TardinessRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = TardinessRule
        fields = (
            "id",
            "code",
            "name",
            "description",
            "type",
            "start_minutes_late",
            "end_minutes_late",
            "accumulation_count",
            "equivalent_formal_tardies",
            "applies_after_formal_tardy",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")


class DisciplinaryActionRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = DisciplinaryActionRule
        fields = (
            "id",
            "code",
            "name",
            "description",
            "trigger_type",
            "trigger_count",
            "period_days",
            "action_type",
            "suspension_days",
            "affects_salary",
            "requires_approval",
            "auto_apply",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")
        # Uniqueness of active triggers is checked by the rule catalog.
        validators = []


class DisciplinaryRecordSerializer(serializers.ModelSerializer):
    rule_name = serializers.CharField(source="rule.name", read_only=True, default=None)

    class Meta:
        model = EmployeeDisciplinaryRecord
        fields = (
            "id",
            "employee",
            "rule",
            "rule_name",
            "action_type",
            "trigger_type",
            "trigger_count",
            "applied_date",
            "effective_date",
            "expiration_date",
            "suspension_days",
            "affects_salary",
            "status",
            "approved_by",
            "approval_date",
            "description",
            "notes",
            "created_at",
        )
        read_only_fields = fields


class DecisionSerializer(serializers.Serializer):
    approve = serializers.BooleanField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class MonthQuerySerializer(serializers.Serializer):
    employee = serializers.IntegerField(required=False, min_value=1)
    year = serializers.IntegerField(required=False, min_value=2000, max_value=9999)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)
