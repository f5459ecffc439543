from rest_framework import serializers

from hr_discipline.attendance.models import Attendance


class AttendanceSerializer(serializers.ModelSerializer):
    logged_time = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Attendance
        fields = [
            "id",
            "employee",
            "date",
            "check_in_time",
            "check_out_time",
            "check_in_method",
            "check_out_method",
            "status",
            "minutes_late",
            "tardiness_processed",
            "worked_hours",
            "overtime_hours",
            "is_auto_checkout",
            "disciplinary_record",
            "logged_time",
            "notes",
        ]
        read_only_fields = fields

    def get_logged_time(self, obj) -> str | None:
        lt = obj.logged_time
        if lt is None:
            return None
        total_seconds = int(lt.total_seconds())
        hours, rem = divmod(total_seconds, 3600)
        minutes, seconds = divmod(rem, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class PunchSerializer(serializers.Serializer):
    """Check-in/check-out payload; ``employee`` is honoured for staff only."""

    employee = serializers.IntegerField(required=False, min_value=1)
    timestamp = serializers.DateTimeField(required=False)
    method = serializers.ChoiceField(
        choices=[Attendance.Method.MANUAL, Attendance.Method.DEVICE],
        default=Attendance.Method.MANUAL,
    )


class CheckInResultSerializer(serializers.Serializer):
    attendance = AttendanceSerializer()
    minutes_late = serializers.IntegerField()
    formal_tardies_count = serializers.IntegerField(allow_null=True)
    formal_tardies_added = serializers.IntegerField()
    deferred = serializers.BooleanField()


class AutoCheckoutRequestSerializer(serializers.Serializer):
    employee = serializers.IntegerField(required=False, min_value=1)
