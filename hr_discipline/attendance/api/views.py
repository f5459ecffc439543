import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from hr_discipline.attendance.api.serializers import AttendanceSerializer
from hr_discipline.attendance.api.serializers import AutoCheckoutRequestSerializer
from hr_discipline.attendance.api.serializers import CheckInResultSerializer
from hr_discipline.attendance.api.serializers import PunchSerializer
from hr_discipline.discipline.api.errors import error_response
from hr_discipline.discipline.container import build_discipline_services
from hr_discipline.exceptions import DisciplineError

logger = logging.getLogger(__name__)


def _resolve_employee_id(request, requested_id):
    """Staff may act for any employee; everyone else only for themselves."""
    user = request.user
    if requested_id and getattr(user, "is_staff", False):
        return requested_id, None
    employee = getattr(user, "employee", None)
    if employee is None:
        return None, Response({"detail": "No employee profile"}, status=400)
    if requested_id and requested_id != employee.pk:
        return None, Response({"detail": "Forbidden"}, status=403)
    return employee.pk, None


class CheckInView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Attendance"],
        request=PunchSerializer,
        responses={201: CheckInResultSerializer},
    )
    def post(self, request):
        ser = PunchSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        employee_id, error = _resolve_employee_id(request, vd.get("employee"))
        if error:
            return error
        services = build_discipline_services()
        try:
            result = services.orchestrator.check_in(
                employee_id, at=vd.get("timestamp"), method=vd["method"]
            )
        except DisciplineError as exc:
            return error_response(exc)
        outcome = result.outcome
        payload = {
            "attendance": result.attendance,
            "minutes_late": result.minutes_late,
            "formal_tardies_count": outcome.row.formal_tardies_count if outcome else None,
            "formal_tardies_added": outcome.formal_tardies_added if outcome else 0,
            "deferred": result.deferred,
        }
        return Response(
            CheckInResultSerializer(payload).data, status=status.HTTP_201_CREATED
        )


class CheckOutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Attendance"],
        request=PunchSerializer,
        responses=AttendanceSerializer,
    )
    def post(self, request):
        ser = PunchSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        employee_id, error = _resolve_employee_id(request, vd.get("employee"))
        if error:
            return error
        services = build_discipline_services()
        try:
            attendance = services.orchestrator.check_out(
                employee_id, at=vd.get("timestamp"), method=vd["method"]
            )
        except DisciplineError as exc:
            return error_response(exc)
        return Response(AttendanceSerializer(attendance).data)


class AutoCheckoutView(APIView):
    """Manual trigger for the auto-checkout sweep (or a single employee)."""

    permission_classes = [IsAdminUser]

    @extend_schema(tags=["Attendance"], request=AutoCheckoutRequestSerializer)
    def post(self, request):
        ser = AutoCheckoutRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        scheduler = build_discipline_services().auto_checkout
        employee_id = ser.validated_data.get("employee")
        if employee_id:
            try:
                attendance = scheduler.run_for_employee(employee_id)
            except DisciplineError as exc:
                return error_response(exc)
            return Response(AttendanceSerializer(attendance).data)
        report = scheduler.run()
        logger.info("Manual auto-checkout by %s", request.user.pk)
        return Response(report.as_dict())
