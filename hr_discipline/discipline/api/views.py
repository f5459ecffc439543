import logging

from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import serializers
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from hr_discipline.attendance.services import local_today
from hr_discipline.discipline import selectors
from hr_discipline.discipline.api.errors import error_response
from hr_discipline.discipline.api.serializers import DecisionSerializer
from hr_discipline.discipline.api.serializers import DisciplinaryActionRuleSerializer
from hr_discipline.discipline.api.serializers import DisciplinaryRecordSerializer
from hr_discipline.discipline.api.serializers import MonthQuerySerializer
from hr_discipline.discipline.api.serializers import TardinessRuleSerializer
from hr_discipline.discipline.container import build_discipline_services
from hr_discipline.discipline.models import DisciplinaryActionRule
from hr_discipline.discipline.models import EmployeeDisciplinaryRecord
from hr_discipline.discipline.models import TardinessRule
from hr_discipline.exceptions import ConfigurationError
from hr_discipline.exceptions import DisciplineError

logger = logging.getLogger(__name__)


class _CatalogRuleViewSet(viewsets.ModelViewSet):
    """Writes go through the rule catalog; deletion only retires a rule."""

    permission_classes = [IsAdminUser]
    save_method = ""

    def _save(self, serializer, instance):
        for attr, value in serializer.validated_data.items():
            setattr(instance, attr, value)
        catalog = build_discipline_services().catalog
        try:
            serializer.instance = getattr(catalog, self.save_method)(instance)
        except ConfigurationError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc

    def perform_create(self, serializer):
        self._save(serializer, self.queryset.model())

    def perform_update(self, serializer):
        self._save(serializer, serializer.instance)

    def perform_destroy(self, instance):
        build_discipline_services().catalog.deactivate(instance)
        logger.info("Deactivated %s by user %s", instance, self.request.user.pk)


@extend_schema_view(
    list=extend_schema(tags=["Rule Configuration"]),
    retrieve=extend_schema(tags=["Rule Configuration"]),
    create=extend_schema(tags=["Rule Configuration"]),
    update=extend_schema(tags=["Rule Configuration"]),
    partial_update=extend_schema(tags=["Rule Configuration"]),
    destroy=extend_schema(tags=["Rule Configuration"]),
)
class TardinessRuleViewSet(_CatalogRuleViewSet):
    queryset = TardinessRule.objects.all()
    serializer_class = TardinessRuleSerializer
    save_method = "save_tardiness_rule"


@extend_schema_view(
    list=extend_schema(tags=["Rule Configuration"]),
    retrieve=extend_schema(tags=["Rule Configuration"]),
    create=extend_schema(tags=["Rule Configuration"]),
    update=extend_schema(tags=["Rule Configuration"]),
    partial_update=extend_schema(tags=["Rule Configuration"]),
    destroy=extend_schema(tags=["Rule Configuration"]),
)
class DisciplinaryActionRuleViewSet(_CatalogRuleViewSet):
    queryset = DisciplinaryActionRule.objects.all()
    serializer_class = DisciplinaryActionRuleSerializer
    save_method = "save_disciplinary_rule"


@extend_schema_view(
    list=extend_schema(
        tags=["Disciplinary Records"],
        parameters=[
            OpenApiParameter("employee", int, description="Filter by employee id"),
            OpenApiParameter("status", str, description="Filter by record status"),
        ],
    ),
    retrieve=extend_schema(tags=["Disciplinary Records"]),
)
class DisciplinaryRecordViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Disciplinary records.

    Staff see every record; other users only the records of their own employee
    profile. Decisions and risk reports are staff-only.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = DisciplinaryRecordSerializer

    def get_queryset(self):
        qs = EmployeeDisciplinaryRecord.objects.select_related("rule")
        user = self.request.user
        if not user.is_staff:
            employee = getattr(user, "employee", None)
            if employee is None:
                return qs.none()
            qs = qs.filter(employee=employee)
        params = self.request.query_params
        if params.get("employee"):
            qs = qs.filter(employee_id=params["employee"])
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        return qs

    def get_permissions(self):
        if self.action in {"decision", "at_risk"}:
            return [IsAdminUser()]
        return [p() for p in self.permission_classes]

    @extend_schema(
        tags=["Disciplinary Records"],
        request=DecisionSerializer,
        responses=DisciplinaryRecordSerializer,
    )
    @action(detail=True, methods=["post"])
    def decision(self, request, pk=None):
        ser = DecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            record = build_discipline_services().decide(
                int(pk),
                approve=ser.validated_data["approve"],
                approver_id=request.user.pk,
                reason=ser.validated_data["reason"],
            )
        except DisciplineError as exc:
            return error_response(exc)
        return Response(DisciplinaryRecordSerializer(record).data)

    @extend_schema(tags=["Disciplinary Records"], parameters=[MonthQuerySerializer])
    @action(detail=False, methods=["get"])
    def stats(self, request):
        """Monthly tardiness counters plus overall disciplinary history."""

        ser = MonthQuerySerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        employee_id = vd.get("employee")
        if not request.user.is_staff or not employee_id:
            employee = getattr(request.user, "employee", None)
            if employee is None:
                return Response({"detail": "No employee profile"}, status=400)
            if employee_id and employee_id != employee.pk:
                return Response({"detail": "Forbidden"}, status=403)
            employee_id = employee.pk
        today = local_today()
        return Response(
            {
                "monthly": selectors.monthly_stats(
                    employee_id,
                    vd.get("year", today.year),
                    vd.get("month", today.month),
                ),
                "history": selectors.employee_disciplinary_stats(employee_id, today),
            }
        )

    @extend_schema(tags=["Disciplinary Records"])
    @action(detail=False, methods=["get"], url_path="at-risk")
    def at_risk(self, request):
        return Response(selectors.employees_at_risk())
