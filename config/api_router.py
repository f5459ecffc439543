from django.conf import settings
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from hr_discipline.attendance.api.views import AutoCheckoutView
from hr_discipline.attendance.api.views import CheckInView
from hr_discipline.attendance.api.views import CheckOutView
from hr_discipline.discipline.api.views import DisciplinaryActionRuleViewSet
from hr_discipline.discipline.api.views import DisciplinaryRecordViewSet
from hr_discipline.discipline.api.views import TardinessRuleViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("tardiness-rules", TardinessRuleViewSet)
router.register("disciplinary-rules", DisciplinaryActionRuleViewSet)
router.register(
    "disciplinary-records",
    DisciplinaryRecordViewSet,
    basename="disciplinary-records",
)


app_name = "api"
urlpatterns = [
    path("attendance/check-in/", CheckInView.as_view(), name="attendance-check-in"),
    path("attendance/check-out/", CheckOutView.as_view(), name="attendance-check-out"),
    path(
        "attendance/auto-checkout/",
        AutoCheckoutView.as_view(),
        name="attendance-auto-checkout",
    ),
    *router.urls,
]
