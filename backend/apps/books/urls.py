from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ManuscriptViewSet

router = DefaultRouter()
router.register("manuscript", ManuscriptViewSet, basename="manuscript")

urlpatterns = [
    path("", include(router.urls)),
]
