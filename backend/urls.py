"""
Root URL configuration for the assessment engine backend.

- /admin/: Django admin (Jazzmin) for content authoring and attempt review
- /api/token/: JWT issuance and refresh
- /api/assessments/: attempt lifecycle, results and grading
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/assessments/", include("assessments.urls")),
]
