"""
URL configuration for HOS Compliance API endpoints.

Provides URL routing for HOS status, availability and
required rest calculations.
"""

from django.urls import path

from .views import HOSCalculationViewSet

urlpatterns = [
    path('status/',
         HOSCalculationViewSet.as_view({'post': 'current_status'}),
         name='hos-status'),
    path('calculate/',
         HOSCalculationViewSet.as_view({'post': 'calculate'}),
         name='hos-calculate'),
    path('required-rest/',
         HOSCalculationViewSet.as_view({'post': 'required_rest'}),
         name='hos-required-rest'),
]

# API Documentation - Available Endpoints:
"""
POST Endpoints:
- /api/hos/status/ - Calculate HOS status for a duty log as of an instant
- /api/hos/calculate/ - Calculate HOS status, availability and violations
- /api/hos/required-rest/ - Calculate rest options that restore driving eligibility
"""
