"""
URL configuration for compliance_api project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/4.2/topics/http/urls/
"""

from django.urls import path, include
from django.http import JsonResponse


def api_root(request):
    """API root endpoint with available endpoints."""
    return JsonResponse({
        'message': 'HOS Compliance API',
        'version': '1.0',
        'endpoints': {
            'hos_compliance': '/api/hos/',
        },
        'documentation': {
            'hos_compliance': {
                'description': 'Hours of Service status, availability and violation detection',
                'endpoints': {
                    'status': 'POST /api/hos/status/ - Calculate HOS status from a duty log',
                    'calculate': 'POST /api/hos/calculate/ - Calculate status, availability and violations',
                    'required_rest': 'POST /api/hos/required-rest/ - Rest options that restore driving eligibility',
                }
            },
        }
    })


urlpatterns = [
    # API root
    path("api/", api_root, name='api-root'),

    # HOS Compliance API
    path("api/hos/", include("hos_compliance.urls")),
]
