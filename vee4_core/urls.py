"""
Vee4 Main URL Configuration
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from drf_spectacular.views import SpectacularAPIView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.health import health_check, readiness_check


# ===========================================
# ADMIN SITE CUSTOMIZATION
# ===========================================
admin.site.site_header = "Vee4 Order Control"
admin.site.site_title = "Vee4 Admin"
admin.site.index_title = "Orders & Notifications"


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request):
    """API Root endpoint with available routes."""
    return Response({
        'name': 'Vee4 Orders API',
        'version': '1.0.0',
        'endpoints': {
            'auth': {
                'token': '/api/v1/auth/token/',
                'refresh': '/api/v1/auth/token/refresh/',
                'me': '/api/v1/auth/me/',
            },
            'orders': '/api/v1/orders/',
            'admin': {
                'orders': '/api/v1/admin/orders/',
                'customers': '/api/v1/admin/customers/',
            },
            'notifications': '/api/v1/notifications/',
            'schema': '/api/schema/',
        }
    })


urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # Monitoring
    path('health/', health_check, name='health'),
    path('health/ready/', readiness_check, name='health-ready'),

    # API Root & schema
    path('api/v1/', api_root, name='api-root'),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),

    # App URLs
    path('api/v1/', include('core.urls')),
    path('api/v1/', include('orders.urls')),
    path('api/v1/', include('notifications.urls')),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
