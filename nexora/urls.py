# nexora/urls.py
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView


def health(_request):
    return JsonResponse({"status": "ok"})


urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health, name='health'),

    # --- DOCUMENTATION ---
    path('schema/', SpectacularAPIView.as_view(), name='schema'),
    path('swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # --- REGISTRATION API ---
    # This handles http://127.0.0.1:4000/register/, /upload/<id>/, /institutes/, /departments/
    path('', include('institutions.urls')),
]
