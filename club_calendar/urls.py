"""
URL configuration for club_calendar project.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('scheduling.urls')),
]
