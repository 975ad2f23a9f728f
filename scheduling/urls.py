"""
URL routing for the scheduling API.
"""

from django.urls import path
from .views import (
    GenerateClassesView,
    CommitClassesView,
    ScheduledClassListView,
    ScheduledClassDetailView,
    RelocateClassView,
    CalendarView,
)

urlpatterns = [
    path('schedule/generate/', GenerateClassesView.as_view(), name='schedule-generate'),
    path('schedule/commit/', CommitClassesView.as_view(), name='schedule-commit'),
    path('classes/', ScheduledClassListView.as_view(), name='class-list'),
    path('classes/<int:pk>/', ScheduledClassDetailView.as_view(), name='class-detail'),
    path('classes/<int:pk>/relocate/', RelocateClassView.as_view(), name='class-relocate'),
    path('calendar/', CalendarView.as_view(), name='calendar'),
]
