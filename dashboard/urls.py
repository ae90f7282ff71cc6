from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .adapters.viewsets.dashboard_count_card_viewset import DashboardViewset
from .adapters.viewsets.dashboard_calendar_viewset import CalendarView
from .adapters.viewsets.dashboard_due_tasks_viewset import DueTasksView

router = DefaultRouter()
router.register(r'dashboard', DashboardViewset, basename='dashboard')

urlpatterns = [
    path('dashboard/calendar/', CalendarView.as_view(), name='dashboard-calendar'),
    path('dashboard/due-tasks/', DueTasksView.as_view(), name='due-tasks'),
    path('', include(router.urls)),
]
