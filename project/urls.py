from django.urls import path, include
from rest_framework.routers import DefaultRouter
from project.adapters.viewset.project_viewset import ProjectViewSet


router = DefaultRouter()
router.register(r'projects', ProjectViewSet, basename='project')

urlpatterns = [
    path('', include(router.urls)),
]
