from django.urls import path, include
from rest_framework.routers import DefaultRouter
from room.adapters.viewset.room_viewset import RoomViewSet

router = DefaultRouter()
router.register(r'rooms', RoomViewSet, basename='room')

urlpatterns = [
    path('', include(router.urls)),
]
