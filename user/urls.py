from django.urls import path
from .adapters.viewsets import auth_viewset
from .adapters.viewsets.auth_refresh import CookieTokenRefreshView

urlpatterns = [
    path('login/email/', auth_viewset.AuthViewSet.as_view({'post': 'login_with_email'}), name='login_email'),
    path('register/', auth_viewset.AuthViewSet.as_view({'post': 'register'}), name='register'),
    path('logout/', auth_viewset.AuthViewSet.as_view({'post': 'logout'}), name='logout'),
    path('token/refresh/', CookieTokenRefreshView.as_view(), name='token_refresh'),
    path('me/', auth_viewset.MeViewSet.as_view({'get': 'retrieve'}), name='me'),
]
