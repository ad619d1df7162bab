from django.urls import path, include

urlpatterns = [
    path('v1/', include('routeweather.api.v1.urls')),
]
