from django.urls import path
from . import views

urlpatterns = [
    path('plan/', views.PlanView.as_view(), name='v1-plan'),
    path('geocode/', views.GeocodeView.as_view(), name='v1-geocode'),
    path('history/', views.HistoryView.as_view(), name='v1-history'),
    path('favorites/', views.FavoriteListView.as_view(), name='v1-favorites'),
    path('favorites/<int:pk>/', views.FavoriteDetailView.as_view(), name='v1-favorite-detail'),
    path('favorites/<int:pk>/plan/', views.FavoritePlanView.as_view(), name='v1-favorite-plan'),
]
