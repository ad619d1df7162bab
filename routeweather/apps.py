from django.apps import AppConfig


class RouteWeatherConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "routeweather"
