from django.conf import settings
from rest_framework import serializers

from trips.models import TRAVEL_MODES, FavoriteRoute, RouteHistory

TRAVEL_MODE_CHOICES = [value for value, _ in TRAVEL_MODES]
MAX_DEPARTURE_OFFSET = settings.ROUTE_WEATHER["MAX_DEPARTURE_OFFSET_MINUTES"]


class PlanInputSerializer(serializers.Serializer):
    origin = serializers.CharField(max_length=500)
    destination = serializers.CharField(max_length=500)
    travel_mode = serializers.ChoiceField(
        choices=TRAVEL_MODE_CHOICES, default="driving-car"
    )
    interval_minutes = serializers.IntegerField(
        min_value=5, max_value=720, default=30
    )
    departure_offset_minutes = serializers.IntegerField(
        min_value=0, max_value=MAX_DEPARTURE_OFFSET, default=0
    )
    include_weather = serializers.BooleanField(default=True)
    render_map = serializers.BooleanField(default=False)


class ReplanInputSerializer(serializers.Serializer):
    departure_offset_minutes = serializers.IntegerField(
        min_value=0, max_value=MAX_DEPARTURE_OFFSET, default=0
    )
    include_weather = serializers.BooleanField(default=True)


class LocationSerializer(serializers.Serializer):
    query = serializers.CharField()
    lat = serializers.FloatField()
    lng = serializers.FloatField()


class WeatherSerializer(serializers.Serializer):
    temp = serializers.FloatField()
    feels_like = serializers.FloatField()
    humidity = serializers.FloatField()
    pressure = serializers.FloatField()
    wind_speed = serializers.FloatField()
    wind_deg = serializers.FloatField()
    visibility = serializers.FloatField()
    condition = serializers.CharField(allow_blank=True)
    description = serializers.CharField(allow_blank=True)
    icon = serializers.CharField()
    icon_url = serializers.CharField()
    summary = serializers.CharField()
    is_forecasted = serializers.BooleanField()
    forecast_time = serializers.CharField(allow_null=True)
    time_difference_minutes = serializers.IntegerField(allow_null=True, required=False)
    fallback_used = serializers.BooleanField(default=False)


class WaypointSerializer(serializers.Serializer):
    sequence_index = serializers.IntegerField()
    lat = serializers.FloatField()
    lng = serializers.FloatField()
    distance_from_start = serializers.FloatField()
    estimated_time = serializers.FloatField()
    eta_text = serializers.CharField()
    arrival_time = serializers.CharField()
    arrival_clock = serializers.CharField()
    weather = WeatherSerializer(allow_null=True, required=False)
    weather_error = serializers.CharField(allow_null=True, required=False)


class PlanOutputSerializer(serializers.Serializer):
    origin = LocationSerializer()
    destination = LocationSerializer()
    travel_mode = serializers.CharField()
    average_speed_kmh = serializers.FloatField()
    interval_minutes = serializers.IntegerField()
    departure_offset_minutes = serializers.IntegerField()
    distance_m = serializers.FloatField()
    distance_km = serializers.FloatField()
    duration_s = serializers.FloatField()
    distance_text = serializers.CharField()
    duration_text = serializers.CharField()
    encoded_polyline = serializers.CharField()
    waypoints = WaypointSerializer(many=True)
    route_map = serializers.CharField(allow_null=True, required=False)
    history_id = serializers.IntegerField(allow_null=True, required=False)


class GeocodeResultSerializer(serializers.Serializer):
    display_name = serializers.CharField()
    lat = serializers.FloatField()
    lng = serializers.FloatField()
    importance = serializers.FloatField(allow_null=True)


class RouteHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = RouteHistory
        fields = [
            "id", "origin", "destination", "travel_mode",
            "interval_minutes", "departure_offset_minutes",
            "distance_m", "duration_s", "encoded_polyline",
            "waypoints", "created_at",
        ]


class FavoriteRouteSerializer(serializers.ModelSerializer):
    travel_mode = serializers.ChoiceField(
        choices=TRAVEL_MODE_CHOICES, default="driving-car"
    )
    interval_minutes = serializers.IntegerField(
        min_value=5, max_value=720, default=30
    )

    class Meta:
        model = FavoriteRoute
        fields = [
            "id", "name", "origin", "destination",
            "travel_mode", "interval_minutes", "created_at",
        ]
        read_only_fields = ["id", "created_at"]
