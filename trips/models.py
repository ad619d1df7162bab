from django.db import models

TRAVEL_MODES = [
    ("driving-car", "Driving"),
    ("cycling-regular", "Cycling"),
    ("foot-walking", "Walking"),
    ("driving", "Driving (short tag)"),
    ("cycling", "Cycling (short tag)"),
    ("walking", "Walking (short tag)"),
]


class RouteHistory(models.Model):
    """One planned trip, appended after every successful plan."""

    origin = models.CharField(max_length=500)
    destination = models.CharField(max_length=500)
    travel_mode = models.CharField(max_length=32, choices=TRAVEL_MODES)
    interval_minutes = models.PositiveIntegerField()
    departure_offset_minutes = models.PositiveIntegerField(default=0)
    distance_m = models.FloatField()
    duration_s = models.FloatField()
    encoded_polyline = models.TextField()
    waypoints = models.JSONField(default=list)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "route history"

    def __str__(self):
        return f"{self.origin} → {self.destination}"


class FavoriteRoute(models.Model):
    name = models.CharField(max_length=255, blank=True)
    origin = models.CharField(max_length=500)
    destination = models.CharField(max_length=500)
    travel_mode = models.CharField(
        max_length=32, choices=TRAVEL_MODES, default="driving-car"
    )
    interval_minutes = models.PositiveIntegerField(default=30)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.name or f"{self.origin} → {self.destination}"
