from django.db import migrations, models


TRAVEL_MODES = [
    ("driving-car", "Driving"),
    ("cycling-regular", "Cycling"),
    ("foot-walking", "Walking"),
    ("driving", "Driving (short tag)"),
    ("cycling", "Cycling (short tag)"),
    ("walking", "Walking (short tag)"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="FavoriteRoute",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, max_length=255)),
                ("origin", models.CharField(max_length=500)),
                ("destination", models.CharField(max_length=500)),
                ("travel_mode", models.CharField(choices=TRAVEL_MODES, default="driving-car", max_length=32)),
                ("interval_minutes", models.PositiveIntegerField(default=30)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="RouteHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("origin", models.CharField(max_length=500)),
                ("destination", models.CharField(max_length=500)),
                ("travel_mode", models.CharField(choices=TRAVEL_MODES, max_length=32)),
                ("interval_minutes", models.PositiveIntegerField()),
                ("departure_offset_minutes", models.PositiveIntegerField(default=0)),
                ("distance_m", models.FloatField()),
                ("duration_s", models.FloatField()),
                ("encoded_polyline", models.TextField()),
                ("waypoints", models.JSONField(default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "verbose_name_plural": "route history",
            },
        ),
    ]
