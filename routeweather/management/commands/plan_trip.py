import requests
from django.core.management.base import BaseCommand, CommandError

from routeweather.api.v1.serializers import TRAVEL_MODE_CHOICES
from routeweather.services import trip
from routeweather.services.formatting import format_distance
from routeweather.services.converter import km_to_meters


class Command(BaseCommand):
    help = "Plan a trip between two addresses and print the weather along the route"

    def add_arguments(self, parser):
        parser.add_argument("origin")
        parser.add_argument("destination")
        parser.add_argument(
            "--mode", default="driving-car", choices=TRAVEL_MODE_CHOICES,
        )
        parser.add_argument(
            "--interval", type=int, default=30,
            help="Minutes of travel between weather points",
        )
        parser.add_argument(
            "--departure", type=int, default=0,
            help="Departure in minutes from now",
        )
        parser.add_argument("--no-weather", action="store_true")

    def handle(self, *args, **options):
        try:
            result = trip.plan_trip(
                origin=options["origin"],
                destination=options["destination"],
                travel_mode=options["mode"],
                interval_minutes=options["interval"],
                departure_offset_minutes=options["departure"],
                include_weather=not options["no_weather"],
            )
        except (ValueError, RuntimeError, requests.RequestException) as e:
            raise CommandError(str(e)) from e

        self.stdout.write(
            self.style.SUCCESS(
                f"{result['origin']['query']} → {result['destination']['query']}: "
                f"{result['distance_text']}, {result['duration_text']} "
                f"({result['travel_mode']}, {result['average_speed_kmh']:.0f} km/h)"
            )
        )

        for wp in result["waypoints"]:
            line = (
                f"#{wp['sequence_index']:<3} {wp['arrival_clock']} "
                f"+{wp['eta_text']:<8} "
                f"{format_distance(km_to_meters(wp['distance_from_start'])):>9} "
                f"({wp['lat']:.4f}, {wp['lng']:.4f})"
            )
            if "weather" in wp:
                if wp["weather"] is not None:
                    w = wp["weather"]
                    line += f"  {w['temp']:.0f}°C {w['summary']}"
                else:
                    line += f"  weather unavailable: {wp['weather_error']}"
            self.stdout.write(line)
