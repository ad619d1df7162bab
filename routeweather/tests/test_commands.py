from io import StringIO
from unittest import mock

from django.core.management import CommandError, call_command
from django.test import SimpleTestCase

from .test_views import _plan_result


class PlanTripCommandTests(SimpleTestCase):

    @mock.patch("routeweather.management.commands.plan_trip.trip.plan_trip")
    def test_prints_waypoints(self, mock_plan):
        mock_plan.return_value = _plan_result()
        out = StringIO()

        call_command("plan_trip", "Turin", "Milan", "--interval", "45", stdout=out)

        output = out.getvalue()
        mock_plan.assert_called_once_with(
            origin="Turin",
            destination="Milan",
            travel_mode="driving-car",
            interval_minutes=45,
            departure_offset_minutes=0,
            include_weather=True,
        )
        self.assertIn("Turin → Milan: 142.0km, 1h 30m", output)
        self.assertIn("14°C Few Clouds", output)
        self.assertIn("weather unavailable", output)
        self.assertIn("142.0km", output.splitlines()[-1])

    @mock.patch(
        "routeweather.management.commands.plan_trip.trip.plan_trip",
        side_effect=ValueError("Could not geocode location: 'Atlantis'"),
    )
    def test_errors_become_command_errors(self, mock_plan):
        with self.assertRaises(CommandError):
            call_command("plan_trip", "Atlantis", "Milan", stdout=StringIO())
