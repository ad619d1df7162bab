import logging

import requests
from django.conf import settings
from django.db import DatabaseError
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from routeweather.services import geocoding, map_renderer, trip
from trips.models import FavoriteRoute, RouteHistory
from .serializers import (
    FavoriteRouteSerializer,
    GeocodeResultSerializer,
    PlanInputSerializer,
    PlanOutputSerializer,
    ReplanInputSerializer,
    RouteHistorySerializer,
)

logger = logging.getLogger(__name__)


def _save_history(result: dict) -> int | None:
    """Store the plan; a failed write never fails the request."""
    try:
        entry = RouteHistory.objects.create(
            origin=result["origin"]["query"],
            destination=result["destination"]["query"],
            travel_mode=result["travel_mode"],
            interval_minutes=result["interval_minutes"],
            departure_offset_minutes=result["departure_offset_minutes"],
            distance_m=result["distance_m"],
            duration_s=result["duration_s"],
            encoded_polyline=result["encoded_polyline"],
            waypoints=result["waypoints"],
        )
    except DatabaseError:
        logger.warning("Could not save route history", exc_info=True)
        return None
    return entry.id


def _plan_response(
    origin: str,
    destination: str,
    travel_mode: str,
    interval_minutes: int,
    departure_offset_minutes: int,
    include_weather: bool = True,
    render_map: bool = False,
) -> Response:
    """Run the planning pipeline and map service errors to HTTP statuses."""
    try:
        result = trip.plan_trip(
            origin=origin,
            destination=destination,
            travel_mode=travel_mode,
            interval_minutes=interval_minutes,
            departure_offset_minutes=departure_offset_minutes,
            include_weather=include_weather,
        )

        result["route_map"] = None
        if render_map:
            result["route_map"] = map_renderer.render_route_map(
                encoded_polyline=result["encoded_polyline"],
                waypoints=result["waypoints"],
            )
        result["history_id"] = _save_history(result)

        output = PlanOutputSerializer(result)
        return Response(output.data, status=status.HTTP_200_OK)

    except ValueError as e:
        logger.warning("Validation error: %s", e)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except (RuntimeError, requests.RequestException) as e:
        logger.error("Service unavailable: %s", e)
        return Response({"error": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    except Exception as e:
        logger.exception("Unhandled error while planning trip")
        return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class PlanView(APIView):
    """
    Plan a trip with weather along the way.

    Flow
    ----
    1. Geocode origin / destination.
    2. OSRM route for the travel mode.
    3. Sample the route every ``interval_minutes`` of travel.
    4. Weather forecast for each sample at its arrival time.
    5. Optional static map, then append to the route history.
    """

    def post(self, request):
        logger.debug("Received plan request with data: %s", request.data)
        serializer = PlanInputSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        return _plan_response(
            origin=data["origin"],
            destination=data["destination"],
            travel_mode=data["travel_mode"],
            interval_minutes=data["interval_minutes"],
            departure_offset_minutes=data["departure_offset_minutes"],
            include_weather=data["include_weather"],
            render_map=data["render_map"],
        )


class GeocodeView(APIView):
    def get(self, request):
        query = request.query_params.get("q", "")
        try:
            results = geocoding.search(query)
        except ValueError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except RuntimeError as e:
            logger.error("Service unavailable: %s", e)
            return Response({"error": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        output = GeocodeResultSerializer(results, many=True)
        return Response(output.data, status=status.HTTP_200_OK)


class HistoryView(APIView):
    def get(self, request):
        limit = settings.ROUTE_WEATHER["HISTORY_LIMIT"]
        entries = RouteHistory.objects.all()[:limit]
        return Response(RouteHistorySerializer(entries, many=True).data)


class FavoriteListView(APIView):
    def get(self, request):
        favorites = FavoriteRoute.objects.all()
        return Response(FavoriteRouteSerializer(favorites, many=True).data)

    def post(self, request):
        serializer = FavoriteRouteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        favorite = serializer.save()
        logger.info("Saved favorite route %d: %s", favorite.id, favorite)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class FavoriteDetailView(APIView):
    def delete(self, request, pk):
        favorite = get_object_or_404(FavoriteRoute, pk=pk)
        favorite.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class FavoritePlanView(APIView):
    """Re-plan a saved favorite; waypoints are always recomputed."""

    def post(self, request, pk):
        favorite = get_object_or_404(FavoriteRoute, pk=pk)
        serializer = ReplanInputSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        return _plan_response(
            origin=favorite.origin,
            destination=favorite.destination,
            travel_mode=favorite.travel_mode,
            interval_minutes=favorite.interval_minutes,
            departure_offset_minutes=data["departure_offset_minutes"],
            include_weather=data["include_weather"],
        )
