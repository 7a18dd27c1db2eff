"""Management command to fetch weather using the same stack as the API."""
from __future__ import annotations

import json
from dataclasses import replace
from typing import Any

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from cityweather.api.views import current_config, get_weather_resolver
from cityweather.core.config import PROVIDER_CHOICES


class Command(BaseCommand):
    help = "Fetch the weather snapshot for a city"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--city", type=str, required=True, help="City name, optionally 'name, region'")
        parser.add_argument("--provider", choices=PROVIDER_CHOICES, help="Override WEATHER_PROVIDER")
        parser.add_argument("--no-cache", action="store_true", help="Bypass the snapshot cache")

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        city = (options.get("city") or "").strip()
        if not city:
            raise CommandError("--city must not be blank")

        config = current_config()
        if options.get("provider"):
            config = replace(config, provider=options["provider"])
        if options.get("no_cache"):
            config = replace(config, cache_disabled=True)

        snapshot = async_to_sync(get_weather_resolver().get_weather_by_city)(city, config)
        self.stdout.write(json.dumps(snapshot.to_dict(), ensure_ascii=False))
