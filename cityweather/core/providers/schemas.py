"""Payload schemas for Open-Meteo responses.

Every field is optional: the providers decide which absences are fatal, so a
missing temperature is a modelled outcome rather than a ``KeyError``.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["CurrentBlock", "ForecastResponse", "GeocodeCandidate", "GeocodeResponse", "HourlyBlock"]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GeocodeCandidate(_Payload):
    name: Optional[str] = Field(default=None)
    country: Optional[str] = Field(default=None)
    country_code: Optional[str] = Field(default=None)
    admin1: Optional[str] = Field(default=None)
    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)
    timezone: Optional[str] = Field(default=None)


class GeocodeResponse(_Payload):
    results: List[GeocodeCandidate] = Field(default_factory=list)


class CurrentBlock(_Payload):
    time: Optional[str] = Field(default=None)
    temperature_2m: Optional[float] = Field(default=None)
    relative_humidity_2m: Optional[float] = Field(default=None)
    weather_code: Optional[int] = Field(default=None)


class HourlyBlock(_Payload):
    time: List[Optional[str]] = Field(default_factory=list)
    temperature_2m: List[Optional[float]] = Field(default_factory=list)
    relative_humidity_2m: List[Optional[float]] = Field(default_factory=list)
    weather_code: List[Optional[int]] = Field(default_factory=list)


class ForecastResponse(_Payload):
    utc_offset_seconds: Optional[int] = Field(default=None)
    timezone: Optional[str] = Field(default=None)
    current: Optional[CurrentBlock] = Field(default=None)
    hourly: Optional[HourlyBlock] = Field(default=None)
