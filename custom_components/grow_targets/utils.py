"""Utility functions for date parsing, number coercion and VPD math in grow_targets."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any

from dateutil import parser

DateInput = str | datetime | date | None


def parse_date_field(date_value: DateInput) -> datetime | None:
    """Parse various date inputs into a datetime object."""
    if date_value is None:
        return None
    if isinstance(date_value, datetime):
        return date_value
    if isinstance(date_value, date):
        return datetime.combine(date_value, datetime.min.time())
    if isinstance(date_value, str):
        try:
            return parser.isoparse(date_value)
        except (ValueError, TypeError):
            return None
    return None


def format_date(date_value: DateInput) -> str | None:
    """Format a date input into an ISO date string."""
    dt = parse_date_field(date_value)
    if dt is None:
        return None
    return dt.date().isoformat()


def _as_naive(value: datetime) -> datetime:
    """Drop the timezone, keeping the wall-clock time of its own zone."""
    if value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


def calculate_days_since(
    start_date: DateInput, end_date: DateInput | None = None
) -> int:
    """Returns the number of whole days from start_date to end_date.

    If end_date is None, uses current time. The result is floored, so it is
    negative when start_date lies in the future.
    """
    start = parse_date_field(start_date)
    end = parse_date_field(end_date) if end_date else datetime.now()
    if start is None or end is None:
        return 0
    return (_as_naive(end) - _as_naive(start)).days


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (62.5 -> 63)."""
    return int(math.floor(value + 0.5))


def coerce_float(value: Any) -> float | None:
    """Return ``value`` as a finite float, or None when that is not possible."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class VPDCalculator:
    """A utility class for calculating Vapor Pressure Deficit (VPD)."""

    @staticmethod
    def saturation_vapor_pressure(temperature_c: float) -> float:
        """Return saturation vapor pressure in kPa (Magnus formula)."""
        return 0.61094 * math.exp((17.625 * temperature_c) / (243.04 + temperature_c))

    @staticmethod
    def calculate_vpd_with_lst_offset(
        air_temperature_c: float, humidity_rh: float, lst_offset: float = -2.0
    ) -> float | None:
        """
        Calculate Vapor Pressure Deficit (VPD) with Leaf Surface Temperature offset.

        Args:
            air_temperature_c: Air temperature in degrees Celsius.
            humidity_rh: Relative humidity in percent (e.g., 65.5).
            lst_offset: Temperature offset for leaf surface (default: -2.0°C).

        Returns:
            The calculated VPD in kilopascals (kPa), or None if inputs are invalid.
        """
        if not isinstance(air_temperature_c, (int, float)) or not isinstance(
            humidity_rh, (int, float)
        ):
            return None

        leaf_temperature_c = air_temperature_c + lst_offset
        svp_leaf = VPDCalculator.saturation_vapor_pressure(leaf_temperature_c)
        svp_air = VPDCalculator.saturation_vapor_pressure(air_temperature_c)

        # VPD is the difference between leaf SVP and air AVP
        avp = svp_air * (humidity_rh / 100)
        return round(svp_leaf - avp, 2)

    @staticmethod
    def calculate_target_humidity(
        air_temperature_c: float, target_vpd: float, lst_offset: float = -2.0
    ) -> float:
        """Return the relative humidity (0-100) that yields ``target_vpd`` at this temperature.

        Solves ``target_vpd = SVP(leaf) - RH / 100 * SVP(air)`` for RH.
        """
        svp_leaf = VPDCalculator.saturation_vapor_pressure(
            air_temperature_c + lst_offset
        )
        svp_air = VPDCalculator.saturation_vapor_pressure(air_temperature_c)
        target_rh = (svp_leaf - target_vpd) / svp_air * 100
        return min(100.0, max(0.0, target_rh))
