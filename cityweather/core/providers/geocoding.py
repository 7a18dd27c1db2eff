from __future__ import annotations

import logging
import re
from typing import Optional, Sequence, Tuple

from .base import HttpProvider, ProviderError
from .schemas import GeocodeCandidate, GeocodeResponse


TARGET_COUNTRY_CODE = "CN"
MAX_CANDIDATES = 5

# Chinese city names -> names the geocoder ranks best
CITY_ALIASES = {
    "北京": "Beijing",
    "上海": "Shanghai",
    "天津": "Tianjin",
    "重庆": "Chongqing",
    "广州": "Guangzhou",
    "深圳": "Shenzhen",
    "杭州": "Hangzhou",
    "南京": "Nanjing",
    "苏州": "Suzhou",
    "武汉": "Wuhan",
    "成都": "Chengdu",
    "西安": "Xi'an",
    "长沙": "Changsha",
    "郑州": "Zhengzhou",
    "济南": "Jinan",
    "青岛": "Qingdao",
    "沈阳": "Shenyang",
    "大连": "Dalian",
    "哈尔滨": "Harbin",
    "长春": "Changchun",
    "昆明": "Kunming",
    "贵阳": "Guiyang",
    "南宁": "Nanning",
    "福州": "Fuzhou",
    "厦门": "Xiamen",
    "合肥": "Hefei",
    "南昌": "Nanchang",
    "太原": "Taiyuan",
    "石家庄": "Shijiazhuang",
    "兰州": "Lanzhou",
    "西宁": "Xining",
    "银川": "Yinchuan",
    "乌鲁木齐": "Urumqi",
    "拉萨": "Lhasa",
    "呼和浩特": "Hohhot",
    "海口": "Haikou",
    "三亚": "Sanya",
    "宁波": "Ningbo",
    "无锡": "Wuxi",
    "香港": "Hong Kong",
    "澳门": "Macau",
    "台北": "Taipei",
}

_QUERY_SEPARATOR = re.compile(r"[,，]")


def parse_city_query(query: str) -> Tuple[str, Optional[str]]:
    """Split ``"name, region"`` (ASCII or full-width comma) into name and hint."""
    parts = _QUERY_SEPARATOR.split(query or "", maxsplit=1)
    name = parts[0].strip()
    hint = parts[1].strip() if len(parts) > 1 else ""
    return name, hint or None


def translate_city_name(name: str) -> str:
    return CITY_ALIASES.get(name, name)


def _casefold(value: Optional[str]) -> str:
    return (value or "").strip().casefold()


def select_candidate(
    candidates: Sequence[GeocodeCandidate],
    target_name: str,
    admin_hint: Optional[str] = None,
) -> Optional[GeocodeCandidate]:
    """Narrow provider candidates down to one.

    Each stage keeps only the matching candidates, unless nothing would match,
    in which case the stage is skipped. Provider order is preserved.
    """
    survivors = list(candidates)
    if not survivors:
        return None

    in_country = [c for c in survivors if (c.country_code or "").upper() == TARGET_COUNTRY_CODE]
    if in_country:
        survivors = in_country

    if admin_hint:
        hint = _casefold(admin_hint)
        in_region = [c for c in survivors if _casefold(c.admin1) == hint]
        if in_region:
            survivors = in_region

    target = _casefold(target_name)
    for candidate in survivors:
        if _casefold(candidate.name) == target:
            return candidate
    return survivors[0]


class OpenMeteoGeocoder(HttpProvider):
    """Resolve free-form city input to coordinates via the Open-Meteo geocoder."""

    name = "open-meteo-geocoding"
    base_url = "https://geocoding-api.open-meteo.com/v1/search"

    def __init__(self, base_url: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url or self.base_url
        self._log = logging.getLogger(self.__class__.__name__)

    def search(self, name: str, *, timeout_ms: Optional[int] = None, debug_raw: bool = False) -> GeocodeResponse:
        params = {
            "name": name,
            "count": MAX_CANDIDATES,
            "language": "zh",
            "format": "json",
        }
        response = self._request("GET", self.base_url, params=params, timeout_ms=timeout_ms, debug_raw=debug_raw)
        data = self._json(response)
        if not isinstance(data, dict):
            raise ProviderError("unexpected geocoding payload")
        return GeocodeResponse.model_validate(data)

    def resolve(
        self,
        query: str,
        *,
        timeout_ms: Optional[int] = None,
        debug_raw: bool = False,
    ) -> Optional[GeocodeCandidate]:
        name, admin_hint = parse_city_query(query)
        if not name:
            return None
        target_name = translate_city_name(name)
        response = self.search(target_name, timeout_ms=timeout_ms, debug_raw=debug_raw)
        chosen = select_candidate(response.results, target_name, admin_hint)
        if chosen is None:
            self._log.info("No geocoding candidates for %r", target_name)
            return None
        if chosen.latitude is None or chosen.longitude is None:
            self._log.warning("Geocoding candidate %r has no coordinates", chosen.name)
            return None
        return chosen


__all__ = [
    "CITY_ALIASES",
    "OpenMeteoGeocoder",
    "TARGET_COUNTRY_CODE",
    "parse_city_query",
    "select_candidate",
    "translate_city_name",
]
