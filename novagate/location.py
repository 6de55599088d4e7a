"""
novagate/location.py - 리전 / 데이터센터 조회

리전 목록은 카탈로그의 compute(없으면 object-store) 엔드포인트 키에서 얻고,
데이터센터는 리전마다 "<리전>-a" 하나를 만들어 냅니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from novagate.exceptions import CloudError

if TYPE_CHECKING:
    from novagate.connection import CloudConnection

logger = logging.getLogger(__name__)

DEFAULT_JURISDICTION = "US"
DATA_CENTER_SUFFIX = "-a"


@dataclass(frozen=True)
class Region:
    """리전 정보"""

    region_id: str
    name: str
    jurisdiction: str = DEFAULT_JURISDICTION
    active: bool = True
    available: bool = True


@dataclass(frozen=True)
class DataCenter:
    """데이터센터(가용 영역) 정보"""

    data_center_id: str
    name: str
    region_id: str
    active: bool = True
    available: bool = True


class LocationServices:
    """리전 / 데이터센터 조회 서비스"""

    def __init__(self, connection: CloudConnection):
        self._connection = connection

    def list_regions(self) -> list[Region]:
        """카탈로그에 나타난 리전 목록"""
        return [Region(region_id=region_id, name=region_id) for region_id in self._connection.catalog().list_regions()]

    def get_region(self, region_id: str) -> Region | None:
        """리전 조회 (없으면 None)"""
        for region in self.list_regions():
            if region.region_id == region_id:
                return region
        return None

    def list_data_centers(self, region_id: str) -> list[DataCenter]:
        """리전의 데이터센터 목록

        Raises:
            CloudError: 없는 리전
        """
        region = self.get_region(region_id)
        if region is None:
            raise CloudError(message="noSuchRegion", details=f"No such region: {region_id}")

        data_center_id = f"{region.region_id}{DATA_CENTER_SUFFIX}"
        return [DataCenter(data_center_id=data_center_id, name=data_center_id, region_id=region.region_id)]

    def get_data_center(self, data_center_id: str) -> DataCenter | None:
        """세션 리전의 데이터센터 조회 (없으면 None)

        Raises:
            CloudError: 세션 리전을 알 수 없음
        """
        region_id = self._connection.session.region_id or self._connection.catalog().home_region
        if region_id is None:
            raise CloudError(message="noRegion", details="No region is known for zones request")

        for data_center in self.list_data_centers(region_id):
            if data_center.data_center_id == data_center_id:
                return data_center
        return None
