"""
区间分布 API 路由

包含：
- POST /zones/distribution：计算各区间的停留时长与占比。

说明：
- 输入为现成的 ``series``（``{timer_time, value}`` 点列），或 ``records`` 加待统计的 ``field``；
- 未提供 ``zones`` 时使用 ``field`` 的内置区间表，没有内置表时返回 400。
"""

from typing import List

from fastapi import APIRouter, HTTPException

from ..core.analytics.zones import (
    TimeSeriesPoint,
    calculate_zone_distribution,
    default_zones,
    distribution_as_dicts,
    field_time_series,
    zone_from_dict,
)
from ..schemas.sensor import ZoneDistributionItemModel, ZoneDistributionRequest

router = APIRouter(prefix="/zones", tags=["zones"])


@router.post("/distribution", response_model=List[ZoneDistributionItemModel])
def zone_distribution(payload: ZoneDistributionRequest):
    if payload.series is not None:
        series = [TimeSeriesPoint(timer_time=p.timer_time, value=p.value) for p in payload.series]
    elif payload.records is not None and payload.field:
        series = field_time_series(payload.records, payload.field, payload.time_field)
    else:
        raise HTTPException(status_code=400, detail="Provide either series or records with field")

    if payload.zones is not None:
        zones = [zone_from_dict(z.model_dump()) for z in payload.zones]
    else:
        zones = default_zones(payload.field) if payload.field else None
        if zones is None:
            raise HTTPException(status_code=400, detail=f"No built-in zones for field '{payload.field}'")
    return distribution_as_dicts(calculate_zone_distribution(series, zones))
