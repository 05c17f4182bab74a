"""
训练课统计 API 路由

包含：
- POST /session/statistics：单个字段的统计摘要；功率字段附带 NP/IF/TSS（给定 FTP 时含功率区间分布），
  速度字段附带配速，心率字段附带心率区间分布，踏频字段附带平均踏频；
- POST /session/value-at：按时间（秒）或进度百分比取最接近的字段值；
- POST /session/summary：将 session/lap 摘要消息渲染为纯文本。

说明：
- 路由仅做参数校验与调用 core.analytics.session；
- 字段没有任何数值时返回 404。
"""

from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from ..core.analytics.fields import FieldKey, canonical_field
from ..core.analytics.session import (
    cadence_summary,
    field_statistics,
    field_value_at_time,
    heart_rate_summary,
    power_summary,
    speed_summary,
    text_summary,
)
from ..core.analytics.zones import zone_from_dict
from ..schemas.sensor import SessionStatisticsRequest, TextSummaryRequest, ValueAtTimeRequest

router = APIRouter(prefix="/session", tags=["session"])


@router.post("/statistics")
def session_statistics(payload: SessionStatisticsRequest):
    stats = field_statistics(payload.records, payload.field)
    if stats is None:
        raise HTTPException(status_code=404, detail=f"No numeric values for field '{payload.field}'")

    result = {"field": payload.field, "statistics": asdict(stats)}
    key = canonical_field(payload.field)
    if key in (FieldKey.WATT, FieldKey.POWER):
        result["power"] = power_summary(payload.records, payload.field, payload.ftp, payload.time_field)
    elif key == FieldKey.SPEED:
        result["speed"] = speed_summary(payload.records, payload.field)
    elif key == FieldKey.HEART_RATE:
        zones = [zone_from_dict(z.model_dump()) for z in payload.zones] if payload.zones else None
        result["heart_rate"] = heart_rate_summary(payload.records, zones, payload.field, payload.time_field)
    elif key == FieldKey.CADENCE:
        result["cadence"] = cadence_summary(payload.records, payload.field)
    return result


@router.post("/value-at")
def value_at_time(payload: ValueAtTimeRequest):
    if payload.is_percentage and not 0 <= payload.time <= 100:
        raise HTTPException(status_code=400, detail="Percentage must be between 0 and 100")
    value = field_value_at_time(
        payload.records, payload.field, payload.time, payload.is_percentage, payload.time_field
    )
    if value is None:
        raise HTTPException(status_code=404, detail=f"No numeric values for field '{payload.field}'")
    return {"field": payload.field, "time": payload.time, "is_percentage": payload.is_percentage, "value": value}


@router.post("/summary")
def session_summary(payload: TextSummaryRequest):
    return {"entity": payload.entity, "text": text_summary(payload.summary, payload.entity)}
