"""
传感器降噪 API 路由

包含：
- POST /sensor/filter：修正记录列表中的传感器掉点，返回修正后的记录、运行统计与前后对比指标；
- POST /sensor/metrics：对比原始记录与修正后记录。

说明：
- 路由仅做参数校验与调用降噪引擎；
- 未知的修正方法返回 400。
"""

import logging

from fastapi import APIRouter, HTTPException

from ..core.filtering.metrics import calculate_filter_improvement_metrics
from ..core.filtering.options import CorrectionOptions
from ..core.filtering.orchestrator import correct_records
from ..schemas.sensor import FilterRequest, FilterResponse, MetricsRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sensor", tags=["sensor"])


@router.post("/filter", response_model=FilterResponse)
def filter_records(payload: FilterRequest):
    try:
        options = CorrectionOptions.from_dict(payload.options.model_dump(exclude_none=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = correct_records(payload.records, options)
        metrics = calculate_filter_improvement_metrics(
            payload.records, result.corrected_records, options.fields
        )
        return {
            "method": result.method.value,
            "records": result.corrected_records,
            "stats": result.stats.as_dict(),
            "metrics": metrics,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("[sensor-api][filter] failed")
        raise HTTPException(status_code=500, detail=f"Error while filtering sensor data: {str(e)}")


@router.post("/metrics")
def filter_metrics(payload: MetricsRequest):
    return calculate_filter_improvement_metrics(payload.original, payload.filtered, payload.fields)
