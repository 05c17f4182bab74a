"""
Pydantic models for the sensor-filter and zone endpoints.

Records travel as free-form JSON objects: the filter needs to preserve every
key the device produced, so no record schema is enforced.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class FilterOptions(BaseModel):
    """Subset of CorrectionOptions exposed over HTTP (unset = server default)."""
    method: Optional[str] = Field(None, description="threshold / movingAverage / correlation / kalman / contextual / auto")
    fields: Optional[List[str]] = Field(None, description="Noisy fields to correct")
    reference_field: Optional[str] = Field(None, description="Trusted motion field, e.g. enhanced_speed")
    time_field: Optional[str] = None
    drop_threshold: Optional[float] = Field(None, ge=0, le=1)
    speed_stability_threshold: Optional[float] = Field(None, ge=0)
    min_motion_speed: Optional[float] = Field(None, ge=0)
    min_valid_stroke_rate: Optional[float] = Field(None, ge=0)
    min_valid_watt: Optional[float] = Field(None, ge=0)
    window_size: Optional[int] = Field(None, ge=1)
    analysis_window_size: Optional[int] = Field(None, ge=1)
    min_valid_points_in_window: Optional[int] = Field(None, ge=0)
    multi_field_correlation: Optional[bool] = None
    adaptive_thresholds: Optional[bool] = None
    temporal_smoothing: Optional[bool] = None
    contextual_awareness: Optional[bool] = None


class FilterRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(..., description="Decoded records in time order")
    options: FilterOptions = Field(default_factory=FilterOptions)


class CorrectionStatsResponse(BaseModel):
    total_points: int
    noisy_points: int
    fixed_fields: Dict[str, int]
    quality_score: float
    phase_analysis: Optional[Dict[str, int]] = None


class FilterResponse(BaseModel):
    method: str
    records: List[Dict[str, Any]]
    stats: CorrectionStatsResponse
    metrics: Dict[str, Any]


class MetricsRequest(BaseModel):
    original: List[Dict[str, Any]]
    filtered: List[Dict[str, Any]]
    fields: List[str] = Field(default_factory=lambda: ["stroke_rate", "watt"])


class ZoneModel(BaseModel):
    min: float
    max: Optional[float] = Field(None, description="null means unbounded")
    name: str


class SeriesPointModel(BaseModel):
    timer_time: float
    value: float


class ZoneDistributionRequest(BaseModel):
    zones: Optional[List[ZoneModel]] = Field(None, description="Defaults to the built-in table of `field`")
    series: Optional[List[SeriesPointModel]] = None
    records: Optional[List[Dict[str, Any]]] = None
    field: Optional[str] = Field(None, description="Field to bucket when records are given")
    time_field: str = "timer_time"


class ZoneDistributionItemModel(BaseModel):
    zone: ZoneModel
    duration: float
    percentage: float


class SessionStatisticsRequest(BaseModel):
    records: List[Dict[str, Any]]
    field: str
    ftp: Optional[float] = Field(None, gt=0)
    zones: Optional[List[ZoneModel]] = Field(None, description="Heart-rate zones; built-in table when omitted")
    time_field: str = "timer_time"


class ValueAtTimeRequest(BaseModel):
    records: List[Dict[str, Any]]
    field: str
    time: float = Field(..., description="Timer seconds, or 0-100 when is_percentage is set")
    is_percentage: bool = False
    time_field: str = "timer_time"


class TextSummaryRequest(BaseModel):
    summary: Dict[str, Any] = Field(..., description="Decoded session or lap message")
    entity: Literal["Session", "Lap"] = "Session"
