"""
应用配置中心（Configuration Center）

说明：
- 本模块统一管理服务端的运行配置（日志、传感器降噪的默认参数）
- 配置优先从环境变量中读取，未设置时使用安全的默认值
- 读取顺序：环境变量（优先） > 内置默认
- 降噪引擎本身不读取环境变量，这些值作为 ``CorrectionOptions`` 的默认值传入，
  库调用方可按次覆盖任意参数

常用环境变量（全部可选）：
1) 日志
   - ``LOG_LEVEL``：根日志等级，默认 INFO（可选 DEBUG/INFO/WARNING/ERROR）

2) 传感器降噪
   - ``FILTER_METHOD``：threshold / movingAverage / correlation / kalman /
     contextual / auto，默认 ``auto``
   - ``FILTER_FIELDS``：逗号分隔的噪声字段，默认 ``stroke_rate,watt``
   - ``REFERENCE_FIELD``：可信的运动参考字段，默认 ``enhanced_speed``
   - ``TIME_FIELD``：计时秒数字段，默认 ``timer_time``
   - ``SPEED_STABILITY_THRESHOLD``：参考字段单步变化（%）不超过该值视为稳定，默认 15
   - ``MIN_MOTION_SPEED``：参考值需大于该值才会修正，默认 1.0
   - ``DROP_THRESHOLD``：单步下降比例阈值，默认 0.5
   - ``MIN_VALID_STROKE_RATE`` / ``MIN_VALID_WATT``：默认 10 / 30
   - ``ANALYSIS_WINDOW_SIZE``：窗口单侧邻点数，默认 5
   - ``MIN_VALID_POINTS_IN_WINDOW``：默认 3
"""

import os
from typing import List


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    items = [item.strip() for item in raw.split(',')]
    return [item for item in items if item] or list(default)


# Logging
# LOG_LEVEL controls the root logger, see telemetry/logging_config.py
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

# Sensor filtering defaults
FILTER_METHOD = os.environ.get('FILTER_METHOD', 'auto')
FILTER_FIELDS = _env_list('FILTER_FIELDS', ['stroke_rate', 'watt'])
REFERENCE_FIELD = os.environ.get('REFERENCE_FIELD', 'enhanced_speed')
TIME_FIELD = os.environ.get('TIME_FIELD', 'timer_time')

SPEED_STABILITY_THRESHOLD = _env_float('SPEED_STABILITY_THRESHOLD', 15.0)
MIN_MOTION_SPEED = _env_float('MIN_MOTION_SPEED', 1.0)
DROP_THRESHOLD = _env_float('DROP_THRESHOLD', 0.5)
MIN_VALID_STROKE_RATE = _env_float('MIN_VALID_STROKE_RATE', 10.0)
MIN_VALID_WATT = _env_float('MIN_VALID_WATT', 30.0)
ANALYSIS_WINDOW_SIZE = _env_int('ANALYSIS_WINDOW_SIZE', 5)
MIN_VALID_POINTS_IN_WINDOW = _env_int('MIN_VALID_POINTS_IN_WINDOW', 3)
