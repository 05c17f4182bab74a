"""
运动遥测数据清洗 API 主应用文件。

本文件是FastAPI应用的入口点，负责：
1. 创建FastAPI应用实例
2. 注册传感器降噪、区间分布与训练课统计路由
3. 按 LOG_LEVEL 初始化日志
"""

from fastapi import FastAPI
from .logging_config import setup_logging
from .config import LOG_LEVEL

from .api.sensor import router as sensor_router
from .api.zones import router as zones_router
from .api.session import router as session_router

setup_logging(LOG_LEVEL)
app = FastAPI(title="Workout Telemetry Cleaning API")

# router registration
app.include_router(sensor_router, tags=["sensor"])
app.include_router(zones_router, tags=["zones"])
app.include_router(session_router, tags=["session"])


@app.get("/health")
def health():
    return {"status": "ok"}
