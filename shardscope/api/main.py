#!/usr/bin/env python3
"""
shardscope - API服务
提供REST API接口: 分区键映射、分布统计、哈希键范围和随机键生成
"""
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Union

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field
import uvicorn

from config.settings import settings
from shardscope import __version__
from shardscope.errors import ShardScopeError
from shardscope.keygen import DEFAULT_PATTERN, MAX_GENERATE_COUNT, PRESETS, generate_many
from shardscope.logging import init_logging
from shardscope.partitioning import (
    analyze_partition_keys,
    find_hot_partitions,
    normalize_partition_count,
    parse_keys,
    partition_hash_ranges,
    summarize_distribution,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


system_stats = {
    "start_time": _utcnow(),
    "requests_count": 0,
    "errors_count": 0,
    "domain_errors_count": 0,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用启动时初始化日志"""
    init_logging(settings.logging.level, settings.logging.log_file)
    logger.info("Starting {} {} on {}:{}", settings.app_name, __version__,
                settings.api_host, settings.api_port)
    yield
    logger.info("{} stopped", settings.app_name)


# 创建FastAPI应用
app = FastAPI(
    title="shardscope",
    description="近似 Kinesis 分片选择: MD5 哈希键按分区数等分 128 位键空间",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# 添加CORS中间件
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 中间件：请求统计
@app.middleware("http")
async def stats_middleware(request, call_next):
    start_time = time.time()
    system_stats["requests_count"] += 1

    try:
        response = await call_next(request)
        if response.status_code >= 500:
            system_stats["errors_count"] += 1
        return response
    except Exception:
        system_stats["errors_count"] += 1
        raise
    finally:
        process_time = time.time() - start_time
        logger.debug("{} {} processed in {:.2f} ms", request.method,
                     request.url.path, process_time * 1000)


# API请求/响应模型
class ApiResponse(BaseModel):
    """标准API响应"""
    success: bool
    data: Any = None
    message: str = ""
    timestamp: datetime


class AnalyzeRequest(BaseModel):
    """分区键映射请求，keys 与 raw_keys（每行一个键）二选一"""
    keys: Optional[List[str]] = None
    raw_keys: Optional[str] = None
    partition_count: Union[int, float] = Field(
        default_factory=lambda: settings.partitioning.default_partition_count)
    include_records: bool = True


class GenerateRequest(BaseModel):
    """随机键生成请求，preset 优先于 pattern"""
    pattern: Optional[str] = None
    preset: Optional[str] = None
    count: Union[int, float] = Field(default_factory=lambda: settings.keygen.default_count)


class SimulateRequest(GenerateRequest):
    """生成随机键并立即分析分布"""
    partition_count: Union[int, float] = Field(
        default_factory=lambda: settings.partitioning.default_partition_count)
    include_records: bool = False


def _ok(data: Any, message: str) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message, timestamp=_utcnow())


def _domain_error(e: ShardScopeError) -> HTTPException:
    system_stats["domain_errors_count"] += 1
    logger.warning("Request rejected: {} ({})", e.message, e.error_code)
    return HTTPException(status_code=400, detail={"error_code": e.error_code, "message": e.message})


def _resolve_pattern(request: GenerateRequest) -> str:
    if request.preset is not None:
        if request.preset not in PRESETS:
            raise HTTPException(status_code=400, detail={
                "error_code": "UnknownPreset",
                "message": f"Unknown preset {request.preset!r}, expected one of {sorted(PRESETS)}"
            })
        return PRESETS[request.preset]
    if request.pattern is None:
        return settings.keygen.default_pattern or DEFAULT_PATTERN
    return request.pattern


def _distribution_report(keys: List[str], partition_count: Union[int, float],
                         include_records: bool) -> Dict[str, Any]:
    """映射分区键并汇总分布"""
    count = normalize_partition_count(partition_count)

    limit = settings.partitioning.max_partition_count
    if count > limit:
        system_stats["domain_errors_count"] += 1
        logger.warning("Request rejected: {} partitions exceeds limit {}", count, limit)
        raise HTTPException(status_code=400, detail={
            "error_code": "TooManyPartitions",
            "message": f"Cannot summarize more than {limit} partitions"
        })

    records = analyze_partition_keys(keys, count)

    summary = None
    hot_partitions: List[Dict[str, Any]] = []
    if records:
        summary = summarize_distribution(count, [r.partition_index for r in records])
        hot_partitions = find_hot_partitions(summary, settings.partitioning.hot_partition_factor)

    report = {
        "partition_count": count,
        "total_keys": len(records),
        "summary": summary.to_dict() if summary else None,
        "hot_partitions": hot_partitions,
    }
    if include_records:
        report["records"] = [r.to_dict() for r in records]
    return report


# 根路径
@app.get("/", response_model=ApiResponse)
async def root():
    """根路径 - 服务概览"""
    uptime = _utcnow() - system_stats["start_time"]

    return _ok({
        "system_name": settings.app_name,
        "version": __version__,
        "uptime_seconds": uptime.total_seconds(),
        "defaults": {
            "partition_count": settings.partitioning.default_partition_count,
            "pattern": settings.keygen.default_pattern,
            "count": settings.keygen.default_count,
        },
        "presets": PRESETS,
        "limits": {
            "max_generate_count": MAX_GENERATE_COUNT,
            "max_partition_count": settings.partitioning.max_partition_count,
        },
    }, "服务运行正常")


# 分区API
@app.post("/partitions/analyze", response_model=ApiResponse)
async def analyze(request: AnalyzeRequest):
    """把分区键映射到分区并统计分布"""
    keys = list(request.keys or [])
    if request.raw_keys:
        keys.extend(parse_keys(request.raw_keys))

    try:
        report = _distribution_report(keys, request.partition_count, request.include_records)
    except ShardScopeError as e:
        raise _domain_error(e)

    logger.info("Analyzed {} keys across {} partitions", report["total_keys"], report["partition_count"])
    return _ok(report, "分区映射完成" if keys else "没有分区键")


@app.get("/partitions/ranges", response_model=ApiResponse)
async def hash_key_ranges(partition_count: Optional[float] = Query(default=None)):
    """获取每个分区的哈希键范围"""
    if partition_count is None:
        partition_count = settings.partitioning.default_partition_count

    try:
        count = normalize_partition_count(partition_count)
    except ShardScopeError as e:
        raise _domain_error(e)

    limit = settings.partitioning.max_listed_ranges
    if count > limit:
        raise HTTPException(status_code=400, detail={
            "error_code": "TooManyRanges",
            "message": f"Cannot list more than {limit} hash key ranges"
        })

    ranges = partition_hash_ranges(count)
    return _ok({
        "partition_count": count,
        "ranges": [r.to_dict() for r in ranges]
    }, "哈希键范围获取成功")


# 键生成API
@app.post("/keys/generate", response_model=ApiResponse)
async def generate_keys(request: GenerateRequest):
    """按模式生成随机分区键"""
    pattern = _resolve_pattern(request)

    try:
        keys = generate_many(pattern, request.count)
    except ShardScopeError as e:
        raise _domain_error(e)

    logger.info("Generated {} keys from pattern {!r}", len(keys), pattern)
    return _ok({"pattern": pattern, "count": len(keys), "keys": keys}, "随机键生成成功")


@app.post("/keys/simulate", response_model=ApiResponse)
async def simulate(request: SimulateRequest):
    """生成随机键并分析其分区分布"""
    pattern = _resolve_pattern(request)

    try:
        keys = generate_many(pattern, request.count)
        report = _distribution_report(keys, request.partition_count, request.include_records)
    except ShardScopeError as e:
        raise _domain_error(e)

    report["pattern"] = pattern
    return _ok(report, "模拟完成")


# 系统监控API
@app.get("/monitoring/health", response_model=ApiResponse)
async def health_check():
    """健康检查"""
    uptime = _utcnow() - system_stats["start_time"]
    requests_count = system_stats["requests_count"]

    return _ok({
        "overall": "healthy",
        "uptime_seconds": uptime.total_seconds(),
        "requests_total": requests_count,
        "errors_total": system_stats["errors_count"],
        "rejected_total": system_stats["domain_errors_count"],
        "error_rate": system_stats["errors_count"] / max(requests_count, 1),
    }, "系统健康检查完成")


def main():
    """启动服务"""
    uvicorn.run(
        "shardscope.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info"
    )


# 启动服务
if __name__ == "__main__":
    main()
