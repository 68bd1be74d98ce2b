"""
shardscope 配置
"""
from typing import Optional
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class PartitioningSettings(BaseModel):
    """分区配置"""
    default_partition_count: int = 8
    # 键数量超过平均值多少倍视为热点分区
    hot_partition_factor: float = 1.5
    # API 一次最多返回的哈希键范围数量
    max_listed_ranges: int = 4096
    # API 统计分布时允许的最大分区数
    max_partition_count: int = 100000


class KeygenSettings(BaseModel):
    """键生成配置"""
    default_pattern: str = "[A-Z0-9]{17}"
    default_count: int = 1000


class LoggingSettings(BaseModel):
    """日志配置"""
    level: str = "INFO"
    log_file: Optional[str] = None


class Settings(BaseSettings):
    """主配置类"""
    # 应用基础配置
    app_name: str = "shardscope"
    app_version: str = "1.0.0"
    debug: bool = False

    # 服务配置
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # 组件配置
    partitioning: PartitioningSettings = PartitioningSettings()
    keygen: KeygenSettings = KeygenSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_prefix="SHARDSCOPE_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )


# 全局配置实例
settings = Settings()
