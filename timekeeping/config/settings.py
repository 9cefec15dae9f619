"""应用配置模块

使用 Pydantic Settings 管理应用配置，支持从 .env 文件加载环境变量
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # JWT配置
    SECRET_KEY: str = "change-me-in-production"  # 生产环境中通过环境变量设置
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720  # 一个班次（12小时）

    # 应用配置
    APP_TITLE: str = "Production Timekeeping"
    APP_DESCRIPTION: str = "Activity timekeeping and TPU API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # MySQL 配置 - 从环境变量加载
    MYSQL_USER: str = ""
    MYSQL_PASSWORD: str = ""
    MYSQL_HOST: str = "127.0.0.1"
    MYSQL_PORT: str = "3306"
    MYSQL_DB: str = "timekeeping"

    # 数据库配置 - 优先使用DATABASE_URL，否则从MySQL配置构建
    DATABASE_URL: str = ""
    ECHO_SQL: bool = False  # 是否打印SQL日志

    # 业务规则
    ANOMALY_THRESHOLD_SECONDS: int = 86400  # 超过即标记为 anomalous
    MAX_REALIZED_RATIO: float = 1.5  # 实际数量上限 = floor(计划数量 * ratio)
    SLOW_PIECE_WARNING_SECONDS: int = 300  # 报表中单件平均时间告警阈值

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # 如果没有显式设置DATABASE_URL，从MySQL配置构建
        if not self.DATABASE_URL:
            if self.MYSQL_USER and self.MYSQL_PASSWORD:
                self.DATABASE_URL = f"mysql+pymysql://{self.MYSQL_USER}:{self.MYSQL_PASSWORD}@{self.MYSQL_HOST}:{self.MYSQL_PORT}/{self.MYSQL_DB}"
            else:
                # Fallback to a local sqlite DB to make local dev effortless
                self.DATABASE_URL = "sqlite:///./dev.db"


# 创建全局配置实例
settings = Settings()
