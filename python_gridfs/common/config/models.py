from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class RedisConfig(BaseSettings):
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    username: Optional[str] = None
    password: Optional[str] = None
    pool_size: Optional[int] = None
    tls: bool = False

    @property
    def url(self) -> str:
        scheme = "rediss" if self.tls else "redis"
        auth = ""
        if self.password:
            auth = f"{self.username or ''}:{self.password}@"
        return f"{scheme}://{auth}{self.host}:{self.port}/{self.db}"

    model_config = SettingsConfigDict(env_prefix="REDIS_")

class StoreConfig(BaseSettings):
    backend: str = "redis"
    database: str = "gridfs"
    root: Optional[str] = None
    chunk_size: Optional[int] = Field(default=None, gt=0)

    model_config = SettingsConfigDict(env_prefix="STORE_")

class LoggingConfig(BaseSettings):
    level: str = "INFO"
    format: str = "text"

    model_config = SettingsConfigDict(env_prefix="LOG_")

class AppConfig(BaseSettings):
    node_id: str = "node-1"

    redis: RedisConfig = RedisConfig()
    store: StoreConfig = StoreConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(env_file=".env", env_nested_delimiter="__")
