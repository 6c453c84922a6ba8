from __future__ import annotations

from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from strata.config.decode import Duration
from strata.logging import LoggingSettings


class PostgresConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = ""
    port: int = 0
    user: str = ""
    password: str = ""
    database: str = ""
    ssl_mode: str = ""
    timezone: str = ""
    max_open_conns: int = 0
    max_idle_conns: int = 0
    conn_max_lifetime: Duration = timedelta(0)
    conn_max_idle_time: Duration = timedelta(0)
    enabled: bool = False

    def get_dsn(self) -> str:
        return (
            f"host={self.host} port={self.port} user={self.user} password={self.password} "
            f"dbname={self.database} sslmode={self.ssl_mode} TimeZone={self.timezone}"
        )


class MySQLConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = ""
    port: int = 0
    user: str = ""
    password: str = ""
    database: str = ""
    charset: str = ""
    parse_time: bool = False
    loc: str = ""
    max_open_conns: int = 0
    max_idle_conns: int = 0
    conn_max_lifetime: Duration = timedelta(0)
    conn_max_idle_time: Duration = timedelta(0)
    enabled: bool = False

    def get_dsn(self) -> str:
        parse_time = "true" if self.parse_time else "false"
        return (
            f"{self.user}:{self.password}@tcp({self.host}:{self.port})/{self.database}"
            f"?charset={self.charset}&parseTime={parse_time}&loc={self.loc}"
        )


class RedisConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = ""
    port: int = 0
    db: int = 0
    password: str = ""
    pool_size: int = 0
    max_retries: int = 0
    dial_timeout: Duration = timedelta(0)
    read_timeout: Duration = timedelta(0)
    write_timeout: Duration = timedelta(0)
    enabled: bool = False

    def get_addr(self) -> str:
        return f"{self.host}:{self.port}"


class MongoDBConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = ""
    port: int = 0
    database: str = ""
    auth_source: str = ""
    replica_set: str = ""
    max_pool_size: int = Field(default=0, ge=0)
    min_pool_size: int = Field(default=0, ge=0)
    timeout: Duration = timedelta(0)
    enabled: bool = False

    def get_uri(self) -> str:
        uri = f"mongodb://{self.host}:{self.port}/{self.database}"
        params = []
        if self.auth_source:
            params.append(f"authSource={self.auth_source}")
        if self.replica_set:
            params.append(f"replicaSet={self.replica_set}")
        if params:
            uri += "?" + "&".join(params)
        return uri


class TelegramConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    bot_token: str = ""
    channel_id: int = 0
    message_thread_id: int = 0
    enabled: bool = False


class EmailConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    smtp_host: str = ""
    smtp_port: int = 0
    from_: str = Field(default="", alias="from")
    password: str = ""
    use_tls: bool = False
    enabled: bool = False


class AppConfig(BaseModel):
    """
    Common application configuration.

    Every key can be overridden from the environment, e.g. `SERVER_PORT`,
    `DATABASE_HOST` or `REDIS_DIAL_TIMEOUT=5s`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # App settings
    app_name: str = ""
    app_env: str = ""
    app_log_path: str = ""
    app_log_level: str = ""

    # Databases
    database: PostgresConfig = Field(default_factory=PostgresConfig)
    mysql: Optional[MySQLConfig] = None
    redis: RedisConfig = Field(default_factory=RedisConfig)
    mongodb: Optional[MongoDBConfig] = None

    # Messaging
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)

    # Server settings
    server_port: int = 0
    server_host: str = ""
    server_timeout: int = 0

    # JWT settings
    jwt_secret_key: str = ""
    jwt_expiration: Duration = timedelta(0)
    jwt_refresh_expiry: Duration = timedelta(0)

    def logging_settings(self) -> LoggingSettings:
        return LoggingSettings(
            level=self.app_log_level or "INFO",
            path=self.app_log_path or None,
        )
