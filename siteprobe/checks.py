"""
Readiness 檢查項目。

每個檢查成功就回傳 None，失敗就 raise DependencyUnavailable(tag)。
收集 tag、控制 deadline 的邏輯在 prober.py。
"""

from pathlib import Path

from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .config import Settings
from .db import create_probe_engine
from .exceptions import DependencyUnavailable, MaintenanceMode


TAG_DB = "db"
TAG_DB_INIT = "db_init"
TAG_DB_CONNECT = "db_connect"
TAG_DB_QUERY = "db_query"
TAG_CACHE = "redis"
TAG_MAINTENANCE = "maintenance"


def describe_error(e: BaseException) -> str:
    # 只取第一行，避免把 SQL / 連線字串整段帶進 log
    first_line = str(e).strip().splitlines()[0] if str(e).strip() else ""
    detail = f"{type(e).__name__}: {first_line}" if first_line else type(e).__name__
    return detail[:200]


def check_database(settings: Settings) -> None:
    """
    連線 DB 並執行 SELECT 1。

    會被丟到 worker thread 執行 (driver 是同步的)。
    Engine 與連線在任何路徑下都會關閉。
    """
    try:
        engine = create_probe_engine(settings)
    except Exception as e:
        # URL 格式錯、driver 沒裝
        raise DependencyUnavailable(TAG_DB_INIT, describe_error(e)) from e

    try:
        try:
            conn = engine.connect()
        except SQLAlchemyError as e:
            raise DependencyUnavailable(TAG_DB_CONNECT, describe_error(e)) from e

        with conn:
            if settings.db_max_execution_ms and engine.dialect.name == "mysql":
                try:
                    conn.execute(
                        text(f"SET SESSION MAX_EXECUTION_TIME={int(settings.db_max_execution_ms)}")
                    )
                except DBAPIError:
                    # 舊版 MySQL / MariaDB 不支援，忽略
                    conn.rollback()

            try:
                value = conn.execute(text("SELECT 1")).scalar()
            except SQLAlchemyError as e:
                raise DependencyUnavailable(TAG_DB_QUERY, describe_error(e)) from e

            if value != 1:
                raise DependencyUnavailable(TAG_DB_QUERY, f"unexpected result {value!r}")
    finally:
        engine.dispose()


async def check_cache(settings: Settings) -> None:
    """PING Redis，必須收到 PONG。沒啟用就直接略過。"""
    if not settings.cache_check_enabled:
        return

    client = Redis(
        host=settings.cache_target,
        port=settings.cache_port,
        password=settings.cache_password or None,
        socket_connect_timeout=settings.cache_timeout,
        socket_timeout=settings.cache_timeout,
        # 不重試，失敗就直接回報，重試交給外部的 poller
        retry=Retry(NoBackoff(), 0),
        # RESP2：舊版 Redis (< 6) 不認得 HELLO 3
        protocol=2,
    )
    try:
        try:
            pong = await client.ping()
        except (RedisError, OSError) as e:
            raise DependencyUnavailable(TAG_CACHE, describe_error(e)) from e
    finally:
        await client.aclose()

    if pong is not True:
        raise DependencyUnavailable(TAG_CACHE, f"unexpected PING reply {pong!r}")


def check_maintenance(settings: Settings) -> None:
    if settings.maintenance:
        raise MaintenanceMode("HEALTHZ_MAINTENANCE is set")
    if Path(settings.maintenance_file).exists():
        raise MaintenanceMode(f"marker {settings.maintenance_file} present")
