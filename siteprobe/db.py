from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import NullPool

from .config import Settings


MYSQL_DRIVER = "mysql+pymysql"


def build_database_url(settings: Settings) -> URL:
    if settings.db_url:
        return make_url(settings.db_url)

    # WordPress 慣例：WORDPRESS_DB_HOST 可以帶 port，例如 "mariadb:3306"
    host, _, port = settings.db_host.partition(":")
    return URL.create(
        MYSQL_DRIVER,
        username=settings.db_user or None,
        password=settings.database_password or None,
        host=host or None,
        port=int(port) if port else None,
        database=settings.db_name or None,
    )


def create_probe_engine(settings: Settings) -> Engine:
    """
    建立只給單次 probe 使用的 engine。

    NullPool：connection close 就真的關掉，不會在 probe 之間留連線。
    """
    url = build_database_url(settings)
    connect_args = {}
    if url.get_backend_name() == "mysql":
        timeout = max(1, int(round(settings.db_timeout)))
        connect_args = {
            "connect_timeout": timeout,
            "read_timeout": timeout,
            "write_timeout": timeout,
        }
    return create_engine(url, poolclass=NullPool, connect_args=connect_args)
