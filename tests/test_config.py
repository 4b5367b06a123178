from order_delivery_service.config import Settings


def test_defaults_build_postgres_url(monkeypatch):
    for name in ("DB_HOST", "DB_USER", "DB_PASSWORD", "DB_NAME", "DB_PORT", "DB_SSLMODE", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)

    url = Settings.from_env().sqlalchemy_url

    assert url.drivername == "postgresql+psycopg"
    assert url.username == "postgres"
    assert url.host == "localhost"
    assert url.port == 5432
    assert url.database == "order_delivery"
    assert url.query["sslmode"] == "disable"


def test_env_overrides(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_PORT", "6543")
    monkeypatch.setenv("DB_PASSWORD", "p@ss:word")
    monkeypatch.setenv("DB_SSLMODE", "require")

    url = Settings.from_env().sqlalchemy_url

    assert url.host == "db.internal"
    assert url.port == 6543
    assert url.password == "p@ss:word"
    assert url.query["sslmode"] == "require"


def test_database_url_takes_precedence(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./orders.db")

    assert Settings.from_env().sqlalchemy_url == "sqlite:///./orders.db"


def test_empty_variables_fall_back_to_defaults(monkeypatch):
    for name in ("DB_HOST", "DB_PORT", "DB_SSLMODE", "DATABASE_URL", "LOG_LEVEL"):
        monkeypatch.setenv(name, "")

    settings = Settings.from_env()

    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_sslmode == "disable"
    assert settings.database_url is None
    assert settings.log_level == "INFO"
