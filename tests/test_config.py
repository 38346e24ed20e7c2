from tuitionhub.core.config import Settings


def make_settings(**overrides):
    return Settings(database_url="sqlite://", jwt_secret_key="k", **overrides)


def test_cors_origins_are_split_and_trimmed():
    s = make_settings(allowed_origins=" http://a.test , ,http://b.test")
    assert s.cors_origins == ["http://a.test", "http://b.test"]


def test_redis_timeout_defaults():
    assert make_settings().redis_socket_timeout == 2


def test_server_bind_options_are_not_settings():
    # uvicorn owns host and port
    assert "host" not in Settings.model_fields
    assert "port" not in Settings.model_fields
