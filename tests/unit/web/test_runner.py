"""Tests for the uvicorn logging configuration."""

from uvicorn.config import LOGGING_CONFIG

from taskvault.web.runner import ACCESS_LOG_FORMAT, DEFAULT_LOG_FORMAT, build_log_config


class TestBuildLogConfig:
    def test_formats_applied(self):
        log_config = build_log_config(debug=False)
        assert log_config["formatters"]["access"]["fmt"] == ACCESS_LOG_FORMAT
        assert log_config["formatters"]["default"]["fmt"] == DEFAULT_LOG_FORMAT

    def test_uvicorn_default_left_untouched(self):
        access_fmt = LOGGING_CONFIG["formatters"]["access"]["fmt"]
        default_fmt = LOGGING_CONFIG["formatters"]["default"]["fmt"]
        uvicorn_level = LOGGING_CONFIG["loggers"]["uvicorn"]["level"]

        build_log_config(debug=True)

        assert LOGGING_CONFIG["formatters"]["access"]["fmt"] == access_fmt
        assert LOGGING_CONFIG["formatters"]["default"]["fmt"] == default_fmt
        assert LOGGING_CONFIG["loggers"]["uvicorn"]["level"] == uvicorn_level

    def test_debug_raises_uvicorn_verbosity(self):
        assert build_log_config(debug=True)["loggers"]["uvicorn"]["level"] == "DEBUG"
        assert build_log_config(debug=False)["loggers"]["uvicorn"]["level"] == LOGGING_CONFIG["loggers"]["uvicorn"]["level"]
