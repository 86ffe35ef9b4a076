"""Tests for structlog configuration."""

import structlog

from split_router.logging_config import configure_logging


class TestConfigureLogging:
    def teardown_method(self) -> None:
        structlog.reset_defaults()

    def test_info_level_drops_debug(self, capsys) -> None:  # noqa: ANN001
        configure_logging()
        logger = structlog.get_logger()

        logger.debug("quote_dropped", route="X -> Y")
        logger.info("routing_request", amount=10)

        out = capsys.readouterr().out
        assert "routing_request" in out
        assert "quote_dropped" not in out

    def test_verbose_keeps_debug(self, capsys) -> None:  # noqa: ANN001
        configure_logging(verbose=True)

        structlog.get_logger().debug("quote_dropped", route="X -> Y")

        assert "quote_dropped" in capsys.readouterr().out
