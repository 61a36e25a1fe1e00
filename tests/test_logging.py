import json
import logging

from loguru import logger

from rewards_api.core.logging import configure_logging


def _lines(capsys) -> list[dict]:
    return [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]


def test_loguru_records_are_written_as_json_lines(capsys) -> None:
    configure_logging(service_name="rewards-api", environment="test", version="9.9.9")

    logger.info("Lucky draw spin completed", user_id="u-1", attempts=2)

    [line] = _lines(capsys)
    assert line["message"] == "Lucky draw spin completed"
    assert line["level"] == "info"
    assert (line["service"], line["environment"], line["version"]) == ("rewards-api", "test", "9.9.9")
    assert line["user_id"] == "u-1"
    assert line["attempts"] == 2
    assert "trace_id" not in line


def test_stdlib_records_are_forwarded_with_their_logger_name(capsys) -> None:
    configure_logging(service_name="rewards-api", environment="test", version="9.9.9")

    logging.getLogger("rewards_api.bridge").warning("pool {size} exhausted")

    [line] = _lines(capsys)
    assert line["logger"] == "rewards_api.bridge"
    assert line["level"] == "warning"
    assert line["message"] == "pool {size} exhausted"
