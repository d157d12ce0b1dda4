import io
import logging
from unittest import TestCase
from unittest.mock import patch

from aurorder.emitter import format_cycle
from aurorder.logger import LevelFormatter, setup_logger


class TestLogger(TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        handlers = root.handlers[:]
        level = root.level

        def restore() -> None:
            root.handlers[:] = handlers
            root.setLevel(level)

        self.addCleanup(restore)

    def test_level_name_is_lower_case(self) -> None:
        cycle = format_cycle(["a", "b", "a"])
        record = logging.LogRecord(
            "aurorder.emitter", logging.WARNING, __file__, 1, "found dependency cycle: %s", (cycle,), None
        )
        assert LevelFormatter().format(record) == "warning: found dependency cycle: [ a -> b -> a ]"
        assert record.levelname == "WARNING"

    def test_setup_logger_writes_to_stderr(self) -> None:
        with patch("sys.stderr", new_callable=io.StringIO) as stderr:
            setup_logger("warning")
            logging.getLogger("aurorder.emitter").warning("found dependency cycle: %s", "[ a -> b -> a ]")
            logging.getLogger("aurorder.emitter").info("not shown")
        assert stderr.getvalue() == "warning: found dependency cycle: [ a -> b -> a ]\n"
        assert logging.getLogger().level == logging.WARNING
