"""Tests for logging and worker pool helpers."""

import logging

import pytest

from bodymorph.utils.logging import ColoredFormatter, setup_logger
from bodymorph.utils.parallel import get_optimal_workers, run_batch


class TestRunBatch:

    @pytest.mark.parametrize("workers", [1, 4])
    def test_keeps_input_order(self, workers):
        assert run_batch(lambda x: x * x, list(range(20)), workers) == [x * x for x in range(20)]

    def test_errors_propagate(self):
        def fail(x):
            raise KeyError(x)

        with pytest.raises(KeyError):
            run_batch(fail, [1, 2, 3], num_workers=2)

    def test_unknown_task_type(self):
        with pytest.raises(ValueError):
            get_optimal_workers("gpu")

    def test_worker_counts(self):
        assert get_optimal_workers("cpu") >= 1
        assert get_optimal_workers("io") >= 2


class TestLogging:

    def test_file_gets_debug(self, tmp_path):
        log_file = tmp_path / "logs" / "convert.log"
        logger = setup_logger("bodymorph.test", verbose=False, log_file=log_file)

        logger.debug("decoded CBBE")
        for handler in logger.handlers:
            handler.close()

        assert "decoded CBBE" in log_file.read_text(encoding='utf-8')

    def test_setup_replaces_handlers(self):
        setup_logger("bodymorph.test2")
        logger = setup_logger("bodymorph.test2", log_level="ERROR")

        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.ERROR

    def test_colored_formatter_restores_levelname(self):
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)

        text = ColoredFormatter('%(levelname)s: %(message)s').format(record)

        assert "\033[33m" in text
        assert record.levelname == "WARNING"
