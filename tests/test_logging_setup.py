import logging

from krixflow.core import logging_setup


def test_setup_logging_writes_to_rotating_file(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_setup, "_configured", False)
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    log_file = tmp_path / "logs" / "krixflow.log"

    try:
        logging_setup.setup_logging(level="DEBUG", log_file=str(log_file))
        logging.getLogger("krixflow.test").info("stock moved")
        for handler in root.handlers:
            handler.flush()

        assert log_file.exists()
        assert "stock moved" in log_file.read_text()

        # second call is a no-op
        count = len(root.handlers)
        logging_setup.setup_logging()
        assert len(root.handlers) == count
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)
