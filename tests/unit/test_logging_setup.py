import io
import logging

from testbench.utils import logging as utils_logging


def test_setup_logging_configures_root_with_emoji_formatter():
    buf = io.StringIO()

    utils_logging.setup_logging(level=logging.DEBUG, stream=buf)

    root = logging.getLogger()
    assert len(root.handlers) == 1

    log = utils_logging.get_logger("test_mod")
    log.info("hello world")

    out = buf.getvalue()
    assert "💡 [INFO" in out
    assert "(test_mod)" in out
    assert "hello world" in out


def test_setup_logging_is_idempotent_replaces_handler():
    buf1 = io.StringIO()
    utils_logging.setup_logging(level=logging.INFO, stream=buf1)

    buf2 = io.StringIO()
    utils_logging.setup_logging(level=logging.INFO, stream=buf2)

    log = utils_logging.get_logger("another_mod")
    log.warning("warn msg")

    assert buf1.getvalue() == ""
    out2 = buf2.getvalue()
    assert "⚠️ [WARNING" in out2
    assert "(another_mod)" in out2


def test_extra_fields_are_appended():
    buf = io.StringIO()
    utils_logging.setup_logging(level=logging.DEBUG, stream=buf)

    utils_logging.get_logger("extra_mod").info("with extra", extra={"path": "/tmp"})

    assert "with extra | path='/tmp'" in buf.getvalue()


def test_level_from_name():
    assert utils_logging.level_from_name("debug") == logging.DEBUG
    assert utils_logging.level_from_name("ERROR") == logging.ERROR
    assert utils_logging.level_from_name("15") == 15
    assert utils_logging.level_from_name(logging.INFO) == logging.INFO
    assert utils_logging.level_from_name(None) == logging.WARNING
    assert utils_logging.level_from_name("nonsense", logging.INFO) == logging.INFO
