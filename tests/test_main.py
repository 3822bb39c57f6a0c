import logging
import logging.handlers

import pytest
from PIL import Image

from raystack.colour import COL_BLACK, COL_WHITE
from raystack.logging_config import setup_logging
from raystack.main import build_scene, checkerboard, main
from raystack.utils import vec


class TestSetupLogging:
    def test_console_handler_added_once(self):
        logger = setup_logging("raystack.test.console", "DEBUG")
        setup_logging("raystack.test.console", "DEBUG")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_logging("raystack.test.level", "CHATTY")
        assert logger.level == logging.INFO

    def test_rotating_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "render.log"
        logger = setup_logging("raystack.test.file", "INFO", log_file)
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)
        assert "hello" in log_file.read_text()
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


class TestDemoScene:
    def test_checkerboard_alternates(self):
        assert checkerboard(vec(0.0, 0.0, 0.0), None) in (COL_WHITE, COL_BLACK)
        assert checkerboard(vec(0.0, 0.0, 0.0), None) != checkerboard(vec(3.2 * 0.6, 3.2 * 0.8, 0.0), None)

    def test_build_scene(self):
        scene = build_scene(32, 24)
        assert scene.finalized
        assert len(scene.lights) == 1
        assert scene.lights[0].probability == pytest.approx(1.0)
        assert len(scene) > 20
        assert scene.camera.width == 32


@pytest.mark.slow
def test_main_writes_image(tmp_path):
    output = tmp_path / "demo.png"
    main(["--width", "6", "--height", "4", "--sub-sample", "1", "--max-depth", "2", "--seed", "7",
          "--output", str(output), "--log-level", "WARNING"])
    with Image.open(output) as image:
        assert image.size == (6, 4)
