import logging
import os
import time

import pytest

from puzzle_defense.config import (
    APP_LOGGER_NAME, MAP_LOGGER_NAME, PerformanceTimer, _archive_old_logs,
    get_logger, get_map_logger, get_project_root
)
from puzzle_defense.game.data.maps.config import MapConfig


class TestMapConfig:
    def test_defaults(self):
        config = MapConfig()
        assert (config.width, config.height) == (30, 20)
        assert config.area == 600
        assert config.cell_count == 24
        assert config.piece_size == 5

    @pytest.mark.parametrize("kwargs", [
        {'width_in_pieces': 1},
        {'height_in_pieces': 0},
        {'fill_ratio': 0.0},
        {'fill_ratio': 1.5},
        {'extra_edge_chance': -0.1},
        {'max_backtracks': -1},
        {'max_generation_attempts': 0},
    ])
    def test_rejects_bad_values(self, kwargs):
        with pytest.raises(ValueError):
            MapConfig(**kwargs)

    def test_for_difficulty_grows(self):
        easy = MapConfig.for_difficulty(1)
        hard = MapConfig.for_difficulty(6)
        assert (easy.width_in_pieces, easy.height_in_pieces) == (5, 3)
        assert (hard.width_in_pieces, hard.height_in_pieces) == (10, 6)
        assert hard.fill_ratio > easy.fill_ratio
        assert hard.extra_edge_chance > easy.extra_edge_chance

    def test_for_difficulty_is_capped(self):
        config = MapConfig.for_difficulty(50)
        assert config.width_in_pieces == 10
        assert config.height_in_pieces == 6
        assert config.fill_ratio == 0.9
        assert config.extra_edge_chance == 0.4

    def test_for_difficulty_overrides(self):
        config = MapConfig.for_difficulty(2, seed=9, tileset_id=3)
        assert config.seed == 9
        assert config.tileset_id == 3

    def test_for_difficulty_rejects_zero(self):
        with pytest.raises(ValueError):
            MapConfig.for_difficulty(0)


class TestLogging:
    def test_logger_names(self):
        assert get_logger().name == APP_LOGGER_NAME
        assert get_logger('x.y').name == 'x.y'
        assert get_map_logger().name == MAP_LOGGER_NAME

    def test_archive_old_logs(self, tmp_path):
        log_dir = tmp_path / "log_dump"
        archive_dir = tmp_path / "old_log_dump"
        log_dir.mkdir()
        archive_dir.mkdir()

        old = log_dir / "session_old.log"
        fresh = log_dir / "session_new.log"
        old.write_text("old")
        fresh.write_text("new")
        two_days_ago = time.time() - 2 * 24 * 3600
        os.utime(old, (two_days_ago, two_days_ago))

        assert _archive_old_logs(log_dir, archive_dir) == 1
        assert (archive_dir / "session_old.log").exists()
        assert fresh.exists()
        assert not old.exists()

    def test_performance_timer(self, caplog):
        logger = logging.getLogger('timer-test')
        with caplog.at_level(logging.DEBUG, logger='timer-test'):
            with PerformanceTimer(logger, "work") as timer:
                pass
        assert timer.elapsed is not None and timer.elapsed >= 0
        assert any("Completed: work" in r.message for r in caplog.records)

    def test_performance_timer_failure(self, caplog):
        logger = logging.getLogger('timer-test')
        with caplog.at_level(logging.DEBUG, logger='timer-test'):
            with pytest.raises(RuntimeError):
                with PerformanceTimer(logger, "broken"):
                    raise RuntimeError("boom")
        assert any("Failed: broken" in r.message and r.levelno == logging.WARNING
                   for r in caplog.records)

    def test_project_root(self):
        root = get_project_root()
        assert os.path.isdir(os.path.join(root, "puzzle_defense"))
