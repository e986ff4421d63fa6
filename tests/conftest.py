"""Fixtures partagées par les tests."""

import logging

import pytest

from unisbom.core.config import InventoryConfig
from unisbom.core.logger import LOGGER_NAME

from samples import PROFILER_OUTPUT


@pytest.fixture
def config(tmp_path):
    """Configuration par défaut, sans lecture du fichier système."""
    return InventoryConfig(str(tmp_path / "absent.ini"))


@pytest.fixture
def profiler_file(tmp_path):
    """Sortie de system_profiler sauvegardée sur disque."""
    path = tmp_path / "profil.txt"
    path.write_text(PROFILER_OUTPUT, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_logger():
    """Retire les handlers installés par InventoryLogger entre deux tests."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
