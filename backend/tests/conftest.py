import logging
import os
import sys

# make the backend package importable without installing it
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from medslot.db import Database
from medslot.domain import BookingService, Doctor
from medslot.storage import MemoryStore


@pytest.fixture(params=["memory", "sqlite"])
def repository(request, tmp_path):
    if request.param == "memory":
        repo = MemoryStore(timeout=2.0)
    else:
        repo = Database(str(tmp_path / "medslot_test.db"), timeout=2.0)
    repo.open()
    yield repo
    repo.close()


@pytest.fixture
def doctor(repository):
    return repository.add_doctor(Doctor.new("Dr. Ana Cardoso", "09:00", "10:00", specialization="Cardiology"))


@pytest.fixture
def service(repository):
    return BookingService(repository, lock_timeout=5.0)


@pytest.fixture(autouse=True)
def _reset_medslot_logger():
    yield
    # handlers bound to a captured stdout must not outlive the test
    logger = logging.getLogger("medslot")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
