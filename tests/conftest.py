import pytest

from dictmaths.core.logging import DictMathsLogger
from dictmaths.hashing import calibrate, linear_hash


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    DictMathsLogger.reset()


@pytest.fixture
def model():
    return calibrate(linear_hash())


@pytest.fixture
def marker_address() -> int:
    return 0x00000001EB91AB60
