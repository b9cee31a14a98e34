import os
import sys
from pathlib import Path

import pytest

# Ensure src/ is importable when running pytest without installation
_ROOT = Path(__file__).resolve().parents[1]
_SRC = _ROOT / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))
os.environ.setdefault("HEADLESS", "true")


@pytest.fixture
def session():
    from fake_session import FakeSession

    return FakeSession()
