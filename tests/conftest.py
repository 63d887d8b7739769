# Ensure `import terrainsweep` works from a fresh clone:
# put repo/python on sys.path so the package is importable without prior install.
import sys
from pathlib import Path

import pytest


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _ensure_python_path():
    pkg_dir = _repo_root() / "python"
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


_ensure_python_path()


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: renders a full-length animation"
    )


@pytest.fixture
def small_config():
    """A quick-to-render config: small canvas, few frames, coarse grid."""
    from terrainsweep.config import AnimationConfig

    return AnimationConfig(
        width=120,
        height=100,
        frame_delay_ms=50,
        frame_count=6,
        pitch_speed_divisor=50.0,
        step_density=1.0,
    )
