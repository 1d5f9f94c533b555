import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from prythian.config import BalanceConfig  # noqa: E402


@pytest.fixture
def flat_config() -> BalanceConfig:
    """Balance without variance, base crits or combo so damage equals the base formula."""
    return BalanceConfig(
        critical_hit_chance=0.0,
        agility_crit_bonus=0.0,
        min_damage_multiplier=1.0,
        max_damage_multiplier=1.0,
        combo_enabled=False,
    )
