"""
tests/test_status.py
─────────────────────
Tests for substation status derivation.
"""
import pytest

from config.alerts import Status
from src.analytics.status import derive_substation_status, worst_status
from src.data.models import Equipment


def _unit(status: str) -> Equipment:
    return Equipment(
        id=f"EQ-{status}", name=status, type="breaker", substation_id="SUB-1",
        status=status, temperature=35, voltage=10.2, current=40, load=50,
    )


class TestWorstStatus:
    @pytest.mark.parametrize(
        "statuses, expected",
        [
            ([], Status.NORMAL),
            (["normal", "normal"], Status.NORMAL),
            (["normal", "warning"], Status.WARNING),
            (["warning", "error", "normal"], Status.ERROR),
            (["error"], Status.ERROR),
        ],
    )
    def test_worst(self, statuses, expected):
        assert worst_status(statuses) == expected

    def test_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            worst_status(["broken"])


class TestDeriveSubstationStatus:
    def test_empty_substation_is_normal(self):
        assert derive_substation_status([]) == Status.NORMAL

    def test_error_dominates(self):
        units = [_unit("normal"), _unit("warning"), _unit("error")]
        assert derive_substation_status(units) == Status.ERROR

    def test_warning_without_error(self):
        assert derive_substation_status([_unit("normal"), _unit("warning")]) == Status.WARNING
