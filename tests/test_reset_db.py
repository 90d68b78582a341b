"""
Tests for the reset-and-seed script.
"""
import pytest

import reset_db
from pipdesk import crud


class TestResetDatabase:
    def test_seeds_admin_and_plans(self, capsys):
        reset_db.reset_database()
        out = capsys.readouterr().out
        assert "Verified admin exists" in out
        assert "Seeded 4 plans" in out

    def test_exits_when_admin_is_missing(self, monkeypatch, capsys):
        """Verification must fail loudly even when Python runs with -O."""
        monkeypatch.setattr(crud, "get_user_by_email", lambda db, email: None)
        with pytest.raises(SystemExit) as exc:
            reset_db.reset_database()
        assert exc.value.code == 1
        assert "missing after seeding" in capsys.readouterr().out
