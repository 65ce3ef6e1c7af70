"""
VetDesk Backend — Request Transaction Tests
=============================================

What we test:
    ✅ After-commit callbacks run once the request commits
    ✅ They are dropped when the request fails and rolls back
"""

import pytest

from vetdesk.database import get_db_session, run_after_commit


class TestRequestTransaction:

    def setup_method(self):
        self.calls = []

    async def _record(self):
        self.calls.append("deleted")

    @pytest.mark.asyncio
    async def test_callbacks_run_after_commit(self):
        dependency = get_db_session()
        session = await dependency.__anext__()
        run_after_commit(session, self._record)
        assert self.calls == []

        with pytest.raises(StopAsyncIteration):
            await dependency.__anext__()

        assert self.calls == ["deleted"]

    @pytest.mark.asyncio
    async def test_callbacks_dropped_on_rollback(self):
        dependency = get_db_session()
        session = await dependency.__anext__()
        run_after_commit(session, self._record)

        with pytest.raises(RuntimeError):
            await dependency.athrow(RuntimeError("handler failed"))

        assert self.calls == []
        assert "after_commit_callbacks" not in session.info
