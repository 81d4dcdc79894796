"""Unit tests for the database change log sink."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from lms.changelog.sink import DatabaseChangeLog


@pytest.mark.asyncio
async def test_failed_write_does_not_raise():
    """An audit write failure is logged, never propagated to the mutation."""
    db = MagicMock()
    db.begin_nested.side_effect = RuntimeError("savepoint failed")

    sink = DatabaseChangeLog(db)
    await sink.record_change("module", 1, 1, "enrolled")

    db.begin_nested.assert_called_once()
