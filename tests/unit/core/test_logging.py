"""Unit tests for the logging helpers."""

import structlog

from menugate.core.logging import (
    LoggingContext,
    add_correlation_id,
    bind_correlation_id,
    clear_context,
    rename_message_field,
)


class TestLoggingContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_binds_only_inside_block(self):
        with LoggingContext(operation="import_menus", source="menus.json"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["operation"] == "import_menus"
            assert bound["source"] == "menus.json"

        assert "operation" not in structlog.contextvars.get_contextvars()

    def test_leaves_outer_context_alone(self):
        bind_correlation_id("cid_outer")

        with LoggingContext(operation="import_menus"):
            pass

        assert structlog.contextvars.get_contextvars() == {"correlation_id": "cid_outer"}


class TestProcessors:
    def test_correlation_id_added_when_missing(self):
        event = add_correlation_id(None, "info", {"event": "x"})

        assert event["correlation_id"].startswith("cid_")

    def test_correlation_id_kept(self):
        event = add_correlation_id(None, "info", {"correlation_id": "cid_abc"})

        assert event["correlation_id"] == "cid_abc"

    def test_event_renamed_to_message(self):
        assert rename_message_field(None, "info", {"event": "Menu created"}) == {
            "message": "Menu created"
        }
