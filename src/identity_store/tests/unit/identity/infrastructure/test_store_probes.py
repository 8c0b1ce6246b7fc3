"""Unit tests for identity store domain probes."""

from unittest.mock import Mock

from identity.infrastructure.observability import (
    DefaultRoleStoreProbe,
    DefaultUserStoreProbe,
)
from infrastructure.observability import ObservationContext


class TestDefaultUserStoreProbe:
    """Tests for DefaultUserStoreProbe."""

    def test_creates_with_default_logger(self):
        """Test that probe can be created without providing a logger."""
        probe = DefaultUserStoreProbe()
        assert probe._logger is not None

    def test_accepts_custom_logger(self):
        """Test that probe accepts a custom logger."""
        custom_logger = Mock()
        probe = DefaultUserStoreProbe(logger=custom_logger)
        assert probe._logger is custom_logger

    def test_user_created(self):
        """User creation is logged at info level."""
        mock_logger = Mock()
        probe = DefaultUserStoreProbe(logger=mock_logger)

        probe.user_created(user_id="01ABC123", user_name="alice")

        mock_logger.info.assert_called_once()
        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "user_created"
        assert call_args[1]["user_id"] == "01ABC123"
        assert call_args[1]["user_name"] == "alice"

    def test_user_not_found(self):
        """Missed lookups are logged at debug level."""
        mock_logger = Mock()
        probe = DefaultUserStoreProbe(logger=mock_logger)

        probe.user_not_found(lookup="normalized_user_name", value="ALICE")

        call_args = mock_logger.debug.call_args
        assert call_args[0][0] == "user_not_found"
        assert call_args[1]["lookup"] == "normalized_user_name"

    def test_concurrency_failure_is_warning(self):
        """Stale stamps are logged as warnings."""
        mock_logger = Mock()
        probe = DefaultUserStoreProbe(logger=mock_logger)

        probe.concurrency_failure(user_id="01ABC123")

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args[0][0] == "user_concurrency_failure"

    def test_write_failed_is_error(self):
        """Unexpected integrity failures are logged as errors."""
        mock_logger = Mock()
        probe = DefaultUserStoreProbe(logger=mock_logger)

        probe.write_failed(operation="create", user_id=None, error="FK violated")

        call_args = mock_logger.error.call_args
        assert call_args[0][0] == "user_write_failed"
        assert call_args[1]["error"] == "FK violated"

    def test_claims_removed_records_count(self):
        """Claim removal records how many rows went away."""
        mock_logger = Mock()
        probe = DefaultUserStoreProbe(logger=mock_logger)

        probe.claims_removed(user_id="u1", count=2)

        assert mock_logger.info.call_args[1]["count"] == 2

    def test_context_is_included(self):
        """Bound observation context is added to events."""
        mock_logger = Mock()
        probe = DefaultUserStoreProbe(logger=mock_logger).with_context(
            ObservationContext(request_id="req-9", store_name="primary")
        )

        probe.user_deleted(user_id="u1")

        call_args = mock_logger.info.call_args
        assert call_args[1]["request_id"] == "req-9"
        assert call_args[1]["store_name"] == "primary"


class TestDefaultRoleStoreProbe:
    """Tests for DefaultRoleStoreProbe."""

    def test_role_created(self):
        """Role creation is logged at info level."""
        mock_logger = Mock()
        probe = DefaultRoleStoreProbe(logger=mock_logger)

        probe.role_created(role_id="r1", name="admin")

        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "role_created"
        assert call_args[1]["name"] == "admin"

    def test_duplicate_role_name_is_warning(self):
        """Duplicate names are logged as warnings."""
        mock_logger = Mock()
        probe = DefaultRoleStoreProbe(logger=mock_logger)

        probe.duplicate_role_name(name="admin")

        assert mock_logger.warning.call_args[0][0] == "duplicate_role_name"

    def test_roles_queried(self):
        """Queries are logged at debug level with counts."""
        mock_logger = Mock()
        probe = DefaultRoleStoreProbe(logger=mock_logger)

        probe.roles_queried(predicate_count=1, result_count=3)

        call_args = mock_logger.debug.call_args
        assert call_args[1]["predicate_count"] == 1
        assert call_args[1]["result_count"] == 3
