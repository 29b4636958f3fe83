"""Tests for the fetch coordinator"""
from unittest.mock import Mock

from cazdo.exceptions import ProviderError, ProviderErrorKind
from cazdo.models.work_item import FetchStatus
from cazdo.services.fetch_coordinator import FetchCoordinator

from conftest import FakeProvider, ManualExecutor, make_details


class TestRequest:
    """Lazy, de-duplicated fetching."""

    def test_request_starts_fetch(self, coordinator, fake_provider, manual_executor):
        fake_provider.responses[123] = make_details(123)

        assert coordinator.request(123)
        assert coordinator.cache.get(123).status is FetchStatus.PENDING
        assert len(manual_executor.queue) == 1

        manual_executor.run_all()
        entry = coordinator.cache.get(123)
        assert entry.status is FetchStatus.READY
        assert entry.details.title == "Fix login"
        assert fake_provider.calls == [123]

    def test_request_while_pending_is_noop(self, coordinator, manual_executor):
        coordinator.request(1)
        assert not coordinator.request(1)
        assert len(manual_executor.queue) == 1

    def test_request_when_ready_is_noop(self, coordinator, fake_provider, manual_executor):
        fake_provider.responses[1] = make_details(1)
        coordinator.request(1)
        manual_executor.run_all()

        assert not coordinator.request(1)
        assert manual_executor.queue == []
        assert fake_provider.calls == [1]

    def test_request_when_failed_is_noop(self, coordinator, manual_executor):
        coordinator.request(1)
        manual_executor.run_all()
        assert coordinator.cache.get(1).status is FetchStatus.FAILED

        assert not coordinator.request(1)
        assert manual_executor.queue == []


class TestFailures:
    """Provider failures become FAILED entries."""

    def test_provider_error_recorded(self, coordinator, fake_provider, manual_executor):
        error = ProviderError(ProviderErrorKind.UNAUTHORIZED, "bad token", 7)
        fake_provider.responses[7] = error
        coordinator.request(7)
        manual_executor.run_all()

        entry = coordinator.cache.get(7)
        assert entry.status is FetchStatus.FAILED
        assert entry.error is error

    def test_unexpected_exception_becomes_unknown(self, coordinator, fake_provider, manual_executor):
        fake_provider.responses[7] = RuntimeError("boom")
        coordinator.request(7)
        manual_executor.run_all()

        entry = coordinator.cache.get(7)
        assert entry.status is FetchStatus.FAILED
        assert entry.error.kind is ProviderErrorKind.UNKNOWN
        assert "boom" in entry.error.message


class TestRefresh:
    """Manual refresh supersedes fetches in flight."""

    def test_refresh_while_pending_keeps_only_second_result(self):
        provider = FakeProvider()
        executor = ManualExecutor()
        coordinator = FetchCoordinator(provider, executor=executor)

        coordinator.request(5)
        coordinator.refresh(5)
        assert len(executor.queue) == 2

        # The refreshed fetch finishes first, the original one later
        provider.responses[5] = make_details(5, "second")
        executor.run(1)
        provider.responses[5] = make_details(5, "first")
        executor.run(0)

        entry = coordinator.cache.get(5)
        assert entry.status is FetchStatus.READY
        assert entry.details.title == "second"

    def test_superseded_fetch_finishing_first_is_discarded(self):
        provider = FakeProvider()
        executor = ManualExecutor()
        coordinator = FetchCoordinator(provider, executor=executor)

        coordinator.request(5)
        coordinator.refresh(5)

        provider.responses[5] = make_details(5, "first")
        executor.run(0)
        assert coordinator.cache.get(5).status is FetchStatus.PENDING

        provider.responses[5] = make_details(5, "second")
        executor.run(0)
        assert coordinator.cache.get(5).details.title == "second"

    def test_refresh_after_ready_fetches_again(self, coordinator, fake_provider, manual_executor):
        fake_provider.responses[1] = make_details(1, "v1")
        coordinator.request(1)
        manual_executor.run_all()

        fake_provider.responses[1] = make_details(1, "v2")
        coordinator.refresh(1)
        assert coordinator.cache.get(1).status is FetchStatus.PENDING
        manual_executor.run_all()
        assert coordinator.cache.get(1).details.title == "v2"


class TestNotifications:
    """The update listener fires only for applied results."""

    def test_listener_called_on_completion(self, fake_provider, manual_executor):
        listener = Mock()
        fake_provider.responses[1] = make_details(1)
        coordinator = FetchCoordinator(fake_provider, executor=manual_executor, on_update=listener)

        coordinator.request(1)
        manual_executor.run_all()
        listener.assert_called_once_with(1)

    def test_listener_not_called_for_stale_result(self, fake_provider, manual_executor):
        listener = Mock()
        fake_provider.responses[1] = make_details(1)
        coordinator = FetchCoordinator(fake_provider, executor=manual_executor, on_update=listener)

        coordinator.request(1)
        coordinator.refresh(1)
        manual_executor.run(1)
        manual_executor.run(0)
        listener.assert_called_once_with(1)

    def test_listener_errors_do_not_propagate(self, fake_provider, manual_executor):
        listener = Mock(side_effect=RuntimeError("app gone"))
        fake_provider.responses[1] = make_details(1)
        coordinator = FetchCoordinator(fake_provider, executor=manual_executor, on_update=listener)

        coordinator.request(1)
        manual_executor.run_all()
        assert coordinator.cache.get(1).status is FetchStatus.READY


class TestShutdown:
    """Test executor ownership."""

    def test_injected_executor_not_shut_down(self, fake_provider):
        executor = Mock()
        coordinator = FetchCoordinator(fake_provider, executor=executor)
        coordinator.shutdown()
        executor.shutdown.assert_not_called()

    def test_owned_executor_shut_down(self, fake_provider):
        coordinator = FetchCoordinator(fake_provider, max_workers=1)
        coordinator.shutdown()
        assert coordinator._executor._shutdown
