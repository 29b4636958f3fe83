"""Tests for text formatting helpers"""
from datetime import datetime, timedelta, timezone

import pytest

from cazdo.exceptions import ProviderError, ProviderErrorKind
from cazdo.formatters import (
    format_branch_info,
    format_branch_name,
    format_detail_lines,
    format_provider_error,
    format_relative_time,
    format_remote_status,
    format_work_item_lines,
    html_to_lines,
)
from cazdo.models.branch import Branch, BranchSummary, RemoteStatus
from cazdo.models.work_item import FetchEntry, FetchStatus

from conftest import make_details


class TestHtmlToLines:
    """Test rendering HTML fields as text."""

    def test_paragraphs_separated(self):
        assert html_to_lines("<p>First</p><p>Second</p>") == ["First", "", "Second"]

    def test_line_breaks(self):
        assert html_to_lines("one<br>two<br/>three") == ["one", "two", "three"]

    def test_bullets(self):
        assert html_to_lines("<ul><li>Apples</li><li>Pears</li></ul>") == ["• Apples", "• Pears"]

    def test_numbered_list(self):
        assert html_to_lines("<ol><li>Open</li><li>Click</li></ol>") == ["1. Open", "2. Click"]

    def test_nested_list_indented(self):
        lines = html_to_lines("<ul><li>Top<ul><li>Inner</li></ul></li></ul>")
        assert lines == ["• Top", "  • Inner"]

    def test_entities_decoded(self):
        assert html_to_lines("<div>a &amp; b &lt;c&gt;</div>") == ["a & b <c>"]

    def test_inline_tags_and_whitespace_collapsed(self):
        assert html_to_lines("<div>Some   <b>bold</b>\n text</div>") == ["Some bold text"]

    def test_wrapping(self):
        lines = html_to_lines("<p>" + "word " * 20 + "</p>", width=20)
        assert len(lines) > 1
        assert all(len(line) <= 20 for line in lines)

    def test_pre_keeps_lines(self):
        assert html_to_lines("<pre>line 1\n  line 2</pre>") == ["line 1", "  line 2"]

    def test_plain_text(self):
        assert html_to_lines("just text") == ["just text"]

    def test_empty(self):
        assert html_to_lines("") == []


class TestRelativeTime:
    """Test relative timestamps."""

    NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("delta,expected", [
        (timedelta(seconds=10), "just now"),
        (timedelta(minutes=1), "1 minute ago"),
        (timedelta(hours=3), "3 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=15), "2 weeks ago"),
        (timedelta(days=65), "2 months ago"),
        (timedelta(days=800), "2 years ago"),
    ])
    def test_units(self, delta, expected):
        assert format_relative_time(self.NOW - delta, now=self.NOW) == expected

    def test_unknown(self):
        assert format_relative_time(None) == "unknown"


class TestBranchFormatting:
    """Test branch list entries and branch info."""

    def test_branch_name_markers(self):
        assert format_branch_name(Branch("main", True, True)) == "* main \U0001F512"
        assert format_branch_name(Branch("feature/12-x", False, False, 12)) == "  feature/12-x [#12]"

    @pytest.mark.parametrize("summary,expected", [
        (BranchSummary(RemoteStatus.LOCAL_ONLY), "local only"),
        (BranchSummary(RemoteStatus.UP_TO_DATE), "up to date"),
        (BranchSummary(RemoteStatus.AHEAD, ahead=2), "↑2"),
        (BranchSummary(RemoteStatus.BEHIND, behind=3), "↓3"),
        (BranchSummary(RemoteStatus.DIVERGED, ahead=1, behind=4), "↑1 ↓4"),
    ])
    def test_remote_status(self, summary, expected):
        assert format_remote_status(summary)[0] == expected

    def test_branch_info_loading(self):
        lines = format_branch_info(Branch("feature/1", False, False, 1), None)
        assert "Loading" in lines[-1].plain

    def test_branch_info_with_commit(self):
        summary = BranchSummary(
            RemoteStatus.AHEAD, ahead=1, last_commit_author="Jane", last_commit_time=datetime.now(timezone.utc)
        )
        text = format_branch_info(Branch("feature/1", False, False, 1), summary)[-1].plain
        assert "↑1" in text
        assert "Jane" in text
        assert "just now" in text


class TestWorkItemFormatting:
    """Test the details pane."""

    def test_work_item_lines(self):
        details = make_details(
            7,
            "Crash on save",
            assigned_to="Jane Doe",
            tags=("ui", "p1"),
            description="<p>It crashes</p>",
            acceptance_criteria="<ul><li>No crash</li></ul>",
        )
        text = "\n".join(line.plain for line in format_work_item_lines(details, 60))
        assert "#7" in text
        assert "Bug" in text
        assert "Active" in text
        assert "Jane Doe" in text
        assert "ui, p1" in text
        assert "Crash on save" in text
        assert "Description:" in text
        assert "    It crashes" in text
        assert "Acceptance Criteria:" in text
        assert "    • No crash" in text

    def test_line_count_depends_on_width(self):
        details = make_details(7, "word " * 40)
        assert len(format_work_item_lines(details, 30)) > len(format_work_item_lines(details, 200))

    def test_detail_lines_states(self):
        assert "No work item" in format_detail_lines(None, None, 80)[-1].plain
        assert "Loading" in format_detail_lines(5, FetchEntry(FetchStatus.PENDING, 1), 80)[-1].plain

        error = ProviderError(ProviderErrorKind.NOT_FOUND, "HTTP 404", 5)
        failed = format_detail_lines(5, FetchEntry(FetchStatus.FAILED, 1, error=error), 80)
        assert any("Work item not found: HTTP 404" in line.plain for line in failed)

    @pytest.mark.parametrize("kind,label", [
        (ProviderErrorKind.NETWORK, "Network error"),
        (ProviderErrorKind.NOT_FOUND, "Work item not found"),
        (ProviderErrorKind.UNAUTHORIZED, "Not authorized"),
        (ProviderErrorKind.UNKNOWN, "Error"),
    ])
    def test_provider_error_labels(self, kind, label):
        assert format_provider_error(ProviderError(kind)) == label
