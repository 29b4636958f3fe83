"""Tests for parsing Azure DevOps work item responses"""
import pytest

from cazdo.exceptions import ProviderError, ProviderErrorKind
from cazdo.models.work_item import WorkItemDetails, WorkItemState, WorkItemType


def work_item_payload(**fields):
    base = {
        "System.Title": "Login fails on Safari",
        "System.WorkItemType": "Bug",
        "System.State": "Active",
    }
    base.update(fields)
    return {
        "id": 123,
        "fields": base,
        "_links": {"html": {"href": "https://dev.azure.com/org/proj/_workitems/edit/123"}},
    }


class TestFromJson:
    """Test WorkItemDetails.from_json."""

    def test_required_fields(self):
        details = WorkItemDetails.from_json(work_item_payload(), 123)
        assert details.id == 123
        assert details.title == "Login fails on Safari"
        assert details.type is WorkItemType.BUG
        assert details.state is WorkItemState.ACTIVE
        assert details.url == "https://dev.azure.com/org/proj/_workitems/edit/123"
        assert details.description is None
        assert details.rich_text_fields == ()

    def test_optional_fields(self):
        payload = work_item_payload(**{
            "System.Description": "<p>Broken</p>",
            "Microsoft.VSTS.Common.AcceptanceCriteria": "<ul><li>Works</li></ul>",
            "Microsoft.VSTS.TCM.ReproSteps": "<ol><li>Open</li></ol>",
            "System.AssignedTo": {"displayName": "Jane Doe", "uniqueName": "jane@example.com"},
            "System.Tags": "frontend; safari ;",
        })
        details = WorkItemDetails.from_json(payload, 123)

        assert details.assigned_to == "Jane Doe"
        assert details.tags == ("frontend", "safari")
        assert [f.name for f in details.rich_text_fields] == [
            "Description", "Acceptance Criteria", "Repro Steps"
        ]

    def test_blank_rich_text_ignored(self):
        details = WorkItemDetails.from_json(work_item_payload(**{"System.Description": "   "}), 123)
        assert details.description is None

    def test_unknown_type_and_state_fall_back(self):
        payload = work_item_payload(**{"System.WorkItemType": "Risk", "System.State": "In Review"})
        details = WorkItemDetails.from_json(payload, 123)
        assert details.type is WorkItemType.OTHER
        assert details.type_name == "Risk"
        assert details.state is WorkItemState.OTHER
        assert details.state_name == "In Review"

    def test_type_parsing_is_case_insensitive(self):
        assert WorkItemType.parse("user story") is WorkItemType.USER_STORY
        assert WorkItemState.parse("DONE") is WorkItemState.DONE

    def test_missing_links(self):
        payload = work_item_payload()
        del payload["_links"]
        assert WorkItemDetails.from_json(payload, 123).url is None

    @pytest.mark.parametrize("missing", ["System.Title", "System.WorkItemType", "System.State"])
    def test_missing_required_field(self, missing):
        payload = work_item_payload()
        del payload["fields"][missing]
        with pytest.raises(ProviderError) as exc_info:
            WorkItemDetails.from_json(payload, 123)
        assert exc_info.value.kind is ProviderErrorKind.UNKNOWN
        assert exc_info.value.work_item_id == 123

    def test_missing_fields_object(self):
        with pytest.raises(ProviderError):
            WorkItemDetails.from_json({"id": 1}, 1)
