"""
Tests for teachteam.core.selection.service — store-backed selection flows.
"""

import asyncio

import pytest
from pydantic import ValidationError

from teachteam.core.exceptions import InvalidRank, NotFound
from teachteam.core.selection.ranking_manager import is_contiguous
from teachteam.core.selection.service import SelectionService
from teachteam.core.session import ReviewerSession
from teachteam.data.models import CandidateUnavailable
from teachteam.utils.constants import ApplicationStatus, SessionType, SortField, UserRole


@pytest.fixture
def group(make_selected_group, make_application):
    selected = make_selected_group(4)
    pending = make_application(candidate_email="pending@student.rmit.edu.au")
    other = make_application(candidate_email="ghost@student.rmit.edu.au", course_id="ISYS1101")
    return selected + [pending, other]


@pytest.fixture
def store(make_store, group):
    return make_store(group)


@pytest.fixture
def service(store, course_lookup, user_lookup):
    return SelectionService(store, course_lookup, user_lookup)


def stored_ranks(store):
    return {a.candidate_email.split("@")[0]: a.ranking for a in store.items.values()}


class TestReads:
    def test_list_joins_metadata(self, service):
        displays = service.list_applications({"course_name": "full stack"})
        assert len(displays) == 5
        assert displays[0].course_name == "Full Stack Development"
        assert displays[0].candidate_name == "Tutor1"

    def test_unknown_references_degrade(self, service):
        display = service.list_applications({"course_name": "ISYS1101"})[0]
        assert display.course_name == "ISYS1101 Course"
        assert display.candidate_name == "Unknown Candidate"

    def test_sorting(self, service):
        displays = service.list_applications(sort_by=SortField.CANDIDATE_NAME)
        names = [d.candidate_name for d in displays]
        assert names == sorted(names, key=str.casefold)

    def test_lecturer_sees_assigned_courses_only(self, service):
        session = ReviewerSession.login("l@rmit.edu.au", UserRole.LECTURER, ["ISYS1101"])
        displays = service.list_applications(session=session)
        assert [d.course_id for d in displays] == ["ISYS1101"]

    def test_lecturer_cannot_open_other_course(self, service):
        session = ReviewerSession.login("l@rmit.edu.au", UserRole.LECTURER, ["ISYS1101"])
        with pytest.raises(PermissionError):
            service.list_applications(course_id="COSC2758", session=session)

    def test_async_listing(self, service):
        displays = asyncio.run(service.list_course_applications_async("COSC2758", {"skill_set": "py"}))
        assert len(displays) == 5

    def test_refresh_statistics(self, service):
        stats = service.refresh_statistics()
        assert stats.total_applicants == 6
        assert stats.selected_count == 4
        assert stats.pending_count == 2

    def test_course_statistics(self, service):
        stats = service.course_statistics("COSC2758")
        assert stats.total_applicants == 5
        assert stats.tutor_count == 5

    def test_get_missing_application(self, service):
        with pytest.raises(NotFound):
            service.get_application("000000000000000000000000")


class TestSelectionReport:
    def test_report_ignores_list_limit(self, service):
        service.list_limit = 1
        report = service.selection_report()
        assert [a.ranking for a in report.chosen_per_course] == [1, 2, 3, 4]
        assert report.chosen_for_multiple_courses == []
        assert [c.name for c in report.not_chosen] == ["Pending", "Unknown Candidate"]

    def test_lecturer_cannot_view(self, service):
        session = ReviewerSession.login("l@rmit.edu.au", UserRole.LECTURER, ["COSC2758"])
        with pytest.raises(PermissionError):
            service.selection_report(session=session)

    def test_admin_can_view(self, service):
        admin = ReviewerSession.login("a@rmit.edu.au", UserRole.ADMIN)
        assert len(service.selection_report(session=admin).not_chosen) == 2


class TestRanking:
    def test_set_ranking_writes_changed_only(self, service, store, group):
        result = service.set_ranking(str(group[2].id), 1)

        assert result
        assert len(store.writes) == 1
        assert len(store.writes[0]) == 3
        assert stored_ranks(store)["tutor3"] == 1
        assert is_contiguous(list(store.items.values()))

    def test_out_of_range_is_falsy_without_write(self, service, store, group):
        result = service.set_ranking(str(group[0].id), 9)
        assert not result
        assert store.writes == []

    def test_strict_raises(self, service, group):
        with pytest.raises(InvalidRank):
            service.set_ranking(str(group[0].id), 9, strict=True)

    def test_strict_by_default_when_configured(self, store, course_lookup, user_lookup, group):
        strict_service = SelectionService(store, course_lookup, user_lookup, strict=True)
        with pytest.raises(InvalidRank):
            strict_service.set_ranking(str(group[4].id), 1)

    def test_missing_application(self, service):
        with pytest.raises(NotFound):
            service.set_ranking("000000000000000000000000", 1)

    def test_session_checked(self, service, group):
        session = ReviewerSession.login("l@rmit.edu.au", UserRole.LECTURER, ["ISYS1101"])
        with pytest.raises(PermissionError):
            service.set_ranking(str(group[2].id), 1, session=session)


class TestStatusChanges:
    def test_reject_compacts(self, service, store, group):
        result = service.reject(str(group[1].id))

        assert result
        ranks = stored_ranks(store)
        assert ranks["tutor2"] is None
        assert [ranks[k] for k in ("tutor1", "tutor3", "tutor4")] == [1, 2, 3]
        assert store.get_by_id(group[1].id).status == "Rejected"

    def test_select_appends(self, service, store, group):
        result = service.select(str(group[4].id))
        assert result.rank == 5
        assert stored_ranks(store)["pending"] == 5

    def test_select_at_rank(self, service, store, group):
        service.select(str(group[4].id), rank=2)
        ranks = stored_ranks(store)
        assert ranks["pending"] == 2
        assert ranks["tutor2"] == 3
        assert is_contiguous(list(store.items.values()))

    def test_reset_to_pending(self, service, store, group):
        service.reset(str(group[3].id))
        assert store.get_by_id(group[3].id).status == "Pending"
        assert store.get_by_id(group[3].id).ranking is None

    def test_groups_are_per_role(self, service, store, make_application):
        lab = make_application(
            candidate_email="lab@student.rmit.edu.au",
            session_type=SessionType.LAB_ASSISTANT,
        )
        store.items[str(lab.id)] = lab
        result = service.change_status(str(lab.id), ApplicationStatus.SELECTED)
        assert result.rank == 1


class TestComments:
    def test_add_comment(self, service, group):
        assert service.add_comment(str(group[0].id), "  Strong React skills ") == ["Strong React skills"]

    def test_comment_too_short(self, service, store, group):
        with pytest.raises(ValidationError):
            service.add_comment(str(group[0].id), "ok")
        assert store.get_by_id(group[0].id).comments == []

    def test_comment_missing_application(self, service):
        with pytest.raises(NotFound):
            service.add_comment("000000000000000000000000", "Good candidate")


class TestNormalize:
    def test_normalize_course(self, service, store, group):
        for application in group[:4]:
            store.items[str(application.id)] = application.model_copy(update={"ranking": application.ranking + 3})

        result = service.normalize_course("COSC2758")

        assert len(result.changed) == 4
        assert is_contiguous(list(store.items.values()))

    def test_normalize_one_role(self, service, store):
        result = service.normalize_course("COSC2758", SessionType.LAB_ASSISTANT)
        assert result.changed == []
        assert store.writes == []


class TestMarkUnavailable:
    def test_requires_admin(self, service):
        session = ReviewerSession.login("l@rmit.edu.au", UserRole.LECTURER, ["COSC2758"])
        with pytest.raises(PermissionError):
            service.mark_unavailable("alice@student.rmit.edu.au", session=session)

    def test_returns_payload(self, store, course_lookup, user_lookup):
        class Candidates:
            def set_blocked(self, email, blocked, reason=None):
                return CandidateUnavailable(candidate_id="1", candidate_email=email, reason=reason)

        service = SelectionService(store, course_lookup, user_lookup, candidates=Candidates())
        admin = ReviewerSession.login("a@rmit.edu.au", UserRole.ADMIN)
        event = service.mark_unavailable("alice@student.rmit.edu.au", "Withdrawn", session=admin)
        assert event.reason == "Withdrawn"
