"""
Tests for teachteam.cli using Typer's CliRunner.
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from typer.testing import CliRunner

from teachteam import cli
from teachteam.core.selection.service import SelectionService
from teachteam.data.models import Course

runner = CliRunner()


@pytest.fixture
def group(make_selected_group, make_application):
    return make_selected_group(3) + [make_application(candidate_email="pending@student.rmit.edu.au")]


@pytest.fixture
def store(make_store, group):
    return make_store(group)


@pytest.fixture(autouse=True)
def service(monkeypatch, store, course_lookup, user_lookup):
    service = SelectionService(store, course_lookup, user_lookup)
    monkeypatch.setattr(cli, "_get_service", lambda: service)
    return service


@pytest.fixture
def courses(monkeypatch):
    repository = MagicMock()
    monkeypatch.setattr(cli, "_get_courses", lambda: repository)
    return repository


class TestInfoCommands:
    def test_version(self):
        result = runner.invoke(cli.app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_info(self):
        result = runner.invoke(cli.app, ["info"])
        assert result.exit_code == 0
        assert "Strict Ranking" in result.output


class TestListApplicants:
    def test_lists_all(self):
        result = runner.invoke(cli.app, ["list-applicants"])
        assert result.exit_code == 0
        assert "Applicants (4 total)" in result.output

    def test_filters(self):
        result = runner.invoke(cli.app, ["list-applicants", "--name", "pending"])
        assert result.exit_code == 0
        assert "Applicants (1 total)" in result.output

    def test_no_matches(self):
        result = runner.invoke(cli.app, ["list-applicants", "--skill", "haskell"])
        assert result.exit_code == 0
        assert "No applicants found" in result.output


class TestSelectionCommands:
    def test_select(self, store, group):
        result = runner.invoke(cli.app, ["select", str(group[3].id)])
        assert result.exit_code == 0
        assert "at rank 4" in result.output
        assert store.get_by_id(group[3].id).ranking == 4

    def test_select_bad_rank(self, group):
        result = runner.invoke(cli.app, ["select", str(group[3].id), "--rank", "9"])
        assert result.exit_code == 1
        assert "between 1 and 4" in result.output

    def test_reject(self, store, group):
        result = runner.invoke(cli.app, ["reject", str(group[0].id)])
        assert result.exit_code == 0
        assert [store.get_by_id(a.id).ranking for a in group[1:3]] == [1, 2]

    def test_reset(self, store, group):
        result = runner.invoke(cli.app, ["reset", str(group[2].id)])
        assert result.exit_code == 0
        assert store.get_by_id(group[2].id).status == "Pending"

    def test_rank(self, store, group):
        result = runner.invoke(cli.app, ["rank", str(group[2].id), "1"])
        assert result.exit_code == 0
        assert store.get_by_id(group[2].id).ranking == 1

    def test_rank_out_of_range(self, group):
        result = runner.invoke(cli.app, ["rank", str(group[2].id), "7"])
        assert result.exit_code == 1

    def test_unknown_application(self):
        result = runner.invoke(cli.app, ["reject", "000000000000000000000000"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestCommentCommand:
    def test_comment(self, group):
        result = runner.invoke(cli.app, ["comment", str(group[0].id), "Excellent communicator"])
        assert result.exit_code == 0
        assert "1 total" in result.output

    def test_comment_too_short(self, group):
        result = runner.invoke(cli.app, ["comment", str(group[0].id), "ok"])
        assert result.exit_code == 1
        assert "at least 3" in result.output


class TestStatisticsCommands:
    def test_stats(self):
        result = runner.invoke(cli.app, ["stats"])
        assert result.exit_code == 0
        assert "Selection Statistics" in result.output
        assert "Pending" in result.output

    def test_course_stats(self):
        result = runner.invoke(cli.app, ["course-stats", "COSC2758"])
        assert result.exit_code == 0
        assert "Tutor" in result.output

    def test_normalize_ranks_noop(self):
        result = runner.invoke(cli.app, ["normalize-ranks", "COSC2758"])
        assert result.exit_code == 0
        assert "already contiguous" in result.output


class TestReportCommand:
    def test_report(self):
        result = runner.invoke(cli.app, ["report"])
        assert result.exit_code == 0
        assert "Candidates Chosen per Course" in result.output
        assert "Not Chosen for Any Course" in result.output
        assert "Pending" in result.output


class TestLecturerListing:
    def test_lists_assigned_courses(self, courses):
        courses.get_for_lecturer.return_value = [Course(code="COSC2758", name="Full Stack Development")]
        result = runner.invoke(cli.app, ["list-applicants", "--lecturer", "lee@rmit.edu.au"])
        assert result.exit_code == 0
        assert "Applicants (4 total)" in result.output
        courses.get_for_lecturer.assert_called_once_with("lee@rmit.edu.au")

    def test_unassigned_courses_hidden(self, courses):
        courses.get_for_lecturer.return_value = [Course(code="COSC1076", name="Advanced Programming")]
        result = runner.invoke(cli.app, ["list-applicants", "--lecturer", "lee@rmit.edu.au"])
        assert result.exit_code == 0
        assert "No applicants found" in result.output

    def test_other_course_refused(self, courses):
        courses.get_for_lecturer.return_value = []
        result = runner.invoke(
            cli.app, ["list-applicants", "--lecturer", "lee@rmit.edu.au", "--course-id", "COSC2758"]
        )
        assert result.exit_code == 1
        assert "may not review" in result.output


class TestCourseCommands:
    def test_add_course(self, courses):
        courses.get_by_code.return_value = None
        courses.create_course.side_effect = lambda data: Course(id=ObjectId(), code=data.code, name=data.name)
        result = runner.invoke(cli.app, ["add-course", "cosc2758", "Full Stack Development"])
        assert result.exit_code == 0
        assert "Added COSC2758" in result.output

    def test_add_existing_course(self, courses):
        courses.get_by_code.return_value = Course(code="COSC2758", name="Full Stack Development")
        result = runner.invoke(cli.app, ["add-course", "COSC2758", "Full Stack Development"])
        assert result.exit_code == 1
        assert "already exists" in result.output
        courses.create_course.assert_not_called()

    def test_add_course_bad_code(self, courses):
        result = runner.invoke(cli.app, ["add-course", "ISYS1101", "Databases"])
        assert result.exit_code == 1
        assert "COSCxxxx" in result.output

    def test_assign_lecturer(self, courses):
        courses.assign_lecturer.return_value = True
        result = runner.invoke(cli.app, ["assign-lecturer", "COSC2758", "Lee@RMIT.edu.au"])
        assert result.exit_code == 0
        assert "lee@rmit.edu.au assigned" in result.output

    def test_assign_lecturer_unknown_course(self, courses):
        courses.assign_lecturer.return_value = False
        result = runner.invoke(cli.app, ["assign-lecturer", "COSC9999", "lee@rmit.edu.au"])
        assert result.exit_code == 1
        assert "Course not found" in result.output


class TestInitDb:
    def test_creates_indexes_and_closes(self, monkeypatch):
        manager = MagicMock()
        manager.check_sync_connection.return_value = True
        monkeypatch.setattr("teachteam.data.database.get_database_manager", lambda: manager)
        result = runner.invoke(cli.app, ["init-db"])
        assert result.exit_code == 0
        manager.ensure_indexes.assert_called_once()
        manager.close_all.assert_called_once()

    def test_unreachable(self, monkeypatch):
        manager = MagicMock()
        manager.check_sync_connection.return_value = False
        monkeypatch.setattr("teachteam.data.database.get_database_manager", lambda: manager)
        result = runner.invoke(cli.app, ["init-db"])
        assert result.exit_code == 1
        manager.ensure_indexes.assert_not_called()
