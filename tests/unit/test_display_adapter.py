"""
Tests for teachteam.core.selection.display_adapter — joining metadata.
"""

import pytest
from bson import ObjectId

from teachteam.core.exceptions import NotFound
from teachteam.core.selection.display_adapter import (
    DisplayAdapter,
    get_course_details,
    to_display,
)
from teachteam.data.models import Course, CourseDetails
from teachteam.utils.constants import COURSE_NOT_IN_CATALOG, UNKNOWN_CANDIDATE_NAME


class TestGetCourseDetails:
    def test_lookup_by_id(self, sample_course):
        details = get_course_details(sample_course.id_str, [sample_course])
        assert details == CourseDetails(code="COSC2758", name="Full Stack Development")

    def test_lookup_by_code(self, sample_course):
        details = get_course_details("COSC2758", [sample_course])
        assert details.name == "Full Stack Development"
        assert details.found

    def test_code_shaped_miss(self):
        details = get_course_details("COSC9999", [])
        assert details.code == "COSC9999"
        assert details.name == "COSC9999 Course"
        assert not details.found

    def test_other_miss(self):
        details = get_course_details("abc", [])
        assert details.code == "abc"
        assert details.name == COURSE_NOT_IN_CATALOG

    def test_empty_id(self):
        details = get_course_details("", [])
        assert details.code == "Unknown"
        assert details.name == COURSE_NOT_IN_CATALOG


class TestToDisplay:
    def test_joins_fields(self, make_application, sample_candidate):
        application = make_application(skills=["Python", "React"], comments=["Strong"])
        course = CourseDetails(code="COSC2758", name="Full Stack Development")
        display = to_display(application, course, sample_candidate)

        assert display.id == str(application.id)
        assert display.candidate_name == "Alice Nguyen"
        assert display.course_code == "COSC2758"
        assert display.course_name == "Full Stack Development"
        assert display.skills == ["Python", "React"]
        assert display.comments == ["Strong"]
        assert display.status == "Pending"
        assert display.ranking is None
        assert display.created_at == application.created_at

    def test_missing_candidate(self, make_application):
        display = to_display(make_application(), None, None)
        assert display.candidate_name == UNKNOWN_CANDIDATE_NAME
        assert display.course_code == "COSC2758"
        assert display.course_name == "COSC2758 Course"

    def test_skills_are_copied(self, make_application):
        application = make_application(skills=["Python"])
        display = to_display(application, None, None)
        display.skills.append("Go")
        assert application.skills == ["Python"]


class TestDisplayAdapter:
    def test_from_catalog(self, make_application, sample_course, sample_candidate):
        adapter = DisplayAdapter.from_catalog([sample_course], [sample_candidate])
        display = adapter.adapt(make_application(candidate_email="ALICE@student.rmit.edu.au"))
        assert display.candidate_name == "Alice Nguyen"
        assert display.course_name == "Full Stack Development"

    def test_lookup_raising_not_found_degrades(self, make_application):
        def course_lookup(course_id):
            raise NotFound("Course", course_id)

        def user_lookup(email):
            raise NotFound("Candidate", email)

        display = DisplayAdapter(course_lookup, user_lookup).adapt(make_application(course_id="xyz"))
        assert display.candidate_name == UNKNOWN_CANDIDATE_NAME
        assert display.course_name == COURSE_NOT_IN_CATALOG

    def test_adapt_many_memoizes_and_keeps_order(self, make_application):
        calls = {"course": 0, "user": 0}

        def course_lookup(course_id):
            calls["course"] += 1
            return CourseDetails(code=course_id, name="Course")

        def user_lookup(email):
            calls["user"] += 1
            return None

        applications = [
            make_application(candidate_email="a@x.edu.au", course_id="COSC2758"),
            make_application(candidate_email="b@x.edu.au", course_id="COSC2758"),
            make_application(candidate_email="a@x.edu.au", course_id="COSC1076"),
        ]
        displays = DisplayAdapter(course_lookup, user_lookup).adapt_many(applications)

        assert [d.id for d in displays] == [str(a.id) for a in applications]
        assert calls == {"course": 2, "user": 2}

    def test_other_errors_propagate(self, make_application):
        def course_lookup(course_id):
            raise RuntimeError("boom")

        adapter = DisplayAdapter(course_lookup, lambda email: None)
        with pytest.raises(RuntimeError):
            adapter.adapt(make_application())

    def test_catalog_ignores_unsaved_course_ids(self, make_application):
        course = Course(code="COSC2758", name="Full Stack Development")
        assert course.id_str == ""
        display = DisplayAdapter.from_catalog([course]).adapt(make_application(course_id=""))
        assert display.course_code == "Unknown"

    def test_object_id_course_reference(self, make_application):
        course = Course(id=ObjectId(), code="COSC1076", name="Advanced Programming Techniques")
        display = DisplayAdapter.from_catalog([course]).adapt(make_application(course_id=course.id_str))
        assert display.course_code == "COSC1076"
