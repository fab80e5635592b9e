"""
Tests for the typed predicate builder and its SQL compilation.
"""

import pytest

from coursedesk.models import postgresql as models
from coursedesk.store.query import And, Eq, In, Or, and_, compile_order, compile_predicate, eq, in_, or_
from coursedesk.tests.conftest import enroll, make_course, make_user


class TestBuilders:

    def test_builders_produce_frozen_nodes(self):
        predicate = and_(eq("course_id", "c1"), or_(in_("student_id", ["a", "b"]), eq("id", "x")))

        assert predicate == And((Eq("course_id", "c1"), Or((In("student_id", ("a", "b")), Eq("id", "x")))))
        with pytest.raises(Exception):
            predicate.clauses = ()

    def test_in_accepts_any_iterable(self):
        assert in_("id", {"only"}).values == ("only",)
        assert in_("id", (x for x in ["a", "b"])).values == ("a", "b")
        assert in_("id", {"k1": 1}).values == ("k1",)


class TestCompilation:

    def test_unknown_field_is_rejected(self):
        with pytest.raises(AttributeError):
            compile_predicate(models.Course, eq("no_such_column", 1))

    def test_relationship_attribute_is_not_a_column(self):
        with pytest.raises(AttributeError):
            compile_predicate(models.Course, eq("teacher", "x"))

    def test_unsupported_predicate_type(self):
        with pytest.raises(TypeError):
            compile_predicate(models.Course, ("title", "x"))

    def test_order_direction(self):
        assert "DESC" in str(compile_order(models.Course, "-created_at"))
        assert "ASC" in str(compile_order(models.Course, "created_at"))
        assert compile_order(models.Course, None) is None


class TestEvaluation:

    @pytest.fixture
    def catalog(self, store):
        alice = make_user(store, "teacher", name="Alice")
        bob = make_user(store, "teacher", name="Bob")
        courses = {
            "algebra": make_course(store, alice, "Algebra"),
            "biology": make_course(store, alice, "Biology"),
            "chemistry": make_course(store, bob, "Chemistry"),
        }
        return alice, bob, courses

    def test_eq(self, store, catalog):
        alice, _, _ = catalog
        found = store.find(models.Course, eq("teacher_id", alice.user_id), order_by="title")
        assert [c.title for c in found] == ["Algebra", "Biology"]

    def test_empty_in_matches_nothing(self, store, catalog):
        assert store.find(models.Course, in_("id", [])) == []
        assert store.count(models.Course, in_("id", set())) == 0

    def test_in(self, store, catalog):
        _, _, courses = catalog
        ids = [courses["algebra"].id, courses["chemistry"].id]
        found = store.find(models.Course, in_("id", ids), order_by="-title")
        assert [c.title for c in found] == ["Chemistry", "Algebra"]

    def test_and_or(self, store, catalog):
        alice, bob, _ = catalog
        where = or_(
            and_(eq("teacher_id", alice.user_id), eq("title", "Biology")),
            eq("teacher_id", bob.user_id),
        )
        found = store.find(models.Course, where, order_by="title")
        assert [c.title for c in found] == ["Biology", "Chemistry"]

    def test_empty_and_matches_everything_empty_or_nothing(self, store, catalog):
        assert store.count(models.Course, and_()) == 3
        assert store.count(models.Course, or_()) == 0

    def test_eq_none_matches_null(self, store, catalog):
        alice, _, courses = catalog
        student = make_user(store, "student", name="Stu")
        enroll(store, student, courses["algebra"])
        root = store.insert(models.Discussion, {
            "course_id": courses["algebra"].id, "user_id": student.user_id, "content": "Question",
        })
        store.insert(models.Discussion, {
            "course_id": courses["algebra"].id, "user_id": alice.user_id,
            "content": "Answer", "parent_id": root.id,
        })

        top_level = store.find(models.Discussion, eq("parent_id", None))
        assert [d.content for d in top_level] == ["Question"]
