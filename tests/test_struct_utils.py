"""
Unit tests for composite document normalization and page merging
"""
import json
import pytest

from app.apps.content.schemas import KNOWN_RESOURCES
from app.apps.content.utils.struct_utils import (
    coerce_version,
    merge_pages,
    normalize_struct,
    page_identity,
)
from app.apps.content.utils.driver_ranking import rank_drivers


class TestNormalizeStruct:
    """Unit tests for normalize_struct"""

    def test_populates_missing_known_resources(self):
        struct = normalize_struct({"schemaVersion": 3, "resources": {"events": [{"id": 1}]}})

        assert struct["schemaVersion"] == 3
        assert struct["updatedAt"] is None
        assert list(struct["resources"]) == KNOWN_RESOURCES
        assert struct["resources"]["events"] == [{"id": 1}]
        assert struct["resources"]["news"] == []

    def test_coerces_and_drops_malformed_resources(self):
        struct = normalize_struct({
            "resources": {
                "news": {"id": 1},
                "videos": "oops",
                "partners": [{"name": "Sponsor"}],
                "legacy-flag": True,
            }
        })

        assert struct["resources"]["news"] == []
        assert struct["resources"]["videos"] == []
        assert struct["resources"]["partners"] == [{"name": "Sponsor"}]
        assert "legacy-flag" not in struct["resources"]

    @pytest.mark.parametrize("raw", [None, [], "struct", 42])
    def test_non_object_becomes_empty_skeleton(self, raw):
        struct = normalize_struct(raw)

        assert struct["schemaVersion"] == 0
        assert all(struct["resources"][resource_id] == [] for resource_id in KNOWN_RESOURCES)

    def test_normalization_is_idempotent(self):
        raw = {
            "theme": {"primary": "#FF4D00"},
            "resources": {
                "partners": [1, 2],
                "drivers": None,
                "site-content": [{"id": "home", "sections": []}],
            },
            "updatedAt": 12345,
            "schemaVersion": "7",
        }

        once = normalize_struct(raw)
        twice = normalize_struct(once)

        assert json.dumps(once, ensure_ascii=False) == json.dumps(twice, ensure_ascii=False)
        assert once["schemaVersion"] == 7
        assert once["theme"] == {"primary": "#FF4D00"}

    def test_does_not_share_state_with_input(self):
        raw = {"resources": {"events": [{"id": 1}]}}

        struct = normalize_struct(raw)
        struct["resources"]["events"][0]["id"] = 99

        assert raw["resources"]["events"][0]["id"] == 1

    @pytest.mark.parametrize("value,expected", [
        (5, 5), ("12", 12), (4.0, 4), (None, 0), (-3, 0), ("abc", 0), (True, 0), (2.5, 0),
    ])
    def test_coerce_version(self, value, expected):
        assert coerce_version(value) == expected


class TestMergePages:
    """Unit tests for site-content page merging"""

    def test_merge_preserves_untouched_pages(self):
        page_a = {"id": "home", "title": "Ana səhifə", "sections": [{"id": "s1", "value": "Salam"}]}
        page_b = {"id": "about", "title": "Haqqımızda", "sections": [{"id": "s2"}]}
        page_a_new = {"id": "home", "title": "Əsas", "sections": [{"id": "s1", "value": "Привет"}]}

        merged = merge_pages([page_a, page_b], [page_a_new])

        assert merged == [page_a_new, page_b]

    def test_partial_page_update_keeps_sections_and_images(self):
        existing = [{
            "id": "home",
            "title": "Old",
            "sections": [{"id": "hero", "type": "text", "value": "x"}],
            "images": [{"id": "img1", "path": "/uploads/1.jpg", "type": "local"}],
        }]

        merged = merge_pages(existing, [{"id": "home", "title": "New", "sections": []}])

        assert merged[0]["title"] == "New"
        assert merged[0]["sections"] == existing[0]["sections"]
        assert merged[0]["images"] == existing[0]["images"]

    def test_identity_is_case_insensitive_and_uses_page_id(self):
        existing = [{"page_id": " Events ", "title": "Tədbirlər", "active": True}]

        merged = merge_pages(existing, [{"id": "events", "active": False}])

        assert len(merged) == 1
        assert merged[0]["active"] is False
        assert merged[0]["title"] == "Tədbirlər"

    def test_new_and_anonymous_pages_are_appended(self):
        existing = [{"id": "home"}]

        merged = merge_pages(existing, [{"id": "contact"}, {"title": "No id"}])

        assert merged == [{"id": "home"}, {"id": "contact"}, {"title": "No id"}]

    def test_resaving_anonymous_pages_does_not_duplicate_them(self):
        payload = [{"title": "Qaydalar", "sections": [{"id": "r1", "value": "Təhlükəsizlik"}]}]

        once = merge_pages([], payload)
        twice = merge_pages(once, payload)

        assert twice == payload
        assert merge_pages(twice, [{"title": "Qaydalar"}]) == payload + [{"title": "Qaydalar"}]

    def test_page_identity(self):
        assert page_identity({"id": "  HOME "}) == "home"
        assert page_identity({"id": "", "page_id": "rules"}) == "rules"
        assert page_identity({"id": 7}) == "7"
        assert page_identity({"title": "x"}) is None
        assert page_identity("home") is None


class TestRankDrivers:
    """Unit tests for driver standings ranking"""

    def test_sorts_by_points_and_assigns_rank(self):
        categories = [{
            "id": 1,
            "name": "UNLIMITED",
            "drivers": [
                {"name": "A", "points": 10},
                {"name": "B", "points": 30},
                {"name": "C"},
                {"name": "D", "points": "20"},
            ],
        }]

        ranked = rank_drivers(categories)

        assert [d["name"] for d in ranked[0]["drivers"]] == ["B", "D", "A", "C"]
        assert [d["rank"] for d in ranked[0]["drivers"]] == [1, 2, 3, 4]
        assert ranked[0]["name"] == "UNLIMITED"

    def test_ties_keep_submission_order(self):
        ranked = rank_drivers([{"drivers": [{"name": "X", "points": 5}, {"name": "Y", "points": 5}]}])

        assert [d["name"] for d in ranked[0]["drivers"]] == ["X", "Y"]

    def test_categories_without_drivers_are_unchanged(self):
        categories = [{"id": 2, "name": "Empty"}, "legacy"]

        assert rank_drivers(categories) == categories
