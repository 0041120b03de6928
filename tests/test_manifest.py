"""Tests for manifest flattening."""

from src.services.manifest import collect_messages, flatten_manifest


def _msg(text, kind="warning"):
    return {"type": kind, "message": text, "code": f"TEST-{text}"}


class TestFlattenManifest:
    """Tests for flatten_manifest()."""

    def test_no_manifest(self):
        """Test that a missing manifest yields only the n/a status."""
        assert flatten_manifest(None) == {"status": "n/a"}

    def test_empty_derivatives(self):
        """Test that an empty derivative list yields no messages."""
        manifest = {"status": "pending", "progress": "0% complete", "derivatives": []}
        assert flatten_manifest(manifest) == {
            "status": "pending",
            "progress": "0% complete",
            "messages": [],
        }

    def test_missing_derivatives(self):
        """Test that a manifest without derivatives is not an error."""
        result = flatten_manifest({"status": "inprogress", "progress": "10% complete"})
        assert result["messages"] == []

    def test_status_and_progress_copied(self):
        """Test that root status and progress are copied verbatim."""
        manifest = {"status": "failed", "progress": "complete", "derivatives": []}
        result = flatten_manifest(manifest)
        assert result["status"] == "failed"
        assert result["progress"] == "complete"

    def test_derivative_then_child(self):
        """Test that a child's messages follow its parent's."""
        m1, m2 = _msg("m1"), _msg("m2")
        manifest = {
            "status": "success",
            "progress": "complete",
            "derivatives": [{"messages": [m1], "children": [{"messages": [m2]}]}],
        }
        assert flatten_manifest(manifest)["messages"] == [m1, m2]

    def test_grandchildren_included(self):
        """Test that messages deeper than one child level are not dropped."""
        m1, m2, m3, m4 = _msg("m1"), _msg("m2"), _msg("m3"), _msg("m4")
        manifest = {
            "status": "success",
            "progress": "complete",
            "derivatives": [{
                "messages": [m1],
                "children": [{
                    "messages": [m2],
                    "children": [{"messages": [m3], "children": [{"messages": [m4]}]}],
                }],
            }],
        }
        assert flatten_manifest(manifest)["messages"] == [m1, m2, m3, m4]

    def test_messages_are_passed_through_unchanged(self):
        """Test that message records are not reshaped."""
        record = {"type": "error", "message": ["a", "b"], "code": "TranslationWorker-InternalFailure", "extra": 1}
        manifest = {"status": "failed", "progress": "complete", "derivatives": [{"messages": [record]}]}
        assert flatten_manifest(manifest)["messages"] == [record]


class TestCollectMessages:
    """Tests for collect_messages() ordering."""

    def test_preorder_across_siblings(self):
        """Test parent-before-children, siblings in listed order."""
        tree = [
            {
                "messages": [_msg("a")],
                "children": [
                    {"messages": [_msg("a.1")], "children": [{"messages": [_msg("a.1.1")]}]},
                    {"messages": [_msg("a.2")]},
                ],
            },
            {"messages": [_msg("b")], "children": [{"messages": [_msg("b.1")]}]},
        ]
        texts = [m["message"] for m in collect_messages(tree)]
        assert texts == ["a", "a.1", "a.1.1", "a.2", "b", "b.1"]

    def test_nodes_without_messages(self):
        """Test that nodes lacking messages contribute nothing."""
        tree = [{"children": [{"children": [{"messages": [_msg("deep")]}]}, {}]}, {"messages": None}]
        assert [m["message"] for m in collect_messages(tree)] == ["deep"]

    def test_none_tree(self):
        """Test that None is treated as an empty tree."""
        assert collect_messages(None) == []

    def test_very_deep_tree(self):
        """Test that deep nesting does not exhaust the recursion limit."""
        node = {"messages": [_msg("leaf")]}
        for i in range(5000):
            node = {"messages": [], "children": [node]}
        assert [m["message"] for m in collect_messages([node])] == ["leaf"]
