"""TreeEditor read-modify-write operations."""
from conftest import USER

from creator_trees.domain.tree.mapping import node_to_dict


def _node_dicts(tree):
    return [node_to_dict(n) for n in tree.nodes]


# ------------------------------------------------------------------
# Create / read
# ------------------------------------------------------------------
def test_create_applies_defaults(editor):
    tree = editor.create(USER, {})
    assert tree.id == "tree_1"
    assert tree.slug == "course-1"
    assert tree.title == "Untitled Tree"
    assert tree.primary_domain == "general"
    assert tree.tags == []
    assert tree.description == ""
    assert tree.root_concept_id == ""
    assert tree.creator_id == USER
    assert tree.nodes == []
    assert tree.ui == {"layoutMode": "top-down"}


def test_create_copies_meta_and_persists(editor, repo):
    tags = ["piano", "theory"]
    tree = editor.create(USER, {"title": "  Scales  ", "primaryDomain": "music", "tags": tags})
    tags.append("mutated")
    assert tree.title == "Scales"
    assert tree.slug == "scales-1"
    assert tree.tags == ["piano", "theory"]
    assert repo.find(USER, tree.id).title == "Scales"


def test_get_and_list(editor):
    first = editor.create(USER, {"title": "One"})
    second = editor.create(USER, {"title": "Two"})
    assert [t.id for t in editor.list(USER)] == [first.id, second.id]
    assert editor.get(USER, second.id).title == "Two"
    assert editor.get(USER, "missing") is None
    assert editor.list("bob") == []


# ------------------------------------------------------------------
# Patch
# ------------------------------------------------------------------
def test_patch_merges_metadata(editor):
    tree = editor.create(USER, {"title": "Old"})
    patched = editor.patch(USER, tree.id, {"title": "New", "description": "Desc", "publishedId": "p-9"})
    assert patched.title == "New"
    assert patched.description == "Desc"
    reloaded = editor.get(USER, tree.id)
    assert reloaded.title == "New"
    assert reloaded.extra == {"publishedId": "p-9"}


def test_patch_without_nodes_keeps_node_list(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "a")
    editor.add_node(USER, tree.id, "b")
    before = _node_dicts(editor.get(USER, tree.id))
    for i in range(3):
        editor.patch(USER, tree.id, {"title": f"T{i}"})
        editor.patch(USER, tree.id, {"nodes": []})
        editor.patch(USER, tree.id, {"nodes": None})
    assert _node_dicts(editor.get(USER, tree.id)) == before


def test_patch_with_nodes_replaces_them(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "a")
    nodes = [{"conceptId": "x", "nextIds": [], "unlockConditions": {"requiredConceptIds": [], "minBadge": "gold"}}]
    patched = editor.patch(USER, tree.id, {"nodes": nodes})
    assert [n.concept_id for n in patched.nodes] == ["x"]
    assert patched.nodes[0].unlock_conditions.min_badge == "gold"


def test_patch_never_changes_identity(editor):
    tree = editor.create(USER, {"title": "Keep"})
    patched = editor.patch(USER, tree.id, {"id": "other", "creatorId": "mallory", "slug": "hijack"})
    assert patched.id == tree.id
    assert patched.creator_id == USER
    assert patched.slug == tree.slug


def test_patch_missing_tree(editor):
    assert editor.patch(USER, "nope", {"title": "x"}) is None


def test_regenerate_slug(editor):
    tree = editor.create(USER, {"title": "Chords"})
    updated = editor.regenerate_slug(USER, tree.id)
    assert updated.slug == "chords-2"
    assert editor.get(USER, tree.id).slug == "chords-2"


# ------------------------------------------------------------------
# Delete
# ------------------------------------------------------------------
def test_delete(editor):
    tree = editor.create(USER, {})
    keep = editor.create(USER, {})
    assert editor.delete(USER, tree.id) is True
    assert editor.delete(USER, tree.id) is False
    assert [t.id for t in editor.list(USER)] == [keep.id]


# ------------------------------------------------------------------
# Nodes
# ------------------------------------------------------------------
def test_add_node_sets_root_and_defaults(editor):
    tree = editor.create(USER, {})
    updated = editor.add_node(USER, tree.id, "a")
    editor.add_node(USER, tree.id, "b")
    reloaded = editor.get(USER, tree.id)
    assert updated.root_concept_id == "a"
    assert reloaded.root_concept_id == "a"
    assert _node_dicts(reloaded)[0] == {
        "conceptId": "a",
        "nextIds": [],
        "unlockConditions": {"requiredConceptIds": [], "minBadge": "none"},
    }


def test_add_node_is_idempotent(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "a")
    once = len(editor.get(USER, tree.id).nodes)
    editor.add_node(USER, tree.id, "a")
    assert len(editor.get(USER, tree.id).nodes) == once == 1


def test_add_node_keeps_explicit_root(editor):
    tree = editor.create(USER, {"rootConceptId": "b"})
    assert editor.add_node(USER, tree.id, "a").root_concept_id == "b"


def test_add_node_missing_tree(editor):
    assert editor.add_node(USER, "nope", "a") is None


# ------------------------------------------------------------------
# Edges
# ------------------------------------------------------------------
def test_connect_before_nodes_exist_is_noop(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "a")
    before = _node_dicts(editor.get(USER, tree.id))
    returned = editor.connect(USER, tree.id, "a", "b")
    assert _node_dicts(returned) == before
    assert _node_dicts(editor.get(USER, tree.id)) == before
    assert _node_dicts(editor.connect(USER, tree.id, "b", "a")) == before


def test_connect_is_idempotent(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "a")
    editor.add_node(USER, tree.id, "b")
    editor.connect(USER, tree.id, "a", "b")
    editor.connect(USER, tree.id, "a", "b")
    assert editor.get(USER, tree.id).find_node("a").next_ids == ["b"]


def test_connect_missing_tree(editor):
    assert editor.connect(USER, "nope", "a", "b") is None


def test_set_next_ids_strips_self_and_duplicates(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "A")
    editor.set_next_ids(USER, tree.id, "A", ["B", "A", "B", "C"])
    assert editor.get(USER, tree.id).find_node("A").next_ids == ["B", "C"]


def test_set_next_ids_non_list_clears(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "a")
    editor.add_node(USER, tree.id, "b")
    editor.connect(USER, tree.id, "a", "b")
    editor.set_next_ids(USER, tree.id, "a", None)
    assert editor.get(USER, tree.id).find_node("a").next_ids == []


def test_set_next_ids_unknown_node_is_noop(editor):
    tree = editor.create(USER, {})
    returned = editor.set_next_ids(USER, tree.id, "ghost", ["a"])
    assert returned.nodes == []


# ------------------------------------------------------------------
# Unlock conditions
# ------------------------------------------------------------------
def test_set_unlock_conditions_partial_merge(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "a")
    editor.set_unlock_conditions(USER, tree.id, "a", {"requiredConceptIds": ["x", "y"]})
    editor.set_unlock_conditions(USER, tree.id, "a", {"minBadge": "silver"})
    editor.set_unlock_conditions(USER, tree.id, "a", {"customRuleId": "rule-7"})
    cond = editor.get(USER, tree.id).find_node("a").unlock_conditions
    assert cond.required_concept_ids == ["x", "y"]
    assert cond.min_badge == "silver"
    assert cond.custom_rule_id == "rule-7"


def test_set_unlock_conditions_copies_input(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "a")
    required = ["x"]
    updated = editor.set_unlock_conditions(USER, tree.id, "a", {"requiredConceptIds": required})
    required.append("y")
    assert updated.find_node("a").unlock_conditions.required_concept_ids == ["x"]


def test_set_unlock_conditions_unknown_node(editor):
    tree = editor.create(USER, {})
    returned = editor.set_unlock_conditions(USER, tree.id, "ghost", {"minBadge": "gold"})
    assert returned.id == tree.id
    assert returned.nodes == []


# ------------------------------------------------------------------
# Validation through the editor
# ------------------------------------------------------------------
def test_validate_stored_tree(editor, master):
    tree = editor.create(USER, {})
    for cid in ("a", "b", "c"):
        editor.add_node(USER, tree.id, cid)
    editor.connect(USER, tree.id, "a", "b")
    editor.connect(USER, tree.id, "b", "c")
    assert editor.validate(USER, tree.id, master).ok
    editor.connect(USER, tree.id, "c", "a")
    report = editor.validate(USER, tree.id, master)
    assert not report.ok
    assert any("Cycle detected" in e for e in report.errors)
    assert editor.validate(USER, "nope", master) is None


def test_patch_with_null_metadata_keeps_current_values(editor):
    tree = editor.create(USER, {"title": "Keep", "primaryDomain": "music", "tags": ["t"]})
    patched = editor.patch(USER, tree.id, {"title": None, "primaryDomain": None, "tags": None, "ui": None})
    reloaded = editor.get(USER, tree.id)
    for t in (patched, reloaded):
        assert t.title == "Keep"
        assert t.primary_domain == "music"
        assert t.tags == ["t"]
        assert t.ui == {"layoutMode": "top-down"}


def test_delete_missing_tree_does_not_write(editor, store, monkeypatch):
    editor.create(USER, {})
    writes = []
    monkeypatch.setattr(store, "set", lambda key, value: writes.append(key))
    assert editor.delete(USER, "nope") is False
    assert writes == []


def test_connect_refuses_self_link(editor):
    tree = editor.create(USER, {})
    editor.add_node(USER, tree.id, "a")
    editor.connect(USER, tree.id, "a", "a")
    assert editor.get(USER, tree.id).find_node("a").next_ids == []
