"""Creator tree CRUD, editing, validation and exchange endpoints."""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from creator_trees.application.exchange_codec import ExchangeCodec
from creator_trees.application.tree_editor import TreeEditor
from creator_trees.container import get_exchange_codec, get_master_index, get_tree_editor
from creator_trees.domain.common.errors import MalformedTreeData, TreeValidationError
from creator_trees.domain.tree.mapping import tree_to_dict
from creator_trees.domain.tree.models import Tree

router = APIRouter(tags=["trees"])


# ------------------------------------------------------------------
# Pydantic schemas (camelCase on the wire)
# ------------------------------------------------------------------
class _CamelBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TreeMetaBody(_CamelBody):
    title: Optional[str] = None
    description: Optional[str] = None
    primary_domain: Optional[str] = None
    tags: Optional[List[str]] = None
    root_concept_id: Optional[str] = None


class TreePatchBody(TreeMetaBody):
    # Unknown top-level fields are kept on the tree
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    nodes: Optional[List[Dict[str, Any]]] = None
    ui: Optional[Dict[str, Any]] = None


class AddNodeBody(_CamelBody):
    concept_id: str


class LinkBody(_CamelBody):
    from_id: str
    to_id: str


class UnlockConditionsBody(_CamelBody):
    required_concept_ids: Optional[List[str]] = None
    min_badge: Optional[str] = None
    custom_rule_id: Optional[str] = None


class NextIdsBody(_CamelBody):
    next_ids: List[str]


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------
def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Identity comes from the caller; it is not authenticated here."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header")
    return x_user_id


def _found(tree: Optional[Tree], tree_id: str) -> dict:
    if tree is None:
        raise HTTPException(status_code=404, detail=f"Tree '{tree_id}' not found")
    return tree_to_dict(tree)


# ------------------------------------------------------------------
# Health check
# ------------------------------------------------------------------
@router.get("/health")
def health():
    return {"status": "ok"}


# ------------------------------------------------------------------
# Tree endpoints
# ------------------------------------------------------------------
@router.get("/trees/")
def list_trees(
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    return [tree_to_dict(t) for t in editor.list(user_id)]


@router.post("/trees/", status_code=status.HTTP_201_CREATED)
def create_tree(
    body: TreeMetaBody,
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    tree = editor.create(user_id, body.model_dump(by_alias=True, exclude_none=True))
    return tree_to_dict(tree)


@router.post("/trees/import", status_code=status.HTTP_201_CREATED)
def import_tree(
    data: Any = Body(...),
    validate: bool = Query(True),
    codec: ExchangeCodec = Depends(get_exchange_codec),
    master_index: Dict[str, Any] = Depends(get_master_index),
    user_id: str = Depends(get_user_id),
):
    try:
        tree = codec.import_tree(user_id, data, master_index if validate else None)
    except TreeValidationError as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "errors": e.errors})
    except MalformedTreeData as e:
        raise HTTPException(status_code=400, detail=str(e))
    return tree_to_dict(tree)


@router.get("/trees/{tree_id}")
def get_tree(
    tree_id: str,
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    return _found(editor.get(user_id, tree_id), tree_id)


@router.patch("/trees/{tree_id}")
def patch_tree(
    tree_id: str,
    body: TreePatchBody,
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    fields = body.model_dump(by_alias=True, exclude_unset=True)
    try:
        tree = editor.patch(user_id, tree_id, fields)
    except MalformedTreeData as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _found(tree, tree_id)


@router.delete("/trees/{tree_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tree(
    tree_id: str,
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    if not editor.delete(user_id, tree_id):
        raise HTTPException(status_code=404, detail=f"Tree '{tree_id}' not found")


@router.post("/trees/{tree_id}/slug")
def regenerate_slug(
    tree_id: str,
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    return _found(editor.regenerate_slug(user_id, tree_id), tree_id)


# ------------------------------------------------------------------
# Node & edge endpoints
# ------------------------------------------------------------------
@router.post("/trees/{tree_id}/nodes")
def add_node(
    tree_id: str,
    body: AddNodeBody,
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    return _found(editor.add_node(user_id, tree_id, body.concept_id), tree_id)


@router.post("/trees/{tree_id}/links")
def connect_nodes(
    tree_id: str,
    body: LinkBody,
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    return _found(editor.connect(user_id, tree_id, body.from_id, body.to_id), tree_id)


@router.put("/trees/{tree_id}/nodes/{concept_id}/unlock-conditions")
def set_unlock_conditions(
    tree_id: str,
    concept_id: str,
    body: UnlockConditionsBody,
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    conditions = body.model_dump(by_alias=True, exclude_none=True)
    return _found(editor.set_unlock_conditions(user_id, tree_id, concept_id, conditions), tree_id)


@router.put("/trees/{tree_id}/nodes/{concept_id}/next-ids")
def set_next_ids(
    tree_id: str,
    concept_id: str,
    body: NextIdsBody,
    editor: TreeEditor = Depends(get_tree_editor),
    user_id: str = Depends(get_user_id),
):
    return _found(editor.set_next_ids(user_id, tree_id, concept_id, body.next_ids), tree_id)


# ------------------------------------------------------------------
# Validation & export
# ------------------------------------------------------------------
@router.get("/trees/{tree_id}/validate")
def validate_tree(
    tree_id: str,
    editor: TreeEditor = Depends(get_tree_editor),
    master_index: Dict[str, Any] = Depends(get_master_index),
    user_id: str = Depends(get_user_id),
):
    report = editor.validate(user_id, tree_id, master_index)
    if report is None:
        raise HTTPException(status_code=404, detail=f"Tree '{tree_id}' not found")
    return report.to_dict()


@router.get("/trees/{tree_id}/export")
def export_tree(
    tree_id: str,
    editor: TreeEditor = Depends(get_tree_editor),
    codec: ExchangeCodec = Depends(get_exchange_codec),
    user_id: str = Depends(get_user_id),
):
    tree = editor.get(user_id, tree_id)
    if tree is None:
        raise HTTPException(status_code=404, detail=f"Tree '{tree_id}' not found")
    return codec.export_tree(tree)
