"""Export-shape to update/create-shape payload transform.

A workspace fetched with ``export=true`` carries read-only fields (timestamps,
status, training state) at every level. Update and create calls accept only
the writable subset. This module builds that subset; it is pure and never
touches the network.

Field mapping (export -> update):

==========================  ==========================  =============================
export field                update field                transform
==========================  ==========================  =============================
name, description,          same                        copied verbatim
language, metadata,
learning_opt_out,
system_settings
intents[]                   intents[]                   INTENT_FIELDS, examples
                                                        reduced to EXAMPLE_FIELDS
entities[]                  entities[]                  ENTITY_FIELDS, values
                                                        reduced to VALUE_FIELDS
dialog_nodes[]              dialog_nodes[]              DIALOG_NODE_FIELDS
counterexamples[]           counterexamples[]           COUNTEREXAMPLE_FIELDS
webhooks[]                  webhooks[]                  WEBHOOK_FIELDS, when the
                                                        export has the key
workspace_id                workspace_id                replaced by the target id
anything else               (dropped)
==========================  ==========================  =============================

Keys whose value is ``None`` are omitted.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from assistant_migration.migration.models import WorkspaceExport

WORKSPACE_FIELDS = (
    "name",
    "description",
    "language",
    "metadata",
    "learning_opt_out",
    "system_settings",
)

INTENT_FIELDS = ("intent", "description")
EXAMPLE_FIELDS = ("text", "mentions")

ENTITY_FIELDS = ("entity", "description", "metadata", "fuzzy_match")
VALUE_FIELDS = ("value", "metadata", "type", "synonyms", "patterns")

DIALOG_NODE_FIELDS = (
    "dialog_node",
    "description",
    "conditions",
    "parent",
    "previous_sibling",
    "output",
    "context",
    "metadata",
    "next_step",
    "title",
    "type",
    "event_name",
    "variable",
    "actions",
    "digress_in",
    "digress_out",
    "digress_out_slots",
    "user_label",
    "disambiguation_opt_out",
)

COUNTEREXAMPLE_FIELDS = ("text",)
WEBHOOK_FIELDS = ("url", "name", "headers")


def _pick(source: Mapping[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    return {key: source[key] for key in fields if source.get(key) is not None}


def reshape_examples(examples: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [_pick(example, EXAMPLE_FIELDS) for example in examples]


def reshape_intents(intents: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Reduce exported intents to create-shape intents."""
    reshaped = []
    for intent in intents:
        item = _pick(intent, INTENT_FIELDS)
        item["examples"] = reshape_examples(intent.get("examples") or [])
        reshaped.append(item)
    return reshaped


def reshape_values(values: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [_pick(value, VALUE_FIELDS) for value in values]


def reshape_entities(entities: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Reduce exported entities to create-shape entities."""
    reshaped = []
    for entity in entities:
        item = _pick(entity, ENTITY_FIELDS)
        item["values"] = reshape_values(entity.get("values") or [])
        reshaped.append(item)
    return reshaped


def reshape_dialog_nodes(nodes: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Reduce exported dialog nodes to create-shape nodes; tree links are kept."""
    return [_pick(node, DIALOG_NODE_FIELDS) for node in nodes]


def reshape_counterexamples(counterexamples: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [_pick(item, COUNTEREXAMPLE_FIELDS) for item in counterexamples]


def build_create_payload(export: WorkspaceExport) -> dict[str, Any]:
    """Build a create-workspace payload from an exported workspace."""
    data = export.to_json_dict()
    payload = _pick(data, WORKSPACE_FIELDS)
    payload["intents"] = reshape_intents(data.get("intents") or [])
    payload["entities"] = reshape_entities(data.get("entities") or [])
    payload["dialog_nodes"] = reshape_dialog_nodes(data.get("dialog_nodes") or [])
    payload["counterexamples"] = reshape_counterexamples(data.get("counterexamples") or [])
    if data.get("webhooks") is not None:
        payload["webhooks"] = [_pick(hook, WEBHOOK_FIELDS) for hook in data["webhooks"]]
    return payload


def build_update_payload(export: WorkspaceExport, target_id: str) -> dict[str, Any]:
    """Build the update payload for ``target_id`` from an exported workspace.

    Whatever identifier the export carries is discarded; the payload always
    addresses ``target_id``.
    """
    if not target_id:
        raise ValueError("Target workspace id is required")
    payload = build_create_payload(export)
    payload["workspace_id"] = target_id
    return payload
