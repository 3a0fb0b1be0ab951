"""Shared snapshot fixtures and fakes for the unit tests."""

from __future__ import annotations

import copy
import json
from pathlib import Path

from xrayview.tree import DomainNode, node_from_dict

SAMPLE_RECORD: dict[str, object] = {
    "kind": "cluster",
    "path": "cluster",
    "children": [
        {
            "kind": "deployments",
            "path": "default/web",
            "labels": {"app": "web"},
            "children": [
                {
                    "kind": "replicasets",
                    "path": "default/web-7d9",
                    "children": [
                        {
                            "kind": "pods",
                            "path": "default/web-7d9-abc",
                            "labels": {"app": "web"},
                            "children": [
                                {
                                    "kind": "containers",
                                    "path": "default/web-7d9-abc/nginx",
                                    "logs": ["started", "listening on :80"],
                                },
                                {
                                    "kind": "containers",
                                    "path": "default/web-7d9-abc/sidecar",
                                    "status": "CrashLoopBackOff",
                                },
                            ],
                        }
                    ],
                }
            ],
        },
        {
            "kind": "pods",
            "path": "kube-system/coredns-55",
            "labels": {"k8s-app": "kube-dns"},
            "children": [
                {"kind": "containers", "path": "kube-system/coredns-55/coredns"},
            ],
        },
        {"kind": "namespaces", "path": "default"},
    ],
}


def sample_record() -> dict[str, object]:
    return copy.deepcopy(SAMPLE_RECORD)


def sample_tree() -> DomainNode:
    return node_from_dict(sample_record())


def write_snapshot(path: Path, record: dict[str, object] | None = None, **extra: object) -> Path:
    document: dict[str, object] = {"tree": record if record is not None else sample_record()}
    document.update(extra)
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    return path


def paths(node: DomainNode | None) -> list[str]:
    """Return subtree paths in depth-first display order."""
    if node is None:
        return []
    return [item.path for item in node.walk()]


class FakeHost:
    """Records every presentation call the view makes."""

    def __init__(self) -> None:
        self.infos: list[str] = []
        self.errors: list[str] = []
        self.cmd_mode = False
        self.previous_calls = 0
        self.redraws = 0
        self.confirm_requests: list[tuple[str, object, object]] = []
        self.details: list[tuple[str, str, str, str]] = []
        self.logs: list[tuple[str, str, bool]] = []
        self.shells: list[tuple[str, str]] = []
        self.edits: list[str] = []
        self.edit_result = True
        self.viewed: list[tuple[str, str]] = []

    def flash_info(self, message: str) -> None:
        self.infos.append(message)

    def flash_error(self, message: str) -> None:
        self.errors.append(message)

    def in_cmd_mode(self) -> bool:
        return self.cmd_mode

    def previous_view(self) -> None:
        self.previous_calls += 1

    def request_redraw(self) -> None:
        self.redraws += 1

    def confirm_delete(self, message, on_ok, on_cancel) -> None:
        self.confirm_requests.append((message, on_ok, on_cancel))

    def show_details(self, title: str, path: str, text: str, language: str) -> None:
        self.details.append((title, path, text, language))

    def show_logs(self, pod, container, previous: bool) -> None:
        self.logs.append((pod.path, container.path, previous))

    def shell_in(self, pod_path: str, container: str) -> None:
        self.shells.append((pod_path, container))

    def edit(self, ref) -> bool:
        self.edits.append(ref.path)
        return self.edit_result

    def view_resource(self, kind: str, path: str) -> None:
        self.viewed.append((kind, path))


class RecordingSource:
    """Watch source that hands the test every subscription it receives."""

    def __init__(self) -> None:
        self.subscriptions: list[tuple[object, object]] = []
        self.json_calls: list[tuple[str, str]] = []

    def watch(self, ctx, listener) -> None:
        self.subscriptions.append((ctx, listener))

    def describe(self, kind: str, path: str) -> str:
        return f"Name: {path}\n"

    def to_json(self, kind: str, path: str) -> str:
        self.json_calls.append((kind, path))
        return json.dumps({"kind": kind, "path": path})

    @property
    def last(self):
        return self.subscriptions[-1]
