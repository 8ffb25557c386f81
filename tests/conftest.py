"""Shared test fixtures for typecrumb."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from typecrumb.graph import TypeGraph
from typecrumb.location import FragmentLocation, TaskQueue
from typecrumb.navigation import NavigationEngine

CORE = "k8s.io/api/core/v1"
META = "k8s.io/apimachinery/pkg/apis/meta/v1"


def _doc(*elements: tuple[str, list[str]]) -> dict[str, Any]:
    return {"elements": [{"type": t, "content": c} for t, c in elements]}


@pytest.fixture()
def sample_graph_data() -> dict[str, Any]:
    """Generator JSON for a small slice of the Kubernetes core API."""
    return {
        f"{CORE}.Pod": {
            "package": CORE,
            "typeName": "Pod",
            "isRoot": True,
            "docString": "Pod is a collection of containers.",
            "parsedDocString": _doc(("p", ["Pod is a collection of containers."])),
            "fields": [
                {"fieldName": "TypeMeta", "typeName": f"{META}.TypeMeta"},
                {"fieldName": "ObjectMeta", "typeName": f"{META}.ObjectMeta"},
                {
                    "fieldName": "Spec",
                    "typeName": f"{CORE}.PodSpec",
                    "docString": "Spec of the pod. More info: https://k8s.io/docs",
                    "parsedDocString": _doc(
                        ("p", ["Spec of the pod. Read carefully."]),
                        ("p", ["More info: https://k8s.io/docs"]),
                    ),
                },
                {"fieldName": "Status", "typeName": f"{CORE}.PodStatus"},
            ],
            "enumValues": [],
        },
        f"{CORE}.PodSpec": {
            "package": CORE,
            "typeName": "PodSpec",
            "isRoot": False,
            "fields": [
                {
                    "fieldName": "Containers",
                    "typeName": f"{CORE}.Container",
                    "typeDecorators": ["List"],
                    "docString": "List of containers.",
                },
                {"fieldName": "NodeName", "typeName": "string"},
                {
                    "fieldName": "Overhead",
                    "typeName": "k8s.io/apimachinery/pkg/api/resource.Quantity",
                    "typeDecorators": ["Map[ResourceName]"],
                },
            ],
        },
        f"{CORE}.Container": {
            "package": CORE,
            "typeName": "Container",
            "isRoot": False,
            "fields": [
                {"fieldName": "Name", "typeName": "string"},
                {"fieldName": "Image", "typeName": "string"},
                {
                    "fieldName": "Ports",
                    "typeName": f"{CORE}.ContainerPort",
                    "typeDecorators": ["List"],
                },
            ],
        },
        f"{CORE}.ContainerPort": {
            "package": CORE,
            "typeName": "ContainerPort",
            "isRoot": False,
            "fields": [{"fieldName": "ContainerPort", "typeName": "int32"}],
        },
        f"{CORE}.PodStatus": {
            "package": CORE,
            "typeName": "PodStatus",
            "isRoot": False,
            "fields": [{"fieldName": "Phase", "typeName": f"{CORE}.PodPhase"}],
        },
        f"{CORE}.PodPhase": {
            "package": CORE,
            "typeName": "PodPhase",
            "isRoot": False,
            "fields": [],
            "enumValues": [
                {"name": "Pending", "docString": "Pending is waiting."},
                {"name": "Running"},
            ],
        },
        f"{CORE}.PodList": {
            "package": CORE,
            "typeName": "PodList",
            "isRoot": True,
            "fields": [
                {
                    "fieldName": "Items",
                    "typeName": f"{CORE}.Pod",
                    "typeDecorators": ["List"],
                }
            ],
        },
        f"{CORE}.Service": {
            "package": CORE,
            "typeName": "Service",
            "isRoot": True,
            "fields": [{"fieldName": "Spec", "typeName": f"{CORE}.ServiceSpec"}],
        },
    }


@pytest.fixture()
def sample_graph(sample_graph_data: dict[str, Any]) -> TypeGraph:
    return TypeGraph.from_json_data(sample_graph_data)


@pytest.fixture()
def graph_file(tmp_path: Path, sample_graph_data: dict[str, Any]) -> Path:
    """The sample graph written to disk the way the generator writes it."""
    path = tmp_path / "types.json"
    path.write_text(json.dumps(sample_graph_data, indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def queue() -> TaskQueue:
    return TaskQueue()


@pytest.fixture()
def location(queue: TaskQueue) -> FragmentLocation:
    return FragmentLocation(scheduler=queue)


@pytest.fixture()
def engine(
    sample_graph: TypeGraph, location: FragmentLocation, queue: TaskQueue
) -> NavigationEngine:
    """A started engine showing the first type, with queued notifications drained."""
    eng = NavigationEngine(sample_graph, location, queue)
    eng.start()
    queue.run_until_idle()
    return eng
