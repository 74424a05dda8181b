"""Recursive dependency tracing for on-chain Move packages.

The resolver walks the declared dependencies of a root package depth-first
and builds two provenance trees in one pass:

- the **dependency tree**, one node per package reference;
- the **module tree**, where each package node lists its own modules as
  leaves followed by the module trees of its dependencies.

Cycle detection uses the set of identifiers on the current root-to-node
path only. Each descent gets its own copy, so a package reachable through
two parents is expanded under both of them, while a package that is
already an ancestor becomes a ``(cycle detected)`` leaf.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Tuple

from .models import (
    CYCLE_MARKER,
    CombinedSummary,
    CombinedTrace,
    DependencyTreeNode,
    ModuleTreeNode,
    TraceResult,
    parse_package_id,
)
from .registry import MetadataProvider

logger = logging.getLogger(__name__)


class _Accumulator:
    """Flat traversal-order lists plus first-seen-order deduplication."""

    def __init__(self) -> None:
        self.items: List[str] = []
        self._seen: Dict[str, None] = {}

    def add(self, item: str) -> None:
        self.items.append(item)
        self._seen.setdefault(item, None)

    @property
    def unique(self) -> List[str]:
        return list(self._seen)


def trace_dependencies(
    package_id: str,
    provider: MetadataProvider,
    network: str = "mainnet",
) -> TraceResult:
    """Recursively trace all dependencies of ``package_id``.

    Args:
        package_id: Root package in ``<address>::<PackageName>`` form.
        provider: Metadata source (registry client, cache wrapper or fake).
        network: Passed through to the provider untouched.

    Returns:
        TraceResult holding both trees and the dependency/module lists.

    Raises:
        MalformedIdentifier: If any reached identifier is not ``<address>::<name>``.
        MetadataLookupError: If the provider fails for any reached identifier.
            No partial result is returned.
    """
    dependencies = _Accumulator()
    modules = _Accumulator()

    def visit(pkg_id: str, path: FrozenSet[str]) -> Tuple[DependencyTreeNode, ModuleTreeNode]:
        if pkg_id in path:
            logger.debug("Cycle closed at %s", pkg_id)
            sentinel = pkg_id + CYCLE_MARKER
            return DependencyTreeNode(name=sentinel), ModuleTreeNode(name=sentinel)

        address = parse_package_id(pkg_id).address
        path = path | {pkg_id}
        metadata = provider.fetch(pkg_id, network)

        dep_ids = [dep.package_id for dep in metadata.deps]
        for dep_id in dep_ids:
            dependencies.add(dep_id)

        module_leaves = []
        for module in metadata.modules:
            qualified = f"{address}::{module.name}"
            modules.add(qualified)
            module_leaves.append(ModuleTreeNode(name=qualified))

        dep_children: List[DependencyTreeNode] = []
        module_children: List[ModuleTreeNode] = module_leaves
        for dep_id in dep_ids:
            dep_node, module_node = visit(dep_id, path)
            dep_children.append(dep_node)
            module_children.append(module_node)

        return (
            DependencyTreeNode(name=pkg_id, dependencies=dep_children),
            ModuleTreeNode(name=pkg_id, children=module_children),
        )

    parse_package_id(package_id)
    dependency_tree, module_tree = visit(package_id, frozenset())
    logger.debug(
        "Traced %s: %d dependencies (%d unique), %d modules",
        package_id,
        len(dependencies.items),
        len(dependencies.unique),
        len(modules.items),
    )

    return TraceResult(
        package_id=package_id,
        dependency_tree=dependency_tree,
        module_tree=module_tree,
        dependency_list=dependencies.items,
        deduped_dependency_list=dependencies.unique,
        module_list=modules.items,
        deduped_module_list=modules.unique,
    )


def trace_packages(
    package_ids: Iterable[str],
    provider: MetadataProvider,
    network: str = "mainnet",
) -> CombinedTrace:
    """Trace several roots and combine their dependency and module lists."""
    package_ids = list(package_ids)
    results = [trace_dependencies(pid, provider, network) for pid in package_ids]

    dependencies = _Accumulator()
    modules = _Accumulator()
    for result in results:
        for dep in result.dependency_list:
            dependencies.add(dep)
        for module in result.module_list:
            modules.add(module)

    return CombinedTrace(
        packages=package_ids,
        per_package=results,
        combined=CombinedSummary(
            dependency_count=len(dependencies.items),
            dependencies=dependencies.unique,
            module_count=len(modules.items),
            modules=modules.unique,
        ),
    )
