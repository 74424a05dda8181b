"""Core data models shared by the resolver, the registry client and the renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .errors import MalformedIdentifier

CYCLE_MARKER = " (cycle detected)"


@dataclass(frozen=True)
class PackageId:
    address: str
    name: str

    def __str__(self) -> str:
        return f"{self.address}::{self.name}"


def parse_package_id(package_id: str) -> PackageId:
    """Split ``<address>::<name>``, raising MalformedIdentifier on any other shape."""
    parts = package_id.split("::")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise MalformedIdentifier(package_id)
    return PackageId(address=parts[0], name=parts[1])


@dataclass(frozen=True)
class ModuleDescriptor:
    name: str
    source: str = ""
    source_map: str = ""


@dataclass(frozen=True)
class DependencyRef:
    account: str
    package_name: str

    @property
    def package_id(self) -> str:
        return f"{self.account}::{self.package_name}"


@dataclass(frozen=True)
class PackageMetadata:
    """Registry entry for one package, tagged with the address it was read from."""
    address: str
    name: str
    modules: tuple = ()
    deps: tuple = ()
    upgrade_number: str = "0"
    upgrade_policy: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "name": self.name,
            "modules": [
                {"name": m.name, "source": m.source, "source_map": m.source_map}
                for m in self.modules
            ],
            "deps": [{"account": d.account, "package_name": d.package_name} for d in self.deps],
            "upgrade_number": self.upgrade_number,
            "upgrade_policy": {"policy": self.upgrade_policy},
        }

    @classmethod
    def from_dict(cls, address: str, payload: Dict[str, Any]) -> "PackageMetadata":
        """Build from a registry entry (or a cached ``to_dict`` payload)."""
        policy = payload.get("upgrade_policy", 0)
        if isinstance(policy, dict):
            policy = policy.get("policy", 0)
        return cls(
            address=payload.get("address", address),
            name=payload["name"],
            modules=tuple(
                ModuleDescriptor(
                    name=m["name"],
                    source=m.get("source", ""),
                    source_map=m.get("source_map", ""),
                )
                for m in payload.get("modules", [])
            ),
            deps=tuple(
                DependencyRef(account=d["account"], package_name=d["package_name"])
                for d in payload.get("deps", [])
            ),
            upgrade_number=str(payload.get("upgrade_number", "0")),
            upgrade_policy=int(policy),
        )


@dataclass
class DependencyTreeNode:
    name: str
    dependencies: List["DependencyTreeNode"] = field(default_factory=list)

    @property
    def children(self) -> List["DependencyTreeNode"]:
        return self.dependencies

    @property
    def is_cycle(self) -> bool:
        return self.name.endswith(CYCLE_MARKER)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "dependencies": [d.to_dict() for d in self.dependencies]}


@dataclass
class ModuleTreeNode:
    name: str
    children: List["ModuleTreeNode"] = field(default_factory=list)

    @property
    def is_cycle(self) -> bool:
        return self.name.endswith(CYCLE_MARKER)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "children": [c.to_dict() for c in self.children]}


@dataclass(frozen=True)
class TraceResult:
    package_id: str
    dependency_tree: DependencyTreeNode
    module_tree: ModuleTreeNode
    dependency_list: List[str]
    deduped_dependency_list: List[str]
    module_list: List[str]
    deduped_module_list: List[str]

    @property
    def direct_dependency_count(self) -> int:
        return len(self.dependency_tree.dependencies)

    @property
    def all_dependency_count(self) -> int:
        return len(self.dependency_list)

    @property
    def deduped_dependency_count(self) -> int:
        return len(self.deduped_dependency_list)

    @property
    def all_module_count(self) -> int:
        return len(self.module_list)

    @property
    def deduped_module_count(self) -> int:
        return len(self.deduped_module_list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "packageId": self.package_id,
            "dependencyList": list(self.dependency_list),
            "dedupedDependencyList": list(self.deduped_dependency_list),
            "dependencyTree": self.dependency_tree.to_dict(),
            "directDependencyCount": self.direct_dependency_count,
            "allDependencyCount": self.all_dependency_count,
            "dedupedDependencyCount": self.deduped_dependency_count,
            "moduleList": list(self.module_list),
            "dedupedModuleList": list(self.deduped_module_list),
            "allModuleCount": self.all_module_count,
            "dedupedModuleCount": self.deduped_module_count,
            "moduleTree": self.module_tree.to_dict(),
        }


@dataclass(frozen=True)
class CombinedSummary:
    dependency_count: int
    dependencies: List[str]
    module_count: int
    modules: List[str]

    @property
    def deduped_dependency_count(self) -> int:
        return len(self.dependencies)

    @property
    def deduped_module_count(self) -> int:
        return len(self.modules)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependencyCount": self.dependency_count,
            "dedupedDependencyCount": self.deduped_dependency_count,
            "dependencies": list(self.dependencies),
            "moduleCount": self.module_count,
            "dedupedModuleCount": self.deduped_module_count,
            "modules": list(self.modules),
        }


@dataclass(frozen=True)
class CombinedTrace:
    """Aggregate of several root traces from one invocation."""
    packages: List[str]
    per_package: List[TraceResult]
    combined: CombinedSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "packages": list(self.packages),
            "perPackage": [r.to_dict() for r in self.per_package],
            "combined": self.combined.to_dict(),
        }
