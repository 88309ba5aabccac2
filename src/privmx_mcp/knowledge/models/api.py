"""Data models for the SDK knowledge graph.

Namespaces group classes and standalone functions for one language. Methods
carry a stable ``key`` assigned by the knowledge store:

    language.namespace.[Class.]name(ParamType, ...)

The key includes the parameter type signature so overloads stay distinct.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Parameter:
    """A single method parameter."""

    name: str
    type: str = "any"
    description: str = ""
    optional: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Parameter":
        raw_type = data.get("type", "any")
        # Source JSON nests the type as {"name": ...}
        if isinstance(raw_type, dict):
            raw_type = raw_type.get("name", "any")
        return cls(
            name=str(data.get("name", "")),
            type=str(raw_type or "any"),
            description=str(data.get("description", "")),
            optional=bool(data.get("optional", False)),
        )


@dataclass
class Method:
    """A callable API member (function, method, static method or constructor)."""

    name: str
    description: str = ""
    parameters: list[Parameter] = field(default_factory=list)
    returns: list[str] = field(default_factory=list)
    examples: list[str] = field(default_factory=list)
    prerequisites: list[str] = field(default_factory=list)
    method_type: str = "method"
    class_name: str | None = None
    key: str | None = None

    def param_signature(self) -> str:
        """Comma-separated parameter types, e.g. ``"string,UserWithPubKey[]"``."""
        return ",".join(p.type for p in self.parameters)

    def signature(self) -> str:
        params = ", ".join(f"{p.name}: {p.type}" for p in self.parameters)
        returns = f" -> {self.returns[0]}" if self.returns else ""
        prefix = f"{self.class_name}." if self.class_name else ""
        return f"{prefix}{self.name}({params}){returns}"

    @classmethod
    def from_dict(cls, data: dict[str, Any], class_name: str | None = None) -> "Method":
        returns = []
        for ret in data.get("returns", []) or []:
            if isinstance(ret, dict):
                ret_type = ret.get("type", "")
                returns.append(ret_type.get("name", "") if isinstance(ret_type, dict) else str(ret_type))
            else:
                returns.append(str(ret))

        examples = []
        for ex in data.get("examples", []) or []:
            examples.append(ex.get("code", "") if isinstance(ex, dict) else str(ex))

        return cls(
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            parameters=[Parameter.from_dict(p) for p in data.get("parameters", []) or []],
            returns=[r for r in returns if r],
            examples=[e for e in examples if e],
            prerequisites=list(data.get("prerequisites", []) or []),
            method_type=str(data.get("methodType", data.get("method_type", "method"))),
            class_name=class_name,
            key=data.get("key"),
        )


@dataclass
class APIClass:
    """A class and its callable members."""

    name: str
    description: str = ""
    methods: list[Method] = field(default_factory=list)
    static_methods: list[Method] = field(default_factory=list)
    constructors: list[Method] = field(default_factory=list)

    def all_methods(self) -> list[Method]:
        return [*self.constructors, *self.methods, *self.static_methods]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "APIClass":
        name = str(data.get("name", ""))
        return cls(
            name=name,
            description=str(data.get("description", "")),
            methods=[Method.from_dict(m, name) for m in data.get("methods", []) or []],
            static_methods=[
                Method.from_dict({"methodType": "static", **m}, name) for m in data.get("staticMethods", []) or []
            ],
            constructors=[
                Method.from_dict({"methodType": "constructor", **m}, name)
                for m in data.get("constructors", []) or []
            ],
        )


@dataclass
class Constant:
    name: str
    description: str = ""
    value: Any = None


@dataclass
class Namespace:
    """A logical API grouping for one language."""

    name: str
    language: str = ""
    description: str = ""
    classes: list[APIClass] = field(default_factory=list)
    functions: list[Method] = field(default_factory=list)
    constants: list[Constant] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], language: str | None = None) -> "Namespace":
        return cls(
            name=str(data.get("name", "")),
            language=str(language or data.get("language", "")),
            description=str(data.get("description", "")),
            classes=[APIClass.from_dict(c) for c in data.get("classes", []) or []],
            functions=[Method.from_dict(f) for f in data.get("functions", []) or []],
            constants=[
                Constant(
                    name=str(c.get("name", "")),
                    description=str(c.get("description", "")),
                    value=c.get("value"),
                )
                for c in data.get("constants", []) or []
            ],
        )
