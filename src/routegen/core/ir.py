"""
Input and output records for route generation.

This module contains the immutable records the generator consumes (methods
grouped into services) and produces (generated files).
"""

from __future__ import annotations

import keyword
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

ANY_VERB = "ANY"


def canonical_verb(verb: str) -> str:
    """
    Canonicalize an HTTP verb.

    ``any`` in any letter case becomes the ``ANY`` wildcard sentinel; every
    other verb is upper-cased.

    Examples:
        >>> canonical_verb("get")
        'GET'
        >>> canonical_verb("Any")
        'ANY'
    """
    if verb.casefold() == ANY_VERB.casefold():
        return ANY_VERB
    return verb.upper()


class Method(BaseModel):
    """
    One API method as handed over by the IDL front end.

    Examples:
        - Method(name="GetUser", path="/api/user/:id", verb="GET")
        - Method(name="Ping", path="/ping", verb="any", handler_package="app.handler.health")
    """

    name: str
    path: str
    verb: str = Field(min_length=1)
    handler_package: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Handler names are emitted as attribute references and must be identifiers."""
        if v and (not v.isidentifier() or keyword.iskeyword(v)):
            raise ValueError(f"method name '{v}' is not a valid Python identifier")
        return v

    @field_validator("handler_package")
    @classmethod
    def validate_handler_package(cls, v: str | None) -> str | None:
        """Treat a blank handler package as absent."""
        if v is not None and not v.strip():
            return None
        return v


class ServiceSpec(BaseModel):
    """
    A service: the methods emitted into one router module.

    Attributes:
        name: Router module name (``<name>.py``)
        package: Slash separated router sub-package, e.g. ``user/api``
        handler_package: Default handler module for methods without one
        methods: Methods in declaration order
    """

    name: str = Field(min_length=1)
    package: str = Field(min_length=1)
    handler_package: str | None = None
    methods: list[Method] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @field_validator("package")
    @classmethod
    def validate_package(cls, v: str) -> str:
        """
        Strip surrounding separators so ``/user/api/`` means ``user/api``.

        Every part becomes a component of the router import path, so it must
        be a Python identifier.
        """
        stripped = v.strip("/")
        if not stripped:
            raise ValueError("package must name at least one directory")
        for part in stripped.split("/"):
            if not part.isidentifier() or keyword.iskeyword(part):
                raise ValueError(f"package part '{part}' is not a valid Python identifier")
        return stripped

    @property
    def package_parts(self) -> list[str]:
        return self.package.split("/")


class ApiList(BaseModel):
    """Top-level API list document."""

    services: list[ServiceSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class HandlerReference(BaseModel):
    """
    The handler a leaf route dispatches to.

    Attributes:
        package: Import path of the module defining the handler
        alias: Name the module is imported as in the router module
        name: Handler function name inside the module
    """

    package: str
    alias: str
    name: str

    model_config = ConfigDict(frozen=True)

    @property
    def qualified(self) -> str:
        """Reference as written in generated code: ``alias.name``."""
        return f"{self.alias}.{self.name}"


class GeneratedFile(BaseModel):
    """
    A file produced by one generation run, relative to the project root.

    The caller owns persistence; nothing is written while generating.
    """

    path: Path
    content: str
    is_new_file: bool
    template_name: str

    model_config = ConfigDict(frozen=True)
