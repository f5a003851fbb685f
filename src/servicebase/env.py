"""
Typed environment variable loading.

Environment variables are bound to the fields of a pydantic model. The
binding is declared on the model itself, so the set of variables a service
reads lives next to their types:

    class ServiceEnv(BaseModel):
        environment: Annotated[str, Env("ENVIRONMENT")]
        version: Annotated[str, Env("VERSION")] = "dev"
        port: Annotated[int, Env("PORT")] = 8080
        allowed_hosts: Annotated[list[str], Env("ALLOWED_HOSTS", separator=";")] = []
        api_token: Annotated[str, Env("API_TOKEN_FILE", from_file=True)]
        database: Annotated[DatabaseEnv, Env(prefix="DB_")]

    env = load_env(ServiceEnv)

Fields without an Env marker bind to their alias, or to their name
upper-cased. Fields without a default are required. A nested model field
with a default is loaded only when at least one of its variables is set.
Values are converted to the field type by pydantic.
"""

import os
import re
import types
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from servicebase.errors import EnvironmentLoadError

EnvT = TypeVar("EnvT", bound=BaseModel)

_SEQUENCE_TYPES = (list, tuple, set, frozenset)

_REFERENCE_PATTERN = re.compile(r"\$\{([^}]*)\}|\$([A-Za-z0-9_]+)")


@dataclass(frozen=True)
class Env:
    """
    Binding between a model field and an environment variable.

    Attributes:
        name: Variable name. None binds to the field alias or the
            upper-cased field name.
        separator: Item separator for list/tuple/set fields and for the
            entries of dict fields
        key_value_separator: Key/value separator inside dict entries
        expand: Expand ``$VAR`` and ``${VAR}`` references in the value.
            Unknown references expand to an empty string.
        from_file: The variable holds a path; the field gets the file content
        not_empty: Treat an empty value as an error
        prefix: Variable name prefix applied to the fields of a nested model
    """

    name: str | None = None
    separator: str = ","
    key_value_separator: str = ":"
    expand: bool = False
    from_file: bool = False
    not_empty: bool = False
    prefix: str = ""


_DEFAULT_BINDING = Env()


def _binding_for(field: FieldInfo) -> Env:
    for item in field.metadata:
        if isinstance(item, Env):
            return item
    return _DEFAULT_BINDING


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _input_key(name: str, field: FieldInfo) -> str:
    if isinstance(field.validation_alias, str):
        return field.validation_alias
    return field.alias or name


def _split_value(value: str, annotation: Any, binding: Env, var_name: str) -> Any:
    """Split delimited values for collection fields; pass scalars through."""
    origin = get_origin(annotation) or annotation
    if origin in _SEQUENCE_TYPES:
        return value.split(binding.separator) if value else []
    if origin is dict:
        result = {}
        if not value:
            return result
        for entry in value.split(binding.separator):
            key, sep, item = entry.partition(binding.key_value_separator)
            if not sep:
                raise ValueError(
                    f'{var_name}: entry "{entry}" is missing '
                    f'key/value separator "{binding.key_value_separator}"'
                )
            result[key] = item
        return result
    return value


class _Collector:
    """Walks a model's fields and gathers raw values from the environment."""

    def __init__(self, environ: Mapping[str, str]):
        self.environ = environ
        self.errors: list[str] = []
        # Number of bound variables present in the environment
        self.found = 0
        # Validation error location -> variable name, for error reporting
        self.var_names: dict[tuple[str, ...], str] = {}

    def collect(
        self,
        shape: type[BaseModel],
        prefix: str,
        path: tuple[str, ...] = (),
    ) -> dict[str, Any]:
        raw: dict[str, Any] = {}

        for name, field in shape.model_fields.items():
            binding = _binding_for(field)
            annotation = _unwrap_optional(field.annotation)
            key = _input_key(name, field)

            if _is_model(annotation):
                child = _Collector(self.environ)
                nested = child.collect(annotation, prefix + binding.prefix, path + (key,))
                # An optional nested model with none of its variables set keeps its default
                if not field.is_required() and not child.found:
                    continue
                raw[key] = nested
                self.found += child.found
                self.errors.extend(child.errors)
                self.var_names.update(child.var_names)
                continue

            var_name = prefix + (binding.name or field.alias or name.upper())
            self.var_names[path + (key,)] = var_name

            value = self._read(var_name, field, binding)
            if value is None:
                continue

            try:
                raw[key] = _split_value(value, annotation, binding, var_name)
            except ValueError as e:
                self.errors.append(str(e))

        return raw

    def _read(self, var_name: str, field: FieldInfo, binding: Env) -> str | None:
        value = self.environ.get(var_name)
        if value is None:
            if field.is_required():
                self.errors.append(f'required environment variable "{var_name}" is not set')
            return None
        self.found += 1

        if binding.expand:
            value = self._expand(value)

        if binding.not_empty and value == "":
            self.errors.append(f'environment variable "{var_name}" should not be empty')
            return None

        if binding.from_file:
            try:
                value = Path(value).read_text()
            except OSError as e:
                self.errors.append(
                    f'could not read file "{value}" named by "{var_name}": {e.strerror or e}'
                )
                return None

        return value

    def _expand(self, value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            braced, bare = match.groups()
            return self.environ.get(braced if braced is not None else bare, "")

        return _REFERENCE_PATTERN.sub(replacer, value)

    def describe(self, loc: tuple[Any, ...]) -> str:
        """Map a pydantic error location back to the variable name."""
        for end in range(len(loc), 0, -1):
            var_name = self.var_names.get(tuple(str(part) for part in loc[:end]))
            if var_name:
                return var_name
        return ".".join(str(part) for part in loc) or "<model>"


def load_env(
    shape: type[EnvT],
    environ: Mapping[str, str] | None = None,
    prefix: str = "",
) -> EnvT:
    """
    Populate a pydantic model from environment variables.

    Args:
        shape: Model class declaring the bindings
        environ: Variables to read (default: os.environ)
        prefix: Prepended to every variable name

    Returns:
        Validated model instance

    Raises:
        EnvironmentLoadError: one or more bindings are missing or invalid.
            ``errors`` lists every problem found.
    """
    if not _is_model(shape):
        raise TypeError(f"environment shape must be a pydantic BaseModel subclass, got {shape!r}")

    collector = _Collector(os.environ if environ is None else environ)
    raw = collector.collect(shape, prefix)

    if collector.errors:
        raise EnvironmentLoadError(
            "Failed to load environment variables",
            errors=collector.errors,
            context={"shape": shape.__name__},
        )

    try:
        return shape.model_validate(raw)
    except ValidationError as e:
        errors = [
            f'environment variable "{collector.describe(err["loc"])}": {err["msg"]}'
            for err in e.errors()
        ]
        raise EnvironmentLoadError(
            "Failed to load environment variables",
            errors=errors,
            cause=e,
            context={"shape": shape.__name__},
        ) from e


__all__ = ["Env", "EnvT", "load_env"]
