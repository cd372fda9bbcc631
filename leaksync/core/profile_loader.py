"""Profile loading and validation for YAML-based leaksync device profiles."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from leaksync.core.errors import ParameterRegistryError, ProfileLoadError, ProfileValidationError
from leaksync.core.model import DeviceProfile, Fingerprint, ParameterDescriptor, WakeUpSpec
from leaksync.core.registry import ParameterRegistry, resolve_mapper

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ProfileValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedProfiles:
    profiles: dict[str, DeviceProfile]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("leaksync.schemas").joinpath("profile.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _profile_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "leaksync/profiles", xdg_data / "leaksync/profiles"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileLoadError(f"Could not read profile file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ProfileValidationError(f"Profile file {path} must contain a mapping at root")
    return loaded


def _parse_range(value: str, *, context: str) -> tuple[int, int]:
    low_text, _, high_text = value.partition("..")
    low, high = int(low_text), int(high_text)
    if low > high:
        raise ProfileValidationError(f"{context} range {value} is empty")
    return low, high


def _build_parameter(number: str, spec: dict[str, Any], *, context: str) -> ParameterDescriptor:
    options = {int(key): label for key, label in spec.get("options", {}).items()}
    if spec["type"] == "enum":
        if not options:
            raise ProfileValidationError(f"{context} is an enum but declares no options")
        valid_range = (min(options), max(options))
    else:
        if "range" not in spec:
            raise ProfileValidationError(f"{context} is a number but declares no range")
        valid_range = _parse_range(spec["range"], context=context)

    return ParameterDescriptor(
        id=int(number),
        name=spec["name"],
        title=spec.get("title", spec["name"]),
        kind=spec["type"],
        wire_size=int(spec["size"]),
        valid_range=valid_range,
        default_value=int(spec["default"]),
        options=options,
        value_mapper=resolve_mapper(spec.get("mapper")),
        fixed_value=spec.get("fixed_value"),
    )


def _build_profile(doc: dict[str, Any], source: Path | Traversable) -> DeviceProfile:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ProfileValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    parameters = tuple(
        _build_parameter(number, spec, context=f"{doc['id']}.parameters.{number}")
        for number, spec in doc["parameters"].items()
    )
    try:
        ParameterRegistry(parameters)
    except ParameterRegistryError as exc:
        raise ProfileValidationError(f"Invalid parameters in {source}: {exc}") from exc

    wake_doc = doc.get("wake_up", {})
    wake_up = WakeUpSpec(
        default_hours=int(wake_doc.get("default_hours", 12)),
        min_hours=int(wake_doc.get("min_hours", 1)),
        max_hours=int(wake_doc.get("max_hours", 24)),
    )
    if not wake_up.min_hours <= wake_up.default_hours <= wake_up.max_hours:
        raise ProfileValidationError(
            f"Wake up default {wake_up.default_hours} is outside "
            f"{wake_up.min_hours}..{wake_up.max_hours} in {source}"
        )

    return DeviceProfile(
        id=doc["id"],
        name=doc["name"],
        fingerprints=tuple(
            Fingerprint(
                manufacturer_id=int(fp["mfr"], 16),
                product_type_id=int(fp["prod"], 16),
                product_id=int(fp["device_id"], 16),
            )
            for fp in doc["fingerprints"]
        ),
        parameters=parameters,
        wake_up=wake_up,
    )


def _iter_packaged_profile_paths() -> list[Traversable]:
    profile_root = resources.files("leaksync.profiles")
    return [item for item in profile_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_profile_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _profile_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def load_profiles() -> LoadedProfiles:
    profiles: dict[str, DeviceProfile] = {}
    warnings: list[str] = []

    for path in sorted(_iter_packaged_profile_paths(), key=lambda p: p.name):
        doc = _read_yaml(path)
        profile = _build_profile(doc, path)
        profiles[profile.id] = profile

    for path in _iter_user_profile_paths():
        doc = _read_yaml(path)
        profile = _build_profile(doc, path)
        if profile.id in profiles:
            warning = f"User profile '{profile.id}' overrides packaged profile"
            LOGGER.warning(warning)
            warnings.append(warning)
        profiles[profile.id] = profile

    return LoadedProfiles(profiles=profiles, warnings=tuple(warnings))
