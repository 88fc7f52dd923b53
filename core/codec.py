"""
YAML encoding and decoding of registry records.

Projects and modules are stored as YAML documents. Decoding validates the
shape of every field and raises ``RecordDecodeError`` on anything unexpected,
so that a malformed file is never half-loaded.

Sets are written as sorted lists to keep files stable across runs. Optional
fields are omitted when unset; ``siblings`` keeps the difference between an
empty set (written as ``[]``) and an unset value (omitted).
"""

from datetime import date
from typing import Any

import yaml

from core.exceptions import RecordDecodeError
from core.models import FlatpakModule, SoftwareModule, SoftwareProject

_PROJECT_SET_FIELDS = (
    "web_urls",
    "vcs_urls",
    "flatpak_app_manifests",
    "flatpak_module_manifests",
    "flatpak_sources_manifests",
    "tags",
    "build_systems",
)
_PROJECT_OPTIONAL_FIELDS = (
    "description",
    "main_branch",
    "last_known_commit",
    "last_updated",
)
_MODULE_KNOWN_KEYS = (
    "name",
    "buildsystem",
    "sources",
    "config-opts",
    "build-commands",
    "cleanup",
)


def project_to_dict(project: SoftwareProject) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": project.id,
        "vcs_url": project.vcs_url,
        "name": project.name,
    }
    if project.description is not None:
        data["description"] = project.description
    data["web_urls"] = sorted(project.web_urls)
    data["vcs_urls"] = sorted(project.vcs_urls)
    if project.siblings is not None:
        data["siblings"] = sorted(project.siblings)
    data["flatpak_app_manifests"] = sorted(project.flatpak_app_manifests)
    data["flatpak_module_manifests"] = sorted(project.flatpak_module_manifests)
    data["flatpak_sources_manifests"] = sorted(project.flatpak_sources_manifests)
    data["tags"] = sorted(project.tags)
    data["build_systems"] = sorted(project.build_systems)
    for name in ("main_branch", "last_known_commit", "last_updated"):
        value = getattr(project, name)
        if value is not None:
            data[name] = value
    data["root_hashes"] = list(project.root_hashes)
    return data


def module_to_dict(module: FlatpakModule) -> dict[str, Any]:
    """
    Convert a module to its manifest form, using flatpak-builder key names.

    Empty lists and an unset build system are left out, as they would be in a
    hand-written manifest.
    """
    data: dict[str, Any] = {"name": module.name}
    if module.buildsystem is not None:
        data["buildsystem"] = module.buildsystem
    if module.config_opts:
        data["config-opts"] = list(module.config_opts)
    if module.build_commands:
        data["build-commands"] = list(module.build_commands)
    if module.cleanup:
        data["cleanup"] = list(module.cleanup)
    if module.sources:
        data["sources"] = [
            dict(source) if isinstance(source, dict) else source
            for source in module.sources
        ]
    for key, value in module.extra.items():
        data[key] = value
    return data


def encode_project(project: SoftwareProject) -> str:
    return _dump(project_to_dict(project))


def encode_module(module: SoftwareModule) -> str:
    return _dump(
        {
            "project_id": module.project_id,
            "flatpak_module": module_to_dict(module.flatpak_module),
        }
    )


def encode_module_manifests(modules: list[FlatpakModule]) -> str:
    """Encode bare module definitions, ready to paste in a Flatpak manifest."""
    return yaml.safe_dump(
        [module_to_dict(module) for module in modules],
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=120,
    )


def decode_project(text: str, file_path: str | None = None) -> SoftwareProject:
    """
    Decode a project document.

    Args:
        text: The YAML document.
        file_path: Where the document came from, for error messages.

    Returns:
        The decoded project.

    Raises:
        RecordDecodeError: If the document is not valid YAML or does not
            describe a project.
    """
    data = _load_mapping(text, file_path)

    project = SoftwareProject(
        id=_require_str(data, "id", file_path),
        vcs_url=_require_str(data, "vcs_url", file_path),
        name=_require_str(data, "name", file_path),
    )
    for name in _PROJECT_SET_FIELDS:
        setattr(project, name, set(_str_list(data, name, file_path)))
    for name in _PROJECT_OPTIONAL_FIELDS:
        setattr(project, name, _optional_str(data, name, file_path))
    if data.get("siblings") is not None:
        project.siblings = set(_str_list(data, "siblings", file_path))
    project.root_hashes = _str_list(data, "root_hashes", file_path)
    return project


def decode_module(text: str, file_path: str | None = None) -> SoftwareModule:
    """
    Decode a stored module document.

    Raises:
        RecordDecodeError: If the document is not valid YAML or does not
            describe a module.
    """
    data = _load_mapping(text, file_path)
    payload = data.get("flatpak_module")
    if not isinstance(payload, dict):
        raise RecordDecodeError(
            "Missing or invalid 'flatpak_module' mapping", file_path=file_path
        )
    return SoftwareModule(
        flatpak_module=module_from_dict(payload, file_path),
        project_id=_optional_str(data, "project_id", file_path),
    )


def module_from_dict(
    data: dict[str, Any], file_path: str | None = None
) -> FlatpakModule:
    """
    Build a module from its manifest form.

    Raises:
        RecordDecodeError: If a known key has the wrong type.
    """
    sources = data.get("sources") or []
    if not isinstance(sources, list):
        raise RecordDecodeError("'sources' must be a list", file_path=file_path)
    for source in sources:
        # Sources may also be plain paths to external source manifests.
        if not isinstance(source, (dict, str)):
            raise RecordDecodeError(
                "Every source must be a mapping or a path", file_path=file_path
            )

    return FlatpakModule(
        name=_require_str(data, "name", file_path),
        buildsystem=_optional_str(data, "buildsystem", file_path),
        sources=list(sources),
        config_opts=_str_list(data, "config-opts", file_path),
        build_commands=_str_list(data, "build-commands", file_path),
        cleanup=_str_list(data, "cleanup", file_path),
        extra={
            key: value
            for key, value in data.items()
            if key not in _MODULE_KNOWN_KEYS
        },
    )


def decode_module_manifest(text: str, file_path: str | None = None) -> FlatpakModule:
    """Decode a bare Flatpak module manifest (no registry envelope)."""
    return module_from_dict(_load_mapping(text, file_path), file_path)


def _dump(data: dict[str, Any]) -> str:
    return yaml.safe_dump(
        data,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=120,
    )


def _load_mapping(text: str, file_path: str | None) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RecordDecodeError(
            message=f"Invalid YAML: {e}",
            file_path=file_path,
            original_exception=e,
        ) from e
    if not isinstance(data, dict):
        raise RecordDecodeError(
            "Record document must contain a mapping at the root", file_path=file_path
        )
    return data


def _require_str(data: dict[str, Any], key: str, file_path: str | None) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise RecordDecodeError(
            f"Missing or invalid '{key}' field", file_path=file_path
        )
    return value


def _optional_str(data: dict[str, Any], key: str, file_path: str | None) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    # Unquoted timestamps in hand-written files are parsed by YAML itself.
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise RecordDecodeError(f"'{key}' must be a string", file_path=file_path)
    return value


def _str_list(data: dict[str, Any], key: str, file_path: str | None) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise RecordDecodeError(
            f"'{key}' must be a list of strings", file_path=file_path
        )
    return list(value)
