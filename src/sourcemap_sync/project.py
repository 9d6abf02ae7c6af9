"""Read project metadata from the project and Cordova config files."""

import json
from pathlib import Path

from defusedxml.ElementTree import ParseError, fromstring

from sourcemap_sync.domain.project import ProjectContext
from sourcemap_sync.errors import FatalError

PROJECT_FILE = "ionic.config.json"
CONFIG_XML_FILE = "config.xml"


def load_project(directory: Path) -> ProjectContext:
    """Load project context rooted at ``directory``."""
    project_file = directory / PROJECT_FILE
    if not project_file.is_file():
        raise FatalError(
            "Cannot run ionic monitoring syncmaps outside a project directory."
        )
    try:
        project_data = json.loads(project_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise FatalError(f"Could not parse {project_file}: {exc}") from exc
    if not isinstance(project_data, dict):
        raise FatalError(f"Could not parse {project_file}: expected an object")

    package_id, version = _read_config_xml(directory / CONFIG_XML_FILE)
    return ProjectContext(
        directory=directory,
        package_id=package_id,
        version=version,
        pro_id=project_data.get("pro_id"),
        name=project_data.get("name"),
    )


def _read_config_xml(path: Path) -> tuple[str, str]:
    """Return the widget id and version from a Cordova config.xml."""
    if not path.is_file():
        raise FatalError(f"Cannot find {path}. Is this a Cordova project?")
    try:
        root = fromstring(path.read_bytes())
    except ParseError as exc:
        raise FatalError(f"Could not parse {path}: {exc}") from exc
    if _local_name(root.tag) != "widget":
        raise FatalError(f"{path} has no <widget> root element")
    package_id = root.get("id")
    version = root.get("version")
    if not package_id or not version:
        raise FatalError(f"{path} is missing the widget id or version attribute")
    return package_id, version


def _local_name(tag: str) -> str:
    """Strip an XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1]
