"""Shared fixtures for catalog lens tests."""

import pytest

from catalog_lens.store import CatalogStore, WORKSPACE_FILENAME

WORKSPACE_YAML = (
    "packages:\n"
    "  - packages/*\n"
    "\n"
    "catalog:\n"
    "  react: ^18.3.1\n"
    "  redux: ^5.0.1\n"
    "\n"
    "catalogs:\n"
    "  react17:\n"
    "    react: ^17.0.2\n"
    "    react-dom: ^17.0.2\n"
    "\n"
    "  react18:\n"
    "    react: ^18.2.0\n"
    "    react-dom: ^18.2.0\n"
)


@pytest.fixture
def workspace_project(tmp_path):
    """Create a project root holding a pnpm-workspace.yaml with catalogs."""
    (tmp_path / WORKSPACE_FILENAME).write_text(WORKSPACE_YAML)

    app_dir = tmp_path / "packages" / "example-app"
    app_dir.mkdir(parents=True)
    (app_dir / "package.json").write_text(
        "{\n"
        '  "name": "@example/app",\n'
        '  "dependencies": {\n'
        '    "react": "catalog:",\n'
        '    "redux": "catalog:",\n'
        '    "react-dom": "catalog:react17"\n'
        "  }\n"
        "}\n"
    )
    return tmp_path


@pytest.fixture
def workspace_file(workspace_project):
    """Path to the workspace document of ``workspace_project``."""
    return workspace_project / WORKSPACE_FILENAME


@pytest.fixture
def store(workspace_project):
    """A store for ``workspace_project``."""
    return CatalogStore(workspace_project)


@pytest.fixture
def workspace_yaml():
    """Text of the fixture workspace document."""
    return WORKSPACE_YAML
