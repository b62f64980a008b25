"""
Pytest configuration and shared fixtures for dbcube tests.
"""

import tempfile
import textwrap
from pathlib import Path

import pytest

from dbcube.engine.config import EngineConfig, ProjectConfig
from dbcube.engine.order_store import ExecutionOrderStore


USERS_TABLE = """\
@database("main");
@table("users");

@meta({
    name: "users";
});

@columns({
    id: {
        type: "int";
        options: ["not null", "primary", "autoincrement"];
    };
    email: {
        type: "varchar";
        length: 255;
        options: ["unique"];
    };
});
"""

ORDERS_TABLE = """\
@database("main");
@table("orders");

@columns({
    id: {
        type: "int";
        options: ["primary", "autoincrement"];
    };
    user_id: {
        type: "int";
        options: ["not null"];
        foreign: {
            table: "users";
            column: "id";
        };
    };
});
"""

USERS_SEEDER = """\
@database("main");
@table("users");

@dataset({
    rows: [
        { id: 1, name: "Alice" }
    ];
});
"""


def table_cube(name: str, references: list[str] | None = None, database: str = "main") -> str:
    """Build a valid table cube declaring ``name`` with one foreign key per reference."""
    lines = [
        f'@database("{database}");',
        f'@table("{name}");',
        "",
        "@columns({",
        "    id: {",
        '        type: "int";',
        '        options: ["primary"];',
        "    };",
    ]
    for reference in references or []:
        lines += [
            f"    {reference}_id: {{",
            '        type: "int";',
            "        foreign: {",
            f'            table: "{reference}";',
            '            column: "id";',
            "        };",
            "    };",
        ]
    lines.append("});")
    return "\n".join(lines) + "\n"


@pytest.fixture
def users_table():
    """Valid table cube declaring `users`."""
    return USERS_TABLE


@pytest.fixture
def orders_table():
    """Valid table cube declaring `orders` with a foreign key to `users`."""
    return ORDERS_TABLE


@pytest.fixture
def users_seeder():
    """Valid seeder cube for `users`."""
    return USERS_SEEDER


@pytest.fixture
def make_table_cube():
    """Builder for table cubes with foreign keys to the given tables."""
    return table_cube


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_cube(temp_dir):
    """Write a cube file below the temporary directory and return its path."""

    def _write(relative_path: str, content: str) -> Path:
        path = temp_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def store(temp_dir):
    """Execution order store rooted at the temporary directory."""
    return ExecutionOrderStore(temp_dir)


@pytest.fixture
def temp_project_dir(temp_dir):
    """Create a project folder with project.toml and an empty dbcube folder."""
    (temp_dir / "dbcube").mkdir()
    (temp_dir / "project.toml").write_text(
        'cubes_folder = "dbcube"\n'
        "\n"
        "[engine]\n"
        'command = ["dbcube-engine"]\n'
        "timeout = 30\n"
        "\n"
        "[databases.main]\n"
        'type = "mysql"\n',
        encoding="utf-8",
    )
    return temp_dir


@pytest.fixture
def project_config(temp_project_dir):
    """ProjectConfig matching temp_project_dir."""
    return ProjectConfig(
        project_root=temp_project_dir,
        cubes_folder="dbcube",
        engine=EngineConfig(command=["dbcube-engine"], timeout=30),
        databases={"main": {"type": "mysql"}},
    )
