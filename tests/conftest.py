from __future__ import annotations

import io

import pytest
from rich.console import Console

from usagehunter.console import RichLogger


@pytest.fixture(autouse=True)
def usagehunter_home(tmp_path, monkeypatch):
    home = tmp_path / "state"
    monkeypatch.setenv("USAGEHUNTER_HOME", str(home))
    monkeypatch.delenv("USAGEHUNTER_CONFIG", raising=False)
    return home


@pytest.fixture
def log_buffer():
    return io.StringIO()


@pytest.fixture
def logger(log_buffer):
    console = Console(file=log_buffer, width=200, color_system=None)
    return RichLogger(console=console, verbose=True)


@pytest.fixture
def workspace(tmp_path):
    """Small mixed-language project."""
    root = tmp_path / "ws"
    (root / "src").mkdir(parents=True)
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "src" / "api.ts").write_text(
        "import { fetchUser, saveUser } from './client';\n"
        "\n"
        "export class UserService {\n"
        "  load(id) {\n"
        "    const user = fetchUser(id);\n"
        "    return user.name;\n"
        "  }\n"
        "}\n",
        encoding="utf-8",
    )
    (root / "src" / "client.ts").write_text(
        "export function fetchUser(id: string) {\n"
        "  // fetchUser hits the API\n"
        "  return http.get('/users/fetchUser');\n"
        "}\n",
        encoding="utf-8",
    )
    (root / "tool.py").write_text(
        "def fetch_user(uid):\n"
        "    return fetchUser(uid)\n",
        encoding="utf-8",
    )
    (root / "node_modules" / "lib" / "index.js").write_text("fetchUser();\n", encoding="utf-8")
    (root / "notes.md").write_text("fetchUser is documented here\n", encoding="utf-8")
    return root
