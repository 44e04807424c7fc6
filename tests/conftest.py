from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

from skillreg.core.loader import load_registry

GUIDANCE_DIR = Path(__file__).resolve().parent.parent / "guidance"


@pytest.fixture(scope="session")
def registry():
    return load_registry(GUIDANCE_DIR)


@pytest.fixture
def client(registry):
    from skillreg.main import create_app

    return TestClient(create_app(registry))


def render_document(meta: dict, body: str = "") -> str:
    return f"---\n{yaml.safe_dump(meta, sort_keys=False)}---\n{body}\n"


@pytest.fixture
def corpus(tmp_path):
    """Factory writing skill documents under tmp_path/skills.

    Returns the guidance root so it can be handed straight to load_registry().
    """
    skills_dir = tmp_path / "skills"
    skills_dir.mkdir()

    def write(name: str, type: str = "atomic", body: str = "", **meta) -> Path:
        doc = {"name": name, "description": f"{name} skill", "type": type, **meta}
        path = skills_dir / name / "SKILL.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_document(doc, body), encoding="utf-8")
        return path

    write.root = tmp_path
    return write


@pytest.fixture(scope="session")
def guidance_dir():
    return GUIDANCE_DIR
