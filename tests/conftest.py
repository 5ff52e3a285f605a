"""Shared pytest fixtures for the BugBlaze test suite.

Provides reusable fixtures for:
- An isolated working directory and environment per test
- AppConfig instances pointing at a temporary config file
- A mocked Groq gateway
- Sample completions in both descriptor dialects
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bugblaze.config import CONFIG_FILENAME, AppConfig
from bugblaze.groq_client import CompletionResponse

_ENV_VARS = ("GROQ_API_KEY", "BUGBLAZE_MODEL", "BUGBLAZE_TIMEOUT", "BUGBLAZE_BACKEND_URL")


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test inside its own directory with no BugBlaze env vars."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / CONFIG_FILENAME


@pytest.fixture
def config(config_path: Path) -> AppConfig:
    """A config with an API key, not premium."""
    return AppConfig(apikey="gsk_test_key_1234567890", config_path=config_path)


@pytest.fixture
def premium_config(config_path: Path) -> AppConfig:
    return AppConfig(
        apikey="gsk_test_key_1234567890",
        is_premium=True,
        email="dev@example.com",
        config_path=config_path,
    )


# ---------------------------------------------------------------------------
# Mock Groq
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_groq() -> MagicMock:
    """Patch the gateway used by the command layer.

    Set ``mock_groq.complete.return_value`` (or ``side_effect``) to script
    the answers.
    """
    client = MagicMock()
    client.complete = AsyncMock(return_value=CompletionResponse(text="Looks fine.", model="test"))
    with patch("bugblaze.commands.GroqClient", return_value=client):
        yield client


# ---------------------------------------------------------------------------
# Sample completions
# ---------------------------------------------------------------------------

MARKERS_COMPLETION = textwrap.dedent("""\
    Here is your project:

    ---FOLDERS---
    src
    src/components
    - `public/`
    package.json
    ---FILES---
    package.json
    src/index.js
    src/components/App.jsx
    ---CONTENT---
    ==package.json==
    {
      "name": "todo-app"
    }
    ==src/index.js==
    import App from "./components/App";
    // render the app
    App();
    ==src/components/App.jsx==
    ```jsx
    export default function App() {
      return <h1>Todo</h1>;
    }
    ```
    """)

HEADINGS_COMPLETION = textwrap.dedent("""\
    PROJECT_STRUCTURE:
    ```
    src/
      utils/
        math.js
      index.js
    README
    ```

    FILE_CONTENTS:
    // src/index.js
    const { add } = require("./utils/math");
    // TODO
    // see https://example.com/docs
    console.log(add(1, 2));
    // src/utils/math.js
    exports.add = (a, b) => a + b;
    // README
    Demo project
    """)


@pytest.fixture
def markers_completion() -> str:
    return MARKERS_COMPLETION


@pytest.fixture
def headings_completion() -> str:
    return HEADINGS_COMPLETION
