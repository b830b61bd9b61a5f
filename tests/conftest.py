"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import flatmodel...' works, and
provides small CSV fixtures shared by the store tests.
"""
import sys
from pathlib import Path

import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))


USERS_CSV = (
    "id,name,email,active\n"
    "1,John Doe,john@example.com,true\n"
    "2,Jane Smith,jane@example.com,false\n"
    "3,Bob Jones,bob@example.com,true\n"
    "4,Alice Brown,alice@example.com,false\n"
    "5,Carol White,carol@example.com,true\n"
)


@pytest.fixture
def write_csv(tmp_path):
    """Factory fixture: write text to a file under tmp_path and return its path."""
    def _write(text: str, name: str = "data.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def users_csv(write_csv) -> Path:
    """Five users, three of them active."""
    return write_csv(USERS_CSV, "users.csv")
