import os
import subprocess
from pathlib import Path
from urllib.parse import urlparse

import pytest
from testcontainers.postgres import PostgresContainer


@pytest.mark.integration
def test_migration_cycle():
    """Test that alembic migrations can upgrade to head and downgrade to base without errors."""

    with PostgresContainer("postgres:16") as postgres:
        # Get database connection details from testcontainer
        parsed_url = urlparse(postgres.get_connection_url())

        # Set environment variables for alembic to use testcontainer database
        env = os.environ.copy()
        env["DB_USER"] = parsed_url.username
        env["DB_PASSWORD"] = parsed_url.password
        env["DB_HOST"] = parsed_url.hostname
        env["DB_PORT"] = str(parsed_url.port)
        env["DB_NAME"] = parsed_url.path.lstrip("/")
        env["ENVIRONMENT"] = "local"

        project_root = Path(__file__).parents[2]

        for command in (["alembic", "upgrade", "head"], ["alembic", "downgrade", "base"]):
            result = subprocess.run(
                command, cwd=project_root, env=env, capture_output=True, text=True
            )
            assert result.returncode == 0, f"{' '.join(command)} failed: {result.stderr}"
